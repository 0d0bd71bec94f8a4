#!/usr/bin/env python3
"""Thin CLIs for the switch loader and the config cleaning utility.

These stay tiny wrappers that call library functions and return meaningful
exit codes.
"""

import argparse
import logging
import sys

from .constants import LoaderConstants
from .driver import EXIT_FAILURE, EXIT_OK, max_read_errors_from_env, run_loader
from .errors import LoaderError
from .extract import clean_file


def _non_negative_int(value):
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"{value!r} is not an integer")
    if n < 0:
        raise argparse.ArgumentTypeError(f"{value} must be 0 or greater")
    return n


def _setup_logging(verbose: bool = False):
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        )
    else:
        logging.basicConfig(level=logging.INFO, format="%(message)s")


def build_load_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="switchcfg-load",
        description="Log in to a switch over its serial console and load a config block.",
        add_help=False,
    )
    parser.add_argument("-ComPort", "--com-port", dest="com_port", help="serial port or port description")
    parser.add_argument(
        "-BaudRate",
        "--baud-rate",
        dest="baud_rate",
        type=int,
        default=LoaderConstants.DEFAULT_BAUDRATE,
    )
    parser.add_argument("-ConfigFile", "--config-file", dest="config_file", help="raw dump or cleaned .cfg")
    parser.add_argument(
        "-SimulationFile",
        "--simulation-file",
        dest="simulation_file",
        help="replay this console transcript instead of opening a port",
    )
    parser.add_argument(
        "-MaxReadErrors",
        "--max-read-errors",
        dest="max_read_errors",
        type=_non_negative_int,
        default=None,
        help="give up after this many consecutive serial read errors (default: never)",
    )
    parser.add_argument("-LogFile", "--log-file", dest="log_file", help="transcript base path")
    parser.add_argument("-Verbose", "--verbose", dest="verbose", action="store_true")
    parser.add_argument("-Help", "-h", "--help", dest="help", action="store_true", help="show this help")
    return parser


def load_main(argv=None):
    parser = build_load_parser()
    args = parser.parse_args(argv)

    if args.help:
        parser.print_help()
        return EXIT_OK

    if not args.config_file:
        # Missing config is reported as usage, not as a failure
        parser.print_help()
        return EXIT_OK

    _setup_logging(args.verbose)
    max_read_errors = args.max_read_errors
    if max_read_errors is None:
        max_read_errors = max_read_errors_from_env()

    return run_loader(
        args.config_file,
        port=args.com_port,
        baudrate=args.baud_rate,
        simulation_file=args.simulation_file,
        max_read_errors=max_read_errors,
        log_file=args.log_file,
    )


def clean_main(argv=None):
    parser = argparse.ArgumentParser(
        prog="switchcfg-clean",
        description=f"Extract the {LoaderConstants.START_MARKER} block from a config dump.",
    )
    parser.add_argument("source", help="raw config dump")
    parser.add_argument("-o", "--output", help="output path (default: <source>.cfg)")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    _setup_logging(args.verbose)
    try:
        out = clean_file(args.source, args.output)
    except LoaderError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_FAILURE

    if out is None:
        return EXIT_FAILURE
    print(out)
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(load_main())
