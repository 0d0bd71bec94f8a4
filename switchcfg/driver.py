"""Loader driver: pick a transport, run one session, map it to an exit code.

Exit codes:
  0  handshake and upload completed
  1  config missing, transport failure, pending configuration, empty
     config block, replay ended early, or any unexpected fault
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from .constants import LoaderConstants
from .errors import ConfigNotFoundError, LoaderError, PendingConfigError
from .session import Session, State, Timing
from .transcript import TranscriptLogger
from .transport import ReplayTransport, SerialTransport, TransportBase, resolve_port

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


def max_read_errors_from_env() -> Optional[int]:
    raw = os.getenv(LoaderConstants.ENV_MAX_READ_ERRORS, "").strip()
    if not raw:
        return None
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r (not an integer)", LoaderConstants.ENV_MAX_READ_ERRORS, raw)
        return None
    return value if value >= 0 else None


def open_transport(
    port: Optional[str] = None,
    baudrate: int = LoaderConstants.DEFAULT_BAUDRATE,
    simulation_file=None,
    replay_delay: float = LoaderConstants.REPLAY_DELAY_S,
    max_read_errors: Optional[int] = None,
) -> TransportBase:
    """Replay when a simulation file is given, otherwise the live console.

    Raises TransportOpenError when neither can be opened.
    """
    if simulation_file:
        logger.info("Replaying %s", simulation_file)
        return ReplayTransport(simulation_file, delay=replay_delay)

    device = resolve_port(port)
    logger.info("Opening %s at %d baud", device, baudrate)
    return SerialTransport(device, baudrate=baudrate, max_read_errors=max_read_errors)


def run_loader(
    config_file,
    port: Optional[str] = None,
    baudrate: int = LoaderConstants.DEFAULT_BAUDRATE,
    simulation_file=None,
    timing: Optional[Timing] = None,
    replay_delay: float = LoaderConstants.REPLAY_DELAY_S,
    max_read_errors: Optional[int] = None,
    log_file=None,
    transport: Optional[TransportBase] = None,
) -> int:
    """Load ``config_file`` onto a switch and return the process exit code.

    ``transport`` overrides transport selection; it is still closed on exit.
    """
    config_path = Path(config_file)
    if not config_path.is_file():
        logger.error("ERROR: %s", ConfigNotFoundError(f"Config file not found: {config_path}"))
        if transport is not None:
            transport.close()
        return EXIT_FAILURE

    if transport is None:
        try:
            transport = open_transport(
                port=port,
                baudrate=baudrate,
                simulation_file=simulation_file,
                replay_delay=replay_delay,
                max_read_errors=max_read_errors,
            )
        except LoaderError as e:
            logger.error("ERROR: %s", e)
            return EXIT_FAILURE

    transcript = None
    try:
        if log_file:
            transcript = TranscriptLogger(log_file)
        session = Session(transport, config_path, timing=timing, transcript=transcript)
        state = session.run()

        if state is State.SUCCESS:
            logger.info("Configuration loaded (%d commands sent)", session.commands_sent)
            return EXIT_OK

        if isinstance(session.error, PendingConfigError):
            logger.error("PENDING CONFIGURATION: %s", session.error)
        else:
            logger.error("ERROR: %s", session.error)
        if transcript:
            transcript.log_error(str(session.error))
        return EXIT_FAILURE

    except Exception as e:
        logger.error("ERROR: %s", e)
        logger.debug("Session aborted", exc_info=True)
        if transcript:
            transcript.log_error(str(e))
        return EXIT_FAILURE

    finally:
        transport.close()
        if transcript:
            transcript.close()
