"""Transport abstractions for the switch console (Serial + Replay)

Keep this small and explicit. SerialTransport wraps pyserial and never blocks:
an idle line reads as an empty chunk. ReplayTransport feeds a recorded
transcript one line at a time and records what would have been written, for
tests and dry runs against captured sessions.
"""

from __future__ import annotations

import logging
import os
import time
from pathlib import Path
from typing import List, Optional

import serial
import serial.tools.list_ports

from .constants import LoaderConstants
from .errors import TransientReadError, TransportError, TransportOpenError

logger = logging.getLogger(__name__)

# Returned by read_chunk() once a transport has nothing left to give.
END_OF_INPUT = None


class TransportBase:
    def read_chunk(self) -> Optional[str]:
        """Return newly received text, "" when idle, or END_OF_INPUT."""
        raise NotImplementedError

    def write_line(self, command) -> None:
        raise NotImplementedError

    def close(self):
        raise NotImplementedError

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


def resolve_port(name: Optional[str] = None) -> str:
    """Map a port name or friendly description to a serial device.

    An exact device match wins, then the first port whose description or
    hardware id contains ``name``. With no name, ``SWITCHCFG_PORT`` is used,
    falling back to the first listed port.
    """
    name = name or os.getenv(LoaderConstants.ENV_PORT)
    ports = list(serial.tools.list_ports.comports())

    if not name:
        if not ports:
            raise TransportOpenError("No serial ports found")
        return ports[0].device

    for info in ports:
        if info.device == name or info.name == name:
            return info.device

    needle = name.lower()
    for info in ports:
        text = f"{info.description or ''} {info.hwid or ''}".lower()
        if needle in text:
            logger.debug("Resolved %r to %s (%s)", name, info.device, info.description)
            return info.device

    # Not listed (e.g. a pty or a port the OS does not enumerate): try it as given
    if not ports or os.path.exists(name):
        return name
    raise TransportOpenError(f"No serial port matches {name!r}")


class SerialTransport(TransportBase):
    """Live switch console over pyserial, 8N1 without flow control.

    Read failures are transient: each one is logged and surfaces as an empty
    chunk. ``max_read_errors`` caps consecutive failures; ``None`` retries
    forever.
    """

    def __init__(
        self,
        port: str,
        baudrate: int = LoaderConstants.DEFAULT_BAUDRATE,
        timeout: float = LoaderConstants.SERIAL_TIMEOUT_S,
        poll_backoff: float = LoaderConstants.POLL_BACKOFF_S,
        max_read_errors: Optional[int] = None,
    ):
        self.port = port
        self.baudrate = baudrate
        self.poll_backoff = poll_backoff
        self.max_read_errors = max_read_errors
        self._errors = 0
        try:
            self._ser = serial.Serial(
                port=port,
                baudrate=baudrate,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                xonxoff=False,
                rtscts=False,
                dsrdtr=False,
                timeout=timeout,
                write_timeout=timeout,
            )
        except (serial.SerialException, OSError, ValueError) as e:
            raise TransportOpenError(f"Cannot open {port} at {baudrate} baud: {e}") from e
        logger.debug("Opened %s at %d baud", port, baudrate)

    def _read_available(self) -> str:
        try:
            waiting = self._ser.in_waiting
            data = self._ser.read(waiting) if waiting else b""
        except (serial.SerialException, OSError) as e:
            raise TransientReadError(str(e)) from e
        return data.decode(LoaderConstants.ENCODING, errors="ignore")

    def read_chunk(self) -> Optional[str]:
        try:
            text = self._read_available()
        except TransientReadError as e:
            self._errors += 1
            logger.debug("Read error %d on %s: %s", self._errors, self.port, e)
            if self.max_read_errors is not None and self._errors > self.max_read_errors:
                raise TransportError(
                    f"{self._errors} consecutive read errors on {self.port}"
                ) from e
            time.sleep(self.poll_backoff)
            return ""

        self._errors = 0
        if not text:
            time.sleep(self.poll_backoff)
        return text

    def write_line(self, command) -> None:
        self._ser.write(command.encode())
        self._ser.flush()

    def close(self):
        try:
            self._ser.close()
        except Exception:
            logger.debug("Error closing %s", self.port, exc_info=True)


class ReplayTransport(TransportBase):
    """Replays a recorded console transcript, one line per read.

    Writes are recorded instead of sent:
        t = ReplayTransport("session.txt", delay=0)
        t.read_chunk()          # "Enter password:\\n"
        t.write_line(Command("admin"))
        t.sent                  # ["admin"]
    """

    def __init__(self, path, delay: float = LoaderConstants.REPLAY_DELAY_S):
        self.path = Path(path)
        self.delay = delay
        self._write_log = []
        try:
            self._fh = open(self.path, "r", encoding=LoaderConstants.ENCODING, errors="ignore")
        except OSError as e:
            raise TransportOpenError(f"Cannot open replay source {self.path}: {e}") from e

    def read_chunk(self) -> Optional[str]:
        if self._fh is None:
            return END_OF_INPUT
        line = self._fh.readline()
        if not line:
            return END_OF_INPUT
        time.sleep(self.delay)
        return line.rstrip("\r\n") + "\n"

    def write_line(self, command) -> None:
        self._write_log.append(command)

    def close(self):
        if self._fh is not None:
            self._fh.close()
            self._fh = None

    @property
    def writes(self):
        return list(self._write_log)

    @property
    def sent(self) -> List[str]:
        return [c.text for c in self._write_log]
