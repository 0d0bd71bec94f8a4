"""Console transcript capture for a loader session

Captures everything the console says and everything sent to it.
Used for:
- Diagnosing a failed handshake
- Recording a real session to replay later with -SimulationFile
"""

from datetime import datetime, timezone
from pathlib import Path

from .constants import LoaderConstants


class TranscriptLogger:
    """Log console I/O for one session.

    Creates two files:
    - .log: timestamped SEND/RECV lines
    - .replay.txt: received text only, a valid replay source

    NO filtering - pure capture.
    """

    @staticmethod
    def _iso_timestamp() -> str:
        """UTC ISO-8601 timestamp with millisecond precision."""
        return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")

    def __init__(self, base_path: str):
        """Initialize transcript logger.

        Args:
            base_path: Base path for log files (without extension)
                      Creates: {base_path}.log and {base_path}.replay.txt
        """
        self.base_path = Path(base_path)
        self.log_path = Path(f"{base_path}.log")
        self.replay_path = Path(f"{base_path}.replay.txt")
        self.log_file = open(self.log_path, "w", encoding=LoaderConstants.ENCODING)
        try:
            self.replay_file = open(self.replay_path, "w", encoding=LoaderConstants.ENCODING)
        except OSError:
            self.log_file.close()
            raise

        self.log_file.write(f"Switch console transcript - {self._iso_timestamp()}\n")
        self.log_file.write("=" * 70 + "\n\n")
        self.log_file.flush()

    def log_send(self, text: str):
        self.log_file.write(f"[{self._iso_timestamp()}] SEND {text!r}\n")
        self.log_file.flush()

    def log_recv(self, text: str):
        if not text:
            return
        self.log_file.write(f"[{self._iso_timestamp()}] RECV {text!r}\n")
        self.log_file.flush()
        self.replay_file.write(text)
        self.replay_file.flush()

    def log_error(self, message: str):
        self.log_file.write(f"[{self._iso_timestamp()}] ERROR: {message}\n")
        self.log_file.flush()

    def close(self):
        """Close log files."""
        if self.replay_file:
            self.replay_file.close()
            self.replay_file = None
        if self.log_file:
            self.log_file.write(f"\nLog closed: {self._iso_timestamp()}\n")
            self.log_file.close()
            self.log_file = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
