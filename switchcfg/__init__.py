"""Switch console config loader.

Logs in to a switch over its serial console, declines the setup wizard and
uploads a cleaned config block line by line. The same session runs against
a recorded transcript for testing.
"""

from .driver import run_loader
from .extract import ConfigDocument, clean_file, extract_config
from .session import Command, Session, State, Timing
from .transport import ReplayTransport, SerialTransport

__all__ = [
    "run_loader",
    "ConfigDocument",
    "clean_file",
    "extract_config",
    "Command",
    "Session",
    "State",
    "Timing",
    "ReplayTransport",
    "SerialTransport",
]
__version__ = "0.1.0"
