"""Loader error taxonomy.

Fatal errors end the run with exit status 1. TransientReadError is raised
and absorbed inside the live transport; it only escapes wrapped in a
TransportError once a configured ceiling is exceeded.
"""


class LoaderError(Exception):
    """Base class for switch loader errors."""


class ConfigNotFoundError(LoaderError):
    """Raised when the configuration source file does not exist."""


class NoValidConfigBlockError(LoaderError):
    """Raised when extraction finds no /c/sys/access block."""


class TransportOpenError(LoaderError):
    """Raised when the serial channel or replay source cannot be opened."""


class TransportError(LoaderError):
    """Raised when consecutive read failures exceed the configured ceiling."""


class TransientReadError(LoaderError):
    """A single failed live read. Recovered as an empty chunk."""


class PendingConfigError(LoaderError):
    """The switch reports pending configuration that needs manual attention."""


class SessionIncompleteError(LoaderError):
    """The replay source ran out before the handshake finished."""


class ConfigDecodeError(LoaderError):
    """Raised when a config file is not valid text in the expected encoding."""


class OutputConflictError(LoaderError):
    """Raised when a cleaned config would overwrite its own source dump."""
