"""Shared switch console constants: prompts, commands, markers and pacing."""


class LoaderConstants:
    """Single source of truth for the handshake text and serial defaults."""

    # Device prompts (matched by containment against the response buffer)
    PASSWORD_PROMPT = "Enter password:"
    SETUP_WIZARD_PROMPT = 'Would you like to run "Set Up" to configure the switch? [y/n]'
    PENDING_CONFIG_PROMPT = "Confirm seeing above note [y]:"
    MAIN_PROMPT = ">> Main#"

    # Handshake answers
    PASSWORD = "admin"
    DECLINE_SETUP = "n"
    DISABLE_PAGING = "lines 0"

    # Config block markers (exact match on the trimmed line)
    START_MARKER = "/c/sys/access"
    END_MARKER = "/"
    COMMENT_PREFIX = "/*"
    CLEAN_SUFFIX = ".cfg"

    # Serial framing
    DEFAULT_BAUDRATE = 9600
    SERIAL_TIMEOUT_S = 3.0
    LINE_TERMINATOR = "\r\n"
    ENCODING = "utf-8"

    # Pacing (seconds)
    LINE_PACING_S = 0.05
    REPLAY_DELAY_S = 0.05
    POLL_BACKOFF_S = 0.1
    SETTLE_DELAY_S = 0.2

    # Environment overrides
    ENV_PORT = "SWITCHCFG_PORT"
    ENV_MAX_READ_ERRORS = "SWITCHCFG_MAX_READ_ERRORS"
