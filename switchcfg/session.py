"""Console handshake and config upload state machine.

WAIT_PASSWORD -> WAIT_PROMPT -> WAIT_MAIN_PROMPT -> UPLOAD -> SUCCESS
                      |
                      +-> ERROR (pending configuration on the switch)

Each read is appended to the response buffer and the current state's prompts
are probed against everything received since the last match. One command is
sent per matched prompt; nothing is sent ahead of the prompt it answers.
"""

from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass
from typing import Optional

from .buffer import ResponseBuffer
from .constants import LoaderConstants
from .errors import (
    LoaderError,
    NoValidConfigBlockError,
    PendingConfigError,
    SessionIncompleteError,
)
from .extract import ConfigDocument
from .transport import END_OF_INPUT

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Command:
    """One console line; the terminator is appended on the wire."""

    text: str
    terminator: str = LoaderConstants.LINE_TERMINATOR

    def encode(self) -> bytes:
        return (self.text + self.terminator).encode(LoaderConstants.ENCODING)


@dataclass(frozen=True)
class Timing:
    """Pacing delays in seconds."""

    line_pacing: float = LoaderConstants.LINE_PACING_S
    settle: float = LoaderConstants.SETTLE_DELAY_S

    @classmethod
    def none(cls) -> "Timing":
        return cls(line_pacing=0.0, settle=0.0)


class State(enum.Enum):
    WAIT_PASSWORD = "wait_password"
    WAIT_PROMPT = "wait_prompt"
    WAIT_MAIN_PROMPT = "wait_main_prompt"
    UPLOAD = "upload"
    SUCCESS = "success"
    ERROR = "error"

    @property
    def terminal(self) -> bool:
        return self in (State.SUCCESS, State.ERROR)


class Session:
    """Drives one switch from login to uploaded config.

    The session owns its transport for its whole life; the driver closes it.
    ``run()`` returns the terminal state. Domain failures land in ``error``;
    transport faults propagate.
    """

    def __init__(self, transport, config_path, timing: Optional[Timing] = None, transcript=None):
        self.transport = transport
        self.config_path = config_path
        self.timing = timing or Timing()
        self.transcript = transcript
        self.buffer = ResponseBuffer()
        self.state = State.WAIT_PASSWORD
        self.document: Optional[ConfigDocument] = None
        self.error: Optional[LoaderError] = None
        self.commands_sent = 0
        self._settle_pending = False

    def send(self, text: str) -> None:
        cmd = Command(text)
        self.transport.write_line(cmd)
        self.commands_sent += 1
        logger.debug("TX %r", text)
        if self.transcript:
            self.transcript.log_send(text)
        if self.commands_sent == 1:
            self._settle_pending = True

    def _transition(self, new_state: State) -> None:
        logger.debug("%s -> %s", self.state.name, new_state.name)
        self.state = new_state

    def _fail(self, error: LoaderError) -> None:
        self.error = error
        self._transition(State.ERROR)

    def feed(self, chunk: str) -> State:
        """Append ``chunk`` and act on the current state's prompt, if present."""
        self.buffer.append(chunk)
        if self.transcript and chunk:
            self.transcript.log_recv(chunk)

        if self.state is State.WAIT_PASSWORD:
            if self.buffer.contains(LoaderConstants.PASSWORD_PROMPT):
                logger.info("Password prompt detected, logging in")
                self.send(LoaderConstants.PASSWORD)
                self.buffer.clear()
                self._transition(State.WAIT_PROMPT)

        elif self.state is State.WAIT_PROMPT:
            seen = self.buffer.first_match(
                [LoaderConstants.SETUP_WIZARD_PROMPT, LoaderConstants.PENDING_CONFIG_PROMPT]
            )
            if seen == LoaderConstants.SETUP_WIZARD_PROMPT:
                logger.info("Declining setup wizard")
                self.send(LoaderConstants.DECLINE_SETUP)
                self.buffer.clear()
                self._transition(State.WAIT_MAIN_PROMPT)
            elif seen == LoaderConstants.PENDING_CONFIG_PROMPT:
                self._fail(
                    PendingConfigError(
                        "Switch has pending configuration; clear it on the console "
                        "before loading a config"
                    )
                )

        elif self.state is State.WAIT_MAIN_PROMPT:
            if self.buffer.contains(LoaderConstants.MAIN_PROMPT):
                logger.info("Main prompt reached, disabling paging")
                self.send(LoaderConstants.DISABLE_PAGING)
                self.buffer.clear()
                self._transition(State.UPLOAD)

        return self.state

    def upload(self) -> State:
        """Extract the config block and send it line by line."""
        self.document = ConfigDocument.from_file(self.config_path)
        commands = self.document.commands()
        if not commands:
            self._fail(NoValidConfigBlockError(f"No valid config block in {self.config_path}"))
            return self.state

        logger.info("Uploading %d lines from %s", len(commands), self.config_path)
        for i, line in enumerate(commands, 1):
            self.send(line)
            logger.debug("Line %d/%d sent", i, len(commands))
            time.sleep(self.timing.line_pacing)

        logger.info("Upload complete")
        self._transition(State.SUCCESS)
        return self.state

    def run(self) -> State:
        while not self.state.terminal:
            if self.state is State.UPLOAD:
                self.upload()
                continue

            if self._settle_pending:
                self._settle_pending = False
                time.sleep(self.timing.settle)

            chunk = self.transport.read_chunk()
            if chunk is END_OF_INPUT:
                self._fail(
                    SessionIncompleteError(
                        f"Input ended while in {self.state.name} (buffer: {self.buffer.text!r})"
                    )
                )
                break
            if chunk:
                logger.debug("RX %r", chunk)
            self.feed(chunk)

        return self.state
