"""Config block extraction: pull the /c/sys/access ... / block out of a dump.

Pure functions here, shared by the cleaning utility and the loader so both
see exactly the same block.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from .constants import LoaderConstants
from .errors import ConfigDecodeError, ConfigNotFoundError, OutputConflictError

logger = logging.getLogger(__name__)


def extract_config(lines: Iterable[str]) -> List[str]:
    """Return the inclusive start..end marker slice of ``lines``.

    Lines are matched on their stripped form but returned untouched.
    Comment lines (``/*``) are dropped wherever they appear. Scanning stops
    at the first end marker after the start marker, even if a longer block
    was intended. No start marker gives an empty list.
    """
    out = []
    capturing = False
    for line in lines:
        trimmed = line.strip()
        if trimmed.startswith(LoaderConstants.COMMENT_PREFIX):
            continue
        if not capturing and trimmed == LoaderConstants.START_MARKER:
            capturing = True
        if capturing:
            out.append(line)
            if trimmed == LoaderConstants.END_MARKER:
                break
    return out


def read_lines(path) -> List[str]:
    """Read a text file into lines without their line breaks."""
    p = Path(path)
    if not p.is_file():
        raise ConfigNotFoundError(f"Config file not found: {p}")
    try:
        text = p.read_text(encoding=LoaderConstants.ENCODING)
    except UnicodeDecodeError as e:
        raise ConfigDecodeError(f"{p} is not valid {LoaderConstants.ENCODING} text: {e}") from e
    return text.splitlines()


@dataclass(frozen=True)
class ConfigDocument:
    """Cleaned config lines, held read-only while they are uploaded."""

    source: Path
    lines: Tuple[str, ...]

    @classmethod
    def from_file(cls, path) -> "ConfigDocument":
        return cls(Path(path), tuple(extract_config(read_lines(path))))

    def commands(self) -> List[str]:
        """Non-blank lines in order, as they are sent to the switch."""
        return [line for line in self.lines if line.strip()]

    def __bool__(self) -> bool:
        return bool(self.lines)

    def __len__(self) -> int:
        return len(self.lines)


def clean_file(source, dest=None) -> Optional[Path]:
    """Write the extracted block of ``source`` to ``dest`` (default ``*.cfg``).

    A dump that is already ``*.cfg`` gets ``*.clean.cfg``; an explicit ``dest``
    naming the source raises OutputConflictError. Returns the written path,
    or None when the dump holds no config block.
    """
    src = Path(source)
    lines = extract_config(read_lines(src))
    if not lines:
        logger.warning("No %s block found in %s", LoaderConstants.START_MARKER, src)
        return None

    if dest:
        out = Path(dest)
    else:
        out = src.with_suffix(LoaderConstants.CLEAN_SUFFIX)
        if out.resolve() == src.resolve():
            out = src.with_suffix(".clean" + LoaderConstants.CLEAN_SUFFIX)
    if out.resolve() == src.resolve():
        raise OutputConflictError(f"Refusing to overwrite source dump {src}; pass a different output path")
    out.write_text("\n".join(lines) + "\n", encoding=LoaderConstants.ENCODING)
    logger.info("Wrote %d lines to %s", len(lines), out)
    return out
