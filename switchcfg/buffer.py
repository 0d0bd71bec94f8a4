"""Accumulating response buffer with incremental prompt matching."""

from __future__ import annotations

from typing import Dict, Iterable, Optional


class ResponseBuffer:
    """Console text received since the last consumed match.

    Grows by ``append`` and only shrinks on ``clear``. ``contains`` remembers
    how far each pattern has been scanned, so repeated probes only look at
    the new tail plus enough overlap to catch a prompt split across reads.
    """

    def __init__(self):
        self._text = ""
        self._scanned: Dict[str, int] = {}

    def append(self, chunk: str) -> None:
        if chunk:
            self._text += chunk

    def contains(self, pattern: str) -> bool:
        start = max(0, self._scanned.get(pattern, 0) - len(pattern) + 1)
        idx = self._text.find(pattern, start)
        # Park on a hit so an uncleared match is still found next time
        self._scanned[pattern] = idx + len(pattern) - 1 if idx != -1 else len(self._text)
        return idx != -1

    def first_match(self, patterns: Iterable[str]) -> Optional[str]:
        for pattern in patterns:
            if self.contains(pattern):
                return pattern
        return None

    def clear(self) -> None:
        self._text = ""
        self._scanned.clear()

    @property
    def text(self) -> str:
        return self._text

    def __len__(self) -> int:
        return len(self._text)

    def __repr__(self) -> str:
        return f"ResponseBuffer({self._text[-40:]!r})"
