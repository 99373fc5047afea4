"""Append-only record of the reasoning behind an inference run."""

from __future__ import annotations

import logging
from typing import Iterator


logger = logging.getLogger(__name__)


class Explanation:
    """Ordered, human-readable notes collected during one inference call.

    Each call owns its own instance. Entries are only ever appended, and
    nothing in the inference code reads them back to make decisions.
    """

    __slots__ = ("_lines",)

    def __init__(self) -> None:
        self._lines: list[str] = []

    def add(self, message: str) -> None:
        """Append a note and mirror it to the debug log."""

        self._lines.append(message)
        logger.debug("%s", message)

    @property
    def lines(self) -> list[str]:
        return list(self._lines)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._lines))

    def __len__(self) -> int:
        return len(self._lines)

    def __repr__(self) -> str:
        return f"Explanation({self._lines!r})"
