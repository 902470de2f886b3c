"""Database-prefixed key display strings and database selection."""

from __future__ import annotations

import re
from dataclasses import dataclass

from redisview.exceptions import KeyFormatError

DATABASE_COUNT = 16

_HEADER_RE = re.compile(r"\((\d{1,2})\) ", re.ASCII)


def _match_header(display: str) -> re.Match[str] | None:
    match = _HEADER_RE.match(display)
    if match is None or int(match.group(1)) >= DATABASE_COUNT:
        return None
    return match


def format_key(database: int, key: str) -> str:
    """Prefix a key with the index of the database that owns it."""
    return f"({database}) {key}"


def parse_key(display: str) -> tuple[int, str]:
    """Split a display string back into (database, original key).

    Only the leading header is consumed, so the key itself may contain
    parentheses, spaces or anything else.
    """
    match = _match_header(display)
    if match is None:
        raise KeyFormatError(f"Not a database-prefixed key: {display!r}")
    return int(match.group(1)), display[match.end() :]


def trim_database_header(display: str) -> str:
    """Strip the database header, returning text unchanged when it has none."""
    match = _match_header(display)
    if match is None:
        return display
    return display[match.end() :]


@dataclass(frozen=True)
class DatabaseSelection:
    """A single database index or a contiguous inclusive range of them."""

    first: int
    last: int

    def __post_init__(self) -> None:
        if not 0 <= self.first <= self.last < DATABASE_COUNT:
            raise ValueError(
                f"Database range {self.first}..{self.last} outside 0..{DATABASE_COUNT - 1}"
            )

    @classmethod
    def single(cls, database: int) -> DatabaseSelection:
        return cls(database, database)

    @classmethod
    def all(cls) -> DatabaseSelection:
        return cls(0, DATABASE_COUNT - 1)

    @property
    def is_range(self) -> bool:
        return self.first != self.last

    def indices(self) -> range:
        """Database indices covered by the selection, in ascending order."""
        return range(self.first, self.last + 1)

    def describe(self) -> str:
        if self.is_range:
            return f"{self.first}-{self.last}"
        return str(self.first)
