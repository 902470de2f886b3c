"""Result values returned by the backend and their textual projection.

Every backend reply is normalized into one of the variants below before it
reaches the session. ``project`` turns a value into the lines shown in the
results list, ``label`` into the short type description shown in the title.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, TypeAlias, assert_never


@dataclass(frozen=True)
class Scalar:
    """A plain string reply (GET, PING, INCR...)."""

    text: str


@dataclass(frozen=True)
class ListValue:
    """Items of a Redis list, in index order."""

    items: tuple[str, ...]


@dataclass(frozen=True)
class SetValue:
    """Members of a Redis set."""

    items: tuple[str, ...]


@dataclass(frozen=True)
class SortedSetValue:
    """Members of a sorted set as (value, score) pairs, in rank order."""

    entries: tuple[tuple[str, float], ...]


@dataclass(frozen=True)
class HashValue:
    """Field/value pairs of a Redis hash."""

    pairs: tuple[tuple[str, str], ...]


@dataclass(frozen=True)
class ErrorValue:
    """Failure reported by the server or the client."""

    message: str


@dataclass(frozen=True)
class Absent:
    """Missing key or nil reply."""


@dataclass(frozen=True)
class Aggregate:
    """Multi-bulk reply, or the concatenation of several per-database replies."""

    children: tuple[ResultValue, ...]


@dataclass(frozen=True)
class Unsupported:
    """A reply shape the viewer cannot display, e.g. streams."""

    kind: str


ResultValue: TypeAlias = (
    Scalar
    | ListValue
    | SetValue
    | SortedSetValue
    | HashValue
    | ErrorValue
    | Absent
    | Aggregate
    | Unsupported
)


@dataclass(frozen=True)
class Projection:
    """Display lines of a value together with its label."""

    lines: tuple[str, ...]
    label: str

    @classmethod
    def of(cls, value: ResultValue) -> Projection:
        """Project a value and label it in one step."""
        return cls(lines=project(value), label=label(value))


def format_score(score: float) -> str:
    """Render a sorted-set score, dropping the fraction of integral scores."""
    if math.isfinite(score) and score.is_integer():
        return str(int(score))
    return repr(score)


def project(value: ResultValue) -> tuple[str, ...]:
    """Project a result value to its display lines."""
    if isinstance(value, Scalar):
        return (value.text,)
    if isinstance(value, ListValue):
        return tuple(f"Index: {i} | Value: {v}" for i, v in enumerate(value.items))
    if isinstance(value, SetValue):
        return value.items
    if isinstance(value, SortedSetValue):
        return tuple(f"Score: {format_score(s)} | Value: {v}" for v, s in value.entries)
    if isinstance(value, HashValue):
        return tuple(f"Field: {f} | Value: {v}" for f, v in value.pairs)
    if isinstance(value, ErrorValue):
        return tuple(value.message.replace("\r\n", "\n").split("\n"))
    if isinstance(value, Absent):
        return ("None",)
    if isinstance(value, Aggregate):
        return tuple(line for child in value.children for line in project(child))
    if isinstance(value, Unsupported):
        return (f"{value.kind} is not supported",)
    assert_never(value)


def label(value: ResultValue) -> str:
    """Short classification of a value, with element count for containers."""
    if isinstance(value, Scalar):
        return "String"
    if isinstance(value, ListValue):
        return f"List ({len(value.items)})"
    if isinstance(value, SetValue):
        return f"Set ({len(value.items)})"
    if isinstance(value, SortedSetValue):
        return f"SortedSet ({len(value.entries)})"
    if isinstance(value, HashValue):
        return f"Hash ({len(value.pairs)})"
    if isinstance(value, ErrorValue):
        return "Error"
    if isinstance(value, Absent):
        return "None"
    if isinstance(value, Aggregate):
        return f"Multi ({len(value.children)})"
    if isinstance(value, Unsupported):
        return value.kind
    assert_never(value)


def to_text(raw: Any) -> str:
    """Decode a raw reply item, replacing bytes that are not valid UTF-8."""
    if isinstance(raw, bytes):
        return raw.decode("utf-8", errors="replace")
    return str(raw)


def from_raw(raw: Any) -> ResultValue:
    """Normalize a raw redis-py reply into a result value.

    Replies of free-form commands come back as whatever the client's
    response callbacks produce, so this accepts nested lists, dicts, sets,
    scalars and exception instances embedded in multi-bulk replies.
    """
    if raw is None:
        return Absent()
    if isinstance(raw, Exception):
        return ErrorValue(str(raw))
    if isinstance(raw, bool):
        return Scalar("1" if raw else "0")
    if isinstance(raw, (str, bytes, int, float)):
        return Scalar(to_text(raw))
    if isinstance(raw, dict):
        return HashValue(tuple((to_text(k), to_text(v)) for k, v in raw.items()))
    if isinstance(raw, (set, frozenset)):
        return SetValue(tuple(sorted(to_text(item) for item in raw)))
    if isinstance(raw, (list, tuple)):
        return Aggregate(tuple(from_raw(item) for item in raw))
    return Unsupported(type(raw).__name__)
