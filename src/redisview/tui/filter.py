"""Local filtering of displayed lines."""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache

from redisview.exceptions import FilterSyntaxError


class FilterMode(Enum):
    """How filter text is matched against lines."""

    CONTAINS = "contains"
    REGEX = "regex"

    def toggled(self) -> FilterMode:
        return FilterMode.REGEX if self is FilterMode.CONTAINS else FilterMode.CONTAINS


@lru_cache(maxsize=64)
def compile_pattern(text: str) -> re.Pattern[str]:
    """Compile a regex filter, reusing the compiled pattern for repeated text."""
    try:
        return re.compile(text)
    except re.error as e:
        raise FilterSyntaxError(text, str(e)) from e


@dataclass(frozen=True)
class LineFilter:
    """Filter text together with its matching mode."""

    text: str = ""
    mode: FilterMode = FilterMode.CONTAINS

    @property
    def active(self) -> bool:
        """Whether the filter removes anything at all."""
        return bool(self.text)

    def validate(self) -> LineFilter:
        """Raise FilterSyntaxError if the text is not usable in this mode."""
        if self.mode is FilterMode.REGEX and self.text:
            compile_pattern(self.text)
        return self

    def matches(self, line: str) -> bool:
        if not self.text:
            return True
        if self.mode is FilterMode.REGEX:
            return compile_pattern(self.text).search(line) is not None
        return self.text.casefold() in line.casefold()


def filter_lines(line_filter: LineFilter, lines: Sequence[str]) -> tuple[str, ...]:
    """Return the lines accepted by the filter, preserving order."""
    if not line_filter.active:
        return tuple(lines)
    return tuple(line for line in lines if line_filter.matches(line))
