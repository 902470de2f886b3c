"""View states of the two session channels."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Channel(Enum):
    """Independent interactive flows of a session."""

    KEYS = "keys"
    RESULTS = "results"


TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

PROCESSING_TITLES: dict[Channel, str] = {
    Channel.KEYS: "Keys (processing)",
    Channel.RESULTS: "Results (processing)",
}


def _compose_title(
    name: str, summary: str, from_history: bool, filtered: bool, time: datetime | None
) -> str:
    if time is None:
        return name
    flags = [summary]
    if from_history:
        flags.append("From History")
    if filtered:
        flags.append("Filtered")
    flags.append(time.strftime(TIME_FORMAT))
    return f"{name} ({', '.join(flags)})"


@dataclass(frozen=True)
class KeyQueryState:
    """Displayed keys of the key-query channel."""

    keys: tuple[str, ...] = ()
    from_history: bool = False
    filtered: bool = False
    time: datetime | None = None

    @property
    def lines(self) -> tuple[str, ...]:
        return self.keys

    def title(self) -> str:
        """Title like ``Keys (12, Filtered, 2024-01-01 10:00:00)``."""
        return _compose_title(
            "Keys", str(len(self.keys)), self.from_history, self.filtered, self.time
        )


@dataclass(frozen=True)
class ResultsState:
    """Displayed lines of the results channel."""

    result: tuple[str, ...] = ()
    result_type: str = ""
    from_history: bool = False
    filtered: bool = False
    time: datetime | None = None

    @property
    def lines(self) -> tuple[str, ...]:
        return self.result

    def title(self) -> str:
        """Title like ``Results (List (3), From History, 2024-01-01 10:00:00)``."""
        return _compose_title(
            "Results", self.result_type, self.from_history, self.filtered, self.time
        )


ViewState = KeyQueryState | ResultsState
