"""Bounded history of fetched results for the TUI inputs."""

from __future__ import annotations

import threading
from collections.abc import Hashable
from dataclasses import dataclass
from typing import Generic, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

DEFAULT_CAPACITY = 100


@dataclass(frozen=True)
class HistorySlot(Generic[K, V]):
    """One history entry: the typed-in key and the result it produced."""

    key: K
    value: V


class ResultHistoryCache(Generic[K, V]):
    """In-memory history with up/down navigation and most-recent-wins dedup.

    Slots are stored oldest first. Adding a key that is already present
    moves it to the end, and the oldest slots are dropped once capacity is
    exceeded. The cursor points at the last added slot; up() steps toward
    older slots and down() toward newer ones, never past either end.

    All methods take the instance lock for the in-memory work only.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 0:
            raise ValueError(f"capacity must not be negative, got {capacity}")
        self._capacity = capacity
        self._lock = threading.Lock()
        self._slots: list[HistorySlot[K, V]] = []
        self._cursor = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        with self._lock:
            return len(self._slots)

    def keys(self) -> list[K]:
        """Snapshot of slot keys, oldest first."""
        with self._lock:
            return [slot.key for slot in self._slots]

    def add(self, key: K, value: V) -> None:
        """Record a result. Replaces any slot with the same key."""
        if self._capacity == 0:
            return
        with self._lock:
            if self._slots:
                for i, slot in enumerate(self._slots):
                    if slot.key == key:
                        del self._slots[i]
                        break
            self._slots.append(HistorySlot(key, value))
            if len(self._slots) > self._capacity:
                del self._slots[0]
            self._cursor = len(self._slots) - 1

    def up(self) -> HistorySlot[K, V] | None:
        """Move cursor to the previous (older) slot and return it."""
        return self._step(-1)

    def down(self) -> HistorySlot[K, V] | None:
        """Move cursor to the next (newer) slot and return it."""
        return self._step(1)

    def _step(self, delta: int) -> HistorySlot[K, V] | None:
        with self._lock:
            count = len(self._slots)
            if count == 0:
                return None
            new_index = self._cursor + delta
            if not 0 <= new_index < count:
                return None
            self._cursor = new_index
            return self._slots[new_index]

    def read_current(self) -> HistorySlot[K, V] | None:
        """Return the slot under the cursor without moving it."""
        with self._lock:
            if not 0 <= self._cursor < len(self._slots):
                return None
            return self._slots[self._cursor]
