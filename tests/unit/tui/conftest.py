"""Shared doubles for session and app tests."""

from __future__ import annotations

import asyncio
from datetime import datetime

import pytest

from redisview.keys import DatabaseSelection, format_key
from redisview.results import Aggregate, ListValue, ResultValue, Scalar, SetValue
from redisview.tui.state import Channel, ViewState

NOON = datetime(2024, 3, 1, 12, 0, 0)


class FakeBackend:
    """Backend double with scripted replies and optional per-call gates."""

    def __init__(self) -> None:
        self.keys: dict[int, list[str]] = {0: ["beta", "alpha"]}
        self.values: dict[tuple[int, str], ResultValue] = {
            (0, "beta"): ListValue(("x", "y")),
            (0, "alpha"): Scalar("first"),
        }
        self.replies: dict[str, ResultValue] = {}
        self.calls: list[tuple[str, object, str]] = []
        self.gates: dict[str, asyncio.Event] = {}
        self.closed = False

    async def _wait(self, token: str) -> None:
        gate = self.gates.get(token)
        if gate is not None:
            await gate.wait()

    async def get_keys(self, selection: DatabaseSelection, pattern: str) -> ResultValue:
        self.calls.append(("keys", selection, pattern))
        await self._wait(pattern)
        parts = [
            SetValue(tuple(format_key(db, k) for k in self.keys.get(db, [])))
            for db in selection.indices()
        ]
        return parts[0] if len(parts) == 1 else Aggregate(tuple(parts))

    async def get_value(self, database: int, key: str) -> ResultValue:
        self.calls.append(("value", database, key))
        await self._wait(key)
        return self.values.get((database, key), Scalar(f"value of {key}"))

    async def exec_command(self, database: int, text: str) -> ResultValue:
        self.calls.append(("command", database, text))
        await self._wait(text)
        return self.replies.get(text, Scalar(f"reply to {text}"))

    async def aclose(self) -> None:
        self.closed = True


class RecordingView:
    """SessionView double recording every call in order."""

    def __init__(self) -> None:
        self.events: list[tuple[str, Channel, object]] = []

    def show_processing(self, channel: Channel, title: str) -> None:
        self.events.append(("processing", channel, title))

    def show_state(self, channel: Channel, state: ViewState) -> None:
        self.events.append(("state", channel, state))

    def show_input(self, channel: Channel, text: str) -> None:
        self.events.append(("input", channel, text))

    def show_settled(self, channel: Channel) -> None:
        self.events.append(("settled", channel, None))

    def states(self, channel: Channel) -> list[ViewState]:
        return [
            state
            for kind, c, state in self.events
            if kind == "state" and c is channel
        ]  # type: ignore[misc]


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def view() -> RecordingView:
    return RecordingView()
