"""Session controller: turns user commands into view-state transitions.

The controller owns both channels of a session (key queries and command
results), their history caches and filters, and the request serializer.
It never touches widgets; everything visible goes through ``SessionView``.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Literal, Protocol, TypeAlias, assert_never

from redisview.backend import Backend
from redisview.exceptions import KeyFormatError
from redisview.keys import DatabaseSelection, parse_key
from redisview.results import ErrorValue, Projection, ResultValue, label, project
from redisview.tui.filter import LineFilter, filter_lines
from redisview.tui.history import DEFAULT_CAPACITY, ResultHistoryCache
from redisview.tui.serializer import RequestSerializer
from redisview.tui.state import PROCESSING_TITLES, Channel, KeyQueryState, ResultsState, ViewState

logger = logging.getLogger(__name__)

Direction = Literal["up", "down"]


@dataclass(frozen=True)
class SubmitKeyQuery:
    """Enter in the key query input.

    ``filter_text`` is the keys filter field as typed when the query was
    submitted; ``None`` keeps the filter already in effect.
    """

    pattern: str
    selection: DatabaseSelection
    filter_text: str | None = None


@dataclass(frozen=True)
class SelectKey:
    """A key was highlighted in the keys list."""

    display_key: str
    filter_text: str | None = None


@dataclass(frozen=True)
class SubmitCommand:
    """Enter in the command input."""

    text: str
    database: int
    filter_text: str | None = None


@dataclass(frozen=True)
class NavigateHistory:
    """Up/down in the key query or command input."""

    channel: Channel
    direction: Direction
    filter_text: str | None = None


@dataclass(frozen=True)
class ApplyFilter:
    """Enter in one of the filter inputs."""

    channel: Channel
    text: str


@dataclass(frozen=True)
class ToggleFilterMode:
    """Switch a channel's filter between substring and regex matching."""

    channel: Channel


SessionCommand: TypeAlias = (
    SubmitKeyQuery | SelectKey | SubmitCommand | NavigateHistory | ApplyFilter | ToggleFilterMode
)


class SessionView(Protocol):
    """Rendering surface driven by the controller."""

    def show_processing(self, channel: Channel, title: str) -> None: ...

    def show_state(self, channel: Channel, state: ViewState) -> None: ...

    def show_input(self, channel: Channel, text: str) -> None: ...

    def show_settled(self, channel: Channel) -> None: ...


class SessionController:
    """State machine for one viewer session.

    Args:
        backend: Store the session reads from.
        view: Receives titles, line arrays and input echoes.
        history_size: Capacity of each history cache.
        clock: Source of view-state timestamps.
    """

    def __init__(
        self,
        backend: Backend,
        view: SessionView,
        *,
        history_size: int = DEFAULT_CAPACITY,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._backend = backend
        self._view = view
        self._clock = clock
        self._serializer = RequestSerializer()
        self.key_history: ResultHistoryCache[str, Projection] = ResultHistoryCache(history_size)
        self.command_history: ResultHistoryCache[str, Projection] = ResultHistoryCache(
            history_size
        )
        self._key_state = KeyQueryState()
        self._results_state = ResultsState()
        self._filters: dict[Channel, LineFilter] = {
            Channel.KEYS: LineFilter(),
            Channel.RESULTS: LineFilter(),
        }
        # Value of the key selected in the keys list; cleared by commands.
        self._live_value: Projection | None = None

    @property
    def serializer(self) -> RequestSerializer:
        return self._serializer

    @property
    def key_state(self) -> KeyQueryState:
        return self._key_state

    @property
    def results_state(self) -> ResultsState:
        return self._results_state

    def filter_for(self, channel: Channel) -> LineFilter:
        return self._filters[channel]

    async def dispatch(self, command: SessionCommand) -> None:
        """Apply one command.

        Commands that reach the backend wait for the shared permit; history
        and filter commands complete without suspending. An invalid regex,
        whether from a filter command or the filter text carried by another
        command, raises FilterSyntaxError before anything changes.
        """
        logger.debug("Dispatching %r", command)
        if isinstance(command, SubmitKeyQuery):
            self._take_filter_text(Channel.KEYS, command.filter_text)
            await self._submit_key_query(command.pattern, command.selection)
        elif isinstance(command, SelectKey):
            self._take_filter_text(Channel.RESULTS, command.filter_text)
            await self._select_key(command.display_key)
        elif isinstance(command, SubmitCommand):
            self._take_filter_text(Channel.RESULTS, command.filter_text)
            await self._submit_command(command.text, command.database)
        elif isinstance(command, NavigateHistory):
            self._take_filter_text(command.channel, command.filter_text)
            self._navigate(command.channel, command.direction)
        elif isinstance(command, ApplyFilter):
            current = self._filters[command.channel]
            self._apply_filter(command.channel, LineFilter(command.text, current.mode))
        elif isinstance(command, ToggleFilterMode):
            current = self._filters[command.channel]
            self._apply_filter(command.channel, LineFilter(current.text, current.mode.toggled()))
        else:
            assert_never(command)

    # --- Backend round trips ---

    async def _fetch(
        self, channel: Channel, call: Callable[[], Awaitable[ResultValue]]
    ) -> ResultValue:
        self._view.show_processing(channel, PROCESSING_TITLES[channel])
        try:
            return await call()
        except Exception as exc:
            logger.exception("Backend request for %s failed", channel.value)
            return ErrorValue(f"{type(exc).__name__}: {exc}")
        finally:
            self._view.show_settled(channel)

    async def _submit_key_query(self, pattern: str, selection: DatabaseSelection) -> None:
        async with self._serializer.permit():
            value = await self._fetch(
                Channel.KEYS, lambda: self._backend.get_keys(selection, pattern)
            )
            keys = project(value)
            if not isinstance(value, ErrorValue):
                keys = tuple(sorted(keys))
            projection = Projection(keys, label(value))
            self.key_history.add(pattern, projection)
            self._show_keys(projection.lines, from_history=False)

    async def _select_key(self, display_key: str) -> None:
        try:
            database, key = parse_key(display_key)
        except KeyFormatError:
            logger.debug("Ignoring selection of non-key line %r", display_key)
            return
        async with self._serializer.permit():
            value = await self._fetch(
                Channel.RESULTS, lambda: self._backend.get_value(database, key)
            )
            projection = Projection.of(value)
            self._live_value = projection
            self._show_results(projection, from_history=False)

    async def _submit_command(self, text: str, database: int) -> None:
        async with self._serializer.permit():
            value = await self._fetch(
                Channel.RESULTS, lambda: self._backend.exec_command(database, text)
            )
            projection = Projection.of(value)
            self.command_history.add(text, projection)
            self._live_value = None
            self._show_results(projection, from_history=False)

    # --- Local transitions ---

    def _navigate(self, channel: Channel, direction: Direction) -> None:
        history = self.key_history if channel is Channel.KEYS else self.command_history
        slot = history.up() if direction == "up" else history.down()
        if slot is None:
            return
        self._view.show_input(channel, slot.key)
        if channel is Channel.KEYS:
            self._show_keys(slot.value.lines, from_history=True)
        else:
            self._show_results(slot.value, from_history=True)

    def _take_filter_text(self, channel: Channel, text: str | None) -> None:
        if text is None:
            return
        current = self._filters[channel]
        self._filters[channel] = LineFilter(text, current.mode).validate()

    def _apply_filter(self, channel: Channel, line_filter: LineFilter) -> None:
        self._filters[channel] = line_filter.validate()
        if channel is Channel.KEYS:
            slot = self.key_history.read_current()
            if slot is None:
                return
            self._key_state = dataclasses.replace(
                self._key_state,
                keys=filter_lines(line_filter, slot.value.lines),
                filtered=line_filter.active,
            )
            self._view.show_state(Channel.KEYS, self._key_state)
            return

        # Results prefer the live key value over the command history.
        source: Sequence[str]
        if self._live_value is not None:
            source = self._live_value.lines
        else:
            slot = self.command_history.read_current()
            if slot is None:
                return
            source = slot.value.lines
        self._results_state = dataclasses.replace(
            self._results_state,
            result=filter_lines(line_filter, source),
            filtered=line_filter.active,
        )
        self._view.show_state(Channel.RESULTS, self._results_state)

    def _show_keys(self, lines: Sequence[str], *, from_history: bool) -> None:
        line_filter = self._filters[Channel.KEYS]
        self._key_state = KeyQueryState(
            keys=filter_lines(line_filter, lines),
            from_history=from_history,
            filtered=line_filter.active,
            time=self._clock(),
        )
        self._view.show_state(Channel.KEYS, self._key_state)

    def _show_results(self, projection: Projection, *, from_history: bool) -> None:
        line_filter = self._filters[Channel.RESULTS]
        self._results_state = ResultsState(
            result=filter_lines(line_filter, projection.lines),
            result_type=projection.label,
            from_history=from_history,
            filtered=line_filter.active,
            time=self._clock(),
        )
        self._view.show_state(Channel.RESULTS, self._results_state)
