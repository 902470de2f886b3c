"""Main Textual application for redisview."""

from __future__ import annotations

import logging

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.css.query import NoMatches
from textual.widgets import Checkbox, Input, OptionList, Select, Static
from textual.widgets.option_list import Option

from redisview.backend import Backend
from redisview.exceptions import RedisViewError
from redisview.keys import DATABASE_COUNT, DatabaseSelection, trim_database_header
from redisview.tui.clipboard import MiniClipboard
from redisview.tui.history import DEFAULT_CAPACITY
from redisview.tui.session import (
    ApplyFilter,
    NavigateHistory,
    SelectKey,
    SessionCommand,
    SessionController,
    SubmitCommand,
    SubmitKeyQuery,
    ToggleFilterMode,
)
from redisview.tui.state import Channel, ViewState
from redisview.tui.widgets.history_input import HistoryInput
from redisview.tui.widgets.status_bar import StatusBar

logger = logging.getLogger(__name__)

ACCENT = "#d82c20"

_LIST_IDS: dict[Channel, str] = {Channel.KEYS: "keys", Channel.RESULTS: "results"}
_INPUT_IDS: dict[Channel, str] = {Channel.KEYS: "key-query", Channel.RESULTS: "command"}
_FILTER_IDS: dict[Channel, str] = {Channel.KEYS: "key-filter", Channel.RESULTS: "result-filter"}
_KEY_CHANNEL_WIDGETS = {"key-query", "key-filter", "keys", "db-picker", "all-dbs"}


class RedisViewTUI(App[None]):
    """Textual app for browsing a Redis server.

    Args:
        backend: Store to browse.
        server: Server address shown in the status bar.
        database: Initially selected database index.
        history_size: Capacity of the query and command histories.
    """

    CSS = f"""
    Screen {{
        layout: vertical;
    }}
    .input-row {{
        height: 3;
    }}
    HistoryInput {{
        border: round $panel-lighten-2;
    }}
    HistoryInput:focus {{
        border: round {ACCENT};
    }}
    #key-query {{
        width: 60%;
    }}
    #key-filter {{
        width: 1fr;
    }}
    #db-picker {{
        width: 12;
    }}
    #all-dbs {{
        width: auto;
    }}
    #command {{
        width: 70%;
    }}
    #result-filter {{
        width: 1fr;
    }}
    OptionList {{
        height: 1fr;
        border: round $panel-lighten-2;
    }}
    OptionList:focus {{
        border: round {ACCENT};
    }}
    #help-bar {{
        height: 1;
        color: $text-muted;
        padding: 0 1;
    }}
    """

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit", show=False),
        Binding("ctrl+y", "copy_selection", "Copy", show=False),
        Binding("ctrl+b", "paste_selection", "Paste", show=False),
        Binding("ctrl+r", "toggle_filter_mode", "Toggle regex filter", show=False),
    ]

    def __init__(
        self,
        backend: Backend,
        server: str = "",
        database: int = 0,
        history_size: int = DEFAULT_CAPACITY,
    ) -> None:
        super().__init__()
        self._backend = backend
        self._server = server
        self._initial_database = database
        self._session = SessionController(backend, self, history_size=history_size)
        self._mini_clipboard = MiniClipboard()

    @property
    def session(self) -> SessionController:
        return self._session

    @property
    def mini_clipboard(self) -> MiniClipboard:
        return self._mini_clipboard

    def compose(self) -> ComposeResult:
        """Create the app layout."""
        with Horizontal(classes="input-row"):
            yield HistoryInput("*", placeholder="Key pattern", id="key-query")
            yield HistoryInput(placeholder="Keys filter", history=False, id="key-filter")
            yield Select(
                [(str(i), i) for i in range(DATABASE_COUNT)],
                value=self._initial_database,
                allow_blank=False,
                id="db-picker",
            )
            yield Checkbox("All", id="all-dbs")
        yield OptionList(id="keys")
        yield OptionList(id="results")
        with Horizontal(classes="input-row"):
            yield HistoryInput(placeholder="Command", id="command")
            yield HistoryInput(placeholder="Results filter", history=False, id="result-filter")
        yield StatusBar(
            server=self._server,
            database=DatabaseSelection.single(self._initial_database).describe(),
        )
        yield Static(
            "Enter: run │ ↑↓: history │ Ctrl+R: regex filter"
            " │ Ctrl+Y: copy │ Ctrl+B: paste │ Ctrl+C: quit",
            id="help-bar",
        )

    def on_mount(self) -> None:
        """Set titles and focus the key query on startup."""
        titles = {
            "key-query": "KeyQuery",
            "key-filter": "Keys Filter",
            "keys": "Keys",
            "results": "Results",
            "command": "Command",
            "result-filter": "Results Filter",
        }
        for widget_id, title in titles.items():
            self.query_one(f"#{widget_id}").border_title = title
        try:
            self.query_one("#key-query", HistoryInput).focus()
        except NoMatches:
            pass

    async def on_unmount(self) -> None:
        await self._backend.aclose()

    # --- SessionView ---

    def show_processing(self, channel: Channel, title: str) -> None:
        self.query_one(f"#{_LIST_IDS[channel]}", OptionList).border_title = title
        self.query_one(StatusBar).update_processing(channel)

    def show_state(self, channel: Channel, state: ViewState) -> None:
        option_list = self.query_one(f"#{_LIST_IDS[channel]}", OptionList)
        option_list.clear_options()
        option_list.add_options([Option(Text(line)) for line in state.lines])
        option_list.border_title = state.title()

    def show_input(self, channel: Channel, text: str) -> None:
        self.query_one(f"#{_INPUT_IDS[channel]}", HistoryInput).replace_text(text)

    def show_settled(self, channel: Channel) -> None:
        self.query_one(StatusBar).update_done(channel)

    # --- Input wiring ---

    def _database(self) -> int:
        value = self.query_one("#db-picker", Select).value
        return value if isinstance(value, int) else 0

    def _filter_text(self, channel: Channel) -> str:
        return self.query_one(f"#{_FILTER_IDS[channel]}", HistoryInput).value

    def _selection(self) -> DatabaseSelection:
        if self.query_one("#all-dbs", Checkbox).value:
            return DatabaseSelection.all()
        return DatabaseSelection.single(self._database())

    def _dispatch(self, command: SessionCommand) -> None:
        """Run a session command as a worker on the app's event loop."""
        self.run_worker(self._run_command(command), group="session")

    async def _run_command(self, command: SessionCommand) -> None:
        try:
            await self._session.dispatch(command)
        except RedisViewError as e:
            logger.info("Command %r rejected: %s", command, e)
            self.notify(str(e), title="Filter", severity="error")
            return
        if isinstance(command, ToggleFilterMode):
            mode = self._session.filter_for(command.channel).mode
            self.query_one(StatusBar).update_filter_mode(command.channel, mode)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        """Map Enter in each input to its session command."""
        widget_id = event.input.id
        value = event.value
        if widget_id == "key-query":
            self._dispatch(
                SubmitKeyQuery(value, self._selection(), self._filter_text(Channel.KEYS))
            )
        elif widget_id == "key-filter":
            self._dispatch(ApplyFilter(Channel.KEYS, value))
        elif widget_id == "command":
            if not value.strip():
                return
            self._dispatch(
                SubmitCommand(value, self._database(), self._filter_text(Channel.RESULTS))
            )
        elif widget_id == "result-filter":
            self._dispatch(ApplyFilter(Channel.RESULTS, value))

    def on_history_input_history_navigate(self, event: HistoryInput.HistoryNavigate) -> None:
        """Handle Up/Down in the key query and command inputs."""
        channel = Channel.KEYS if event.history_input.id == "key-query" else Channel.RESULTS
        direction = "up" if event.direction == "up" else "down"
        self._dispatch(NavigateHistory(channel, direction, self._filter_text(channel)))

    def on_option_list_option_highlighted(self, event: OptionList.OptionHighlighted) -> None:
        """Fetch the value of a key when it is highlighted in the keys list."""
        if event.option_list.id != "keys":
            return
        self._dispatch(
            SelectKey(_option_text(event.option), self._filter_text(Channel.RESULTS))
        )

    def on_select_changed(self, event: Select.Changed) -> None:
        self.query_one(StatusBar).update_database(self._selection().describe())

    def on_checkbox_changed(self, event: Checkbox.Changed) -> None:
        self.query_one(StatusBar).update_database(self._selection().describe())

    # --- Actions ---

    def _focused_channel(self) -> Channel:
        focused = self.focused
        if focused is not None and focused.id in _KEY_CHANNEL_WIDGETS:
            return Channel.KEYS
        return Channel.RESULTS

    def action_toggle_filter_mode(self) -> None:
        """Switch the focused channel's filter between text and regex."""
        self._dispatch(ToggleFilterMode(self._focused_channel()))

    def action_copy_selection(self) -> None:
        """Copy the highlighted key or result line, or the focused input's text."""
        focused = self.focused
        if isinstance(focused, OptionList):
            index = focused.highlighted
            if index is None or index >= focused.option_count:
                return
            text = _option_text(focused.get_option_at_index(index))
            if focused.id == "keys":
                text = trim_database_header(text)
        elif isinstance(focused, Input):
            text = focused.value
        else:
            return
        self.copy_to_clipboard(self._mini_clipboard.save(text))

    def action_paste_selection(self) -> None:
        """Paste the last copied text into the focused input."""
        focused = self.focused
        if isinstance(focused, Input) and self._mini_clipboard.text:
            focused.insert_text_at_cursor(self._mini_clipboard.text)


def _option_text(option: Option) -> str:
    prompt = option.prompt
    if isinstance(prompt, Text):
        return prompt.plain
    return str(prompt)
