"""Status bar widget."""

from dataclasses import dataclass, field

from textual.widgets import Static

from redisview.tui.filter import FilterMode
from redisview.tui.state import Channel


@dataclass
class StatusBarState:
    """Data model for the status bar, independent of Textual.

    Tracks the server address, database selection, filter modes and the
    channels currently waiting on the server.
    """

    server: str
    database: str = "0"
    filter_modes: dict[Channel, FilterMode] = field(
        default_factory=lambda: {c: FilterMode.CONTAINS for c in Channel}
    )
    _pending: list[Channel] = field(default_factory=list, init=False)

    def set_processing(self, channel: Channel) -> None:
        """Mark a channel as waiting on the server."""
        if channel not in self._pending:
            self._pending.append(channel)

    def set_done(self, channel: Channel) -> None:
        """Mark a channel's request as settled."""
        if channel in self._pending:
            self._pending.remove(channel)

    @property
    def phase(self) -> str:
        if not self._pending:
            return "Ready"
        names = ", ".join(channel.value for channel in self._pending)
        return f"Waiting on server ({names})"

    def render_line(self) -> str:
        """Render the status line."""
        modes = ", ".join(f"{c.value}: {m.value}" for c, m in self.filter_modes.items())
        return (
            f"Server: {self.server} │ "
            f"DB: {self.database} │ "
            f"Filters: {modes} │ "
            f"{self.phase}"
        )


class StatusBar(Static):
    """Textual widget displaying the session status line."""

    DEFAULT_CSS = """
    StatusBar {
        height: 1;
        padding: 0 1;
        color: $text-muted;
    }
    """

    def __init__(self, server: str, database: str = "0") -> None:
        super().__init__("", markup=False)
        self._state = StatusBarState(server=server, database=database)
        self._refresh_content()

    @property
    def state(self) -> StatusBarState:
        return self._state

    def _refresh_content(self) -> None:
        """Re-render from state."""
        self.update(self._state.render_line())

    def update_database(self, database: str) -> None:
        self._state.database = database
        self._refresh_content()

    def update_filter_mode(self, channel: Channel, mode: FilterMode) -> None:
        self._state.filter_modes[channel] = mode
        self._refresh_content()

    def update_processing(self, channel: Channel) -> None:
        self._state.set_processing(channel)
        self._refresh_content()

    def update_done(self, channel: Channel) -> None:
        self._state.set_done(channel)
        self._refresh_content()
