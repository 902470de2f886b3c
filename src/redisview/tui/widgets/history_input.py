"""Single-line input with history navigation."""

from __future__ import annotations

from textual import events
from textual.message import Message
from textual.widgets import Input


class HistoryInput(Input):
    """Input whose Up/Down keys navigate history instead of moving focus.

    Inputs created with ``history=False`` (the filter fields) swallow
    Up/Down without posting anything.
    """

    class HistoryNavigate(Message):
        """Posted when the user presses Up or Down in a history input."""

        def __init__(self, history_input: HistoryInput, direction: str) -> None:
            super().__init__()
            self.history_input = history_input
            self.direction = direction

        @property
        def control(self) -> HistoryInput:
            return self.history_input

    def __init__(
        self,
        value: str = "",
        *,
        placeholder: str = "",
        history: bool = True,
        id: str | None = None,
    ) -> None:
        super().__init__(value, placeholder=placeholder, id=id)
        self._history = history

    def replace_text(self, text: str) -> None:
        """Replace the whole value and move the cursor to its end."""
        self.value = text
        self.cursor_position = len(text)

    async def _on_key(self, event: events.Key) -> None:
        """Handle key events."""
        if event.key in ("up", "down"):
            event.prevent_default()
            event.stop()
            if self._history:
                self.post_message(HistoryInput.HistoryNavigate(self, event.key))
            return
        await super()._on_key(event)
