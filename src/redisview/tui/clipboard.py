"""In-process clipboard shared by the TUI inputs and lists."""


class MiniClipboard:
    """Last copied text, kept so it can be pasted even without a system clipboard."""

    def __init__(self) -> None:
        self._text = ""

    @property
    def text(self) -> str:
        return self._text

    def save(self, text: str | None) -> str:
        """Store text (None counts as empty) and return what was stored."""
        self._text = text or ""
        return self._text
