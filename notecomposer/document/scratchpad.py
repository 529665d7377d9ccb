"""ScratchpadAggregator: condensed one-line-per-section mirror of the note."""

from __future__ import annotations

import re
from dataclasses import dataclass

from notecomposer.models import CANONICAL_ORDER, SectionKey

# Marks wrapped content on one logical scratchpad line.
WRAP_MARKER = " \n\t "
_LINE_BREAK_RUN = re.compile(r"\s*[\r\n]\s*")


@dataclass
class ScratchpadView:
    """The mirror surface: displayed text, caret offset and scroll position."""

    text: str = ""
    caret: int = 0
    scroll_top: float = 0.0

    def scroll_to_bottom(self) -> None:
        self.scroll_top = float("inf")


def condense(text: str) -> str:
    """Trim and replace every line-break whitespace run with the wrap marker."""
    return _LINE_BREAK_RUN.sub(WRAP_MARKER, text.strip())


class ScratchpadAggregator:
    def __init__(self, view: ScratchpadView | None = None) -> None:
        self.view = view or ScratchpadView()
        self._entries: dict[SectionKey, str] = {}

    @property
    def entries(self) -> dict[SectionKey, str]:
        return dict(self._entries)

    def on_section_changed(self, key: SectionKey, new_text: str) -> bool:
        """Update the mirror entry for ``key`` and redraw; True if the view changed."""
        condensed = condense(new_text)
        if not condensed:
            self._entries.pop(key, None)
        else:
            self._entries[key] = condensed
        return self.redraw()

    def render(self) -> str:
        # Canonical order, never edit order.
        return "\n".join(
            f"{key.label} {self._entries[key]}"
            for key in CANONICAL_ORDER
            if self._entries.get(key)
        )

    def redraw(self) -> bool:
        """Write the rendered mirror only when it differs from the view."""
        rendered = self.render()
        if rendered == self.view.text:
            return False
        self.view.text = rendered
        self.view.caret = len(rendered)
        self.view.scroll_to_bottom()
        return True

    def clear(self) -> None:
        self._entries = {}
        self.redraw()
