"""Abbreviation expansion on live space keystrokes."""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Protocol

from notecomposer.config import settings
from notecomposer.models import DecisionKind, ExpansionDecision

logger = logging.getLogger(__name__)


class AbbreviationTable(Protocol):
    """Read/write capability over the token -> expansion lookup table."""

    def get(self, key: str) -> str | None: ...

    def put(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...

    def entries(self) -> list[tuple[str, str]]: ...


class AbbreviationExpander:
    """Decides, per space keystroke, whether to replace a just-typed ``:token``."""

    def __init__(
        self,
        table: AbbreviationTable,
        trigger_char: str | None = None,
        date_macro_key: str | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.table = table
        self.trigger_char = trigger_char or settings.trigger_char
        self.date_macro_key = date_macro_key or settings.date_macro_key
        self._today = today

    @staticmethod
    def token_start(text_before_caret: str) -> int:
        """Offset just after the nearest preceding space or newline (0 if none)."""
        boundary = max(text_before_caret.rfind(" "), text_before_caret.rfind("\n"))
        return boundary + 1

    def lookup(self, key: str) -> str | None:
        if key == self.date_macro_key:
            return self._today().isoformat()
        return self.table.get(key)

    def on_space_keystroke(
        self,
        caret_offset_before_insert: int,
        text_before_caret: str,
    ) -> ExpansionDecision:
        start = self.token_start(text_before_caret)
        token = text_before_caret[start:]
        if not token.startswith(self.trigger_char):
            return ExpansionDecision.no_action()

        key = token[len(self.trigger_char):]
        replacement = self.lookup(key)
        if replacement is None:
            logger.debug("No abbreviation for %r; passing space through.", key)
            return ExpansionDecision.no_action()

        return ExpansionDecision.replace(
            start=start,
            end=caret_offset_before_insert,
            replacement=replacement + " ",
        )


def apply_decision(decision: ExpansionDecision, text: str) -> tuple[str, int | None]:
    """Apply a Replace decision to ``text``; return (new_text, new_caret).

    NoAction leaves the text untouched and returns ``None`` for the caret, the
    caller inserts the space keystroke itself.
    """
    if decision.kind != DecisionKind.REPLACE:
        return text, None
    start = decision.start or 0
    end = decision.end if decision.end is not None else start
    replacement = decision.replacement or ""
    new_text = text[:start] + replacement + text[end:]
    return new_text, start + len(replacement)
