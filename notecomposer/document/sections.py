"""SectionStore: text of the ten note sections plus the running problem list."""

from __future__ import annotations

import logging
from typing import Callable, Iterable

from notecomposer.document.normalizer import normalize_line, strip_control_chars
from notecomposer.models import CANONICAL_ORDER, Section, SectionKey

logger = logging.getLogger(__name__)

SectionListener = Callable[[SectionKey, str], None]


class SectionStore:
    """Holds section text by fixed key and notifies listeners on every change."""

    def __init__(self, problems: Iterable[str] = ()) -> None:
        self._texts: dict[SectionKey, str] = {key: "" for key in CANONICAL_ORDER}
        self._problems: list[str] = []
        self._listeners: list[SectionListener] = []
        for problem in problems:
            self.add_problem(problem)

    def subscribe(self, listener: SectionListener) -> None:
        self._listeners.append(listener)

    def _notify(self, key: SectionKey) -> None:
        text = self._texts[key]
        for listener in self._listeners:
            listener(key, text)

    # --- Sections ---

    def get_text(self, key: SectionKey) -> str:
        return self._texts[key]

    def set_text(self, key: SectionKey, text: str) -> None:
        self._texts[key] = strip_control_chars(text)
        self._notify(key)

    def insert_at(self, key: SectionKey, offset: int, text: str) -> int:
        """Insert ``text`` at ``offset``; return the caret just after it."""
        return self.replace_range(key, offset, offset, text)

    def replace_range(self, key: SectionKey, start: int, end: int, text: str) -> int:
        """Replace ``[start, end)`` with ``text``; return the caret just after it."""
        current = self._texts[key]
        start = max(0, min(start, len(current)))
        end = max(start, min(end, len(current)))
        inserted = strip_control_chars(text)
        self._texts[key] = current[:start] + inserted + current[end:]
        self._notify(key)
        return start + len(inserted)

    def sections(self) -> list[Section]:
        return [
            Section(key=key, title=key.label, text=self._texts[key])
            for key in CANONICAL_ORDER
        ]

    # --- Problem list ---

    @property
    def problems(self) -> list[str]:
        return list(self._problems)

    def add_problem(self, text: str) -> bool:
        normalized = normalize_line(text)
        if not normalized:
            return False
        self._problems.append(normalized)
        return True

    def remove_problem(self, index: int) -> str | None:
        if index < 0 or index >= len(self._problems):
            logger.debug("Ignoring problem removal at out-of-range index %s.", index)
            return None
        return self._problems.pop(index)

    def get_problem(self, index: int) -> str | None:
        if 0 <= index < len(self._problems):
            return self._problems[index]
        return None

    def clear(self) -> None:
        """Empty every section (notifying each) and the problem list."""
        self._problems = []
        for key in CANONICAL_ORDER:
            self.set_text(key, "")
