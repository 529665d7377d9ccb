"""ComposerSession: one note document and its editing-event dispatch."""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Iterable, Protocol

from notecomposer.config import settings
from notecomposer.document.expander import AbbreviationExpander, AbbreviationTable, apply_decision
from notecomposer.document.export import assemble
from notecomposer.document.normalizer import auto_format
from notecomposer.document.scratchpad import ScratchpadAggregator
from notecomposer.document.sections import SectionStore
from notecomposer.document.templates import DEFAULT_TEMPLATE, Template
from notecomposer.models import (
    CANONICAL_ORDER,
    DecisionKind,
    ExpansionDecision,
    SectionKey,
    SessionSnapshot,
)

logger = logging.getLogger(__name__)


class ClipboardSink(Protocol):
    def set_text(self, text: str) -> None: ...


class ComposerSession:
    """Owns sections, problem list, scratchpad mirror and the focused section."""

    def __init__(
        self,
        table: AbbreviationTable,
        problems: Iterable[str] | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._today = today
        self.table = table
        self.expander = AbbreviationExpander(table, today=today)
        self._initial_problems = list(settings.seed_problems if problems is None else problems)
        self.store = SectionStore(self._initial_problems)
        self.scratchpad = ScratchpadAggregator()
        self.store.subscribe(self._on_section_changed)
        self.focused = CANONICAL_ORDER[0]
        self.carets: dict[SectionKey, int] = {key: 0 for key in CANONICAL_ORDER}
        self.scratchpad_changed = False
        self.last_space_applied = False

    def _on_section_changed(self, key: SectionKey, new_text: str) -> None:
        if self.scratchpad.on_section_changed(key, new_text):
            self.scratchpad_changed = True

    def consume_scratchpad_change(self) -> bool:
        """Return whether the mirror changed since the last call, and reset the flag."""
        changed = self.scratchpad_changed
        self.scratchpad_changed = False
        return changed

    # --- Focus ---

    def focus(self, key: SectionKey) -> None:
        self.focused = key

    def focus_index(self, index: int) -> bool:
        if 0 <= index < len(CANONICAL_ORDER):
            self.focused = CANONICAL_ORDER[index]
            return True
        return False

    def caret(self, key: SectionKey | None = None) -> int:
        key = key or self.focused
        return min(self.carets[key], len(self.store.get_text(key)))

    # --- Editing events ---

    def edit(self, key: SectionKey, text: str, caret: int | None = None) -> None:
        """The surface relays the section's full new text after an edit."""
        self.store.set_text(key, text)
        current = self.store.get_text(key)
        self.carets[key] = len(current) if caret is None else max(0, min(caret, len(current)))

    def space(
        self,
        key: SectionKey,
        caret: int,
        text_before_caret: str,
        text_after_caret: str | None = None,
    ) -> ExpansionDecision:
        """Handle a space keystroke; apply the replacement when one is decided.

        Without ``text_after_caret`` the stored text supplies the remainder, but
        only if its prefix matches what the surface reports. When the store lags
        the surface the decision is returned unapplied (``last_space_applied`` is
        False) and the surface performs the replacement and relays an edit.
        """
        self.last_space_applied = False
        decision = self.expander.on_space_keystroke(caret, text_before_caret)
        if decision.kind != DecisionKind.REPLACE:
            return decision

        if text_after_caret is None:
            current = self.store.get_text(key)
            if current[:caret] != text_before_caret:
                logger.debug("Store lags surface in %s; leaving replacement to the surface.", key.value)
                return decision
            text_after_caret = current[caret:]

        new_text, new_caret = apply_decision(decision, text_before_caret + text_after_caret)
        self.store.set_text(key, new_text)
        self.carets[key] = new_caret if new_caret is not None else len(new_text)
        self.last_space_applied = True
        logger.debug("Expanded abbreviation in %s at %s.", key.value, decision.start)
        return decision

    def insert_block(self, block: str, key: SectionKey | None = None) -> int:
        key = key or self.focused
        caret = self.store.insert_at(key, self.caret(key), block)
        self.carets[key] = caret
        return caret

    def insert_line(self, line: str, key: SectionKey | None = None) -> int:
        return self.insert_block(line if line.endswith("\n") else line + "\n", key)

    def insert_template(self, template: Template = DEFAULT_TEMPLATE, key: SectionKey | None = None) -> int:
        return self.insert_block(template.body(self._today()), key)

    def insert_problem(self, index: int, key: SectionKey | None = None) -> int | None:
        problem = self.store.get_problem(index)
        if problem is None:
            return None
        return self.insert_line(f"- {problem}", key)

    def format_section(self, key: SectionKey | None = None) -> str:
        key = key or self.focused
        formatted = auto_format(self.store.get_text(key))
        self.store.set_text(key, formatted)
        self.carets[key] = len(formatted)
        return formatted

    # --- Problem list ---

    def add_problem(self, text: str) -> bool:
        return self.store.add_problem(text)

    def remove_problem(self, index: int) -> str | None:
        return self.store.remove_problem(index)

    # --- Export ---

    def copy_all(self, sink: ClipboardSink | None = None) -> str:
        document = assemble(self.store.problems, self.store.sections(), self._today())
        if sink is not None:
            sink.set_text(document)
        logger.info("Assembled note export (%d chars).", len(document))
        return document

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            sections=self.store.sections(),
            problems=self.store.problems,
            scratchpad=self.scratchpad.view.text,
            focused=self.focused,
        )

    def reset(self) -> None:
        """Reset for a new note."""
        self.store.clear()
        for problem in self._initial_problems:
            self.store.add_problem(problem)
        self.scratchpad.clear()
        self.focused = CANONICAL_ORDER[0]
        self.carets = {key: 0 for key in CANONICAL_ORDER}
        self.scratchpad_changed = False
