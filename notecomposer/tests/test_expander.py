import unittest
from datetime import date

from notecomposer.document.expander import AbbreviationExpander, apply_decision
from notecomposer.models import DecisionKind


class _DictTable:
    def __init__(self, data: dict[str, str]) -> None:
        self.data = dict(data)

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def put(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)

    def entries(self) -> list[tuple[str, str]]:
        return sorted(self.data.items())


FIXED_DAY = date(2024, 3, 9)


class AbbreviationExpanderTests(unittest.TestCase):
    def setUp(self) -> None:
        self.table = _DictTable({"to": "hypothyroidism", "cd": "not a date"})
        self.expander = AbbreviationExpander(self.table, today=lambda: FIXED_DAY)

    def test_known_token_is_replaced_and_space_suppressed(self) -> None:
        text = "Hx of :to"
        decision = self.expander.on_space_keystroke(len(text), text)

        self.assertEqual(decision.kind, DecisionKind.REPLACE)
        self.assertTrue(decision.suppress_keystroke)
        self.assertEqual((decision.start, decision.end), (6, 9))
        self.assertEqual(decision.replacement, "hypothyroidism ")

        new_text, caret = apply_decision(decision, text)
        self.assertEqual(new_text, "Hx of hypothyroidism ")
        self.assertEqual(caret, len(new_text))

    def test_unknown_token_passes_space_through(self) -> None:
        text = "Hx of :xyz"
        decision = self.expander.on_space_keystroke(len(text), text)

        self.assertEqual(decision.kind, DecisionKind.NO_ACTION)
        self.assertFalse(decision.suppress_keystroke)
        self.assertEqual(apply_decision(decision, text), (text, None))

    def test_token_without_trigger_is_ignored(self) -> None:
        decision = self.expander.on_space_keystroke(2, "to")
        self.assertEqual(decision.kind, DecisionKind.NO_ACTION)

    def test_trigger_inside_word_is_ignored(self) -> None:
        decision = self.expander.on_space_keystroke(7, "ratio:to")
        self.assertEqual(decision.kind, DecisionKind.NO_ACTION)

    def test_token_at_start_of_text(self) -> None:
        decision = self.expander.on_space_keystroke(3, ":to")
        self.assertEqual(decision.start, 0)

    def test_token_after_newline(self) -> None:
        text = "line one\n:to"
        decision = self.expander.on_space_keystroke(len(text), text)
        self.assertEqual(decision.start, 9)

    def test_lookup_is_case_sensitive(self) -> None:
        decision = self.expander.on_space_keystroke(3, ":TO")
        self.assertEqual(decision.kind, DecisionKind.NO_ACTION)

    def test_date_macro_overrides_table(self) -> None:
        decision = self.expander.on_space_keystroke(3, ":cd")
        self.assertEqual(decision.replacement, "2024-03-09 ")

    def test_bare_trigger_is_no_action(self) -> None:
        decision = self.expander.on_space_keystroke(5, "note:")
        self.assertEqual(decision.kind, DecisionKind.NO_ACTION)
        decision = self.expander.on_space_keystroke(6, "note :")
        self.assertEqual(decision.kind, DecisionKind.NO_ACTION)

    def test_table_changes_are_seen_immediately(self) -> None:
        self.table.put("dm", "diabetes mellitus")
        decision = self.expander.on_space_keystroke(3, ":dm")
        self.assertEqual(decision.replacement, "diabetes mellitus ")

        self.table.remove("dm")
        decision = self.expander.on_space_keystroke(3, ":dm")
        self.assertEqual(decision.kind, DecisionKind.NO_ACTION)

    def test_apply_keeps_text_after_caret(self) -> None:
        decision = self.expander.on_space_keystroke(3, ":to")
        new_text, caret = apply_decision(decision, ":to and more")
        self.assertEqual(new_text, "hypothyroidism  and more")
        self.assertEqual(caret, 15)


if __name__ == "__main__":
    unittest.main()
