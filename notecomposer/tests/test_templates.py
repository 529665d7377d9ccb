import unittest
from datetime import date
from unittest.mock import patch

from notecomposer.config import settings
from notecomposer.document.templates import (
    DEFAULT_TEMPLATE,
    Template,
    get_template,
    quick_snippets,
)


class TemplateLibraryTests(unittest.TestCase):
    def test_default_template_is_hpi(self) -> None:
        self.assertIs(DEFAULT_TEMPLATE, Template.HPI)
        self.assertTrue(Template.HPI.body().startswith("# HPI\n- Onset: \n"))

    def test_letter_is_dated_at_render_time(self) -> None:
        body = Template.LETTER.body(date(2023, 12, 31))
        self.assertIn("Date: 2023-12-31\n", body)

    def test_signature_comes_from_settings(self) -> None:
        with patch.object(settings, "signature", "Dr. Test\nCardiology"):
            self.assertEqual(Template.SNIPPET_SIGNATURE.body(), "# Signature\nDr. Test\nCardiology\n")
            self.assertIn("Signature:\nDr. Test\n", Template.LETTER.body())

    def test_quick_snippets_in_bar_order(self) -> None:
        self.assertEqual(
            [t.display_name for t in quick_snippets()],
            ["Vitals", "Meds", "Allergy", "Assessment", "Plan", "F/U", "Signature"],
        )
        self.assertIn(Template.SNIPPET_MEDS, quick_snippets())
        self.assertNotIn(Template.LAB_SUMMARY, quick_snippets())

    def test_lookup_by_name_or_display_name(self) -> None:
        self.assertIs(get_template("a_p"), Template.A_P)
        self.assertIs(get_template("Assessment & Plan"), Template.A_P)
        self.assertIs(get_template(" lab summary "), Template.LAB_SUMMARY)
        self.assertIsNone(get_template("discharge"))

    def test_every_template_has_body_and_name(self) -> None:
        for template in Template:
            self.assertTrue(template.display_name)
            self.assertTrue(template.body().endswith("\n"))


if __name__ == "__main__":
    unittest.main()
