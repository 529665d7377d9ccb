"""Fixed template and quick-snippet library for section insertion."""

from __future__ import annotations

from datetime import date
from enum import Enum

from notecomposer.config import settings


_HPI = (
    "# HPI\n"
    "- Onset: \n"
    "- Location: \n"
    "- Character: \n"
    "- Aggravating/Relieving: \n"
    "- Associated Sx: \n"
    "- Context: \n"
    "- Notes: \n"
)

_ASSESSMENT_PLAN = (
    "# Assessment & Plan\n"
    "- Dx: \n"
    "- Severity: \n"
    "- Plan: meds / labs / imaging / follow-up\n"
)

_LETTER = (
    "# Letter\n"
    "Patient: \n"
    "DOB: \n"
    "Date: {today}\n\n"
    "Findings:\n- \n\n"
    "Plan:\n- \n\n"
    "Signature:\n{signature_name}\n"
)

_LAB_SUMMARY = (
    "# Labs\n"
    "- FBS:  mg/dL\n"
    "- LDL:  mg/dL\n"
    "- HbA1c:  %\n"
    "- TSH:  uIU/mL\n"
)

_PROBLEM_LIST = "# Problem List\n- \n- \n- \n"

_VITALS = "# Vitals\n- BP: / mmHg\n- HR: / min\n- Temp:  °C\n- RR: / min\n- SpO2:  %\n"
_MEDS = "# Medications\n- \n"
_ALLERGY = "# Allergy\n- NKDA\n"
_ASSESS = "# Assessment\n- \n"
_PLAN = "# Plan\n- \n"
_FOLLOWUP = "# Follow-up\n- Return in  weeks\n"
_SIGNATURE = "# Signature\n{signature}\n"


class Template(str, Enum):
    HPI = "HPI"
    A_P = "A_P"
    LETTER = "LETTER"
    LAB_SUMMARY = "LAB_SUMMARY"
    PROBLEM_LIST = "PROBLEM_LIST"
    SNIPPET_VITALS = "SNIPPET_VITALS"
    SNIPPET_MEDS = "SNIPPET_MEDS"
    SNIPPET_ALLERGY = "SNIPPET_ALLERGY"
    SNIPPET_ASSESS = "SNIPPET_ASSESS"
    SNIPPET_PLAN = "SNIPPET_PLAN"
    SNIPPET_FOLLOWUP = "SNIPPET_FOLLOWUP"
    SNIPPET_SIGNATURE = "SNIPPET_SIGNATURE"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    def body(self, today: date | None = None) -> str:
        """Render the template text; dated templates use ``today``."""
        signature = settings.signature
        return _BODIES[self].format(
            today=(today or date.today()).isoformat(),
            signature=signature,
            signature_name=signature.split("\n", 1)[0],
        )


_DISPLAY_NAMES: dict[Template, str] = {
    Template.HPI: "HPI",
    Template.A_P: "Assessment & Plan",
    Template.LETTER: "Letter Template",
    Template.LAB_SUMMARY: "Lab Summary",
    Template.PROBLEM_LIST: "Problem List Header",
    Template.SNIPPET_VITALS: "Vitals",
    Template.SNIPPET_MEDS: "Meds",
    Template.SNIPPET_ALLERGY: "Allergy",
    Template.SNIPPET_ASSESS: "Assessment",
    Template.SNIPPET_PLAN: "Plan",
    Template.SNIPPET_FOLLOWUP: "F/U",
    Template.SNIPPET_SIGNATURE: "Signature",
}

_BODIES: dict[Template, str] = {
    Template.HPI: _HPI,
    Template.A_P: _ASSESSMENT_PLAN,
    Template.LETTER: _LETTER,
    Template.LAB_SUMMARY: _LAB_SUMMARY,
    Template.PROBLEM_LIST: _PROBLEM_LIST,
    Template.SNIPPET_VITALS: _VITALS,
    Template.SNIPPET_MEDS: _MEDS,
    Template.SNIPPET_ALLERGY: _ALLERGY,
    Template.SNIPPET_ASSESS: _ASSESS,
    Template.SNIPPET_PLAN: _PLAN,
    Template.SNIPPET_FOLLOWUP: _FOLLOWUP,
    Template.SNIPPET_SIGNATURE: _SIGNATURE,
}

# Bottom-bar order.
QUICK_SNIPPETS: tuple[Template, ...] = (
    Template.SNIPPET_VITALS,
    Template.SNIPPET_MEDS,
    Template.SNIPPET_ALLERGY,
    Template.SNIPPET_ASSESS,
    Template.SNIPPET_PLAN,
    Template.SNIPPET_FOLLOWUP,
    Template.SNIPPET_SIGNATURE,
)

DEFAULT_TEMPLATE = Template.HPI


def get_template(name: str) -> Template | None:
    """Resolve a template by enum name or display name (case-insensitive)."""
    cleaned = name.strip()
    try:
        return Template(cleaned.upper())
    except ValueError:
        pass
    lowered = cleaned.lower()
    for template, display in _DISPLAY_NAMES.items():
        if display.lower() == lowered:
            return template
    return None


def quick_snippets() -> list[Template]:
    return list(QUICK_SNIPPETS)
