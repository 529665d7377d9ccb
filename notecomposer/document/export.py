"""ExportAssembler: problem list + non-empty sections as one finalized document."""

from __future__ import annotations

from datetime import date
from typing import Iterable, Sequence

from notecomposer.document.normalizer import finalize
from notecomposer.models import Section

BLOCK_SEPARATOR = "\n\n"


def problem_list_block(problems: Sequence[str], today: date) -> str:
    lines = [f"# Problem List (as of {today.isoformat()})"]
    lines.extend(f"- {p}" for p in problems)
    return "\n".join(lines)


def assemble(
    problems: Sequence[str],
    sections: Iterable[Section],
    today: date | None = None,
) -> str:
    """Build the clipboard document.

    ``sections`` must already be in canonical order (``SectionStore.sections()``
    guarantees this).
    """
    blocks: list[str] = []
    if problems:
        blocks.append(problem_list_block(problems, today or date.today()))

    for section in sections:
        text = section.text.strip()
        if not text:
            continue
        title = section.title[:-1] if section.title.endswith(">") else section.title
        blocks.append(f"# {title}\n{text}")

    return finalize(BLOCK_SEPARATOR.join(blocks))
