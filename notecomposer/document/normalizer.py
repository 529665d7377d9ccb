"""Text normalization: canonical bullet/markdown style for sections and export."""

from __future__ import annotations

import re

_BULLET_GLYPHS = re.compile(r"^[•·→▶▷‣⦿∘*]+\s*")
_DASH_BULLET = re.compile(r"^-{1,2}\s*")
_TRAILING_WS = re.compile(r"\s+$")
_HEADER_NO_SPACE = re.compile(r"^(#+)([^# \n])", re.MULTILINE)
_EXCESS_NEWLINES = re.compile(r"\n{3,}")
_INNER_WS = re.compile(r"\s+")
# ASCII control characters except TAB (U+0009), LF (U+000A) and CR (U+000D).
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")

BULLET_PREFIX = "- "


def _format_line(line: str) -> str:
    t = line.strip()
    t = _BULLET_GLYPHS.sub(BULLET_PREFIX, t)
    # A line bulleted above matches again here and keeps a single prefix.
    t = _DASH_BULLET.sub(BULLET_PREFIX, t)
    return _TRAILING_WS.sub("", t)


def auto_format(raw: str | None) -> str:
    """Normalize bullets, collapse blank lines and trim trailing spaces.

    Idempotent: ``auto_format(auto_format(s)) == auto_format(s)``.
    """
    if raw is None or not raw.strip():
        return ""

    out: list[str] = []
    last_blank = False
    for line in raw.replace("\r", "").split("\n"):
        t = _format_line(line)
        if not t:
            if not last_blank:
                out.append("")
                last_blank = True
            continue
        out.append(t)
        last_blank = False

    return "\n".join(out).strip()


def finalize(raw: str | None) -> str:
    """Export pass: auto_format, '#Header' -> '# Header', one blank line max."""
    s = auto_format(raw)
    s = _HEADER_NO_SPACE.sub(r"\1 \2", s)
    s = _EXCESS_NEWLINES.sub("\n\n", s)
    return s.strip()


def normalize_line(text: str | None) -> str:
    """Trim and collapse internal whitespace to single spaces."""
    if text is None:
        return ""
    return _INNER_WS.sub(" ", text.strip())


def strip_control_chars(text: str) -> str:
    """Drop control characters the editing surface should never insert."""
    return _CONTROL_CHARS.sub("", text)
