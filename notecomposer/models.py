from __future__ import annotations

from enum import Enum
from pydantic import BaseModel, Field


# --- Sections ---

class SectionKey(str, Enum):
    """The ten note sections, declared in canonical layout/export order."""

    CC = "CC"
    PI = "PI"
    ROS = "ROS"
    PMH = "PMH"
    S = "S"
    O = "O"
    PE = "PE"
    A = "A"
    P = "P"
    COMMENT = "Comment"

    @property
    def label(self) -> str:
        return SECTION_TITLES[self]

    @property
    def export_label(self) -> str:
        """Title as used in exported headers (one trailing '>' removed)."""
        title = self.label
        return title[:-1] if title.endswith(">") else title


SECTION_TITLES: dict[SectionKey, str] = {
    SectionKey.CC: "CC>",
    SectionKey.PI: "PI>",
    SectionKey.ROS: "ROS>",
    SectionKey.PMH: "PMH>",
    SectionKey.S: "S>",
    SectionKey.O: "O>",
    SectionKey.PE: "Physical Exam>",
    SectionKey.A: "A>",
    SectionKey.P: "P>",
    SectionKey.COMMENT: "Comment>",
}

CANONICAL_ORDER: tuple[SectionKey, ...] = tuple(SectionKey)


class Section(BaseModel):
    key: SectionKey
    title: str
    text: str = ""


# --- Abbreviation expansion ---

class DecisionKind(str, Enum):
    NO_ACTION = "no_action"
    REPLACE = "replace"


class ExpansionDecision(BaseModel):
    kind: DecisionKind = DecisionKind.NO_ACTION
    start: int | None = None
    end: int | None = None
    replacement: str | None = None

    @property
    def suppress_keystroke(self) -> bool:
        # Only a real replacement swallows the space; it supplies its own.
        return self.kind == DecisionKind.REPLACE

    @classmethod
    def no_action(cls) -> ExpansionDecision:
        return cls()

    @classmethod
    def replace(cls, start: int, end: int, replacement: str) -> ExpansionDecision:
        return cls(kind=DecisionKind.REPLACE, start=start, end=end, replacement=replacement)


# --- Abbreviation store results ---

class AbbreviationEntry(BaseModel):
    short: str
    full: str


class StoreStatus(str, Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    INVALID = "invalid"
    EXISTS = "exists"
    STORE_ERROR = "store_error"


class StoreResult(BaseModel):
    status: StoreStatus
    message: str = ""
    entry: AbbreviationEntry | None = None

    @property
    def ok(self) -> bool:
        return self.status == StoreStatus.OK


# --- WebSocket message types ---

class WSMessageType(str, Enum):
    SESSION_STATE = "session_state"
    SECTION_TEXT = "section_text"
    EXPANSION = "expansion"
    SCRATCHPAD = "scratchpad"
    PROBLEMS = "problems"
    CLIPBOARD = "clipboard"
    SESSION_RESET = "session_reset"
    STATUS = "status"
    ERROR = "error"


class WSMessage(BaseModel):
    type: WSMessageType
    data: dict


# --- REST payloads ---

class AbbreviationPayload(BaseModel):
    short: str = ""
    full: str = ""


class TextPayload(BaseModel):
    text: str = ""


class TemplateInfo(BaseModel):
    name: str
    display_name: str
    body: str
    quick_snippet: bool = False
    snippet_order: int | None = None


class SessionSnapshot(BaseModel):
    sections: list[Section] = Field(default_factory=list)
    problems: list[str] = Field(default_factory=list)
    scratchpad: str = ""
    focused: SectionKey = SectionKey.CC
