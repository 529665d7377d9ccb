"""WebSocket editing channel: surface events -> ComposerSession -> client replies."""

import json
import logging
from typing import Any

from fastapi import WebSocket, WebSocketDisconnect

from notecomposer.document.expander import AbbreviationTable
from notecomposer.document.templates import DEFAULT_TEMPLATE, get_template
from notecomposer.models import (
    CANONICAL_ORDER,
    SectionKey,
    WSMessage,
    WSMessageType,
)
from notecomposer.note.state import ComposerSession

logger = logging.getLogger(__name__)

Reply = tuple[WSMessageType, dict]


class ProtocolError(ValueError):
    """Raised for a control message the session cannot act on."""


class MessageClipboard:
    """Clipboard sink that hands the exported text back to the client."""

    def __init__(self) -> None:
        self.text: str | None = None

    def set_text(self, text: str) -> None:
        self.text = text


async def _send(ws: WebSocket, msg_type: WSMessageType, data: dict) -> None:
    """Send a typed JSON message to the client."""
    msg = WSMessage(type=msg_type, data=data)
    await ws.send_text(msg.model_dump_json())


def parse_section(value: Any) -> SectionKey:
    """Resolve a section by key ("CC"), enum name ("COMMENT") or title ("CC>")."""
    if isinstance(value, SectionKey):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ProtocolError(f"Unknown section: {value!r}")
    cleaned = value.strip()
    for key in CANONICAL_ORDER:
        if cleaned in (key.value, key.name, key.label, key.export_label):
            return key
    raise ProtocolError(f"Unknown section: {value!r}")


def _int_field(ctrl: dict, name: str) -> int:
    value = ctrl.get(name)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ProtocolError(f"Field {name!r} must be an integer.")
    return value


def _section_or_focused(session: ComposerSession, ctrl: dict) -> SectionKey:
    if ctrl.get("section") is None:
        return session.focused
    return parse_section(ctrl["section"])


def scratchpad_payload(session: ComposerSession) -> dict:
    view = session.scratchpad.view
    return {"text": view.text, "caret": view.caret, "scroll_to_bottom": True}


def section_payload(session: ComposerSession, key: SectionKey) -> dict:
    return {
        "section": key.value,
        "text": session.store.get_text(key),
        "caret": session.caret(key),
    }


def build_session_state_payload(session: ComposerSession) -> dict:
    return session.snapshot().model_dump(mode="json")


def build_session_reset_payload(session: ComposerSession) -> dict:
    """Snapshot of a freshly reset session for the frontend."""
    payload = build_session_state_payload(session)
    payload["message"] = "Session reset."
    return payload


def dispatch_action(session: ComposerSession, ctrl: dict) -> list[Reply]:
    """Apply one control message to the session and return replies in send order."""
    action = ctrl.get("action")
    replies: list[Reply] = []
    session.consume_scratchpad_change()

    if action == "edit":
        key = parse_section(ctrl.get("section"))
        text = ctrl.get("text")
        if not isinstance(text, str):
            raise ProtocolError("Field 'text' must be a string.")
        caret = None if ctrl.get("caret") is None else _int_field(ctrl, "caret")
        session.edit(key, text, caret)

    elif action == "space":
        key = parse_section(ctrl.get("section"))
        caret = _int_field(ctrl, "caret")
        text_before_caret = ctrl.get("text_before_caret")
        if not isinstance(text_before_caret, str):
            raise ProtocolError("Field 'text_before_caret' must be a string.")
        if caret != len(text_before_caret):
            raise ProtocolError("Field 'caret' must equal the length of 'text_before_caret'.")
        text_after_caret = ctrl.get("text_after_caret")
        if text_after_caret is not None and not isinstance(text_after_caret, str):
            raise ProtocolError("Field 'text_after_caret' must be a string.")
        decision = session.space(key, caret, text_before_caret, text_after_caret)
        data = decision.model_dump(mode="json")
        data["suppress_keystroke"] = decision.suppress_keystroke
        data["applied"] = session.last_space_applied
        data.update(section_payload(session, key))
        replies.append((WSMessageType.EXPANSION, data))

    elif action == "focus":
        if "index" in ctrl:
            # Out-of-range indexes leave focus unchanged.
            session.focus_index(_int_field(ctrl, "index"))
        else:
            session.focus(parse_section(ctrl.get("section")))
        replies.append((WSMessageType.STATUS, {"focused": session.focused.value}))

    elif action == "insert_template":
        name = ctrl.get("template")
        template = DEFAULT_TEMPLATE if name is None else get_template(str(name))
        if template is None:
            raise ProtocolError(f"Unknown template: {name!r}")
        key = _section_or_focused(session, ctrl)
        session.insert_template(template, key)
        replies.append((WSMessageType.SECTION_TEXT, section_payload(session, key)))

    elif action in ("insert_snippet", "insert_line"):
        text = ctrl.get("text")
        if not isinstance(text, str):
            raise ProtocolError("Field 'text' must be a string.")
        key = _section_or_focused(session, ctrl)
        if action == "insert_line":
            session.insert_line(text, key)
        else:
            session.insert_block(text, key)
        replies.append((WSMessageType.SECTION_TEXT, section_payload(session, key)))

    elif action == "insert_problem":
        key = _section_or_focused(session, ctrl)
        if session.insert_problem(_int_field(ctrl, "index"), key) is not None:
            replies.append((WSMessageType.SECTION_TEXT, section_payload(session, key)))

    elif action == "format":
        key = _section_or_focused(session, ctrl)
        session.format_section(key)
        replies.append((WSMessageType.SECTION_TEXT, section_payload(session, key)))

    elif action == "add_problem":
        session.add_problem(str(ctrl.get("text") or ""))
        replies.append((WSMessageType.PROBLEMS, {"problems": session.store.problems}))

    elif action == "remove_problem":
        session.remove_problem(_int_field(ctrl, "index"))
        replies.append((WSMessageType.PROBLEMS, {"problems": session.store.problems}))

    elif action == "copy_all":
        clipboard = MessageClipboard()
        session.copy_all(clipboard)
        replies.append((WSMessageType.CLIPBOARD, {"text": clipboard.text or ""}))

    elif action == "state":
        replies.append((WSMessageType.SESSION_STATE, build_session_state_payload(session)))

    elif action == "reset":
        session.reset()
        session.consume_scratchpad_change()
        replies.append((WSMessageType.SESSION_RESET, build_session_reset_payload(session)))

    else:
        raise ProtocolError(f"Unknown action: {action!r}")

    if session.consume_scratchpad_change():
        replies.append((WSMessageType.SCRATCHPAD, scratchpad_payload(session)))
    return replies


async def handle_websocket(ws: WebSocket, table: AbbreviationTable) -> None:
    """Main WebSocket handler for a single editing session."""
    await ws.accept()
    logger.info("WebSocket client connected.")

    session = ComposerSession(table)
    await _send(ws, WSMessageType.SESSION_STATE, build_session_state_payload(session))

    try:
        while True:
            message = await ws.receive()
            msg_type = message.get("type")

            if msg_type == "websocket.disconnect":
                logger.info("WebSocket client disconnected.")
                break

            if not message.get("text"):
                continue

            try:
                ctrl = json.loads(message["text"])
            except json.JSONDecodeError:
                continue
            if not isinstance(ctrl, dict):
                continue

            try:
                replies = dispatch_action(session, ctrl)
            except ProtocolError as e:
                logger.warning("Rejected %r message: %s", ctrl.get("action"), e)
                await _send(ws, WSMessageType.ERROR, {"message": str(e)})
                continue

            for reply_type, data in replies:
                await _send(ws, reply_type, data)

    except WebSocketDisconnect:
        logger.info("WebSocket client disconnected.")
    except Exception as e:
        logger.exception("WebSocket error: %s", e)
