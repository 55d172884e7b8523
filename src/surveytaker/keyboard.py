"""
Keyboard shortcuts.

    ArrowRight          -> Advance
    ArrowLeft           -> Retreat
    Ctrl/Cmd + Enter    -> Submit

Shortcuts are suppressed while focus is in a text field, in terminal
phases, and while a submission is in flight.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from surveytaker.events import Advance, Event, Retreat, Submit
from surveytaker.state import Phase, SessionState

_TEXT_INPUT_TYPES = {"text", "email", "number", "password", "search", "tel", "url"}


@dataclass(frozen=True)
class KeyPress:
    """
    A key event as reported by the UI layer.

    Properties:
        key: Key name ("ArrowRight", "Enter", ...)
        ctrl / meta / shift / alt: Modifier state
        target_tag: Tag of the focused element ("input", "textarea", ...)
        target_type: `type` attribute of a focused input
    """

    key: str
    ctrl: bool = False
    meta: bool = False
    shift: bool = False
    alt: bool = False
    target_tag: Optional[str] = None
    target_type: Optional[str] = None

    @property
    def in_text_field(self) -> bool:
        tag = (self.target_tag or "").lower()
        if tag == "textarea":
            return True
        if tag == "input":
            return (self.target_type or "text").lower() in _TEXT_INPUT_TYPES
        return False


def event_for_key(state: SessionState, press: KeyPress) -> Optional[Event]:
    """Translate a key press into a reducer event, or None when suppressed."""
    if press.in_text_field:
        return None
    if state.phase not in (Phase.ANSWERING, Phase.CHOOSING_ANONYMITY) or state.is_loading:
        return None

    if press.key == "Enter" and (press.ctrl or press.meta):
        return Submit()
    if press.ctrl or press.meta or press.alt:
        return None
    if press.key == "ArrowRight" and state.phase is Phase.ANSWERING:
        return Advance()
    if press.key == "ArrowLeft":
        return Retreat()
    return None


__all__ = ["KeyPress", "event_for_key"]
