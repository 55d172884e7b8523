"""
Fault taxonomy for the survey taker.

Remote faults arrive as free-form messages. They are classified by
case-insensitive substring match into a fixed set of categories, and
each category maps to one fixed advisory string shown to the respondent.
Raw remote messages are logged, never shown.

NOTE:
    Substring matching is wording-dependent. A structured error code from
    the remote layer would replace the keyword tables below.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple


class LoadFault(Enum):
    NOT_FOUND = "not_found"
    PERMISSION = "permission"
    EXPIRED = "expired"
    ALREADY_SUBMITTED = "already_submitted"
    NETWORK = "network"
    UNKNOWN = "unknown"


class SubmitFault(Enum):
    DUPLICATE = "duplicate"
    EXPIRED = "expired"
    PERMISSION = "permission"
    NETWORK = "network"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


class RemoteCallError(Exception):
    """
    Raised by remote data-layer implementations when a call fails.

    `body` mirrors the platform error body; its "message" entry, when
    present, is preferred over the exception text.
    """

    def __init__(self, message: str = "", body: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.body = body or {}


_ALREADY_SUBMITTED_KEYWORDS = ("already submitted", "already been submitted", "already completed", "already responded")
_EXPIRED_KEYWORDS = ("expired",)
_PERMISSION_KEYWORDS = ("permission", "access", "not authorized", "unauthorized", "insufficient privileges")
_NOT_FOUND_KEYWORDS = ("not found", "does not exist", "no survey", "not available")
_NETWORK_KEYWORDS = ("network", "failed to fetch", "connection", "offline", "disconnected")
_TIMEOUT_KEYWORDS = ("timeout", "timed out")
_DUPLICATE_KEYWORDS = ("duplicate",) + _ALREADY_SUBMITTED_KEYWORDS

# Checked in order; first match wins.
_LOAD_RULES: Tuple[Tuple[LoadFault, Sequence[str]], ...] = (
    (LoadFault.ALREADY_SUBMITTED, _ALREADY_SUBMITTED_KEYWORDS),
    (LoadFault.EXPIRED, _EXPIRED_KEYWORDS),
    (LoadFault.PERMISSION, _PERMISSION_KEYWORDS),
    (LoadFault.NOT_FOUND, _NOT_FOUND_KEYWORDS),
    (LoadFault.NETWORK, _NETWORK_KEYWORDS),
)

_SUBMIT_RULES: Tuple[Tuple[SubmitFault, Sequence[str]], ...] = (
    (SubmitFault.DUPLICATE, _DUPLICATE_KEYWORDS),
    (SubmitFault.EXPIRED, _EXPIRED_KEYWORDS),
    (SubmitFault.PERMISSION, _PERMISSION_KEYWORDS),
    (SubmitFault.NETWORK, _NETWORK_KEYWORDS),
    (SubmitFault.TIMEOUT, _TIMEOUT_KEYWORDS),
)

LOAD_MESSAGES: Dict[LoadFault, str] = {
    LoadFault.NOT_FOUND: "Survey not found or not available.",
    LoadFault.PERMISSION: "You do not have access to this survey. Please contact the survey owner.",
    LoadFault.EXPIRED: "This survey link has expired. Please request a new invitation.",
    LoadFault.ALREADY_SUBMITTED: "This survey has already been submitted. Thank you for your response.",
    LoadFault.NETWORK: "We could not reach the server. Please check your connection and reload the page.",
    LoadFault.UNKNOWN: "Error loading survey. Please reload the page or contact your administrator.",
}

SUBMIT_MESSAGES: Dict[SubmitFault, str] = {
    SubmitFault.DUPLICATE: "A response for this survey has already been submitted.",
    SubmitFault.EXPIRED: "This survey link has expired, so your response could not be recorded.",
    SubmitFault.PERMISSION: "You do not have permission to submit this survey.",
    SubmitFault.NETWORK: "We could not reach the server. Your answers are still here; please try again.",
    SubmitFault.TIMEOUT: "The server took too long to respond. Your answers are still here; please try again.",
    SubmitFault.UNKNOWN: "Error submitting survey. Please try again.",
}


def _classify(message: Optional[str], rules, default):
    low = (message or "").lower()
    for category, keywords in rules:
        if any(keyword in low for keyword in keywords):
            return category
    return default


def classify_load_fault(message: Optional[str]) -> LoadFault:
    """Map a load fault message to its LoadFault category."""
    return _classify(message, _LOAD_RULES, LoadFault.UNKNOWN)


def classify_submit_fault(message: Optional[str]) -> SubmitFault:
    """Map a submit fault message to its SubmitFault category."""
    return _classify(message, _SUBMIT_RULES, SubmitFault.UNKNOWN)


def fault_message(exc: BaseException) -> str:
    """
    Extract the most specific message carried by a remote failure.

    Preference: error body message, then exception text, then class name.
    """
    body = getattr(exc, "body", None)
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    text = str(exc)
    if text:
        return text
    return type(exc).__name__


__all__ = [
    "LoadFault",
    "SubmitFault",
    "RemoteCallError",
    "LOAD_MESSAGES",
    "SUBMIT_MESSAGES",
    "classify_load_fault",
    "classify_submit_fault",
    "fault_message",
]
