"""Outward notifications (toast equivalents)."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Severity(Enum):
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    """A single user-visible message: severity tag, title and body."""

    severity: Severity
    title: str
    message: str


def required_field() -> Notification:
    return Notification(Severity.ERROR, "Required Field", "Please answer this question before continuing.")


def validation_error(message: str) -> Notification:
    return Notification(Severity.ERROR, "Validation Error", message)


def submitted() -> Notification:
    return Notification(Severity.SUCCESS, "Success", "Survey submitted successfully!")


def preview_submitted() -> Notification:
    return Notification(
        Severity.INFO,
        "Preview Mode",
        "This was a preview. Your responses were validated but not saved.",
    )


def error(message: str) -> Notification:
    return Notification(Severity.ERROR, "Error", message)
