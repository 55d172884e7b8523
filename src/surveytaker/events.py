"""
Typed event union consumed by the session reducer.

User events:      SetScalar, ToggleChoice, ChooseAnonymity, Advance, Retreat, Submit, Reset
Lifecycle events: IdentityResolved, LoadStarted, LoadSucceeded, LoadFailed,
                  SubmitSucceeded, SubmitFailed
"""

from __future__ import annotations

from abc import ABC
from dataclasses import dataclass
from typing import Optional

from surveytaker.errors import LoadFault, SubmitFault
from surveytaker.model import SessionIdentity, SurveyPayload


class Event(ABC):
    """
    Base class for everything the reducer consumes.

    Structure only: events carry data, the reducer decides what they mean.
    """
    pass


@dataclass(frozen=True)
class IdentityResolved(Event):
    identity: SessionIdentity
    preview: bool = False


@dataclass(frozen=True)
class LoadStarted(Event):
    identity: SessionIdentity


@dataclass(frozen=True)
class LoadSucceeded(Event):
    identity: SessionIdentity
    payload: SurveyPayload


@dataclass(frozen=True)
class LoadFailed(Event):
    identity: SessionIdentity
    fault: LoadFault


@dataclass(frozen=True)
class SetScalar(Event):
    """Overwrite the scalar answer of a free-text or single-select question."""

    question_id: str
    value: str


@dataclass(frozen=True)
class ToggleChoice(Event):
    """Check or uncheck one value of a multi-select question."""

    question_id: str
    value: str
    checked: bool


@dataclass(frozen=True)
class ChooseAnonymity(Event):
    value: str


@dataclass(frozen=True)
class Advance(Event):
    pass


@dataclass(frozen=True)
class Retreat(Event):
    pass


@dataclass(frozen=True)
class Submit(Event):
    pass


@dataclass(frozen=True)
class Reset(Event):
    pass


@dataclass(frozen=True)
class SubmitSucceeded(Event):
    thank_you_text: Optional[str] = None


@dataclass(frozen=True)
class SubmitFailed(Event):
    fault: SubmitFault


# Events a respondent produces; ignored unless the session accepts input.
USER_EVENTS = (SetScalar, ToggleChoice, ChooseAnonymity, Advance, Retreat, Submit, Reset)
