"""
Session state snapshot and reducer.

The survey taker is driven by a single pure function:

    reduce(state, event) -> state'

SessionState is an immutable snapshot. Events are immutable values. The
reducer performs no I/O; the session controller feeds it events produced
by user interaction, the loader and the dispatcher, and publishes each new
snapshot to subscribers.

Phases:
    IDLE                -> nothing loaded yet
    ANSWERING           -> one question shown, `cursor` indexes visible questions
    CHOOSING_ANONYMITY  -> named/anonymous choice before submit
    SUBMITTING          -> submission in flight, input disabled
    SUBMITTED           -> terminal, success
    ERROR               -> terminal, load failure

ARCHITECTURAL RULE:
    Load bookkeeping (`loading`, `loaded`) is part of the snapshot, not a
    side channel, so duplicate and stale loads are decided from state alone.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Dict, Optional, Tuple, Type

from surveytaker import notifications
from surveytaker.dispatcher import assemble_record
from surveytaker.errors import LOAD_MESSAGES, SUBMIT_MESSAGES, LoadFault
from surveytaker.events import (
    USER_EVENTS,
    Advance,
    ChooseAnonymity,
    Event,
    IdentityResolved,
    LoadFailed,
    LoadStarted,
    LoadSucceeded,
    Reset,
    Retreat,
    SetScalar,
    Submit,
    SubmitFailed,
    SubmitSucceeded,
    ToggleChoice,
)
from surveytaker.model import (
    ANONYMOUS,
    NAMED,
    AnonymityPolicy,
    Question,
    SessionIdentity,
    SubmissionRecord,
    SurveyInfo,
)
from surveytaker.notifications import Notification
from surveytaker.responses import ResponseStore, missing_answer_message


class Phase(Enum):
    IDLE = "idle"
    ANSWERING = "answering"
    CHOOSING_ANONYMITY = "choosing_anonymity"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"
    ERROR = "error"


TERMINAL_PHASES = (Phase.SUBMITTED, Phase.ERROR)
INPUT_PHASES = (Phase.ANSWERING, Phase.CHOOSING_ANONYMITY)


@dataclass(frozen=True)
class SessionState:
    """
    Immutable snapshot of one survey-taking session.

    Properties:
        phase: Current Phase
        identity: Current effective identity (None before resolution)
        preview: Preview mode; submit never reaches the remote layer
        loading: Identity whose load is in flight, if any
        loaded: Identity whose load last settled (success or failure)
        survey: Display metadata of the loaded survey
        invitation_header: Optional invitation-specific subheading
        questions: All loaded questions, hidden ones included
        answers: ResponseStore with one Answer per question
        cursor: Index into visible_questions
        is_internal: Respondent is an internal user
        anonymity_policy: Institution anonymity policy
        anonymity_choice: Respondent's own choice (NAMED / ANONYMOUS)
        can_choose_anonymous: Whether the anonymity step is offered
        thank_you_text: Text shown once submitted
        error: Advisory string of a fatal load fault
        resume_phase: Step to return to when a submission fails
        submission: Record assembled for the current/last submit
        notice: Notification produced by the last reduction, if any
    """

    phase: Phase = Phase.IDLE
    identity: Optional[SessionIdentity] = None
    preview: bool = False
    loading: Optional[SessionIdentity] = None
    loaded: Optional[SessionIdentity] = None
    survey: Optional[SurveyInfo] = None
    invitation_header: str = ""
    questions: Tuple[Question, ...] = ()
    answers: ResponseStore = field(default_factory=ResponseStore)
    cursor: int = 0
    is_internal: bool = False
    anonymity_policy: AnonymityPolicy = AnonymityPolicy.USER
    anonymity_choice: str = NAMED
    can_choose_anonymous: bool = False
    thank_you_text: str = ""
    error: Optional[str] = None
    resume_phase: Optional[Phase] = None
    submission: Optional[SubmissionRecord] = None
    notice: Optional[Notification] = None

    @property
    def visible_questions(self) -> Tuple[Question, ...]:
        return tuple(q for q in self.questions if q.is_visible)

    @property
    def current_question(self) -> Optional[Question]:
        if self.phase is not Phase.ANSWERING:
            return None
        visible = self.visible_questions
        if 0 <= self.cursor < len(visible):
            return visible[self.cursor]
        return None

    @property
    def last_index(self) -> int:
        return max(len(self.visible_questions) - 1, 0)

    @property
    def is_last_question(self) -> bool:
        return self.cursor >= len(self.visible_questions) - 1

    @property
    def is_loading(self) -> bool:
        return self.loading is not None

    @property
    def is_terminal(self) -> bool:
        return self.phase in TERMINAL_PHASES

    @property
    def accepts_input(self) -> bool:
        return self.phase in INPUT_PHASES and self.loading is None


# =============================================================================
# REDUCER
# =============================================================================


def _question(state: SessionState, question_id: str) -> Optional[Question]:
    for question in state.questions:
        if question.id == question_id:
            return question
    return None


def _begin_submit(state: SessionState) -> SessionState:
    # answers belong to `loaded`; wait for the current identity to load first
    if state.identity != state.loaded:
        return state
    missing = state.answers.first_unsatisfied(state.visible_questions)
    if missing is not None:
        return replace(state, notice=notifications.validation_error(missing_answer_message(missing)))

    record = assemble_record(
        state.answers.non_empty(),
        anonymity_choice=state.anonymity_choice,
        policy=state.anonymity_policy,
        identity=state.identity,
    )
    if state.preview:
        return replace(
            state,
            phase=Phase.SUBMITTED,
            submission=record,
            notice=notifications.preview_submitted(),
        )
    return replace(state, phase=Phase.SUBMITTING, resume_phase=state.phase, submission=record)


def _on_identity_resolved(state: SessionState, event: IdentityResolved) -> SessionState:
    return replace(state, identity=event.identity, preview=event.preview)


def _on_load_started(state: SessionState, event: LoadStarted) -> SessionState:
    if state.phase in (Phase.SUBMITTING, Phase.SUBMITTED):
        return state
    return replace(state, loading=event.identity, error=None)


def _settle_load(state: SessionState, identity: SessionIdentity) -> Tuple[SessionState, bool]:
    """Clear the in-flight marker; report whether the result is still current."""
    if state.loading == identity:
        state = replace(state, loading=None)
    current = identity == state.identity and state.phase not in (Phase.SUBMITTING, Phase.SUBMITTED)
    return state, current


def _on_load_succeeded(state: SessionState, event: LoadSucceeded) -> SessionState:
    state, current = _settle_load(state, event.identity)
    if not current:
        return state

    payload = event.payload
    if payload.survey is None:
        return _on_load_failed(state, LoadFailed(event.identity, LoadFault.NOT_FOUND))

    can_choose = (
        not event.identity.uses_token
        and payload.is_internal
        and payload.anonymity_policy is not AnonymityPolicy.ANONYMOUS
    )
    return replace(
        state,
        phase=Phase.ANSWERING,
        loaded=event.identity,
        survey=payload.survey,
        invitation_header=payload.invitation_header,
        questions=payload.questions,
        answers=ResponseStore.initialize(payload.questions),
        cursor=0,
        is_internal=payload.is_internal,
        anonymity_policy=payload.anonymity_policy,
        anonymity_choice=NAMED,
        can_choose_anonymous=can_choose,
        thank_you_text=payload.survey.thank_you_text,
        error=None,
        resume_phase=None,
        submission=None,
    )


def _on_load_failed(state: SessionState, event: LoadFailed) -> SessionState:
    state, current = _settle_load(state, event.identity)
    if not current:
        return state
    message = LOAD_MESSAGES[event.fault]
    return replace(
        state,
        phase=Phase.ERROR,
        loaded=event.identity,
        error=message,
        notice=notifications.error(message),
    )


def _on_set_scalar(state: SessionState, event: SetScalar) -> SessionState:
    question = _question(state, event.question_id)
    if state.phase is not Phase.ANSWERING or question is None or question.question_type.is_multi_select:
        return state
    return replace(state, answers=state.answers.set_scalar(event.question_id, event.value))


def _on_toggle_choice(state: SessionState, event: ToggleChoice) -> SessionState:
    question = _question(state, event.question_id)
    if state.phase is not Phase.ANSWERING or question is None or not question.question_type.is_multi_select:
        return state
    return replace(state, answers=state.answers.toggle_choice(event.question_id, event.value, event.checked))


def _on_choose_anonymity(state: SessionState, event: ChooseAnonymity) -> SessionState:
    if not state.can_choose_anonymous or event.value not in (NAMED, ANONYMOUS):
        return state
    return replace(state, anonymity_choice=event.value)


def _on_advance(state: SessionState, event: Advance) -> SessionState:
    if state.phase is not Phase.ANSWERING:
        return state
    question = state.current_question
    if question is not None and not state.answers.is_satisfied(question):
        return replace(state, notice=notifications.required_field())
    if not state.is_last_question:
        return replace(state, cursor=state.cursor + 1)
    if state.can_choose_anonymous:
        return replace(state, phase=Phase.CHOOSING_ANONYMITY)
    return _begin_submit(state)


def _on_retreat(state: SessionState, event: Retreat) -> SessionState:
    if state.phase is Phase.CHOOSING_ANONYMITY:
        return replace(state, phase=Phase.ANSWERING, cursor=state.last_index)
    if state.phase is Phase.ANSWERING and state.cursor > 0:
        return replace(state, cursor=state.cursor - 1)
    return state


def _on_submit(state: SessionState, event: Submit) -> SessionState:
    if state.phase is Phase.CHOOSING_ANONYMITY:
        return _begin_submit(state)
    if state.phase is Phase.ANSWERING and state.is_last_question:
        return _on_advance(state, Advance())
    return state


def _on_reset(state: SessionState, event: Reset) -> SessionState:
    return replace(
        state,
        phase=Phase.ANSWERING,
        answers=ResponseStore.initialize(state.questions),
        cursor=0,
        anonymity_choice=NAMED,
    )


def _on_submit_succeeded(state: SessionState, event: SubmitSucceeded) -> SessionState:
    if state.phase is not Phase.SUBMITTING:
        return state
    return replace(
        state,
        phase=Phase.SUBMITTED,
        thank_you_text=event.thank_you_text or state.thank_you_text,
        resume_phase=None,
        notice=notifications.submitted(),
    )


def _on_submit_failed(state: SessionState, event: SubmitFailed) -> SessionState:
    if state.phase is not Phase.SUBMITTING:
        return state
    return replace(
        state,
        phase=state.resume_phase or Phase.ANSWERING,
        resume_phase=None,
        submission=None,
        notice=notifications.error(SUBMIT_MESSAGES[event.fault]),
    )


_HANDLERS: Dict[Type[Event], Callable[[SessionState, Event], SessionState]] = {
    IdentityResolved: _on_identity_resolved,
    LoadStarted: _on_load_started,
    LoadSucceeded: _on_load_succeeded,
    LoadFailed: _on_load_failed,
    SetScalar: _on_set_scalar,
    ToggleChoice: _on_toggle_choice,
    ChooseAnonymity: _on_choose_anonymity,
    Advance: _on_advance,
    Retreat: _on_retreat,
    Submit: _on_submit,
    Reset: _on_reset,
    SubmitSucceeded: _on_submit_succeeded,
    SubmitFailed: _on_submit_failed,
}


def reduce(state: SessionState, event: Event) -> SessionState:
    """
    Apply one event to a snapshot and return the next snapshot.

    The returned snapshot's `notice` holds the notification raised by this
    event only; it is cleared on every call.

    Raises:
        TypeError: If the event type is unknown
    """
    handler = _HANDLERS.get(type(event))
    if handler is None:
        raise TypeError(f"Unsupported event type: {type(event)}")
    state = replace(state, notice=None) if state.notice is not None else state
    if isinstance(event, USER_EVENTS) and not state.accepts_input:
        return state
    return handler(state, event)


def initial_state() -> SessionState:
    return SessionState()


__all__ = [
    "Phase",
    "SessionState",
    "Event",
    "IdentityResolved",
    "LoadStarted",
    "LoadSucceeded",
    "LoadFailed",
    "SetScalar",
    "ToggleChoice",
    "ChooseAnonymity",
    "Advance",
    "Retreat",
    "Submit",
    "Reset",
    "SubmitSucceeded",
    "SubmitFailed",
    "reduce",
    "initial_state",
]
