"""
Presentation values derived from a SessionState.

Everything a renderer needs that is not stored directly in the snapshot:
titles with fallbacks, progress, the current question's layout, and the
checked projection of choice lists. Read-only; nothing here changes state.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

from surveytaker.config import SurveyTakerConfig
from surveytaker.model import ANONYMOUS, NAMED, Choice, Question, QuestionType
from surveytaker.state import Phase, SessionState

ANONYMITY_OPTIONS: Tuple[Tuple[str, str], ...] = (
    ("Submit with my name", NAMED),
    ("Submit anonymously", ANONYMOUS),
)

PREVIEW_BANNER = "Preview mode: responses are validated but not saved."


@dataclass(frozen=True)
class ChoiceView:
    choice: Choice
    checked: bool


@dataclass(frozen=True)
class SurveyView:
    """Snapshot of everything shown on screen."""

    header_title: str
    intro_heading: str
    intro_subheading: str
    help_text: str
    question_number: int
    total_questions: int
    progress_percentage: int
    is_first_question: bool
    is_last_question: bool
    layout: str
    current_response: str
    choices: Tuple[ChoiceView, ...]
    show_anonymity_step: bool
    anonymity_options: Tuple[Tuple[str, str], ...]
    is_loading: bool
    is_submitting: bool
    is_submitted: bool
    thank_you_text: str
    error: Optional[str]
    preview_banner: Optional[str]


def header_title(state: SessionState, config: SurveyTakerConfig) -> str:
    survey = state.survey
    if survey is not None and survey.name and not survey.hide_name:
        return survey.name
    return config.default_header_title


def intro_heading(state: SessionState, config: SurveyTakerConfig) -> str:
    survey = state.survey
    if survey is not None and survey.name and not survey.hide_name:
        return survey.name
    return config.default_intro_heading


def intro_subheading(state: SessionState, config: SurveyTakerConfig) -> str:
    if state.invitation_header:
        return state.invitation_header
    if state.survey is not None and state.survey.header:
        return state.survey.header
    return config.default_intro_subheading


def help_text(question: Optional[Question], config: SurveyTakerConfig) -> str:
    if question is not None:
        if question.help_text:
            return question.help_text
        if question.description:
            return question.description
    return config.default_help_text


def progress_percentage(state: SessionState) -> int:
    total = len(state.visible_questions)
    if total == 0:
        return 0
    # half-up rounding
    return math.floor((state.cursor + 1) * 100 / total + 0.5)


def layout(question: Optional[Question]) -> str:
    if question is not None and question.question_type is QuestionType.SINGLE_SELECT_HORIZONTAL:
        return "horizontal"
    return "vertical"


def choice_views(state: SessionState, question: Optional[Question]) -> Tuple[ChoiceView, ...]:
    """Choices of a question with their checked projection from the store."""
    if question is None:
        return ()
    answer = state.answers.answer_for(question.id)
    if question.question_type.is_multi_select:
        return tuple(ChoiceView(c, c.value in answer.selected) for c in question.choices)
    return tuple(ChoiceView(c, c.value == answer.value) for c in question.choices)


def build_view(state: SessionState, config: Optional[SurveyTakerConfig] = None) -> SurveyView:
    config = config or SurveyTakerConfig()
    question = state.current_question
    current_response = state.answers.answer_for(question.id).value if question is not None else ""
    return SurveyView(
        header_title=header_title(state, config),
        intro_heading=intro_heading(state, config),
        intro_subheading=intro_subheading(state, config),
        help_text=help_text(question, config),
        question_number=state.cursor + 1,
        total_questions=len(state.visible_questions),
        progress_percentage=progress_percentage(state),
        is_first_question=state.cursor == 0,
        is_last_question=state.is_last_question,
        layout=layout(question),
        current_response=current_response,
        choices=choice_views(state, question),
        show_anonymity_step=state.phase is Phase.CHOOSING_ANONYMITY,
        anonymity_options=ANONYMITY_OPTIONS if state.can_choose_anonymous else (),
        is_loading=state.is_loading,
        is_submitting=state.phase is Phase.SUBMITTING,
        is_submitted=state.phase is Phase.SUBMITTED,
        thank_you_text=state.thank_you_text,
        error=state.error,
        preview_banner=PREVIEW_BANNER if state.preview else None,
    )


__all__ = ["SurveyView", "ChoiceView", "build_view", "ANONYMITY_OPTIONS", "PREVIEW_BANNER"]
