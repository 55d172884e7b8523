"""
Core Survey Taking Objects

Defines the fundamental data structures of the survey-taking engine.

These are pure data classes representing:
    - Questions (what the respondent is asked)
    - Answers (what the respondent has said so far)
    - Session identity (who is answering, and under which policy)
    - Load and submit payloads exchanged with the remote data layer

ARCHITECTURAL RULE:
    These objects:
        - Know nothing about the remote transport
        - Are immutable
        - Are fully serializable
        - Represent structure, not behavior
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class QuestionType(Enum):
    """
    Question types supported by the survey taker.

    The values are the labels the remote data layer uses on the wire.
    """

    FREE_TEXT = "Free Text"
    SINGLE_SELECT_VERTICAL = "Single Select--Vertical"
    SINGLE_SELECT_HORIZONTAL = "Single Select--Horizontal"
    MULTI_SELECT_VERTICAL = "Multi-Select--Vertical"

    @property
    def is_multi_select(self) -> bool:
        return self is QuestionType.MULTI_SELECT_VERTICAL

    @property
    def is_single_select(self) -> bool:
        return self in (
            QuestionType.SINGLE_SELECT_VERTICAL,
            QuestionType.SINGLE_SELECT_HORIZONTAL,
        )


class AnonymityPolicy(Enum):
    """
    Institution-level anonymity setting.

    USER:       the respondent may choose to submit identified
    ANONYMOUS:  every response is stored anonymously
    """

    USER = "User"
    ANONYMOUS = "Anonymous"


# Values of the respondent's own anonymity selection
NAMED = "named"
ANONYMOUS = "anonymous"


@dataclass(frozen=True)
class Choice:
    """
    A selectable option of a choice question.

    Properties:
        label: Text shown to the respondent
        value: Value stored in the answer
    """

    label: str
    value: str


@dataclass(frozen=True)
class Question:
    """
    Represents a single question of a loaded survey.

    Immutable once loaded for the session.

    Properties:
        id:
            Identifier assigned by the remote data layer

        order_number:
            Position shown to the respondent ("Please answer question 3")

        text:
            Prompt text

        question_type:
            QuestionType enum

        required:
            If True, the respondent must answer before moving on

        choices:
            Ordered options (empty for FREE_TEXT)

        scale_labels:
            Optional (low, high) end labels for SINGLE_SELECT_HORIZONTAL scales

        help_text / description:
            Optional guidance; help_text wins when both are present

        hide_on_survey:
            Hidden questions are never shown or validated
    """

    id: str
    order_number: int
    text: str
    question_type: QuestionType = QuestionType.FREE_TEXT
    required: bool = False
    choices: Tuple[Choice, ...] = ()
    scale_labels: Optional[Tuple[str, str]] = None
    help_text: Optional[str] = None
    description: Optional[str] = None
    hide_on_survey: bool = False

    @property
    def is_visible(self) -> bool:
        return not self.hide_on_survey


@dataclass(frozen=True)
class Answer:
    """
    The in-progress answer to one question.

    Scalar question types use `value`; multi-select questions use
    `selected`, which behaves as an insertion-ordered set.

    Properties:
        question_id: Question this answer belongs to
        value: Scalar value (free text or single choice)
        selected: Selected values of a multi-select question
    """

    question_id: str
    value: str = ""
    selected: Tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.value and not self.selected


@dataclass(frozen=True)
class SessionIdentity:
    """
    The effective identity used for every remote call of a session.

    INVARIANT:
        Once a token is present, case/contact identifiers are dropped
        and anonymous_only is True.

    Properties:
        survey_id: Survey record identifier (identity path)
        case_id: Optional related case
        contact_id: Optional responding contact
        token: Opaque single-use access token (token path)
        anonymous_only: True when non-anonymous submission is unreachable
    """

    survey_id: Optional[str] = None
    case_id: Optional[str] = None
    contact_id: Optional[str] = None
    token: Optional[str] = None
    anonymous_only: bool = False

    @property
    def uses_token(self) -> bool:
        return self.token is not None

    @property
    def has_identifier(self) -> bool:
        return self.survey_id is not None or self.token is not None


@dataclass(frozen=True)
class SurveyInfo:
    """
    Display metadata of a loaded survey.

    Properties:
        name: Survey name
        header: Survey header / subheader text
        hide_name: If True, the name is not shown to respondents
        thank_you_text: Text shown after a successful submission
    """

    name: str = ""
    header: str = ""
    hide_name: bool = False
    thank_you_text: str = ""


@dataclass(frozen=True)
class SurveyPayload:
    """
    Result of a load call on the remote data layer.

    `survey` is None when the remote layer answered but found nothing.
    """

    survey: Optional[SurveyInfo]
    questions: Tuple[Question, ...] = ()
    is_internal: bool = False
    anonymity_policy: AnonymityPolicy = AnonymityPolicy.USER
    invitation_header: str = ""


@dataclass(frozen=True)
class SubmitResult:
    """Result of a submit call on the remote data layer."""

    success: bool
    thank_you_text: Optional[str] = None
    message: Optional[str] = None


@dataclass(frozen=True)
class SubmissionRecord:
    """
    Answers assembled at submit time.

    Write-once: built from the non-empty answers and the resolved
    anonymity flag, then sent to the remote layer exactly once per attempt.
    """

    answers: Tuple[Answer, ...] = field(default_factory=tuple)
    is_anonymous: bool = False
