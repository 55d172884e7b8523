"""
Example surveys and an in-memory data service.

Builds a small case-feedback survey covering every question type, and an
InMemorySurveyService implementing the remote contract from a dict of
payloads. The service records every call, which the demos and tests use
to check exactly which remote calls a session made.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from surveytaker.errors import RemoteCallError
from surveytaker.model import (
    AnonymityPolicy,
    Answer,
    Choice,
    Question,
    QuestionType,
    SubmitResult,
    SurveyInfo,
    SurveyPayload,
)
from surveytaker.remote import SurveyDataService


def build_example_feedback_survey(
    is_internal: bool = True,
    policy: AnonymityPolicy = AnonymityPolicy.USER,
) -> SurveyPayload:
    survey = SurveyInfo(
        name="Case Feedback",
        header="Tell us how we handled your recent case.",
        thank_you_text="Thanks! Your feedback helps us improve.",
    )

    scale = tuple(Choice(label=str(i), value=str(i)) for i in range(1, 6))
    questions = (
        Question(
            id="q1",
            order_number=1,
            text="How satisfied were you with the resolution?",
            question_type=QuestionType.SINGLE_SELECT_HORIZONTAL,
            required=True,
            choices=scale,
            scale_labels=("Very dissatisfied", "Very satisfied"),
        ),
        Question(
            id="q2",
            order_number=2,
            text="Which channels did you use to contact us?",
            question_type=QuestionType.MULTI_SELECT_VERTICAL,
            choices=(
                Choice("Email", "email"),
                Choice("Phone", "phone"),
                Choice("Chat", "chat"),
            ),
        ),
        Question(
            id="q3",
            order_number=3,
            text="Would you contact us again?",
            question_type=QuestionType.SINGLE_SELECT_VERTICAL,
            choices=(Choice("Yes", "yes"), Choice("No", "no")),
        ),
        Question(
            id="q4",
            order_number=4,
            text="Internal routing code",
            hide_on_survey=True,
        ),
        Question(
            id="q5",
            order_number=5,
            text="Anything else you would like to share?",
            question_type=QuestionType.FREE_TEXT,
            required=True,
            help_text="A sentence or two is plenty.",
        ),
    )
    return SurveyPayload(
        survey=survey,
        questions=questions,
        is_internal=is_internal,
        anonymity_policy=policy,
    )


@dataclass
class RecordedCall:
    name: str
    args: Tuple[Any, ...]
    kwargs: Dict[str, Any] = field(default_factory=dict)


class InMemorySurveyService(SurveyDataService):
    """
    SurveyDataService backed by dicts.

    Properties:
        surveys: survey id -> payload
        tokens: token -> payload
        load_errors / submit_errors: key (survey id or token) -> message
            raised as RemoteCallError on the matching call
        submit_result: result returned by successful submits
        delays: call name -> seconds to sleep before answering
        calls: every call made, in order
        submissions: answers received, in order
    """

    def __init__(
        self,
        surveys: Optional[Dict[str, SurveyPayload]] = None,
        tokens: Optional[Dict[str, SurveyPayload]] = None,
    ):
        self.surveys: Dict[str, SurveyPayload] = dict(surveys or {})
        self.tokens: Dict[str, SurveyPayload] = dict(tokens or {})
        self.load_errors: Dict[str, str] = {}
        self.submit_errors: Dict[str, str] = {}
        self.submit_result = SubmitResult(success=True, thank_you_text=None, message="Survey submitted")
        self.delays: Dict[str, float] = {}
        self.calls: List[RecordedCall] = []
        self.submissions: List[List[Answer]] = []

    def calls_named(self, name: str) -> List[RecordedCall]:
        return [c for c in self.calls if c.name == name]

    async def _pause(self, name: str) -> None:
        delay = self.delays.get(name)
        if delay:
            await asyncio.sleep(delay)

    async def load_survey_by_identity(self, survey_id, case_id=None, contact_id=None) -> SurveyPayload:
        self.calls.append(RecordedCall("load_survey_by_identity", (survey_id,), {"case_id": case_id, "contact_id": contact_id}))
        await self._pause("load_survey_by_identity")
        if survey_id in self.load_errors:
            raise RemoteCallError(body={"message": self.load_errors[survey_id]})
        if survey_id not in self.surveys:
            raise RemoteCallError("Survey not found")
        return self.surveys[survey_id]

    async def load_survey_by_token(self, token) -> SurveyPayload:
        self.calls.append(RecordedCall("load_survey_by_token", (token,)))
        await self._pause("load_survey_by_token")
        if token in self.load_errors:
            raise RemoteCallError(body={"message": self.load_errors[token]})
        if token not in self.tokens:
            raise RemoteCallError("Invalid or expired token")
        return self.tokens[token]

    async def submit_by_identity(self, survey_id, answers, case_id=None, contact_id=None, is_anonymous=False) -> SubmitResult:
        self.calls.append(
            RecordedCall(
                "submit_by_identity",
                (survey_id, list(answers)),
                {"case_id": case_id, "contact_id": contact_id, "is_anonymous": is_anonymous},
            )
        )
        await self._pause("submit_by_identity")
        if survey_id in self.submit_errors:
            raise RemoteCallError(self.submit_errors[survey_id])
        self.submissions.append(list(answers))
        return self.submit_result

    async def submit_by_token(self, token, answers) -> SubmitResult:
        self.calls.append(RecordedCall("submit_by_token", (token, list(answers))))
        await self._pause("submit_by_token")
        if token in self.submit_errors:
            raise RemoteCallError(self.submit_errors[token])
        self.submissions.append(list(answers))
        return self.submit_result
