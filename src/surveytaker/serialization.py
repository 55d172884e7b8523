"""
Serialization helpers for survey-taker objects.

Converts remote-layer payloads (plain dicts, as decoded from the remote
layer's JSON) into model objects and back, and answers/submission records
into the dict shape the remote layer expects. JSON and YAML round-trips go
through the same intermediate dicts.

Wire keys follow the remote layer's camelCase naming.
"""
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import yaml

from surveytaker.model import (
    AnonymityPolicy,
    Answer,
    Choice,
    Question,
    QuestionType,
    SubmissionRecord,
    SubmitResult,
    SurveyInfo,
    SurveyPayload,
)


def choice_to_dict(c: Choice) -> Dict[str, Any]:
    return {"label": c.label, "value": c.value}


def choice_from_dict(d: Any) -> Choice:
    # bare strings are used as both label and value
    if isinstance(d, str):
        return Choice(label=d, value=d)
    value = d.get("value", d.get("label", ""))
    return Choice(label=d.get("label", value), value=value)


def question_type_from_value(value: Optional[str]) -> QuestionType:
    """
    Map a wire question type to QuestionType. A missing type is free text.

    Raises:
        TypeError: If the type is not one the survey taker can render
    """
    if value is None:
        return QuestionType.FREE_TEXT
    try:
        return QuestionType(value.strip())
    except ValueError:
        raise TypeError(f"Unsupported question type: {value!r}")


def question_to_dict(q: Question) -> Dict[str, Any]:
    return {
        "id": q.id,
        "orderNumber": q.order_number,
        "question": q.text,
        "questionType": q.question_type.value,
        "required": q.required,
        "choices": [choice_to_dict(c) for c in q.choices],
        "scaleLabels": list(q.scale_labels) if q.scale_labels else None,
        "helpText": q.help_text,
        "description": q.description,
        "hideOnSurvey": q.hide_on_survey,
    }


def question_from_dict(d: Dict[str, Any]) -> Question:
    scale = d.get("scaleLabels")
    return Question(
        id=str(d["id"]),
        order_number=int(d.get("orderNumber") or 0),
        text=d.get("question", ""),
        question_type=question_type_from_value(d.get("questionType")),
        required=bool(d.get("required", False)),
        choices=tuple(choice_from_dict(c) for c in d.get("choices") or []),
        scale_labels=(scale[0], scale[1]) if scale else None,
        help_text=d.get("helpText"),
        description=d.get("description"),
        hide_on_survey=bool(d.get("hideOnSurvey", False)),
    )


def survey_info_to_dict(s: SurveyInfo) -> Dict[str, Any]:
    return {
        "name": s.name,
        "header": s.header,
        "hideName": s.hide_name,
        "thankYouText": s.thank_you_text,
    }


def survey_info_from_dict(d: Dict[str, Any]) -> SurveyInfo:
    return SurveyInfo(
        name=d.get("name") or "",
        header=d.get("header") or "",
        hide_name=bool(d.get("hideName", False)),
        thank_you_text=d.get("thankYouText") or "",
    )


def payload_to_dict(p: SurveyPayload) -> Dict[str, Any]:
    return {
        "survey": survey_info_to_dict(p.survey) if p.survey is not None else None,
        "questions": [question_to_dict(q) for q in p.questions],
        "isInternal": p.is_internal,
        "anonymousOption": p.anonymity_policy.value,
        "invitationHeader": p.invitation_header,
    }


def anonymity_policy_from_value(value: Optional[str]) -> AnonymityPolicy:
    # unrecognised policies fall back to letting the respondent choose
    try:
        return AnonymityPolicy((value or "").strip())
    except ValueError:
        return AnonymityPolicy.USER


def payload_from_dict(d: Optional[Dict[str, Any]]) -> SurveyPayload:
    if not d or not d.get("survey"):
        return SurveyPayload(survey=None)
    questions = sorted(
        (question_from_dict(q) for q in d.get("questions") or []),
        key=lambda q: q.order_number,
    )
    return SurveyPayload(
        survey=survey_info_from_dict(d["survey"]),
        questions=tuple(questions),
        is_internal=bool(d.get("isInternal", False)),
        anonymity_policy=anonymity_policy_from_value(d.get("anonymousOption")),
        invitation_header=d.get("invitationHeader") or "",
    )


def answer_to_dict(a: Answer) -> Dict[str, Any]:
    return {"questionId": a.question_id, "response": a.value, "responses": list(a.selected)}


def answer_from_dict(d: Dict[str, Any]) -> Answer:
    return Answer(
        question_id=str(d["questionId"]),
        value=d.get("response") or "",
        selected=tuple(d.get("responses") or ()),
    )


def answers_to_list(answers) -> List[Dict[str, Any]]:
    return [answer_to_dict(a) for a in answers]


def submission_to_dict(r: SubmissionRecord) -> Dict[str, Any]:
    return {"responses": answers_to_list(r.answers), "isAnonymous": r.is_anonymous}


def submission_from_dict(d: Dict[str, Any]) -> SubmissionRecord:
    return SubmissionRecord(
        answers=tuple(answer_from_dict(a) for a in d.get("responses", [])),
        is_anonymous=bool(d.get("isAnonymous", False)),
    )


def submit_result_from_dict(d: Optional[Dict[str, Any]]) -> SubmitResult:
    d = d or {}
    return SubmitResult(
        success=bool(d.get("success", False)),
        thank_you_text=d.get("thankYouText"),
        message=d.get("message"),
    )


def payload_to_json(p: SurveyPayload) -> str:
    return json.dumps(payload_to_dict(p), sort_keys=True)


def payload_from_json(s: str) -> SurveyPayload:
    d = json.loads(s)
    return payload_from_dict(d)


def payload_to_yaml(p: SurveyPayload) -> str:
    return yaml.safe_dump(payload_to_dict(p))


def payload_from_yaml(s: str) -> SurveyPayload:
    d = yaml.safe_load(s)
    return payload_from_dict(d)
