"""
Submission Dispatcher.

Assembles the SubmissionRecord from the Response Store and sends it to the
remote data layer through exactly one of two mutually exclusive paths:

    - token path:     submit_by_token(token, answers)
    - identity path:  submit_by_identity(survey_id, answers, case_id, contact_id, is_anonymous)

Every failure, raised or reported, is converted to a SubmitFault before it
leaves this module.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, Optional

from surveytaker.errors import SubmitFault, classify_submit_fault, fault_message
from surveytaker.events import Event, SubmitFailed, SubmitSucceeded
from surveytaker.model import ANONYMOUS, AnonymityPolicy, Answer, SessionIdentity, SubmissionRecord

if TYPE_CHECKING:
    from surveytaker.remote import SurveyDataService

logger = logging.getLogger(__name__)


def resolve_is_anonymous(
    anonymity_choice: str,
    policy: AnonymityPolicy,
    identity: Optional[SessionIdentity] = None,
) -> bool:
    """
    A response is anonymous when the respondent chose so, when the
    institution policy demands it, or when the session runs on a token.
    """
    if identity is not None and identity.anonymous_only:
        return True
    return anonymity_choice == ANONYMOUS or policy is AnonymityPolicy.ANONYMOUS


def assemble_record(
    answers: Iterable[Answer],
    anonymity_choice: str,
    policy: AnonymityPolicy,
    identity: Optional[SessionIdentity] = None,
) -> SubmissionRecord:
    """Build the write-once record from the non-empty answers."""
    return SubmissionRecord(
        answers=tuple(a for a in answers if not a.is_empty),
        is_anonymous=resolve_is_anonymous(anonymity_choice, policy, identity),
    )


class SubmissionDispatcher:
    """Sends SubmissionRecords and reports the outcome as an Event."""

    def __init__(self, service: "SurveyDataService"):
        self._service = service

    async def dispatch(self, identity: SessionIdentity, record: SubmissionRecord) -> Event:
        path = "token" if identity.uses_token else "identity"
        logger.info(
            "submit_start path=%s survey_id=%s answers=%d anonymous=%s",
            path,
            identity.survey_id,
            len(record.answers),
            record.is_anonymous,
        )
        try:
            if identity.uses_token:
                result = await self._service.submit_by_token(identity.token, list(record.answers))
            else:
                result = await self._service.submit_by_identity(
                    identity.survey_id,
                    list(record.answers),
                    case_id=identity.case_id,
                    contact_id=identity.contact_id,
                    is_anonymous=record.is_anonymous,
                )
        except Exception as exc:
            message = fault_message(exc)
            fault = classify_submit_fault(message)
            logger.warning("submit_failed path=%s category=%s message=%s", path, fault.value, message)
            return SubmitFailed(fault)

        if result is None or not result.success:
            message = result.message if result is not None else None
            fault = classify_submit_fault(message) if message else SubmitFault.UNKNOWN
            logger.warning("submit_rejected path=%s category=%s message=%s", path, fault.value, message)
            return SubmitFailed(fault)

        logger.info("submit_succeeded path=%s survey_id=%s", path, identity.survey_id)
        return SubmitSucceeded(thank_you_text=result.thank_you_text)


__all__ = ["SubmissionDispatcher", "assemble_record", "resolve_is_anonymous"]
