"""
Survey Loader.

Fetches the question set and metadata for an effective identity and reports
the outcome as a LoadSucceeded / LoadFailed event tagged with the identity
it was issued for. The reducer compares that tag with the identity that is
current when the result arrives and drops stale results.

`should_load` is the duplicate-load guard: at most one load in flight, and
never a second load for the identity that already settled.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Optional

from surveytaker.errors import classify_load_fault, fault_message
from surveytaker.events import Event, LoadFailed, LoadSucceeded
from surveytaker.model import SessionIdentity, SurveyPayload
from surveytaker.state import Phase, SessionState

if TYPE_CHECKING:
    from surveytaker.remote import SurveyDataService

logger = logging.getLogger(__name__)


def should_load(state: SessionState, identity: Optional[SessionIdentity] = None) -> bool:
    """
    Decide whether `identity` (default: the state's current identity) needs a load.

    False when there is nothing to load, a load is already in flight, the
    identity already settled, or the session is submitting/submitted.
    """
    identity = identity if identity is not None else state.identity
    if identity is None or not identity.has_identifier:
        return False
    if state.loading is not None:
        return False
    if state.phase in (Phase.SUBMITTING, Phase.SUBMITTED):
        return False
    return identity != state.loaded


class SurveyLoader:
    """Runs one load call against the remote data layer."""

    def __init__(self, service: "SurveyDataService", default_thank_you_text: str = ""):
        self._service = service
        self._default_thank_you_text = default_thank_you_text

    async def load(self, identity: SessionIdentity) -> Event:
        path = "token" if identity.uses_token else "identity"
        logger.info("load_start path=%s survey_id=%s", path, identity.survey_id)
        try:
            if identity.uses_token:
                payload = await self._service.load_survey_by_token(identity.token)
            else:
                payload = await self._service.load_survey_by_identity(
                    identity.survey_id,
                    case_id=identity.case_id,
                    contact_id=identity.contact_id,
                )
        except Exception as exc:
            message = fault_message(exc)
            fault = classify_load_fault(message)
            logger.warning("load_failed path=%s category=%s message=%s", path, fault.value, message)
            return LoadFailed(identity, fault)

        if payload is None:
            payload = SurveyPayload(survey=None)
        logger.info(
            "load_succeeded path=%s survey_id=%s questions=%d",
            path,
            identity.survey_id,
            len(payload.questions),
        )
        return LoadSucceeded(identity, self._with_defaults(payload))

    def _with_defaults(self, payload: SurveyPayload) -> SurveyPayload:
        survey = payload.survey
        if survey is None or survey.thank_you_text or not self._default_thank_you_text:
            return payload
        return replace(payload, survey=replace(survey, thank_you_text=self._default_thank_you_text))


__all__ = ["SurveyLoader", "should_load"]
