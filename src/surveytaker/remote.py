"""
Remote data-access layer contract.

The survey taker never looks up surveys, issues invitations or stores
responses itself; it calls an implementation of SurveyDataService.
All four calls are asynchronous and are not cancelled once issued.

Implementations report failures by raising (ideally RemoteCallError) or,
for submissions, by returning SubmitResult(success=False, message=...).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from surveytaker.model import Answer, SubmitResult, SurveyPayload


class SurveyDataService(ABC):
    """Asynchronous survey lookup and response storage."""

    @abstractmethod
    async def load_survey_by_identity(
        self,
        survey_id: str,
        case_id: Optional[str] = None,
        contact_id: Optional[str] = None,
    ) -> SurveyPayload:
        ...

    @abstractmethod
    async def load_survey_by_token(self, token: str) -> SurveyPayload:
        """Token loads are always anonymous."""
        ...

    @abstractmethod
    async def submit_by_identity(
        self,
        survey_id: str,
        answers: List[Answer],
        case_id: Optional[str] = None,
        contact_id: Optional[str] = None,
        is_anonymous: bool = False,
    ) -> SubmitResult:
        ...

    @abstractmethod
    async def submit_by_token(self, token: str, answers: List[Answer]) -> SubmitResult:
        ...


__all__ = ["SurveyDataService"]
