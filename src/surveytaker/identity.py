"""
Identity Resolver.

Merges the identifiers supplied directly to the component, the identifiers
carried in navigation/page state, and an optional access token into one
SessionIdentity.

Precedence:
    - survey/case/contact id: local value, else page-state value
    - token: page state only; a token switches loading to the token path,
      drops case/contact ids and forces anonymous_only

Resolution is a pure function of its inputs, so resolving the same inputs
twice yields equal identities.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from surveytaker.model import SessionIdentity


@dataclass(frozen=True)
class LocalIdentity:
    """Identifiers supplied directly by the embedding page."""

    survey_id: Optional[str] = None
    case_id: Optional[str] = None
    contact_id: Optional[str] = None
    preview: bool = False


@dataclass(frozen=True)
class PageState:
    """Identifiers read from navigation state."""

    survey_id: Optional[str] = None
    case_id: Optional[str] = None
    contact_id: Optional[str] = None
    token: Optional[str] = None
    preview: bool = False

    @classmethod
    def from_mapping(cls, state: Optional[Mapping[str, Any]]) -> "PageState":
        """
        Build a PageState from raw navigation state.

        Accepts the platform-prefixed keys (c__recordId, c__token, ...)
        as well as plain keys. Empty values count as absent.
        """
        state = state or {}
        return cls(
            survey_id=_first(state, "c__recordId", "c__surveyId", "surveyId", "recordId"),
            case_id=_first(state, "c__caseId", "caseId"),
            contact_id=_first(state, "c__contactId", "contactId"),
            token=_first(state, "c__token", "token"),
            preview=_truthy(_first(state, "c__preview", "preview")),
        )


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _first(state: Mapping[str, Any], *keys: str) -> Optional[str]:
    for key in keys:
        value = _clean(state.get(key))
        if value is not None:
            return value
    return None


def _truthy(value: Optional[str]) -> bool:
    return value is not None and value.lower() in ("1", "true", "yes", "on")


def resolve_identity(local: LocalIdentity, page: PageState) -> SessionIdentity:
    """Resolve the effective identity for a session."""
    survey_id = _clean(local.survey_id) or page.survey_id
    token = page.token
    if token is not None:
        return SessionIdentity(survey_id=survey_id, token=token, anonymous_only=True)
    return SessionIdentity(
        survey_id=survey_id,
        case_id=_clean(local.case_id) or page.case_id,
        contact_id=_clean(local.contact_id) or page.contact_id,
    )


def resolve_preview(local: LocalIdentity, page: PageState) -> bool:
    return local.preview or page.preview


__all__ = ["LocalIdentity", "PageState", "resolve_identity", "resolve_preview"]
