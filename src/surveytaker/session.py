"""
Survey-taking session controller.

Owns one SessionState and wires the pieces together:

    page state ──> resolve_identity ──> IdentityResolved
                                          │
                         should_load ──> SurveyLoader ──> LoadSucceeded / LoadFailed
                                          │
    user / keyboard events ────────────> reduce ──> subscribers, notification listeners
                                          │
                    phase == SUBMITTING ──> SubmissionDispatcher ──> SubmitSucceeded / SubmitFailed

Single-threaded: all methods are meant to run on one event loop. Remote
calls are awaited in place; overlapping page-state updates only change the
target identity and the in-flight load loop picks the change up when its
current call settles.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Mapping, Optional, Union

from surveytaker.config import SurveyTakerConfig
from surveytaker.dispatcher import SubmissionDispatcher
from surveytaker.events import Event, IdentityResolved, LoadStarted
from surveytaker.identity import LocalIdentity, PageState, resolve_identity, resolve_preview
from surveytaker.keyboard import KeyPress, event_for_key
from surveytaker.loader import SurveyLoader, should_load
from surveytaker.notifications import Notification
from surveytaker.remote import SurveyDataService
from surveytaker.state import Phase, SessionState, initial_state, reduce
from surveytaker.view import SurveyView, build_view

logger = logging.getLogger(__name__)

StateListener = Callable[[SessionState], None]
NotificationListener = Callable[[Notification], None]


class SurveySession:
    """One respondent working through one survey."""

    def __init__(
        self,
        service: SurveyDataService,
        local: Optional[LocalIdentity] = None,
        config: Optional[SurveyTakerConfig] = None,
    ):
        self._config = config or SurveyTakerConfig()
        self._local = local or LocalIdentity()
        self._page = PageState()
        self._state = initial_state()
        self._loader = SurveyLoader(service, default_thank_you_text=self._config.default_thank_you_text)
        self._dispatcher = SubmissionDispatcher(service)
        self._state_listeners: List[StateListener] = []
        self._notification_listeners: List[NotificationListener] = []

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def view(self) -> SurveyView:
        return build_view(self._state, self._config)

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call `listener` with every new snapshot. Returns an unsubscribe callable."""
        self._state_listeners.append(listener)
        return lambda: self._state_listeners.remove(listener)

    def on_notification(self, listener: NotificationListener) -> Callable[[], None]:
        """Call `listener` with every user-visible notification."""
        self._notification_listeners.append(listener)
        return lambda: self._notification_listeners.remove(listener)

    # ------------------------------------------------------------------
    # Identity and loading
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        """Resolve the identity from what is known so far and load if needed."""
        await self._resolve()

    async def update_page_state(self, page_state: Union[PageState, Mapping[str, Any], None]) -> None:
        """Feed new navigation state; loads only when the effective identity changed."""
        if not isinstance(page_state, PageState):
            page_state = PageState.from_mapping(page_state)
        self._page = page_state
        await self._resolve()

    async def update_local(self, local: LocalIdentity) -> None:
        self._local = local
        await self._resolve()

    async def _resolve(self) -> None:
        identity = resolve_identity(self._local, self._page)
        preview = resolve_preview(self._local, self._page)
        if identity != self._state.identity or preview != self._state.preview:
            self._apply(IdentityResolved(identity, preview=preview))
        if self._state.loading is not None:
            logger.info("load_suppressed reason=in_flight survey_id=%s", identity.survey_id)
            return
        await self._load_pending()

    async def _load_pending(self) -> None:
        while should_load(self._state):
            identity = self._state.identity
            self._apply(LoadStarted(identity))
            outcome = await self._loader.load(identity)
            if outcome.identity != self._state.identity:
                logger.info("load_discarded reason=stale survey_id=%s", identity.survey_id)
            self._apply(outcome)

    # ------------------------------------------------------------------
    # User interaction
    # ------------------------------------------------------------------

    async def send(self, event: Event) -> SessionState:
        """Apply a user event; runs the submission when the event starts one."""
        before = self._state
        self._apply(event)
        if before.phase is not Phase.SUBMITTING and self._state.phase is Phase.SUBMITTING:
            outcome = await self._dispatcher.dispatch(self._state.loaded, self._state.submission)
            self._apply(outcome)
            # page state may have moved on while the submit was in flight
            await self._load_pending()
        return self._state

    async def handle_key(self, press: KeyPress) -> bool:
        """Apply a keyboard shortcut. Returns True when the key was handled."""
        if not self._config.keyboard_shortcuts:
            return False
        event = event_for_key(self._state, press)
        if event is None:
            return False
        await self.send(event)
        return True

    # ------------------------------------------------------------------

    def _apply(self, event: Event) -> None:
        previous = self._state
        self._state = reduce(previous, event)
        if self._state is previous:
            logger.debug("event_ignored type=%s phase=%s", type(event).__name__, previous.phase.value)
            return
        if self._state.phase is not previous.phase:
            logger.info(
                "phase_change event=%s from=%s to=%s",
                type(event).__name__,
                previous.phase.value,
                self._state.phase.value,
            )
        for listener in list(self._state_listeners):
            listener(self._state)
        notice = self._state.notice
        if notice is not None:
            for notify in list(self._notification_listeners):
                notify(notice)


__all__ = ["SurveySession"]
