"""
Tests for the survey session controller.

Tests run the session against InMemorySurveyService and verify:
    - Exactly one load per effective identity, even under concurrent updates
    - Stale load results never reach the screen
    - Token and identity submission paths
    - Preview mode never submits
    - Remote faults surface as notifications with the right advisory text
"""

import asyncio

from surveytaker.config import SurveyTakerConfig
from surveytaker.errors import LOAD_MESSAGES, SUBMIT_MESSAGES, LoadFault, SubmitFault
from surveytaker.events import Advance, ChooseAnonymity, Retreat, SetScalar, Submit, ToggleChoice
from surveytaker.examples import InMemorySurveyService, build_example_feedback_survey
from surveytaker.identity import LocalIdentity
from surveytaker.keyboard import KeyPress
from surveytaker.model import ANONYMOUS, Answer, SubmitResult, SurveyInfo, SurveyPayload
from surveytaker.notifications import Severity
from surveytaker.session import SurveySession
from surveytaker.state import Phase


def make_session(local=None, config=None, **service_kwargs):
    service = InMemorySurveyService(**service_kwargs)
    return service, SurveySession(service, local=local, config=config)


async def answer_example(session):
    """Answer the example survey: q1, q2 and q5; q3 skipped, q4 hidden."""
    await session.send(SetScalar("q1", "4"))
    await session.send(Advance())
    await session.send(ToggleChoice("q2", "email", True))
    await session.send(Advance())
    await session.send(Advance())
    await session.send(SetScalar("q5", "Quick and friendly"))
    return await session.send(Advance())


class TestLoading:
    """Test load triggering and the duplicate-load guard."""

    def test_connect_loads_once(self):
        """Should load the resolved identity exactly once."""
        service, session = make_session(
            local=LocalIdentity(survey_id="S1"), surveys={"S1": build_example_feedback_survey()}
        )

        async def scenario():
            await session.connect()
            await session.connect()
            await session.update_page_state({"c__recordId": "S-ignored"})

        asyncio.run(scenario())

        assert len(service.calls_named("load_survey_by_identity")) == 1
        assert session.state.phase is Phase.ANSWERING

    def test_no_identity_no_load(self):
        """Nothing is loaded until some identifier is known."""
        service, session = make_session()
        asyncio.run(session.connect())
        assert service.calls == []
        assert session.state.phase is Phase.IDLE

    def test_page_state_triggers_load(self):
        """Page-state ids are used when no local ids are set."""
        service, session = make_session(surveys={"S1": build_example_feedback_survey()})
        asyncio.run(session.update_page_state({"c__recordId": "S1", "c__caseId": "C9"}))
        call = service.calls_named("load_survey_by_identity")[0]
        assert call.args == ("S1",)
        assert call.kwargs["case_id"] == "C9"

    def test_concurrent_duplicate_updates(self):
        """Two updates for the same identity while loading issue one call."""
        service, session = make_session(surveys={"S1": build_example_feedback_survey()})
        service.delays["load_survey_by_identity"] = 0.01

        async def scenario():
            await asyncio.gather(
                session.update_page_state({"c__recordId": "S1"}),
                session.update_page_state({"c__recordId": "S1"}),
            )

        asyncio.run(scenario())

        assert len(service.calls_named("load_survey_by_identity")) == 1
        assert session.state.phase is Phase.ANSWERING

    def test_stale_load_replaced_by_latest_identity(self):
        """An identity change mid-load ends on the latest identity's survey."""
        first = SurveyPayload(survey=SurveyInfo(name="First"))
        second = SurveyPayload(survey=SurveyInfo(name="Second"))
        service, session = make_session(surveys={"S1": first, "S2": second})
        service.delays["load_survey_by_identity"] = 0.01
        seen = []
        session.subscribe(lambda s: seen.append(s.survey.name if s.survey else None))

        async def scenario():
            await asyncio.gather(
                session.update_page_state({"c__recordId": "S1"}),
                session.update_page_state({"c__recordId": "S2"}),
            )

        asyncio.run(scenario())

        assert [c.args[0] for c in service.calls_named("load_survey_by_identity")] == ["S1", "S2"]
        assert session.state.survey.name == "Second"
        assert "First" not in seen

    def test_load_failure_not_retried(self):
        """A failed identity is not reloaded by further identical updates."""
        service, session = make_session(local=LocalIdentity(survey_id="S1"))
        service.load_errors["S1"] = "Insufficient access rights"

        async def scenario():
            await session.connect()
            await session.update_page_state({})

        asyncio.run(scenario())

        assert len(service.calls) == 1
        assert session.state.phase is Phase.ERROR
        assert session.state.error == LOAD_MESSAGES[LoadFault.PERMISSION]

    def test_unknown_survey_is_not_found(self):
        """A missing survey surfaces the not-found advisory."""
        _, session = make_session(local=LocalIdentity(survey_id="nope"))
        asyncio.run(session.connect())
        assert session.view.error == LOAD_MESSAGES[LoadFault.NOT_FOUND]

    def test_new_identity_loads_after_error(self):
        """A different identity is loaded even from the error state."""
        service, session = make_session(surveys={"S2": build_example_feedback_survey()})

        async def scenario():
            await session.update_page_state({"c__recordId": "S1"})
            await session.update_page_state({"c__recordId": "S2"})

        asyncio.run(scenario())

        assert len(service.calls) == 2
        assert session.state.phase is Phase.ANSWERING


class TestSubmission:
    """Test the end-to-end flows through submission."""

    def test_identity_path_with_anonymity_choice(self):
        """Internal respondent chooses anonymous; identity path carries the flag."""
        service, session = make_session(
            local=LocalIdentity(survey_id="S1", case_id="C1", contact_id="P1"),
            surveys={"S1": build_example_feedback_survey(is_internal=True)},
        )

        async def scenario():
            await session.connect()
            state = await answer_example(session)
            assert state.phase is Phase.CHOOSING_ANONYMITY
            await session.send(ChooseAnonymity(ANONYMOUS))
            return await session.send(Submit())

        state = asyncio.run(scenario())

        assert state.phase is Phase.SUBMITTED
        assert state.thank_you_text == "Thanks! Your feedback helps us improve."
        call = service.calls_named("submit_by_identity")[0]
        assert call.kwargs == {"case_id": "C1", "contact_id": "P1", "is_anonymous": True}
        assert [a.question_id for a in call.args[1]] == ["q1", "q2", "q5"]
        assert service.calls_named("submit_by_token") == []

    def test_token_path(self):
        """Token session: no anonymity step, only the token submit call."""
        payload = build_example_feedback_survey(is_internal=True)
        service, session = make_session(tokens={"tok": payload})

        async def scenario():
            await session.update_page_state({"c__recordId": "S1", "c__token": "tok"})
            return await answer_example(session)

        state = asyncio.run(scenario())

        assert state.phase is Phase.SUBMITTED
        assert [c.name for c in service.calls] == ["load_survey_by_token", "submit_by_token"]
        assert service.calls[1].args[0] == "tok"
        assert state.submission.is_anonymous is True

    def test_returned_thank_you_text_wins(self):
        """Thank-you text from the submit result replaces the loaded text."""
        service, session = make_session(
            local=LocalIdentity(survey_id="S1"),
            surveys={"S1": build_example_feedback_survey(is_internal=False)},
        )
        service.submit_result = SubmitResult(success=True, thank_you_text="Cheers")

        async def scenario():
            await session.connect()
            return await answer_example(session)

        assert asyncio.run(scenario()).thank_you_text == "Cheers"

    def test_expired_submit_returns_to_last_step(self):
        """Expired invitation: notification, back on the last step, answers kept."""
        service, session = make_session(
            local=LocalIdentity(survey_id="S1"),
            surveys={"S1": build_example_feedback_survey(is_internal=False)},
        )
        service.submit_errors["S1"] = "Invitation expired"
        notices = []
        session.on_notification(notices.append)

        async def scenario():
            await session.connect()
            return await answer_example(session)

        state = asyncio.run(scenario())

        assert state.phase is Phase.ANSWERING
        assert state.current_question.id == "q5"
        assert state.answers["q5"] == Answer("q5", value="Quick and friendly")
        assert notices[-1].severity is Severity.ERROR
        assert notices[-1].message == SUBMIT_MESSAGES[SubmitFault.EXPIRED]

    def test_reported_failure_is_classified(self):
        """A success=False result is classified from its message."""
        service, session = make_session(
            local=LocalIdentity(survey_id="S1"),
            surveys={"S1": build_example_feedback_survey(is_internal=False)},
        )
        service.submit_result = SubmitResult(success=False, message="Duplicate response for invitation")
        notices = []
        session.on_notification(notices.append)

        async def scenario():
            await session.connect()
            return await answer_example(session)

        asyncio.run(scenario())
        assert notices[-1].message == SUBMIT_MESSAGES[SubmitFault.DUPLICATE]

    def test_unexpected_exception_is_unknown_fault(self):
        """Any other exception becomes the unknown fault."""

        class BrokenService(InMemorySurveyService):
            async def submit_by_identity(self, *args, **kwargs):
                raise RuntimeError("kaboom")

        service = BrokenService(surveys={"S1": build_example_feedback_survey(is_internal=False)})
        session = SurveySession(service, local=LocalIdentity(survey_id="S1"))
        notices = []
        session.on_notification(notices.append)

        async def scenario():
            await session.connect()
            return await answer_example(session)

        state = asyncio.run(scenario())
        assert state.phase is Phase.ANSWERING
        assert notices[-1].message == SUBMIT_MESSAGES[SubmitFault.UNKNOWN]

    def test_page_change_during_submit_reloads_before_retry(self):
        """A new survey arriving mid-submit is loaded; old answers never reach it."""
        second = SurveyPayload(
            survey=SurveyInfo(name="Second"),
            questions=build_example_feedback_survey().questions,
        )
        service, session = make_session(
            surveys={"S1": build_example_feedback_survey(is_internal=False), "S2": second}
        )
        service.delays["submit_by_identity"] = 0.05
        service.submit_errors["S1"] = "Network connection lost"

        async def navigate_away():
            await asyncio.sleep(0.01)
            await session.update_page_state({"c__recordId": "S2"})

        async def scenario():
            await session.update_page_state({"c__recordId": "S1"})
            await asyncio.gather(answer_example(session), navigate_away())
            service.submit_errors.clear()
            return await session.send(Submit())

        state = asyncio.run(scenario())

        assert [c.args[0] for c in service.calls_named("submit_by_identity")] == ["S1"]
        assert [c.args[0] for c in service.calls_named("load_survey_by_identity")] == ["S1", "S2"]
        assert state.loaded.survey_id == "S2"
        assert state.survey.name == "Second"
        assert state.phase is Phase.ANSWERING
        assert state.cursor == 0
        assert all(a.is_empty for a in state.answers.values())

    def test_preview_never_submits(self):
        """Preview validates and completes without any submit call."""
        service, session = make_session(
            local=LocalIdentity(survey_id="S1", preview=True),
            surveys={"S1": build_example_feedback_survey(is_internal=False)},
        )

        async def scenario():
            await session.connect()
            await session.send(Advance())
            blocked = session.state
            return blocked, await answer_example(session)

        blocked, state = asyncio.run(scenario())

        assert blocked.cursor == 0
        assert state.phase is Phase.SUBMITTED
        assert [c.name for c in service.calls] == ["load_survey_by_identity"]
        assert session.view.preview_banner is not None


class TestListeners:
    """Test state and notification listeners."""

    def test_required_notification_and_unsubscribe(self):
        """Blocked Advance notifies; unsubscribed listeners hear nothing more."""
        _, session = make_session(
            local=LocalIdentity(survey_id="S1"), surveys={"S1": build_example_feedback_survey()}
        )
        notices = []
        states = []
        unsubscribe = session.on_notification(notices.append)
        session.subscribe(states.append)

        async def scenario():
            await session.connect()
            await session.send(Advance())
            unsubscribe()
            await session.send(Advance())

        asyncio.run(scenario())

        assert [n.title for n in notices] == ["Required Field"]
        assert states[-1].phase is Phase.ANSWERING


class TestKeyboard:
    """Test keyboard shortcuts through the session."""

    def test_arrow_keys_navigate(self):
        """ArrowRight advances, ArrowLeft retreats."""
        _, session = make_session(
            local=LocalIdentity(survey_id="S1"), surveys={"S1": build_example_feedback_survey()}
        )

        async def scenario():
            await session.connect()
            await session.send(SetScalar("q1", "3"))
            assert await session.handle_key(KeyPress("ArrowRight"))
            assert session.state.cursor == 1
            assert await session.handle_key(KeyPress("ArrowLeft"))
            assert session.state.cursor == 0
            assert not await session.handle_key(KeyPress("ArrowRight", target_tag="textarea"))

        asyncio.run(scenario())

    def test_shortcuts_disabled_by_config(self):
        """With shortcuts off no key is handled."""
        _, session = make_session(
            local=LocalIdentity(survey_id="S1"),
            config=SurveyTakerConfig(keyboard_shortcuts=False),
            surveys={"S1": build_example_feedback_survey()},
        )

        async def scenario():
            await session.connect()
            await session.send(SetScalar("q1", "3"))
            return await session.handle_key(KeyPress("ArrowRight"))

        assert asyncio.run(scenario()) is False
        assert session.state.cursor == 0

    def test_retreat_from_anonymity_step(self):
        """Retreat from the anonymity step returns to the last question."""
        _, session = make_session(
            local=LocalIdentity(survey_id="S1"), surveys={"S1": build_example_feedback_survey()}
        )

        async def scenario():
            await session.connect()
            await answer_example(session)
            return await session.send(Retreat())

        state = asyncio.run(scenario())
        assert state.phase is Phase.ANSWERING
        assert state.current_question.id == "q5"
