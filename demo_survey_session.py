#!/usr/bin/env python3
"""
Survey Session Demo: Load → Answer → Choose Anonymity → Submit

Shows the full respondent workflow against the in-memory data service:
1. Resolve identity from page state and load the survey
2. Walk the questions (including a blocked Advance on a required question)
3. Choose to submit anonymously
4. Submit and print the remote calls that were made
5. Replay the flow on a token link and in preview mode
"""

import asyncio

from surveytaker.config import load_config
from surveytaker.events import Advance, ChooseAnonymity, SetScalar, Submit, ToggleChoice
from surveytaker.examples import InMemorySurveyService, build_example_feedback_survey
from surveytaker.identity import LocalIdentity
from surveytaker.logging_setup import configure_logging
from surveytaker.model import ANONYMOUS
from surveytaker.serialization import payload_to_yaml
from surveytaker.session import SurveySession


def show(session):
    view = session.view
    state = session.state
    if state.current_question is not None:
        print(f"   [{view.progress_percentage:3d}%] Q{view.question_number}/{view.total_questions}: "
              f"{state.current_question.text} ({view.layout})")
    else:
        print(f"   phase={state.phase.value}")


async def answer_all(session):
    await session.send(Advance())  # blocked: q1 is required
    await session.send(SetScalar("q1", "5"))
    await session.send(Advance())
    show(session)
    await session.send(ToggleChoice("q2", "email", True))
    await session.send(ToggleChoice("q2", "chat", True))
    await session.send(Advance())
    show(session)
    await session.send(SetScalar("q3", "yes"))
    await session.send(Advance())
    show(session)
    await session.send(SetScalar("q5", "Quick turnaround, thanks."))
    await session.send(Advance())


async def main():
    config = load_config()
    configure_logging(config.log_level)
    payload = build_example_feedback_survey()

    print("=" * 80)
    print("SURVEY SESSION DEMO: Load → Answer → Anonymity → Submit")
    print("=" * 80)

    # =========================================================================
    # STEP 1: Load
    # =========================================================================
    print("\n1. LOADING SURVEY...")
    service = InMemorySurveyService(surveys={"S1": payload}, tokens={"tok-123": payload})
    session = SurveySession(service, local=LocalIdentity(case_id="C42"), config=config)
    session.on_notification(lambda n: print(f"   ! {n.severity.value.upper()}: {n.title}: {n.message}"))
    await session.update_page_state({"c__recordId": "S1"})
    print(f"   ✓ Loaded: {session.view.header_title}")
    print(f"   ✓ Visible questions: {session.view.total_questions}")
    show(session)

    # =========================================================================
    # STEP 2-3: Answer and choose anonymity
    # =========================================================================
    print("\n2. ANSWERING...")
    await answer_all(session)
    show(session)
    print("\n3. CHOOSING ANONYMITY...")
    await session.send(ChooseAnonymity(ANONYMOUS))

    # =========================================================================
    # STEP 4: Submit
    # =========================================================================
    print("\n4. SUBMITTING...")
    state = await session.send(Submit())
    print(f"   ✓ Phase: {state.phase.value}")
    print(f"   ✓ {state.thank_you_text}")
    for call in service.calls:
        print(f"   - {call.name} {call.args[0]} {call.kwargs}")

    # =========================================================================
    # STEP 5: Token link and preview
    # =========================================================================
    print("\n5. TOKEN LINK...")
    token_service = InMemorySurveyService(tokens={"tok-123": payload})
    token_session = SurveySession(token_service, config=config)
    await token_session.update_page_state({"c__token": "tok-123"})
    await answer_all(token_session)
    print(f"   ✓ Calls: {[c.name for c in token_service.calls]}")

    print("\n   PREVIEW...")
    preview_service = InMemorySurveyService(surveys={"S1": payload})
    preview_session = SurveySession(preview_service, local=LocalIdentity(survey_id="S1", preview=True), config=config)
    await preview_session.connect()
    await answer_all(preview_session)
    await preview_session.send(Submit())
    print(f"   ✓ Calls: {[c.name for c in preview_service.calls]}")

    print("\n6. PAYLOAD (YAML):")
    print("-" * 80)
    lines = payload_to_yaml(payload).splitlines()
    for line in lines[:15]:
        print(f"   {line}")
    if len(lines) > 15:
        print(f"   ... ({len(lines) - 15} more lines)")


if __name__ == "__main__":
    asyncio.run(main())
