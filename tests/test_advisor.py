# tests/test_advisor.py

from __future__ import annotations

import pytest

from trifocus.advisory.advisor import (
    ADVICE_UNAVAILABLE_MESSAGE,
    BREAKDOWN_UNAVAILABLE_MESSAGE,
    NOT_CONFIGURED_MESSAGE,
    NOTHING_PENDING_MESSAGE,
    AdvisoryClient,
    AdvisoryStatus,
    parse_steps,
)
from trifocus.advisory.prompts import BREAKDOWN_SCHEMA
from trifocus.tasks.task_models import JobContext

from .fakes import FakeCompletionClient, make_task, unavailable


def test_no_pending_tasks_skips_the_service(settings, llm: FakeCompletionClient) -> None:
    advisor = AdvisoryClient(settings, completion_client=llm)

    for tasks in ([], [make_task("a", completed=True)]):
        advice = advisor.get_prioritization_advice(tasks)
        assert advice.status is AdvisoryStatus.NOTHING_PENDING
        assert advice.text == NOTHING_PENDING_MESSAGE
        assert not advice.ok

    assert llm.calls == []


def test_missing_credential_short_circuits_both_operations(unconfigured_settings, llm) -> None:
    advisor = AdvisoryClient(unconfigured_settings, completion_client=llm)

    advice = advisor.get_prioritization_advice([make_task("a")])
    assert advice.status is AdvisoryStatus.NOT_CONFIGURED
    assert advice.text == NOT_CONFIGURED_MESSAGE

    breakdown = advisor.breakdown_task("Plan camp", JobContext.VIBE_TEEN)
    assert breakdown.status is AdvisoryStatus.NOT_CONFIGURED
    assert breakdown.steps == ()
    assert breakdown.display_lines() == [NOT_CONFIGURED_MESSAGE]

    assert llm.calls == []


def test_missing_credential_never_builds_a_real_client(unconfigured_settings) -> None:
    advisor = AdvisoryClient(unconfigured_settings)
    assert not advisor.configured
    assert advisor.get_prioritization_advice([make_task("a")]).status is AdvisoryStatus.NOT_CONFIGURED


def test_advice_returns_text_verbatim_and_prompts_with_pending_only(settings) -> None:
    llm = FakeCompletionClient(next_text="**Plan:** start with the slides.")
    advisor = AdvisoryClient(settings, completion_client=llm)
    tasks = [
        make_task("a", title="Write devotional post", job=JobContext.SOMOSUM),
        make_task("b", title="Grade quizzes", job=JobContext.IPE, completed=True),
        make_task("c", title="Call camp venue", job=JobContext.VIBE_TEEN, deadline="2025-05-20"),
    ]

    advice = advisor.get_prioritization_advice(tasks)

    assert advice.ok
    assert advice.text == "**Plan:** start with the slides."
    assert len(llm.calls) == 1
    prompt, schema = llm.calls[0]
    assert schema is None
    assert "Write devotional post" in prompt
    assert "Call camp venue" in prompt
    assert "2025-05-20" in prompt
    assert "Grade quizzes" not in prompt
    for job in JobContext:
        assert job.value in prompt
    assert "English" in prompt


def test_advice_failure_and_empty_text_degrade(settings) -> None:
    failing = AdvisoryClient(settings, completion_client=FakeCompletionClient(error=unavailable()))
    advice = failing.get_prioritization_advice([make_task("a")])
    assert advice.status is AdvisoryStatus.UNAVAILABLE
    assert advice.text == ADVICE_UNAVAILABLE_MESSAGE

    blank = AdvisoryClient(settings, completion_client=FakeCompletionClient(next_text="   "))
    assert blank.get_prioritization_advice([make_task("a")]).status is AdvisoryStatus.UNAVAILABLE


def test_every_call_hits_the_service(settings, llm) -> None:
    advisor = AdvisoryClient(settings, completion_client=llm)
    advisor.get_prioritization_advice([make_task("a")])
    advisor.get_prioritization_advice([make_task("a")])
    assert len(llm.calls) == 2


def test_breakdown_parses_structured_steps(settings) -> None:
    llm = FakeCompletionClient(next_text='{"steps": [" Book the venue ", "", "Send invites", "Plan games"]}')
    advisor = AdvisoryClient(settings, completion_client=llm)

    breakdown = advisor.breakdown_task("Organise camp", JobContext.VIBE_TEEN)

    assert breakdown.ok
    assert breakdown.steps == ("Book the venue", "Send invites", "Plan games")
    prompt, schema = llm.calls[0]
    assert schema == BREAKDOWN_SCHEMA
    assert "Organise camp" in prompt
    assert "Vibe Teen" in prompt


def test_breakdown_unparseable_response_falls_back(settings) -> None:
    nested = "[" * 100_000 + "]" * 100_000
    for text in ("Sure! First, book the venue.", '{"steps": [1, 2]}', "[]", '{"other": ["x"]}', nested):
        advisor = AdvisoryClient(settings, completion_client=FakeCompletionClient(next_text=text))
        breakdown = advisor.breakdown_task("Organise camp", JobContext.VIBE_TEEN)
        assert breakdown.status is AdvisoryStatus.UNAVAILABLE
        assert breakdown.steps == ()
        assert breakdown.display_lines() == [BREAKDOWN_UNAVAILABLE_MESSAGE]


def test_breakdown_service_error_falls_back(settings) -> None:
    advisor = AdvisoryClient(settings, completion_client=FakeCompletionClient(error=unavailable("auth")))
    breakdown = advisor.breakdown_task("Prepare class", JobContext.IPE)
    assert breakdown.status is AdvisoryStatus.UNAVAILABLE
    assert breakdown.message == BREAKDOWN_UNAVAILABLE_MESSAGE


def test_parse_steps_accepts_fenced_arrays_and_caps_length() -> None:
    fenced = '```json\n["a", "b", "c"]\n```'
    assert parse_steps(fenced, max_steps=5) == ["a", "b", "c"]

    many = '["1", "2", "3", "4", "5", "6", "7"]'
    assert parse_steps(many, max_steps=5) == ["1", "2", "3", "4", "5"]

    assert parse_steps("", max_steps=5) is None
    assert parse_steps("null", max_steps=5) is None


@pytest.mark.asyncio
async def test_async_wrappers_return_same_results(settings) -> None:
    llm = FakeCompletionClient(next_text='["Outline", "Record", "Publish"]')
    advisor = AdvisoryClient(settings, completion_client=llm)

    breakdown = await advisor.breakdown_task_async("Weekly video", JobContext.SOMOSUM)
    assert breakdown.steps == ("Outline", "Record", "Publish")

    advice = await advisor.get_prioritization_advice_async([make_task("a", completed=True)])
    assert advice.status is AdvisoryStatus.NOTHING_PENDING
    assert len(llm.calls) == 1
