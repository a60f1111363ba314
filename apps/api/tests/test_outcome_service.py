"""Tests for marketing task outcome rules."""

import pytest

from forge.db.enums import MarketingOutcome, MarketingTaskType, ResponseType
from forge.services.outcome_service import (
    OUTCOME_RULES,
    TaskMetrics,
    classify_outcome,
    email_rates,
    optional_fields_for_type,
    outcome_rank,
    required_fields_for_type,
)


def test_every_task_type_has_a_rule():
    assert set(OUTCOME_RULES) == set(MarketingTaskType)


@pytest.mark.parametrize("task_type", list(MarketingTaskType))
def test_empty_metrics_never_raise(task_type):
    result = classify_outcome(task_type, TaskMetrics())
    assert result.outcome in set(MarketingOutcome)
    assert result.checks


@pytest.mark.parametrize("task_type", list(MarketingTaskType))
def test_a_lead_always_means_success(task_type):
    result = classify_outcome(task_type, TaskMetrics(leads_generated_count=1))
    assert result.outcome == MarketingOutcome.SUCCESS


def test_social_post_grades():
    assert classify_outcome(
        "social_post", TaskMetrics(likes=12, comments=6, icp_engagement=True)
    ).outcome == MarketingOutcome.SUCCESS
    # Strong engagement without ICP is not enough for success
    assert classify_outcome(
        "social_post", TaskMetrics(likes=12, comments=6, icp_engagement=False)
    ).outcome == MarketingOutcome.FAILED
    assert classify_outcome("social_post", TaskMetrics(likes=7)).outcome == MarketingOutcome.PARTIAL
    assert classify_outcome("social_post", TaskMetrics(comments=3)).outcome == MarketingOutcome.PARTIAL
    assert classify_outcome("social_post", TaskMetrics(likes=4, comments=1)).outcome == MarketingOutcome.FAILED


def test_linkedin_outreach_grades():
    assert classify_outcome(
        MarketingTaskType.LINKEDIN_OUTREACH, TaskMetrics(response_type=ResponseType.INTERESTED)
    ).outcome == MarketingOutcome.SUCCESS
    assert classify_outcome(
        MarketingTaskType.LINKEDIN_OUTREACH, TaskMetrics(connection_accepted=True)
    ).outcome == MarketingOutcome.PARTIAL
    assert classify_outcome(
        MarketingTaskType.LINKEDIN_OUTREACH, TaskMetrics(response_type=ResponseType.NOT_INTERESTED)
    ).outcome == MarketingOutcome.PARTIAL
    assert classify_outcome(
        MarketingTaskType.LINKEDIN_OUTREACH, TaskMetrics(response_type=ResponseType.NO_RESPONSE)
    ).outcome == MarketingOutcome.FAILED


def test_blog_post_grades():
    assert classify_outcome("blog_post", TaskMetrics(views=150, icp_engagement=True)).outcome == MarketingOutcome.SUCCESS
    assert classify_outcome("blog_post", TaskMetrics(views=150)).outcome == MarketingOutcome.FAILED
    assert classify_outcome("blog_post", TaskMetrics(views=50)).outcome == MarketingOutcome.PARTIAL
    assert classify_outcome("blog_post", TaskMetrics(views=49)).outcome == MarketingOutcome.FAILED


@pytest.mark.parametrize("task_type", [MarketingTaskType.EMAIL_CAMPAIGN, MarketingTaskType.COLD_EMAIL])
def test_email_reply_rate_boundary(task_type):
    partial = classify_outcome(task_type, TaskMetrics(sent=100, opens=25, replies=3))
    assert partial.outcome == MarketingOutcome.PARTIAL

    success = classify_outcome(task_type, TaskMetrics(sent=100, opens=25, replies=5))
    assert success.outcome == MarketingOutcome.SUCCESS

    failed = classify_outcome(task_type, TaskMetrics(sent=100, opens=10, replies=0))
    assert failed.outcome == MarketingOutcome.FAILED


def test_email_rates_round_half_up_and_guard_zero_sent():
    assert email_rates(TaskMetrics(sent=40, opens=9, replies=1)) == (23, 3)
    # 1/40 = 2.5% rounds up to 3
    assert email_rates(TaskMetrics(sent=40, replies=1))[1] == 3
    assert email_rates(TaskMetrics(sent=0, opens=0, replies=0)) == (0, 0)


def test_event_and_webinar_grades():
    for task_type in ("event", "webinar"):
        assert classify_outcome(task_type, TaskMetrics(meetings_booked=1)).outcome == MarketingOutcome.SUCCESS
        assert classify_outcome(task_type, TaskMetrics(attendees=10)).outcome == MarketingOutcome.PARTIAL
        assert classify_outcome(task_type, TaskMetrics(attendees=9)).outcome == MarketingOutcome.FAILED


def test_generic_types_never_fail():
    for task_type in ("content_creation", "other"):
        assert classify_outcome(task_type, TaskMetrics()).outcome == MarketingOutcome.PARTIAL


def test_adding_engagement_never_lowers_the_outcome():
    base = TaskMetrics(likes=6, comments=1)
    more = TaskMetrics(likes=12, comments=6, icp_engagement=True)
    assert outcome_rank(classify_outcome("social_post", more).outcome) >= outcome_rank(
        classify_outcome("social_post", base).outcome
    )


def test_checks_explain_the_result():
    result = classify_outcome("cold_email", TaskMetrics(sent=100, opens=25, replies=3))
    by_label = {c.label: c for c in result.checks}
    assert by_label["Open Rate >= 20%"].passed is True
    assert by_label["Open Rate >= 20%"].value == "25%"
    assert by_label["Reply Rate >= 5%"].passed is False


def test_outcome_rank_order():
    assert outcome_rank("failed") < outcome_rank("partial") < outcome_rank("success")


def test_required_and_optional_fields_partition():
    required = required_fields_for_type("cold_email")
    optional = optional_fields_for_type("cold_email")
    assert required == ["sent", "opens", "replies"]
    assert not set(required) & set(optional)
    assert "likes" in optional
