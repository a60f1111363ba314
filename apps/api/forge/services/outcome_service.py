"""
Marketing task outcome rules.

Scores a completed marketing task as SUCCESS / PARTIAL / FAILED from its
type-specific engagement metrics. Every rule also returns the individual
checks it evaluated so the task form can explain the result.

Rules are pure and total: missing metrics count as 0/False and every
task type has exactly one rule.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Callable

from forge.db.enums import MarketingOutcome, MarketingTaskType, ResponseType


OUTCOME_RANK = {
    MarketingOutcome.FAILED: 0,
    MarketingOutcome.PARTIAL: 1,
    MarketingOutcome.SUCCESS: 2,
}

ENGAGEMENT_FIELDS = (
    "likes",
    "comments",
    "shares",
    "views",
    "opens",
    "sent",
    "replies",
    "attendees",
    "meetings_booked",
    "response_type",
    "connection_accepted",
)


@dataclass(frozen=True)
class TaskMetrics:
    """Recorded engagement for one marketing task."""

    icp_engagement: bool = False
    leads_generated_count: int = 0
    likes: int | None = None
    comments: int | None = None
    shares: int | None = None
    views: int | None = None
    sent: int | None = None
    opens: int | None = None
    replies: int | None = None
    attendees: int | None = None
    meetings_booked: int | None = None
    response_type: ResponseType | None = None
    connection_accepted: bool | None = None

    @classmethod
    def from_task(cls, task) -> "TaskMetrics":
        """Build metrics from a MarketingTask row."""
        return cls(
            icp_engagement=bool(task.icp_engagement),
            leads_generated_count=task.leads_generated_count or 0,
            likes=task.likes,
            comments=task.comments,
            shares=task.shares,
            views=task.views,
            sent=task.sent,
            opens=task.opens,
            replies=task.replies,
            attendees=task.attendees,
            meetings_booked=task.meetings_booked,
            response_type=ResponseType(task.response_type) if task.response_type else None,
            connection_accepted=task.connection_accepted,
        )


@dataclass(frozen=True)
class OutcomeCheck:
    label: str
    passed: bool
    value: str | int | bool
    threshold: str | None = None


@dataclass(frozen=True)
class OutcomeResult:
    outcome: MarketingOutcome
    checks: list[OutcomeCheck] = field(default_factory=list)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _leads_check(count: int, label: str = "Leads Generated") -> OutcomeCheck:
    return OutcomeCheck(label=label, passed=count >= 1, value=count, threshold="1")


def _social_post(m: TaskMetrics) -> OutcomeResult:
    likes = m.likes or 0
    comments = m.comments or 0
    leads = m.leads_generated_count or 0
    checks = [
        OutcomeCheck("Likes >= 10", likes >= 10, likes, "10"),
        OutcomeCheck("Comments >= 5", comments >= 5, comments, "5"),
        OutcomeCheck("ICP Engagement", m.icp_engagement, m.icp_engagement),
        _leads_check(leads),
    ]

    if leads >= 1:
        outcome = MarketingOutcome.SUCCESS
    elif likes >= 10 and comments >= 5 and m.icp_engagement:
        outcome = MarketingOutcome.SUCCESS
    elif 5 <= likes < 10 or 2 <= comments < 5:
        outcome = MarketingOutcome.PARTIAL
    else:
        outcome = MarketingOutcome.FAILED
    return OutcomeResult(outcome, checks)


def _linkedin_outreach(m: TaskMetrics) -> OutcomeResult:
    leads = m.leads_generated_count or 0
    accepted = m.connection_accepted is True
    checks = [
        OutcomeCheck(
            "Interested Response",
            m.response_type == ResponseType.INTERESTED,
            m.response_type.value if m.response_type else "None",
        ),
        OutcomeCheck("Connection Accepted", accepted, accepted),
        _leads_check(leads, label="Lead Generated"),
    ]

    if m.response_type == ResponseType.INTERESTED or leads >= 1:
        outcome = MarketingOutcome.SUCCESS
    elif accepted or m.response_type == ResponseType.NOT_INTERESTED:
        # Accepted connection or a polite decline still counts as reach
        outcome = MarketingOutcome.PARTIAL
    else:
        outcome = MarketingOutcome.FAILED
    return OutcomeResult(outcome, checks)


def _blog_post(m: TaskMetrics) -> OutcomeResult:
    views = m.views or 0
    leads = m.leads_generated_count or 0
    checks = [
        OutcomeCheck("Views >= 100", views >= 100, views, "100"),
        OutcomeCheck("ICP Traffic", m.icp_engagement, m.icp_engagement),
        _leads_check(leads),
    ]

    if leads >= 1:
        outcome = MarketingOutcome.SUCCESS
    elif views >= 100 and m.icp_engagement:
        outcome = MarketingOutcome.SUCCESS
    elif 50 <= views < 100:
        outcome = MarketingOutcome.PARTIAL
    else:
        outcome = MarketingOutcome.FAILED
    return OutcomeResult(outcome, checks)


def email_rates(m: TaskMetrics) -> tuple[int, int]:
    """Return (open_rate, reply_rate) as whole percentages."""
    sent = max(m.sent or 0, 1)
    open_rate = _round_half_up((m.opens or 0) / sent * 100)
    reply_rate = _round_half_up((m.replies or 0) / sent * 100)
    return open_rate, reply_rate


def _email(m: TaskMetrics) -> OutcomeResult:
    leads = m.leads_generated_count or 0
    open_rate, reply_rate = email_rates(m)
    checks = [
        OutcomeCheck("Open Rate >= 20%", open_rate >= 20, f"{open_rate}%", "20%"),
        OutcomeCheck("Reply Rate >= 5%", reply_rate >= 5, f"{reply_rate}%", "5%"),
        _leads_check(leads),
    ]

    if reply_rate >= 5 or leads >= 1:
        outcome = MarketingOutcome.SUCCESS
    elif open_rate >= 20:
        outcome = MarketingOutcome.PARTIAL
    else:
        outcome = MarketingOutcome.FAILED
    return OutcomeResult(outcome, checks)


def _event(m: TaskMetrics) -> OutcomeResult:
    attendees = m.attendees or 0
    meetings = m.meetings_booked or 0
    leads = m.leads_generated_count or 0
    checks = [
        OutcomeCheck("Attendees >= 10", attendees >= 10, attendees, "10"),
        OutcomeCheck("Meetings Booked", meetings >= 1, meetings, "1"),
        _leads_check(leads),
    ]

    if leads >= 1 or meetings >= 1:
        outcome = MarketingOutcome.SUCCESS
    elif attendees >= 10:
        outcome = MarketingOutcome.PARTIAL
    else:
        outcome = MarketingOutcome.FAILED
    return OutcomeResult(outcome, checks)


def _generic(m: TaskMetrics) -> OutcomeResult:
    # Engagement alone never fails a generic task
    leads = m.leads_generated_count or 0
    checks = [
        OutcomeCheck("ICP Engagement", m.icp_engagement, m.icp_engagement),
        _leads_check(leads),
    ]
    outcome = MarketingOutcome.SUCCESS if leads >= 1 else MarketingOutcome.PARTIAL
    return OutcomeResult(outcome, checks)


OutcomeRule = Callable[[TaskMetrics], OutcomeResult]

OUTCOME_RULES: dict[MarketingTaskType, OutcomeRule] = {
    MarketingTaskType.SOCIAL_POST: _social_post,
    MarketingTaskType.LINKEDIN_OUTREACH: _linkedin_outreach,
    MarketingTaskType.BLOG_POST: _blog_post,
    MarketingTaskType.EMAIL_CAMPAIGN: _email,
    MarketingTaskType.COLD_EMAIL: _email,
    MarketingTaskType.EVENT: _event,
    MarketingTaskType.WEBINAR: _event,
    MarketingTaskType.CONTENT_CREATION: _generic,
    MarketingTaskType.OTHER: _generic,
}

REQUIRED_FIELDS: dict[MarketingTaskType, tuple[str, ...]] = {
    MarketingTaskType.SOCIAL_POST: ("likes", "comments", "shares", "icp_engagement"),
    MarketingTaskType.LINKEDIN_OUTREACH: ("response_type", "connection_accepted"),
    MarketingTaskType.BLOG_POST: ("views", "icp_engagement"),
    MarketingTaskType.EMAIL_CAMPAIGN: ("sent", "opens", "replies"),
    MarketingTaskType.COLD_EMAIL: ("sent", "opens", "replies"),
    MarketingTaskType.EVENT: ("attendees", "meetings_booked"),
    MarketingTaskType.WEBINAR: ("attendees", "meetings_booked"),
    MarketingTaskType.CONTENT_CREATION: ("icp_engagement",),
    MarketingTaskType.OTHER: ("icp_engagement",),
}

_missing_rules = set(MarketingTaskType) - set(OUTCOME_RULES)
_missing_fields = set(MarketingTaskType) - set(REQUIRED_FIELDS)
if _missing_rules or _missing_fields:
    raise RuntimeError(
        "Outcome rules missing for task types: "
        + ", ".join(sorted(t.value for t in _missing_rules | _missing_fields))
    )


def classify_outcome(task_type: MarketingTaskType | str, metrics: TaskMetrics) -> OutcomeResult:
    """Score a marketing task. Pure; never raises for a known task type."""
    return OUTCOME_RULES[MarketingTaskType(task_type)](metrics)


def outcome_rank(outcome: MarketingOutcome | str) -> int:
    """FAILED < PARTIAL < SUCCESS."""
    return OUTCOME_RANK[MarketingOutcome(outcome)]


def required_fields_for_type(task_type: MarketingTaskType | str) -> list[str]:
    """Metric fields the task form should ask for."""
    return list(REQUIRED_FIELDS[MarketingTaskType(task_type)])


def optional_fields_for_type(task_type: MarketingTaskType | str) -> list[str]:
    required = set(REQUIRED_FIELDS[MarketingTaskType(task_type)])
    return [f for f in ENGAGEMENT_FIELDS if f not in required]
