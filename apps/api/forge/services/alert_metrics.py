"""
Metric aggregation for performance alerts.

Query helpers take a session plus a user and a time window and return
plain snapshots; the summarizers below them are pure. Windows are
half-open: ``start <= t < end``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Iterable, Sequence
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from forge.core.config import settings
from forge.db.enums import (
    CLOSED_DEAL_STAGES,
    ActivityType,
    DealStage,
    LeadStatus,
    MarketingOutcome,
    MarketingTaskStatus,
    MarketingTaskType,
    Role,
)
from forge.db.models import Activity, Deal, Lead, MarketingTask, Task, User, UserQuota
from forge.services.alert_severity import (
    LEAD_STALE_RED_DAYS,
    LEAD_STALE_YELLOW_DAYS,
    StaleBuckets,
    percentage,
)
from forge.utils.datetimes import days_since, ensure_utc
from forge.utils.presentation import humanize_identifier

# Weekly activity expectation per role
EXPECTED_WEEKLY_ACTIVITIES = {
    Role.SALES_REP.value: 20,
    Role.MARKETING_REP.value: 15,
}
DEFAULT_EXPECTED_WEEKLY_ACTIVITIES = 15

MAX_OVERDUE_TASKS_LISTED = 10

# Completed tasks without an outcome this old count as backlog
PENDING_OUTCOME_AFTER_DAYS = 3

# Template leaderboards need this many scored tasks per template
MIN_TEMPLATE_OUTCOMES = 2
TOP_TEMPLATE_RATE = 70
BOTTOM_TEMPLATE_RATE = 30

MARKETING_TYPE_LABELS = {
    MarketingTaskType.LINKEDIN_OUTREACH: "LinkedIn Outreach",
    MarketingTaskType.COLD_EMAIL: "Cold Email",
    MarketingTaskType.SOCIAL_POST: "Social Posts",
    MarketingTaskType.BLOG_POST: "Blog Posts",
    MarketingTaskType.EMAIL_CAMPAIGN: "Email Campaigns",
    MarketingTaskType.EVENT: "Events",
    MarketingTaskType.WEBINAR: "Webinars",
    MarketingTaskType.CONTENT_CREATION: "Content Creation",
    MarketingTaskType.OTHER: "Other",
}


# =============================================================================
# Snapshots
# =============================================================================

@dataclass(frozen=True)
class QuotaSnapshot:
    target: float
    actual: float
    days_remaining: int

    @property
    def attainment(self) -> float:
        return percentage(self.actual, self.target)


@dataclass(frozen=True)
class StaleItem:
    id: UUID
    name: str
    days_since_update: int


@dataclass(frozen=True)
class ActivityBreakdown:
    calls: int = 0
    emails: int = 0
    meetings: int = 0
    notes: int = 0

    @property
    def total(self) -> int:
        return self.calls + self.emails + self.meetings + self.notes


@dataclass(frozen=True)
class ActivitySnapshot:
    expected: int
    breakdown: ActivityBreakdown
    team_average: int = 0

    @property
    def actual(self) -> int:
        return self.breakdown.total

    @property
    def attainment(self) -> float:
        return percentage(self.actual, self.expected)


@dataclass(frozen=True)
class OverdueTask:
    id: UUID
    title: str
    due_date: datetime
    days_overdue: int


@dataclass(frozen=True)
class OverdueSnapshot:
    count: int
    tasks: list[OverdueTask]


@dataclass(frozen=True)
class TypeStats:
    task_type: MarketingTaskType
    display_name: str
    count: int
    success_rate: float
    leads_generated: int


@dataclass(frozen=True)
class TemplateStats:
    name: str
    success_rate: float
    leads_generated: int


@dataclass(frozen=True)
class MarketingSummary:
    total: int
    with_outcome: int
    success: int
    partial: int
    failed: int
    leads_generated: int
    by_type: list[TypeStats] = field(default_factory=list)

    @property
    def success_rate(self) -> float:
        return percentage(self.success, self.with_outcome)

    @property
    def active_types(self) -> list[TypeStats]:
        return [t for t in self.by_type if t.count > 0]


@dataclass(frozen=True)
class MarketingCheckSnapshot:
    summary: MarketingSummary
    team_success_rate: float = 0.0


@dataclass(frozen=True)
class MarketingWeeklySnapshot:
    summary: MarketingSummary
    pending_backlog: int
    top_templates: list[TemplateStats] = field(default_factory=list)
    bottom_templates: list[TemplateStats] = field(default_factory=list)
    issues: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class MarketingMonthlySnapshot:
    month_name: str
    summary: MarketingSummary
    best_type: str | None = None
    needs_improvement: str | None = None
    rank: int | None = None
    team_size: int | None = None


@dataclass(frozen=True)
class MonthlyReviewSnapshot:
    month_name: str
    target: float
    actual: float
    deals_won: int
    deals_closed: int
    activities: int
    stale_deal_count: int
    task_completion_rate: float
    rank: int | None = None
    team_size: int | None = None

    @property
    def attainment(self) -> float:
        return percentage(self.actual, self.target)

    @property
    def win_rate(self) -> float:
        return percentage(self.deals_won, self.deals_closed)

    @property
    def average_deal_size(self) -> float:
        return self.actual / self.deals_won if self.deals_won else 0.0


# =============================================================================
# Quota / revenue
# =============================================================================

def quota_target(db: Session, user: User, year: int, month: int) -> float:
    """Monthly target: quota row, else the user's quota, else the default."""
    row = db.query(UserQuota).filter(
        UserQuota.user_id == user.id,
        UserQuota.year == year,
        UserQuota.month == month,
    ).first()
    if row is not None:
        return float(row.target_amount)
    if user.monthly_quota is not None:
        return float(user.monthly_quota)
    return float(settings.DEFAULT_MONTHLY_QUOTA)


def closed_won_revenue(db: Session, user_id: UUID, start: datetime, end: datetime) -> float:
    total = db.query(func.coalesce(func.sum(Deal.amount_total), 0)).filter(
        Deal.owner_id == user_id,
        Deal.stage == DealStage.CLOSED_WON.value,
        Deal.updated_at >= start,
        Deal.updated_at < end,
    ).scalar()
    return float(total or Decimal("0"))


def closed_deal_counts(db: Session, user_id: UUID, start: datetime, end: datetime) -> tuple[int, int]:
    """Return (won, closed) deal counts in the window."""
    rows = db.query(Deal.stage, func.count(Deal.id)).filter(
        Deal.owner_id == user_id,
        Deal.stage.in_([s.value for s in CLOSED_DEAL_STAGES]),
        Deal.updated_at >= start,
        Deal.updated_at < end,
    ).group_by(Deal.stage).all()
    counts = {stage: count for stage, count in rows}
    won = counts.get(DealStage.CLOSED_WON.value, 0)
    return won, won + counts.get(DealStage.CLOSED_LOST.value, 0)


# =============================================================================
# Stale pipeline
# =============================================================================

def bucket_stale_items(
    deals: Iterable[StaleItem],
    leads: Iterable[StaleItem],
    *,
    deal_red_days: int,
    deal_yellow_days: int,
    lead_red_days: int = LEAD_STALE_RED_DAYS,
    lead_yellow_days: int = LEAD_STALE_YELLOW_DAYS,
) -> StaleBuckets:
    """
    RED when idle more than ``*_red_days``; YELLOW from ``*_yellow_days``
    up to one day short of the RED cutoff.
    """
    deals = list(deals)
    leads = list(leads)
    return StaleBuckets(
        red_deals=[d for d in deals if d.days_since_update > deal_red_days],
        yellow_deals=[
            d for d in deals if deal_yellow_days <= d.days_since_update < deal_red_days
        ],
        red_leads=[l for l in leads if l.days_since_update > lead_red_days],
        yellow_leads=[
            l for l in leads if lead_yellow_days <= l.days_since_update < lead_red_days
        ],
    )


def open_deals(db: Session, user_id: UUID, now: datetime) -> list[StaleItem]:
    rows = db.query(Deal.id, Deal.name, Deal.updated_at).filter(
        Deal.owner_id == user_id,
        Deal.stage.notin_([s.value for s in CLOSED_DEAL_STAGES]),
    ).all()
    return [StaleItem(r.id, r.name, days_since(r.updated_at, now)) for r in rows]


def open_leads(db: Session, user_id: UUID, now: datetime) -> list[StaleItem]:
    rows = db.query(Lead.id, Lead.name, Lead.updated_at).filter(
        Lead.owner_id == user_id,
        Lead.is_converted.is_(False),
        Lead.status != LeadStatus.UNQUALIFIED.value,
    ).all()
    return [StaleItem(r.id, r.name, days_since(r.updated_at, now)) for r in rows]


def stale_deal_count(db: Session, user_id: UUID, now: datetime, red_days: int) -> int:
    return sum(1 for d in open_deals(db, user_id, now) if d.days_since_update > red_days)


# =============================================================================
# Activity
# =============================================================================

def expected_weekly_activities(role: str) -> int:
    return EXPECTED_WEEKLY_ACTIVITIES.get(role, DEFAULT_EXPECTED_WEEKLY_ACTIVITIES)


def activity_breakdown(db: Session, user_id: UUID, start: datetime, end: datetime) -> ActivityBreakdown:
    rows = db.query(Activity.type, func.count(Activity.id)).filter(
        Activity.user_id == user_id,
        Activity.created_at >= start,
        Activity.created_at < end,
    ).group_by(Activity.type).all()
    counts = {activity_type: count for activity_type, count in rows}
    return ActivityBreakdown(
        calls=counts.get(ActivityType.CALL.value, 0),
        emails=counts.get(ActivityType.EMAIL.value, 0),
        meetings=counts.get(ActivityType.MEETING.value, 0),
        notes=counts.get(ActivityType.NOTE.value, 0),
    )


def team_activity_average(
    db: Session, user_ids: Sequence[UUID], start: datetime, end: datetime
) -> int:
    if not user_ids:
        return 0
    total = db.query(func.count(Activity.id)).filter(
        Activity.user_id.in_(user_ids),
        Activity.created_at >= start,
        Activity.created_at < end,
    ).scalar() or 0
    return round(total / len(user_ids))


def activity_count(db: Session, user_id: UUID, start: datetime, end: datetime) -> int:
    return db.query(func.count(Activity.id)).filter(
        Activity.user_id == user_id,
        Activity.created_at >= start,
        Activity.created_at < end,
    ).scalar() or 0


# =============================================================================
# Tasks
# =============================================================================

def overdue_tasks(db: Session, user_id: UUID, now: datetime) -> OverdueSnapshot:
    """Incomplete tasks past due, oldest first; lists at most ten."""
    rows = db.query(Task).filter(
        Task.user_id == user_id,
        Task.completed.is_(False),
        Task.due_date.isnot(None),
        Task.due_date < now,
    ).order_by(Task.due_date.asc()).all()
    listed = [
        OverdueTask(
            id=t.id,
            title=t.title,
            due_date=ensure_utc(t.due_date),
            days_overdue=max(days_since(t.due_date, now), 1),
        )
        for t in rows[:MAX_OVERDUE_TASKS_LISTED]
    ]
    return OverdueSnapshot(count=len(rows), tasks=listed)


def task_completion_rate(db: Session, user_id: UUID, start: datetime, end: datetime) -> float:
    """Share of tasks created in the window that are completed (100 when none)."""
    rows = db.query(Task.completed, func.count(Task.id)).filter(
        Task.user_id == user_id,
        Task.created_at >= start,
        Task.created_at < end,
    ).group_by(Task.completed).all()
    counts = {bool(done): count for done, count in rows}
    total = counts.get(True, 0) + counts.get(False, 0)
    if total == 0:
        return 100.0
    return percentage(counts.get(True, 0), total)


# =============================================================================
# Marketing
# =============================================================================

def marketing_tasks(
    db: Session,
    user_ids: UUID | Sequence[UUID],
    start: datetime,
    end: datetime,
    *,
    completed_only: bool = False,
) -> list[MarketingTask]:
    """Non-template marketing tasks dated within the window."""
    if isinstance(user_ids, UUID):
        user_ids = [user_ids]
    query = db.query(MarketingTask).filter(
        MarketingTask.user_id.in_(list(user_ids)),
        MarketingTask.is_template.is_(False),
        MarketingTask.task_date >= start,
        MarketingTask.task_date < end,
    )
    if completed_only:
        query = query.filter(MarketingTask.status == MarketingTaskStatus.COMPLETED.value)
    return query.all()


def pending_outcome_backlog(db: Session, user_id: UUID, now: datetime) -> int:
    """Completed tasks still missing an outcome after PENDING_OUTCOME_AFTER_DAYS."""
    cutoff = now - timedelta(days=PENDING_OUTCOME_AFTER_DAYS)
    return db.query(func.count(MarketingTask.id)).filter(
        MarketingTask.user_id == user_id,
        MarketingTask.status == MarketingTaskStatus.COMPLETED.value,
        MarketingTask.outcome.is_(None),
        MarketingTask.is_template.is_(False),
        MarketingTask.task_date <= cutoff,
    ).scalar() or 0


def _type_label(task_type: MarketingTaskType) -> str:
    return MARKETING_TYPE_LABELS.get(task_type) or humanize_identifier(task_type.value)


def summarize_marketing_tasks(tasks: Sequence[MarketingTask]) -> MarketingSummary:
    """Outcome counts, lead count and per-type breakdown."""
    scored = [t for t in tasks if t.outcome is not None]
    by_type = []
    for task_type in MarketingTaskType:
        typed = [t for t in tasks if t.type == task_type.value]
        typed_scored = [t for t in typed if t.outcome is not None]
        typed_success = sum(1 for t in typed_scored if t.outcome == MarketingOutcome.SUCCESS.value)
        by_type.append(
            TypeStats(
                task_type=task_type,
                display_name=_type_label(task_type),
                count=len(typed),
                success_rate=percentage(typed_success, len(typed_scored)),
                leads_generated=sum(1 for t in typed if t.lead_generated),
            )
        )
    return MarketingSummary(
        total=len(tasks),
        with_outcome=len(scored),
        success=sum(1 for t in scored if t.outcome == MarketingOutcome.SUCCESS.value),
        partial=sum(1 for t in scored if t.outcome == MarketingOutcome.PARTIAL.value),
        failed=sum(1 for t in scored if t.outcome == MarketingOutcome.FAILED.value),
        leads_generated=sum(1 for t in tasks if t.lead_generated),
        by_type=by_type,
    )


def template_leaderboard(
    tasks: Sequence[MarketingTask],
) -> tuple[list[TemplateStats], list[TemplateStats]]:
    """Top (>=70% success) and bottom (<30%) templates, three of each."""
    stats: dict[UUID, dict] = {}
    for task in tasks:
        if task.template_id is None:
            continue
        entry = stats.setdefault(
            task.template_id,
            {"name": task.template_name or "Unknown Template", "success": 0, "total": 0, "leads": 0},
        )
        if task.outcome is not None:
            entry["total"] += 1
            if task.outcome == MarketingOutcome.SUCCESS.value:
                entry["success"] += 1
        if task.lead_generated:
            entry["leads"] += 1

    ranked = [
        TemplateStats(
            name=entry["name"],
            success_rate=percentage(entry["success"], entry["total"]),
            leads_generated=entry["leads"],
        )
        for entry in stats.values()
        if entry["total"] >= MIN_TEMPLATE_OUTCOMES
    ]
    top = sorted(
        (t for t in ranked if t.success_rate >= TOP_TEMPLATE_RATE),
        key=lambda t: t.success_rate,
        reverse=True,
    )[:3]
    bottom = sorted(
        (t for t in ranked if t.success_rate < BOTTOM_TEMPLATE_RATE),
        key=lambda t: t.success_rate,
    )[:3]
    return top, bottom


def best_and_worst_types(summary: MarketingSummary) -> tuple[str | None, str | None]:
    """Display names of the strongest and weakest active task types."""
    active = summary.active_types
    if not active:
        return None, None
    best = max(active, key=lambda t: (t.success_rate, t.leads_generated))
    worst = min(active, key=lambda t: (t.success_rate, t.leads_generated))
    if best is worst:
        return best.display_name, None
    return best.display_name, worst.display_name


def rank_of(user_id: UUID, scores: dict[UUID, float]) -> tuple[int | None, int]:
    """1-based rank of ``user_id`` by descending score, and the field size."""
    ordered = sorted(scores.items(), key=lambda item: item[1], reverse=True)
    for index, (candidate, _) in enumerate(ordered, start=1):
        if candidate == user_id:
            return index, len(ordered)
    return None, len(ordered)
