"""
Per-category alert check strategies.

A check knows which users it evaluates, which ledger period a run belongs
to, and how to turn one user's metrics into an AlertEvaluation. The run
loop itself lives in ``alert_engine``.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy.orm import Session

from forge.db.enums import AlertCategory, AlertSeverity, Role
from forge.db.models import User
from forge.services import alert_metrics as metrics
from forge.services.alert_ledger import day_period, iso_week_period, month_period, previous_month
from forge.services.alert_settings_service import DEFAULT_THRESHOLDS, EffectiveConfig
from forge.services.alert_severity import (
    classify_activity,
    classify_marketing_monthly,
    classify_marketing_period,
    classify_monthly_review,
    classify_quota,
    classify_stale,
    classify_task_overdue,
    marketing_red_reasons,
    percentage,
)
from forge.utils.datetimes import days_remaining_in_month, start_of_month, week_start

SALES_AND_MARKETING = (Role.SALES_REP.value, Role.MARKETING_REP.value)
MARKETING_ONLY = (Role.MARKETING_REP.value,)

WEEKLY_LEADS_FLOOR = 3
WEEKLY_BACKLOG_CAP = 5


class UnknownAlertCategoryError(LookupError):
    """Raised when a trigger names a category with no registered check."""


@dataclass(frozen=True)
class AlertEvaluation:
    severity: AlertSeverity
    snapshot: Any
    quota_target: float | None = None
    quota_actual: float | None = None


def _week_window(now: datetime) -> tuple[datetime, datetime]:
    start = week_start(now)
    return start, start + timedelta(days=7)


def _month_window(now: datetime) -> tuple[datetime, datetime]:
    start = start_of_month(now)
    return start, (start + timedelta(days=32)).replace(day=1)


class AlertCheck(ABC):
    """Base strategy. Subclasses set ``category`` and implement ``period_key`` and ``evaluate``."""

    category: AlertCategory
    roles: tuple[str, ...] = SALES_AND_MARKETING

    @abstractmethod
    def period_key(self, now: datetime) -> str:
        """Ledger period a run at ``now`` belongs to."""

    def prepare(
        self, db: Session, users: Sequence[User], now: datetime, config: EffectiveConfig
    ) -> Any:
        """Team-wide context shared by every user in the run."""
        return None

    @abstractmethod
    def evaluate(
        self,
        db: Session,
        user: User,
        now: datetime,
        config: EffectiveConfig,
        context: Any,
    ) -> AlertEvaluation | None:
        """Grade one user, or None when no alert is due."""


class QuotaCheck(AlertCheck):
    category = AlertCategory.QUOTA

    def period_key(self, now: datetime) -> str:
        return month_period(now)

    def evaluate(self, db, user, now, config, context):
        start, end = _month_window(now)
        target = metrics.quota_target(db, user, now.year, now.month)
        actual = metrics.closed_won_revenue(db, user.id, start, end)
        snapshot = metrics.QuotaSnapshot(
            target=target,
            actual=actual,
            days_remaining=days_remaining_in_month(now),
        )
        severity = classify_quota(snapshot.attainment, config.thresholds, snapshot.days_remaining)
        if severity is None:
            return None
        return AlertEvaluation(severity, snapshot, quota_target=target, quota_actual=actual)


class StaleCheck(AlertCheck):
    category = AlertCategory.STALE

    def period_key(self, now: datetime) -> str:
        return day_period(now)

    def evaluate(self, db, user, now, config, context):
        buckets = metrics.bucket_stale_items(
            metrics.open_deals(db, user.id, now),
            metrics.open_leads(db, user.id, now),
            deal_red_days=int(config.thresholds.red),
            deal_yellow_days=int(config.thresholds.yellow),
        )
        severity = classify_stale(buckets)
        if severity is None:
            return None
        return AlertEvaluation(severity, buckets)


class ActivityCheck(AlertCheck):
    category = AlertCategory.ACTIVITY

    def period_key(self, now: datetime) -> str:
        return iso_week_period(now)

    def prepare(self, db, users, now, config):
        start, end = _week_window(now)
        return metrics.team_activity_average(db, [u.id for u in users], start, end)

    def evaluate(self, db, user, now, config, context):
        start, end = _week_window(now)
        snapshot = metrics.ActivitySnapshot(
            expected=metrics.expected_weekly_activities(user.role),
            breakdown=metrics.activity_breakdown(db, user.id, start, end),
            team_average=context or 0,
        )
        severity = classify_activity(snapshot.attainment, config.thresholds)
        if severity is None:
            return None
        return AlertEvaluation(severity, snapshot)


class TaskOverdueCheck(AlertCheck):
    category = AlertCategory.TASK

    def period_key(self, now: datetime) -> str:
        return day_period(now)

    def evaluate(self, db, user, now, config, context):
        snapshot = metrics.overdue_tasks(db, user.id, now)
        severity = classify_task_overdue(snapshot.count, config.thresholds)
        if severity is None:
            return None
        return AlertEvaluation(severity, snapshot)


class MarketingCheck(AlertCheck):
    """Weekly success-rate check against the team."""

    category = AlertCategory.MARKETING
    roles = MARKETING_ONLY

    def period_key(self, now: datetime) -> str:
        return iso_week_period(now)

    def prepare(self, db, users, now, config):
        start, end = _week_window(now)
        team = metrics.summarize_marketing_tasks(
            metrics.marketing_tasks(db, [u.id for u in users], start, end)
        )
        return team.success_rate

    def evaluate(self, db, user, now, config, context):
        start, end = _week_window(now)
        summary = metrics.summarize_marketing_tasks(metrics.marketing_tasks(db, user.id, start, end))
        severity = classify_marketing_period(
            sample_size=summary.with_outcome,
            success_rate=summary.success_rate,
            leads_generated=summary.leads_generated,
            pending_backlog=0,
            thresholds=config.thresholds,
        )
        if severity is None:
            return None
        return AlertEvaluation(
            severity,
            metrics.MarketingCheckSnapshot(summary=summary, team_success_rate=context or 0.0),
        )


class MarketingWeeklyCheck(AlertCheck):
    """Trailing seven-day digest with lead floor and outcome backlog."""

    category = AlertCategory.MARKETING_WEEKLY
    roles = MARKETING_ONLY

    def period_key(self, now: datetime) -> str:
        return iso_week_period(now)

    def evaluate(self, db, user, now, config, context):
        tasks = metrics.marketing_tasks(
            db, user.id, now - timedelta(days=7), now + timedelta(seconds=1), completed_only=True
        )
        summary = metrics.summarize_marketing_tasks(tasks)
        backlog = metrics.pending_outcome_backlog(db, user.id, now)
        grading = dict(
            success_rate=summary.success_rate,
            leads_generated=summary.leads_generated,
            pending_backlog=backlog,
            thresholds=config.thresholds,
            leads_floor=WEEKLY_LEADS_FLOOR,
            backlog_cap=WEEKLY_BACKLOG_CAP,
        )
        severity = classify_marketing_period(sample_size=summary.with_outcome, **grading)
        if severity is None:
            return None
        top, bottom = metrics.template_leaderboard(tasks)
        issues = marketing_red_reasons(**grading) if severity == AlertSeverity.RED else []
        return AlertEvaluation(
            severity,
            metrics.MarketingWeeklySnapshot(
                summary=summary,
                pending_backlog=backlog,
                top_templates=top,
                bottom_templates=bottom,
                issues=issues,
            ),
        )


class MarketingMonthlyCheck(AlertCheck):
    category = AlertCategory.MARKETING_MONTHLY
    roles = MARKETING_ONLY

    def period_key(self, now: datetime) -> str:
        return f"{previous_month(now).period}-marketing"

    def prepare(self, db, users, now, config):
        window = previous_month(now)
        scores: dict[UUID, float] = {}
        for user in users:
            summary = metrics.summarize_marketing_tasks(
                metrics.marketing_tasks(db, user.id, window.start, window.end)
            )
            scores[user.id] = summary.success_rate
        return scores

    def evaluate(self, db, user, now, config, context):
        window = previous_month(now)
        summary = metrics.summarize_marketing_tasks(
            metrics.marketing_tasks(db, user.id, window.start, window.end)
        )
        best, worst = metrics.best_and_worst_types(summary)
        rank, team_size = metrics.rank_of(user.id, context or {})
        severity = classify_marketing_monthly(summary.success_rate, config.thresholds)
        return AlertEvaluation(
            severity,
            metrics.MarketingMonthlySnapshot(
                month_name=window.name,
                summary=summary,
                best_type=best,
                needs_improvement=worst,
                rank=rank,
                team_size=team_size,
            ),
        )


class MonthlyReviewCheck(AlertCheck):
    """Month-end sales review for the previous calendar month."""

    category = AlertCategory.MONTHLY

    def period_key(self, now: datetime) -> str:
        return previous_month(now).period

    def prepare(self, db, users, now, config):
        window = previous_month(now)
        scores: dict[UUID, float] = {}
        for user in users:
            target = metrics.quota_target(db, user, window.year, window.month)
            actual = metrics.closed_won_revenue(db, user.id, window.start, window.end)
            scores[user.id] = percentage(actual, target)
        return scores

    def evaluate(self, db, user, now, config, context):
        window = previous_month(now)
        target = metrics.quota_target(db, user, window.year, window.month)
        actual = metrics.closed_won_revenue(db, user.id, window.start, window.end)
        won, closed = metrics.closed_deal_counts(db, user.id, window.start, window.end)
        rank, team_size = metrics.rank_of(user.id, context or {})
        snapshot = metrics.MonthlyReviewSnapshot(
            month_name=window.name,
            target=target,
            actual=actual,
            deals_won=won,
            deals_closed=closed,
            activities=metrics.activity_count(db, user.id, window.start, window.end),
            stale_deal_count=metrics.stale_deal_count(
                db, user.id, now, DEFAULT_THRESHOLDS[AlertCategory.STALE].red
            ),
            task_completion_rate=metrics.task_completion_rate(db, user.id, window.start, window.end),
            rank=rank,
            team_size=team_size,
        )
        severity = classify_monthly_review(snapshot.attainment, config.thresholds)
        return AlertEvaluation(severity, snapshot, quota_target=target, quota_actual=actual)


ALERT_CHECKS: dict[AlertCategory, AlertCheck] = {
    check.category: check
    for check in (
        QuotaCheck(),
        StaleCheck(),
        ActivityCheck(),
        TaskOverdueCheck(),
        MarketingCheck(),
        MarketingWeeklyCheck(),
        MarketingMonthlyCheck(),
        MonthlyReviewCheck(),
    )
}


def get_check(category: AlertCategory | str) -> AlertCheck:
    try:
        return ALERT_CHECKS[AlertCategory(category)]
    except (ValueError, KeyError):
        raise UnknownAlertCategoryError(f"Unknown alert category: {category}") from None
