"""
Severity grading for performance alerts.

One pure function per alert category. Each returns an AlertSeverity or
None when no alert is warranted.
"""
from __future__ import annotations

from dataclasses import dataclass

from forge.db.enums import SEVERITY_RANK, AlertSeverity

# Quota alerts only fire inside the last days of the month
QUOTA_BOUNDARY_DAYS = 10

# Weekly marketing checks stay quiet below this many outcome-bearing tasks
MIN_MARKETING_SAMPLE = 5

LEAD_STALE_RED_DAYS = 7
LEAD_STALE_YELLOW_DAYS = 3


@dataclass(frozen=True)
class Thresholds:
    red: float
    yellow: float
    green: float


@dataclass(frozen=True)
class StaleBuckets:
    """Items grouped by age since last update."""

    red_deals: list
    yellow_deals: list
    red_leads: list
    yellow_leads: list

    @property
    def has_red(self) -> bool:
        return bool(self.red_deals or self.red_leads)

    @property
    def has_yellow(self) -> bool:
        return bool(self.yellow_deals or self.yellow_leads)


def worst_severity(*severities: AlertSeverity | None) -> AlertSeverity | None:
    """RED > YELLOW > GREEN; None entries are ignored."""
    present = [s for s in severities if s is not None]
    if not present:
        return None
    return max(present, key=lambda s: SEVERITY_RANK[s])


def percentage(actual: float, target: float) -> float:
    if not target:
        return 0.0
    return float(actual) / float(target) * 100


def classify_quota(
    attainment_pct: float,
    thresholds: Thresholds,
    days_remaining: int,
) -> AlertSeverity | None:
    """Month-end quota attainment. Silent outside the boundary window."""
    if days_remaining >= QUOTA_BOUNDARY_DAYS:
        return None
    if attainment_pct < thresholds.red:
        return AlertSeverity.RED
    if attainment_pct >= thresholds.green:
        return AlertSeverity.GREEN
    return AlertSeverity.YELLOW


def classify_stale(buckets: StaleBuckets) -> AlertSeverity | None:
    """Any RED bucket wins; YELLOW only when nothing is RED."""
    if buckets.has_red:
        return AlertSeverity.RED
    if buckets.has_yellow:
        return AlertSeverity.YELLOW
    return None


def classify_activity(activity_pct: float, thresholds: Thresholds) -> AlertSeverity | None:
    """Weekly activity against expectation. There is no YELLOW band."""
    if activity_pct < thresholds.red:
        return AlertSeverity.RED
    if activity_pct > thresholds.green:
        return AlertSeverity.GREEN
    return None


def classify_task_overdue(overdue_count: int, thresholds: Thresholds) -> AlertSeverity | None:
    if overdue_count <= 0:
        return None
    if overdue_count >= thresholds.red:
        return AlertSeverity.RED
    if overdue_count >= thresholds.yellow:
        return AlertSeverity.YELLOW
    return None


def classify_marketing_period(
    *,
    sample_size: int,
    success_rate: float,
    leads_generated: int,
    pending_backlog: int,
    thresholds: Thresholds,
    leads_floor: int | None = None,
    backlog_cap: int | None = None,
) -> AlertSeverity | None:
    """
    Weekly marketing performance.

    Needs MIN_MARKETING_SAMPLE outcome-bearing tasks before anything fires.
    RED when the rate is below ``red``, leads are under the floor, or the
    pending-outcome backlog is over the cap.
    """
    if sample_size < MIN_MARKETING_SAMPLE:
        return None
    if success_rate < thresholds.red:
        return AlertSeverity.RED
    if leads_floor is not None and leads_generated < leads_floor:
        return AlertSeverity.RED
    if backlog_cap is not None and pending_backlog > backlog_cap:
        return AlertSeverity.RED
    if success_rate > thresholds.green:
        return AlertSeverity.GREEN
    if success_rate < thresholds.yellow:
        return AlertSeverity.YELLOW
    return None


def marketing_red_reasons(
    *,
    success_rate: float,
    leads_generated: int,
    pending_backlog: int,
    thresholds: Thresholds,
    leads_floor: int | None = None,
    backlog_cap: int | None = None,
) -> list[str]:
    """Human-readable reasons behind a RED marketing grade."""
    reasons = []
    if success_rate < thresholds.red:
        reasons.append(f"Success rate {round(success_rate)}% (target: {round(thresholds.red)}%+)")
    if leads_floor is not None and leads_generated < leads_floor:
        reasons.append(f"Only {leads_generated} leads generated (target: {leads_floor}+)")
    if backlog_cap is not None and pending_backlog > backlog_cap:
        reasons.append(f"{pending_backlog} tasks awaiting outcomes for 3+ days")
    return reasons


def classify_marketing_monthly(success_rate: float, thresholds: Thresholds) -> AlertSeverity:
    """Monthly marketing rollup always reports."""
    if success_rate < thresholds.red:
        return AlertSeverity.RED
    if success_rate >= thresholds.green:
        return AlertSeverity.GREEN
    return AlertSeverity.YELLOW


def classify_monthly_review(attainment_pct: float, thresholds: Thresholds) -> AlertSeverity:
    """Month-end sales review always reports, regardless of sample size."""
    if attainment_pct < thresholds.red:
        return AlertSeverity.RED
    if attainment_pct >= thresholds.green:
        return AlertSeverity.GREEN
    return AlertSeverity.YELLOW
