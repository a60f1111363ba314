"""Tests for severity grading and stale bucketing."""

import uuid

from forge.db.enums import AlertSeverity
from forge.services.alert_metrics import StaleItem, bucket_stale_items
from forge.services.alert_severity import (
    Thresholds,
    classify_activity,
    classify_marketing_monthly,
    classify_marketing_period,
    classify_monthly_review,
    classify_quota,
    classify_stale,
    classify_task_overdue,
    marketing_red_reasons,
    percentage,
    worst_severity,
)

QUOTA = Thresholds(50, 80, 100)


def _item(days: int) -> StaleItem:
    return StaleItem(uuid.uuid4(), f"Item {days}", days)


def test_quota_is_silent_outside_month_end_window():
    assert classify_quota(10, QUOTA, days_remaining=10) is None
    assert classify_quota(10, QUOTA, days_remaining=9) == AlertSeverity.RED


def test_quota_grades_inside_window():
    assert classify_quota(49.9, QUOTA, 5) == AlertSeverity.RED
    assert classify_quota(50, QUOTA, 5) == AlertSeverity.YELLOW
    assert classify_quota(99, QUOTA, 5) == AlertSeverity.YELLOW
    assert classify_quota(100, QUOTA, 5) == AlertSeverity.GREEN


def test_stale_deal_and_lead_mix_is_red():
    buckets = bucket_stale_items([_item(20)], [_item(4)], deal_red_days=14, deal_yellow_days=7)
    assert len(buckets.red_deals) == 1
    assert len(buckets.yellow_leads) == 1
    assert classify_stale(buckets) == AlertSeverity.RED


def test_stale_bucket_edges():
    buckets = bucket_stale_items(
        [_item(6), _item(7), _item(13), _item(15)],
        [_item(2), _item(3), _item(6), _item(8)],
        deal_red_days=14,
        deal_yellow_days=7,
    )
    assert [d.days_since_update for d in buckets.yellow_deals] == [7, 13]
    assert [d.days_since_update for d in buckets.red_deals] == [15]
    assert [l.days_since_update for l in buckets.yellow_leads] == [3, 6]
    assert [l.days_since_update for l in buckets.red_leads] == [8]


def test_stale_yellow_only_and_empty():
    yellow = bucket_stale_items([_item(8)], [], deal_red_days=14, deal_yellow_days=7)
    assert classify_stale(yellow) == AlertSeverity.YELLOW
    empty = bucket_stale_items([_item(1)], [_item(1)], deal_red_days=14, deal_yellow_days=7)
    assert classify_stale(empty) is None


def test_activity_has_no_yellow_band():
    th = Thresholds(50, 75, 150)
    assert classify_activity(40, th) == AlertSeverity.RED
    assert classify_activity(60, th) is None
    assert classify_activity(150, th) is None
    assert classify_activity(151, th) == AlertSeverity.GREEN


def test_task_overdue_counts():
    th = Thresholds(3, 1, 0)
    assert classify_task_overdue(0, th) is None
    assert classify_task_overdue(1, th) == AlertSeverity.YELLOW
    assert classify_task_overdue(2, th) == AlertSeverity.YELLOW
    assert classify_task_overdue(3, th) == AlertSeverity.RED


def test_marketing_period_needs_sample():
    th = Thresholds(30, 50, 70)
    assert classify_marketing_period(
        sample_size=4, success_rate=0, leads_generated=0, pending_backlog=0, thresholds=th
    ) is None


def test_marketing_period_grades():
    th = Thresholds(30, 50, 70)
    kwargs = dict(sample_size=5, leads_generated=5, pending_backlog=0, thresholds=th)
    assert classify_marketing_period(success_rate=20, **kwargs) == AlertSeverity.RED
    assert classify_marketing_period(success_rate=40, **kwargs) == AlertSeverity.YELLOW
    assert classify_marketing_period(success_rate=60, **kwargs) is None
    assert classify_marketing_period(success_rate=80, **kwargs) == AlertSeverity.GREEN


def test_marketing_period_floors_force_red():
    th = Thresholds(30, 50, 70)
    assert classify_marketing_period(
        sample_size=6, success_rate=80, leads_generated=2, pending_backlog=0,
        thresholds=th, leads_floor=3, backlog_cap=5,
    ) == AlertSeverity.RED
    assert classify_marketing_period(
        sample_size=6, success_rate=80, leads_generated=4, pending_backlog=6,
        thresholds=th, leads_floor=3, backlog_cap=5,
    ) == AlertSeverity.RED


def test_marketing_red_reasons_lists_each_failure():
    reasons = marketing_red_reasons(
        success_rate=20, leads_generated=1, pending_backlog=7,
        thresholds=Thresholds(30, 50, 70), leads_floor=3, backlog_cap=5,
    )
    assert len(reasons) == 3
    assert reasons[0].startswith("Success rate 20%")


def test_monthly_rollups_always_fire():
    assert classify_monthly_review(0, Thresholds(80, 80, 100)) == AlertSeverity.RED
    assert classify_monthly_review(90, Thresholds(80, 80, 100)) == AlertSeverity.YELLOW
    assert classify_monthly_review(100, Thresholds(80, 80, 100)) == AlertSeverity.GREEN
    assert classify_marketing_monthly(0, Thresholds(15, 25, 40)) == AlertSeverity.RED
    assert classify_marketing_monthly(40, Thresholds(15, 25, 40)) == AlertSeverity.GREEN


def test_worst_severity_ordering():
    assert worst_severity(AlertSeverity.GREEN, None, AlertSeverity.RED) == AlertSeverity.RED
    assert worst_severity(AlertSeverity.GREEN, AlertSeverity.YELLOW) == AlertSeverity.YELLOW
    assert worst_severity(None) is None


def test_percentage_guards_zero_target():
    assert percentage(10, 0) == 0
    assert percentage(1500, 3000) == 50
