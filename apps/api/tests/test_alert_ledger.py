"""Tests for the alert dedup ledger."""

from datetime import datetime, timezone

from forge.db.models import QuotaAlert
from forge.services import alert_ledger


def test_period_keys():
    now = datetime(2026, 1, 1, 8, 0, tzinfo=timezone.utc)
    assert alert_ledger.month_period(now) == "2026-01"
    assert alert_ledger.day_period(now) == "2026-01-01"
    # Jan 1 2026 is a Thursday in ISO week 1
    assert alert_ledger.iso_week_period(now) == "2026-W01"
    # Dec 31 2024 belongs to ISO week 1 of 2025
    assert alert_ledger.iso_week_period(datetime(2024, 12, 31, tzinfo=timezone.utc)) == "2025-W01"


def test_previous_month_wraps_year():
    window = alert_ledger.previous_month(datetime(2026, 1, 15, tzinfo=timezone.utc))
    assert window.period == "2025-12"
    assert window.name == "December 2025"
    assert window.start == datetime(2025, 12, 1, tzinfo=timezone.utc)
    assert window.end == datetime(2026, 1, 1, tzinfo=timezone.utc)


def test_record_is_idempotent(db, sales_rep):
    assert not alert_ledger.already_sent(db, sales_rep.id, "quota_red", "2026-10")

    assert alert_ledger.record(db, sales_rep.id, "quota_red", "red", "2026-10") is True
    assert alert_ledger.already_sent(db, sales_rep.id, "quota_red", "2026-10")

    # Second insert hits the unique key and reports already sent
    assert alert_ledger.record(db, sales_rep.id, "quota_red", "red", "2026-10") is False
    assert db.query(QuotaAlert).filter(QuotaAlert.user_id == sales_rep.id).count() == 1


def test_record_keys_by_type_and_period(db, sales_rep):
    assert alert_ledger.record(db, sales_rep.id, "quota_red", "red", "2026-10")
    assert alert_ledger.record(db, sales_rep.id, "quota_yellow", "yellow", "2026-10")
    assert alert_ledger.record(db, sales_rep.id, "quota_red", "red", "2026-11")
    assert not alert_ledger.already_sent(db, sales_rep.id, "quota_green", "2026-10")
