"""Tests for alert email rendering."""

import uuid

import pytest

from forge.core.config import settings
from forge.db.enums import AlertCategory, AlertSeverity
from forge.services.alert_email_base import FOOTER_TEXT, html_to_text
from forge.services.alert_email_templates import ALERT_RENDERERS, render_alert
from forge.services.alert_metrics import (
    ActivityBreakdown,
    ActivitySnapshot,
    MonthlyReviewSnapshot,
    OverdueSnapshot,
    OverdueTask,
    QuotaSnapshot,
    StaleItem,
)
from forge.services.alert_severity import StaleBuckets
from forge.services.alert_test_send_service import build_sample_snapshot
from conftest import FIXED_NOW


def test_every_category_has_a_renderer():
    assert set(ALERT_RENDERERS) == set(AlertCategory)


@pytest.mark.parametrize("category", list(AlertCategory))
def test_sample_snapshots_render_for_every_category(category):
    rendered = render_alert(category, AlertSeverity.RED, "Jordan Smith", build_sample_snapshot(category, FIXED_NOW))

    assert "Jordan Smith" in rendered.subject
    assert rendered.html.startswith("<!DOCTYPE html>")
    assert "Jordan Smith," in rendered.text
    assert FOOTER_TEXT in rendered.text
    assert settings.dashboard_base_url in rendered.html


def test_user_supplied_text_is_escaped():
    name = "<script>alert(1)</script>"
    buckets = StaleBuckets(
        red_deals=[StaleItem(uuid.uuid4(), "Deal <img src=x>", 30)],
        yellow_deals=[],
        red_leads=[],
        yellow_leads=[],
    )

    rendered = render_alert(AlertCategory.STALE, AlertSeverity.RED, name, buckets)

    assert "<script>" not in rendered.html
    assert "&lt;script&gt;" in rendered.html
    assert "<img src=x>" not in rendered.html
    assert "Deal &lt;img src=x&gt;" in rendered.html


def test_quota_subjects_by_severity():
    snapshot = QuotaSnapshot(target=3000, actual=1500, days_remaining=4)
    red = render_alert(AlertCategory.QUOTA, AlertSeverity.RED, "Sam", snapshot)
    yellow = render_alert(AlertCategory.QUOTA, AlertSeverity.YELLOW, "Sam", snapshot)
    green = render_alert(AlertCategory.QUOTA, AlertSeverity.GREEN, "Sam", QuotaSnapshot(3000, 3300, 4))

    assert red.subject == "Performance Alert: Sam - 50% to Monthly Quota"
    assert yellow.subject == "Progress Update: Sam - 50% to Monthly Quota"
    assert green.subject == "Congratulations: Sam - 110% to Monthly Quota"
    assert "$1,500 / $3,000" in red.text
    assert "copied to HR" in red.text


def test_activity_subjects():
    snapshot = ActivitySnapshot(expected=20, breakdown=ActivityBreakdown(calls=2, emails=3), team_average=12)
    assert render_alert(AlertCategory.ACTIVITY, AlertSeverity.RED, "Sam", snapshot).subject == (
        "Performance Alert: Low Activity - Sam"
    )
    assert render_alert(AlertCategory.ACTIVITY, AlertSeverity.GREEN, "Sam", snapshot).subject == (
        "Recognition: Outstanding Activity - Sam"
    )


def test_task_alert_lists_overflow():
    tasks = [
        OverdueTask(uuid.uuid4(), f"Task {i}", FIXED_NOW, 2)
        for i in range(10)
    ]
    rendered = render_alert(
        AlertCategory.TASK, AlertSeverity.RED, "Sam", OverdueSnapshot(count=12, tasks=tasks)
    )
    assert rendered.subject == "Performance Alert: Sam - 12 Tasks Overdue"
    assert "...and 2 more" in rendered.text
    assert f"{settings.dashboard_base_url}/tasks" in rendered.html


def test_monthly_review_verdicts():
    snapshot = MonthlyReviewSnapshot(
        month_name="September 2026",
        target=3000,
        actual=3000,
        deals_won=3,
        deals_closed=4,
        activities=60,
        stale_deal_count=0,
        task_completion_rate=90,
        rank=1,
        team_size=5,
    )
    green = render_alert(AlertCategory.MONTHLY, AlertSeverity.GREEN, "Sam", snapshot)
    red = render_alert(AlertCategory.MONTHLY, AlertSeverity.RED, "Sam", snapshot)

    assert green.subject == "September 2026 Performance: Excellent - Sam"
    assert red.subject == "September 2026 Performance: Below Expectations - Sam"
    assert "1 of 5" in green.text
    assert "75%" in green.text  # win rate


def test_marketing_weekly_red_lists_issues_and_stop_recommendation():
    snapshot = build_sample_snapshot(AlertCategory.MARKETING_WEEKLY, FIXED_NOW)

    red = render_alert(AlertCategory.MARKETING_WEEKLY, AlertSeverity.RED, "Mia", snapshot)
    green = render_alert(AlertCategory.MARKETING_WEEKLY, AlertSeverity.GREEN, "Mia", snapshot)

    assert red.subject == "Marketing Performance: Below Expectations - Mia"
    assert "Only 2 leads generated" in red.text
    assert "RECOMMEND STOPPING" in red.html
    assert "Only 2 leads generated" not in green.text
    assert f"{settings.dashboard_base_url}/marketing" in red.html


def test_marketing_subjects():
    check = build_sample_snapshot(AlertCategory.MARKETING, FIXED_NOW)
    monthly = build_sample_snapshot(AlertCategory.MARKETING_MONTHLY, FIXED_NOW)

    assert render_alert(AlertCategory.MARKETING, AlertSeverity.YELLOW, "Mia", check).subject == (
        "Performance Warning: Marketing Needs Attention - Mia"
    )
    assert render_alert(AlertCategory.MARKETING_MONTHLY, AlertSeverity.GREEN, "Mia", monthly).subject == (
        "Monthly Marketing Review: October 2026 - Mia"
    )


def test_html_to_text_keeps_block_breaks():
    text = html_to_text("<p>One &amp; two</p><table><tr><td>A</td><td>B</td></tr></table>")
    assert text.splitlines() == ["One & two", "A B"]
