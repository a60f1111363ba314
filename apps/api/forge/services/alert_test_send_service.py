"""Alert email test-send helpers.

Renders each category's template with sample data and sends it to one
inbox. Attempts are audited like real alerts, under a ``TEST-<timestamp>``
period, and never touch the dedup ledger.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Iterable

from sqlalchemy.orm import Session

from forge.db.enums import AlertCategory, AlertSeverity, MarketingTaskType, alert_type_for
from forge.db.models import EmailLog
from forge.services import alert_metrics as metrics
from forge.services.alert_email_templates import render_alert
from forge.services.alert_severity import StaleBuckets
from forge.services.email_sender import AlertEmailSender, OutboundEmail
from forge.utils.datetimes import utc_now
from forge.utils.presentation import mask_email

logger = logging.getLogger(__name__)

SAMPLE_USER_NAME = "Jordan Smith"


@dataclass(frozen=True)
class AlertTestSendOutcome:
    alert_type: str
    subject: str
    success: bool
    message_id: str | None = None
    error: str | None = None


def _sample_summary() -> metrics.MarketingSummary:
    return metrics.MarketingSummary(
        total=12,
        with_outcome=10,
        success=2,
        partial=3,
        failed=5,
        leads_generated=2,
        by_type=[
            metrics.TypeStats(MarketingTaskType.LINKEDIN_OUTREACH, "LinkedIn Outreach", 6, 33.3, 2),
            metrics.TypeStats(MarketingTaskType.SOCIAL_POST, "Social Posts", 4, 0.0, 0),
            metrics.TypeStats(MarketingTaskType.COLD_EMAIL, "Cold Email", 2, 0.0, 0),
        ],
    )


def build_sample_snapshot(category: AlertCategory, now: datetime) -> Any:
    """Representative metrics for previewing a category's template."""
    if category == AlertCategory.QUOTA:
        return metrics.QuotaSnapshot(target=3000, actual=1200, days_remaining=5)
    if category == AlertCategory.STALE:
        return StaleBuckets(
            red_deals=[metrics.StaleItem(uuid.uuid4(), "Acme Corp Renewal", 21)],
            yellow_deals=[],
            red_leads=[metrics.StaleItem(uuid.uuid4(), "Globex Inbound", 9)],
            yellow_leads=[],
        )
    if category == AlertCategory.ACTIVITY:
        return metrics.ActivitySnapshot(
            expected=20,
            breakdown=metrics.ActivityBreakdown(calls=3, emails=4, meetings=1, notes=0),
            team_average=18,
        )
    if category == AlertCategory.TASK:
        return metrics.OverdueSnapshot(
            count=4,
            tasks=[
                metrics.OverdueTask(uuid.uuid4(), f"Follow up call #{i}", now - timedelta(days=i + 1), i + 1)
                for i in range(4)
            ],
        )
    if category == AlertCategory.MARKETING:
        return metrics.MarketingCheckSnapshot(summary=_sample_summary(), team_success_rate=42.0)
    if category == AlertCategory.MARKETING_WEEKLY:
        return metrics.MarketingWeeklySnapshot(
            summary=_sample_summary(),
            pending_backlog=6,
            top_templates=[metrics.TemplateStats("Founder intro", 75.0, 3)],
            bottom_templates=[metrics.TemplateStats("Generic follow-up", 10.0, 0)],
            issues=["Success rate 20% (target: 30%+)", "Only 2 leads generated (target: 3+)"],
        )
    if category == AlertCategory.MARKETING_MONTHLY:
        return metrics.MarketingMonthlySnapshot(
            month_name=now.strftime("%B %Y"),
            summary=_sample_summary(),
            best_type="LinkedIn Outreach",
            needs_improvement="Cold Email",
            rank=3,
            team_size=4,
        )
    return metrics.MonthlyReviewSnapshot(
        month_name=now.strftime("%B %Y"),
        target=3000,
        actual=1800,
        deals_won=2,
        deals_closed=5,
        activities=42,
        stale_deal_count=3,
        task_completion_rate=70.0,
        rank=4,
        team_size=6,
    )


def send_test_alerts(
    db: Session,
    sender: AlertEmailSender,
    *,
    to_email: str,
    from_email: str,
    categories: Iterable[AlertCategory] | None = None,
    now: datetime | None = None,
) -> list[AlertTestSendOutcome]:
    now = now or utc_now()
    period = f"TEST-{now.strftime('%Y%m%d%H%M%S')}"
    outcomes: list[AlertTestSendOutcome] = []

    for category in categories or list(AlertCategory):
        severity = AlertSeverity.RED
        alert_type = alert_type_for(category, severity)
        rendered = render_alert(category, severity, SAMPLE_USER_NAME, build_sample_snapshot(category, now))
        subject = f"[TEST] {rendered.subject}"

        message_id = None
        error = None
        try:
            message_id = sender.send(
                OutboundEmail(
                    from_email=from_email,
                    to=to_email,
                    subject=subject,
                    html_body=rendered.html,
                    text_body=rendered.text,
                )
            )
        except Exception as exc:
            error = f"{type(exc).__name__}: {exc}"
            logger.warning("Test alert %s to %s failed: %s", alert_type, mask_email(to_email), error)

        db.add(
            EmailLog(
                alert_type=alert_type,
                severity=severity.value,
                user_id=None,
                recipient_to=to_email,
                recipients_cc=[],
                recipients_bcc=[],
                subject=subject,
                body=rendered.html,
                ses_message_id=message_id,
                error=error,
                period=period,
                sent_at=now,
            )
        )
        outcomes.append(
            AlertTestSendOutcome(
                alert_type=alert_type,
                subject=subject,
                success=error is None,
                message_id=message_id,
                error=error,
            )
        )

    db.commit()
    return outcomes
