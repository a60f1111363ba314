"""
Alert dispatch: render, send and audit one alert.

Every send attempt writes exactly one EmailLog row, committed before this
module returns or raises. Delivery failures surface as AlertDeliveryError so
the run driver can record ``email_failed`` and move on.
"""
from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy.orm import Session

from forge.core.config import settings
from forge.core.structured_logging import build_log_context
from forge.db.enums import AlertCategory, AlertSeverity
from forge.db.models import EmailLog, User
from forge.services.alert_email_templates import render_alert
from forge.services.alert_recipients import Recipients
from forge.services.email_sender import AlertEmailSender, OutboundEmail
from forge.utils.datetimes import days_since, utc_now
from forge.utils.presentation import mask_email

logger = logging.getLogger(__name__)

ONBOARDING_PREFIX = "[ONBOARDING] "


class AlertDeliveryError(Exception):
    """The email provider rejected or failed to deliver an alert."""

    def __init__(self, message: str, email_log_id=None):
        super().__init__(message)
        self.email_log_id = email_log_id


def in_grace_period(user: User, now: datetime | None = None) -> bool:
    """True while the user is within GRACE_PERIOD_DAYS of their hire date."""
    if user.hired_at is None:
        return False
    return days_since(user.hired_at, now or utc_now()) < settings.GRACE_PERIOD_DAYS


def grace_period_days_remaining(user: User, now: datetime | None = None) -> int:
    if user.hired_at is None:
        return 0
    return max(settings.GRACE_PERIOD_DAYS - days_since(user.hired_at, now or utc_now()), 0)


def apply_grace_prefix(subject: str, user: User, now: datetime | None = None) -> str:
    if in_grace_period(user, now) and not subject.startswith(ONBOARDING_PREFIX):
        return f"{ONBOARDING_PREFIX}{subject}"
    return subject


def _decimal_or_none(value: float | None) -> Decimal | None:
    if value is None:
        return None
    return Decimal(str(round(value, 2)))


def dispatch_alert(
    db: Session,
    sender: AlertEmailSender,
    *,
    user: User,
    category: AlertCategory,
    severity: AlertSeverity,
    alert_type: str,
    metrics: Any,
    period: str,
    recipients: Recipients,
    from_email: str,
    quota_target: float | None = None,
    quota_actual: float | None = None,
    now: datetime | None = None,
) -> str:
    """
    Render and send one alert, then log the attempt.

    Returns:
        Provider message id.

    Raises:
        AlertDeliveryError: the sender raised; the failure is already logged.
    """
    now = now or utc_now()
    rendered = render_alert(category, severity, user.name, metrics)
    subject = apply_grace_prefix(rendered.subject, user, now)

    message = OutboundEmail(
        from_email=from_email,
        to=recipients.to,
        cc=recipients.cc,
        bcc=recipients.bcc,
        subject=subject,
        html_body=rendered.html,
        text_body=rendered.text,
    )

    message_id: str | None = None
    error: str | None = None
    try:
        message_id = sender.send(message)
    except Exception as exc:
        error = f"{type(exc).__name__}: {exc}"

    log = EmailLog(
        alert_type=alert_type,
        severity=severity.value,
        user_id=user.id,
        recipient_to=recipients.to,
        recipients_cc=list(recipients.cc),
        recipients_bcc=list(recipients.bcc),
        subject=subject,
        body=rendered.html,
        ses_message_id=message_id,
        error=error,
        quota_target=_decimal_or_none(quota_target),
        quota_actual=_decimal_or_none(quota_actual),
        period=period,
        sent_at=now,
    )
    db.add(log)
    db.commit()

    context = build_log_context(
        user_id=str(user.id),
        alert_type=alert_type,
        period=period,
        category=category.value,
    )
    if error is not None:
        logger.warning(
            "Alert delivery failed to %s: %s",
            mask_email(recipients.to),
            error,
            extra=context,
        )
        raise AlertDeliveryError(error, email_log_id=log.id)

    logger.info(
        "Alert sent to %s (test_mode=%s)",
        mask_email(recipients.to),
        recipients.test_mode,
        extra=context,
    )
    return message_id
