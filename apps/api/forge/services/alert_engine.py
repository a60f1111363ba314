"""
Scheduled alert run driver.

Given a check strategy, evaluates every candidate user in turn:

    inactive -> excluded -> evaluate -> ledger check -> route -> dispatch -> record

Users are processed sequentially and independently; a failure for one
user is recorded in the summary and the batch continues. Test-mode sends
skip the final record step.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from forge.core.structured_logging import build_log_context
from forge.db.enums import AlertRunStatus, AlertSeverity, alert_type_for
from forge.db.models import User
from forge.services import alert_ledger
from forge.services.alert_checks import AlertCheck, AlertEvaluation
from forge.services.alert_dispatch_service import AlertDeliveryError, dispatch_alert
from forge.services.alert_recipients import resolve_recipients
from forge.services.alert_settings_service import (
    effective_config,
    effective_global_settings,
    is_user_excluded,
)
from forge.services.email_sender import AlertEmailSender
from forge.utils.datetimes import ensure_utc, utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserAlertResult:
    user_id: UUID
    user_name: str
    status: AlertRunStatus
    severity: AlertSeverity | None = None
    detail: str | None = None


@dataclass
class AlertRunSummary:
    category: str
    period: str
    enabled: bool
    timestamp: datetime
    results: list[UserAlertResult] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return len(self.results)

    def count(self, status: AlertRunStatus) -> int:
        return sum(1 for r in self.results if r.status == status)


def candidate_users(db: Session, check: AlertCheck) -> list[User]:
    """Users holding one of the check's roles, active or not."""
    return (
        db.query(User)
        .filter(User.role.in_(check.roles))
        .order_by(User.name.asc())
        .all()
    )


def run_alert_check(
    db: Session,
    check: AlertCheck,
    sender: AlertEmailSender,
    now: datetime | None = None,
) -> AlertRunSummary:
    """Run one category's check for every candidate user."""
    now = ensure_utc(now) if now else utc_now()
    category = check.category
    period = check.period_key(now)
    config = effective_config(db, category)
    summary = AlertRunSummary(
        category=category.value,
        period=period,
        enabled=config.enabled,
        timestamp=now,
    )
    if not config.enabled:
        logger.info("Alert category %s disabled; skipping run", category.value)
        return summary

    global_settings = effective_global_settings(db)
    users = candidate_users(db, check)
    team = [
        u
        for u in users
        if u.is_active
        and not u.exclude_from_reporting
        and not is_user_excluded(db, u.id, now)
    ]
    context = check.prepare(db, team, now, config)

    for user in users:
        result = _process_user(db, check, sender, user, now, period, config, global_settings, context)
        summary.results.append(result)

    logger.info(
        "Alert run complete: %s processed, %s sent, %s failed",
        summary.processed,
        summary.count(AlertRunStatus.ALERT_SENT),
        summary.count(AlertRunStatus.EMAIL_FAILED) + summary.count(AlertRunStatus.FAILED),
        extra=build_log_context(category=category.value, period=period),
    )
    return summary


def _process_user(db, check, sender, user, now, period, config, global_settings, context) -> UserAlertResult:
    user_id, user_name = user.id, user.name

    def result(status: AlertRunStatus, severity=None, detail=None) -> UserAlertResult:
        return UserAlertResult(user_id, user_name, status, severity, detail)

    if not user.is_active:
        return result(AlertRunStatus.INACTIVE)

    try:
        if user.exclude_from_reporting or is_user_excluded(db, user.id, now):
            return result(AlertRunStatus.EXCLUDED)

        evaluation: AlertEvaluation | None = check.evaluate(db, user, now, config, context)
        if evaluation is None:
            return result(AlertRunStatus.NO_ALERT_NEEDED)

        alert_type = alert_type_for(check.category, evaluation.severity)
        if alert_ledger.already_sent(db, user.id, alert_type, period):
            return result(AlertRunStatus.ALREADY_SENT, evaluation.severity)

        recipients = resolve_recipients(
            user.email, evaluation.severity, check.category, config, global_settings
        )
        try:
            dispatch_alert(
                db,
                sender,
                user=user,
                category=check.category,
                severity=evaluation.severity,
                alert_type=alert_type,
                metrics=evaluation.snapshot,
                period=period,
                recipients=recipients,
                from_email=global_settings.from_email,
                quota_target=evaluation.quota_target,
                quota_actual=evaluation.quota_actual,
                now=now,
            )
        except AlertDeliveryError as exc:
            return result(AlertRunStatus.EMAIL_FAILED, evaluation.severity, str(exc))

        # Redirected sends leave the real period open
        if recipients.test_mode:
            return result(AlertRunStatus.ALERT_SENT, evaluation.severity, "test_mode")

        recorded = alert_ledger.record(
            db, user.id, alert_type, evaluation.severity.value, period, sent_at=now
        )
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception(
            "Alert check failed for user",
            extra=build_log_context(
                user_id=str(user_id), category=check.category.value, period=period
            ),
        )
        return result(AlertRunStatus.FAILED, detail=type(exc).__name__)

    if not recorded:
        return result(AlertRunStatus.ALREADY_SENT, evaluation.severity)
    return result(AlertRunStatus.ALERT_SENT, evaluation.severity)
