"""
Alert deduplication ledger.

A QuotaAlert row keyed by (user, alert type, period) means the alert was
already sent for that period. Writes rely on the unique constraint rather
than read-then-write, so overlapping runs cannot double-record.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from forge.db.models import QuotaAlert
from forge.utils.datetimes import ensure_utc

logger = logging.getLogger(__name__)


def month_period(now: datetime) -> str:
    """Calendar month key, e.g. ``2026-10``."""
    return ensure_utc(now).strftime("%Y-%m")


def iso_week_period(now: datetime) -> str:
    """ISO week key, e.g. ``2026-W42``."""
    year, week, _ = ensure_utc(now).isocalendar()
    return f"{year}-W{week:02d}"


def day_period(now: datetime) -> str:
    """Daily key, e.g. ``2026-10-19``."""
    return ensure_utc(now).strftime("%Y-%m-%d")


@dataclass(frozen=True)
class MonthWindow:
    year: int
    month: int
    name: str
    start: datetime
    end: datetime  # exclusive

    @property
    def period(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


def previous_month(now: datetime) -> MonthWindow:
    """The calendar month before ``now``."""
    now = ensure_utc(now)
    current_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    start = (current_start - timedelta(days=1)).replace(day=1)
    return MonthWindow(
        year=start.year,
        month=start.month,
        name=start.strftime("%B %Y"),
        start=start,
        end=current_start,
    )


def already_sent(db: Session, user_id: UUID, alert_type: str, period: str) -> bool:
    return db.query(QuotaAlert.id).filter(
        QuotaAlert.user_id == user_id,
        QuotaAlert.alert_type == alert_type,
        QuotaAlert.period == period,
    ).first() is not None


def record(
    db: Session,
    user_id: UUID,
    alert_type: str,
    severity: str,
    period: str,
    sent_at: datetime | None = None,
) -> bool:
    """
    Insert the ledger row.

    Returns False when the key already exists (another run recorded it);
    that is treated as already sent, never as an error.
    """
    entry = QuotaAlert(
        user_id=user_id,
        alert_type=alert_type,
        severity=severity,
        period=period,
    )
    if sent_at is not None:
        entry.sent_at = sent_at
    try:
        with db.begin_nested():
            db.add(entry)
            db.flush()
    except IntegrityError:
        logger.info(
            "Alert ledger conflict user=%s alert_type=%s period=%s",
            user_id,
            alert_type,
            period,
        )
        return False
    db.commit()
    return True
