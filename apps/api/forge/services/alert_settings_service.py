"""Alert settings service.

Per-category thresholds, the global delivery singleton, user exclusions and
the audit history read by the admin settings surface.

Alert checks read settings through ``effective_config`` and
``effective_global_settings``, which never write: a missing row resolves to
in-memory defaults. Rows are only created by the settings surface
(``list_alert_configs`` / ``get_or_create_global_settings``).
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.orm import Session, joinedload

from forge.core.config import settings
from forge.db.enums import AlertCategory
from forge.db.models import (
    AlertConfig,
    EmailLog,
    GlobalAlertSettings,
    User,
    UserAlertExclusion,
)
from forge.services.alert_severity import Thresholds
from forge.utils.datetimes import ensure_utc, utc_now

logger = logging.getLogger(__name__)

UNSET = object()

DEFAULT_SCHEDULE = "0 9 * * 1-5"


@dataclass(frozen=True)
class CategoryDefaults:
    red: int
    yellow: int
    green: int
    schedule: str = DEFAULT_SCHEDULE


# quota/monthly: % of quota; stale: days idle; activity/marketing*: %;
# task: overdue count
DEFAULT_THRESHOLDS: dict[AlertCategory, CategoryDefaults] = {
    AlertCategory.QUOTA: CategoryDefaults(red=50, yellow=80, green=100),
    AlertCategory.STALE: CategoryDefaults(red=14, yellow=7, green=0),
    AlertCategory.ACTIVITY: CategoryDefaults(red=50, yellow=75, green=150, schedule="0 17 * * 5"),
    AlertCategory.TASK: CategoryDefaults(red=3, yellow=1, green=0),
    AlertCategory.MARKETING: CategoryDefaults(red=15, yellow=25, green=50, schedule="0 9 * * 1"),
    AlertCategory.MARKETING_WEEKLY: CategoryDefaults(red=30, yellow=50, green=70, schedule="0 17 * * 5"),
    AlertCategory.MARKETING_MONTHLY: CategoryDefaults(red=15, yellow=25, green=40, schedule="0 9 1 * *"),
    AlertCategory.MONTHLY: CategoryDefaults(red=80, yellow=80, green=100, schedule="0 9 1 * *"),
}


@dataclass(frozen=True)
class EffectiveConfig:
    """Read-only view of a category's configuration."""

    category: AlertCategory
    enabled: bool
    schedule: str
    thresholds: Thresholds
    cc_recipients: tuple[str, ...]
    bcc_admin: bool
    test_mode: bool


@dataclass(frozen=True)
class EffectiveGlobalSettings:
    from_email: str
    admin_email: str
    bcc_all_to_admin: bool
    test_mode: bool


# =============================================================================
# Category configs
# =============================================================================

def get_alert_config(db: Session, category: AlertCategory) -> AlertConfig | None:
    return db.query(AlertConfig).filter(
        AlertConfig.alert_category == category.value
    ).first()


def _new_config(category: AlertCategory) -> AlertConfig:
    defaults = DEFAULT_THRESHOLDS[category]
    return AlertConfig(
        alert_category=category.value,
        enabled=True,
        schedule=defaults.schedule,
        red_threshold=defaults.red,
        yellow_threshold=defaults.yellow,
        green_threshold=defaults.green,
        cc_recipients=[],
        bcc_admin=False,
        test_mode=False,
    )


def list_alert_configs(db: Session) -> list[AlertConfig]:
    """Return every category's config, creating missing rows with defaults."""
    configs = {c.alert_category: c for c in db.query(AlertConfig).all()}
    missing = [c for c in AlertCategory if c.value not in configs]
    if missing:
        for category in missing:
            config = _new_config(category)
            db.add(config)
            configs[category.value] = config
        db.commit()
        logger.info("Created default alert configs: %s", ", ".join(c.value for c in missing))
    return [configs[c.value] for c in AlertCategory]


def effective_config(db: Session, category: AlertCategory) -> EffectiveConfig:
    """Config for a check run. Falls back to defaults without writing."""
    row = get_alert_config(db, category)
    if row is None:
        defaults = DEFAULT_THRESHOLDS[category]
        return EffectiveConfig(
            category=category,
            enabled=True,
            schedule=defaults.schedule,
            thresholds=Thresholds(defaults.red, defaults.yellow, defaults.green),
            cc_recipients=(),
            bcc_admin=False,
            test_mode=False,
        )
    return EffectiveConfig(
        category=category,
        enabled=row.enabled,
        schedule=row.schedule,
        thresholds=Thresholds(row.red_threshold, row.yellow_threshold, row.green_threshold),
        cc_recipients=tuple(row.cc_recipients or ()),
        bcc_admin=row.bcc_admin,
        test_mode=row.test_mode,
    )


def update_alert_config(
    db: Session,
    category: AlertCategory,
    *,
    enabled: bool | None = None,
    schedule: str | None = None,
    red_threshold: int | None = None,
    yellow_threshold: int | None = None,
    green_threshold: int | None = None,
    cc_recipients: list[str] | None = None,
    bcc_admin: bool | None = None,
    test_mode: bool | None = None,
) -> AlertConfig:
    """Partial update of a category config (row created if missing)."""
    config = get_alert_config(db, category)
    if config is None:
        config = _new_config(category)
        db.add(config)

    if enabled is not None:
        config.enabled = enabled
    if schedule is not None:
        if len(schedule.split()) != 5:
            raise ValueError("schedule must be a 5-field cron expression")
        config.schedule = schedule
    if red_threshold is not None:
        config.red_threshold = red_threshold
    if yellow_threshold is not None:
        config.yellow_threshold = yellow_threshold
    if green_threshold is not None:
        config.green_threshold = green_threshold
    if cc_recipients is not None:
        config.cc_recipients = [e.strip() for e in cc_recipients if e and e.strip()]
    if bcc_admin is not None:
        config.bcc_admin = bcc_admin
    if test_mode is not None:
        config.test_mode = test_mode

    db.commit()
    db.refresh(config)
    return config


# =============================================================================
# Global settings
# =============================================================================

def get_global_settings(db: Session) -> GlobalAlertSettings | None:
    return db.query(GlobalAlertSettings).first()


def get_or_create_global_settings(db: Session) -> GlobalAlertSettings:
    s = get_global_settings(db)
    if s:
        return s
    s = GlobalAlertSettings(
        from_email=settings.FROM_EMAIL,
        admin_email=settings.ADMIN_EMAIL,
        bcc_all_to_admin=False,
        test_mode=False,
    )
    db.add(s)
    db.commit()
    db.refresh(s)
    return s


def effective_global_settings(db: Session) -> EffectiveGlobalSettings:
    s = get_global_settings(db)
    if s is None:
        return EffectiveGlobalSettings(
            from_email=settings.FROM_EMAIL,
            admin_email=settings.ADMIN_EMAIL,
            bcc_all_to_admin=False,
            test_mode=False,
        )
    return EffectiveGlobalSettings(
        from_email=s.from_email,
        admin_email=s.admin_email,
        bcc_all_to_admin=s.bcc_all_to_admin,
        test_mode=s.test_mode,
    )


def update_global_settings(
    db: Session,
    *,
    from_email: str | None = None,
    admin_email: str | None = None,
    bcc_all_to_admin: bool | None = None,
    test_mode: bool | None = None,
) -> GlobalAlertSettings:
    s = get_or_create_global_settings(db)
    if from_email is not None:
        s.from_email = from_email
    if admin_email is not None:
        s.admin_email = admin_email
    if bcc_all_to_admin is not None:
        s.bcc_all_to_admin = bcc_all_to_admin
    if test_mode is not None:
        s.test_mode = test_mode
    db.commit()
    db.refresh(s)
    return s


# =============================================================================
# Exclusions
# =============================================================================

def list_active_exclusions(db: Session, now: datetime | None = None) -> list[UserAlertExclusion]:
    """Exclusions that have not ended yet (current and upcoming)."""
    now = now or utc_now()
    return (
        db.query(UserAlertExclusion)
        .options(joinedload(UserAlertExclusion.user))
        .filter(UserAlertExclusion.end_date >= now)
        .order_by(UserAlertExclusion.start_date.asc())
        .all()
    )


def is_user_excluded(db: Session, user_id: uuid.UUID, now: datetime) -> bool:
    return db.query(UserAlertExclusion.id).filter(
        UserAlertExclusion.user_id == user_id,
        UserAlertExclusion.start_date <= now,
        UserAlertExclusion.end_date >= now,
    ).first() is not None


def create_exclusion(
    db: Session,
    *,
    user_id: uuid.UUID,
    start_date: datetime,
    end_date: datetime,
    reason: str | None = None,
) -> UserAlertExclusion:
    """
    Create a user alert exclusion.

    Raises:
        ValueError: end_date is not after start_date
        LookupError: user does not exist
    """
    start_date = ensure_utc(start_date)
    end_date = ensure_utc(end_date)
    if end_date <= start_date:
        raise ValueError("End date must be after start date")
    if db.get(User, user_id) is None:
        raise LookupError("User not found")

    exclusion = UserAlertExclusion(
        user_id=user_id,
        start_date=start_date,
        end_date=end_date,
        reason=reason or None,
    )
    db.add(exclusion)
    db.commit()
    db.refresh(exclusion)
    return exclusion


def update_exclusion(
    db: Session,
    exclusion_id: uuid.UUID,
    *,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    reason: str | None | object = UNSET,
) -> UserAlertExclusion:
    exclusion = db.get(UserAlertExclusion, exclusion_id)
    if exclusion is None:
        raise LookupError("Exclusion not found")

    new_start = ensure_utc(start_date) if start_date else ensure_utc(exclusion.start_date)
    new_end = ensure_utc(end_date) if end_date else ensure_utc(exclusion.end_date)
    if new_end <= new_start:
        raise ValueError("End date must be after start date")

    exclusion.start_date = new_start
    exclusion.end_date = new_end
    if reason is not UNSET:
        exclusion.reason = reason or None

    db.commit()
    db.refresh(exclusion)
    return exclusion


def delete_exclusion(db: Session, exclusion_id: uuid.UUID) -> bool:
    exclusion = db.get(UserAlertExclusion, exclusion_id)
    if exclusion is None:
        return False
    db.delete(exclusion)
    db.commit()
    return True


# =============================================================================
# History
# =============================================================================

def list_alert_history(
    db: Session,
    days: int = 30,
    limit: int = 100,
    now: datetime | None = None,
) -> list[EmailLog]:
    """Audit rows from the last ``days`` days, newest first."""
    since = (now or utc_now()) - timedelta(days=days)
    return (
        db.query(EmailLog)
        .options(joinedload(EmailLog.user))
        .filter(EmailLog.sent_at >= since)
        .order_by(EmailLog.sent_at.desc())
        .limit(limit)
        .all()
    )


def list_active_users(db: Session) -> list[User]:
    return db.query(User).filter(User.is_active.is_(True)).order_by(User.name.asc()).all()
