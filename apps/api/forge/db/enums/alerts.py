"""Performance alert enums."""

from enum import Enum


class AlertCategory(str, Enum):
    """Unit of independent scheduling and threshold configuration."""

    QUOTA = "quota"
    STALE = "stale"
    ACTIVITY = "activity"
    TASK = "task"
    MARKETING = "marketing"  # Weekly success-rate check
    MARKETING_WEEKLY = "marketing_weekly"  # Weekly digest with backlog/lead floors
    MARKETING_MONTHLY = "marketing_monthly"
    MONTHLY = "monthly"  # Month-end sales review


class AlertSeverity(str, Enum):
    RED = "red"
    YELLOW = "yellow"
    GREEN = "green"


# Higher rank is worse
SEVERITY_RANK = {
    AlertSeverity.GREEN: 0,
    AlertSeverity.YELLOW: 1,
    AlertSeverity.RED: 2,
}


class AlertRunStatus(str, Enum):
    """Per-user terminal state of one scheduled run."""

    NO_ALERT_NEEDED = "no_alert_needed"
    ALREADY_SENT = "already_sent"
    ALERT_SENT = "alert_sent"
    EMAIL_FAILED = "email_failed"
    EXCLUDED = "excluded"
    INACTIVE = "inactive"
    FAILED = "failed"  # Data access error while evaluating


def alert_type_for(category: AlertCategory, severity: AlertSeverity) -> str:
    """Ledger/audit alert type, e.g. ``quota_red``."""
    return f"{category.value}_{severity.value}"
