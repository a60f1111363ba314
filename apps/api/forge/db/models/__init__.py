"""SQLAlchemy ORM models."""

from forge.db.models.alerts import (
    AlertConfig,
    EmailLog,
    GlobalAlertSettings,
    QuotaAlert,
    UserAlertExclusion,
)
from forge.db.models.marketing import MarketingTask
from forge.db.models.pipeline import Activity, Deal, Lead, Task
from forge.db.models.users import User, UserQuota
