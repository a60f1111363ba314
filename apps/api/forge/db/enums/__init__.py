"""Enum definitions for application constants."""

from forge.db.enums.alerts import (
    SEVERITY_RANK,
    AlertCategory,
    AlertRunStatus,
    AlertSeverity,
    alert_type_for,
)
from forge.db.enums.auth import REP_ROLES, Role
from forge.db.enums.marketing import (
    MarketingOutcome,
    MarketingTaskStatus,
    MarketingTaskType,
    ResponseType,
)
from forge.db.enums.pipeline import (
    CLOSED_DEAL_STAGES,
    ActivityType,
    DealStage,
    LeadStatus,
)
