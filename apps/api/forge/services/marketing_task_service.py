"""Marketing task updates and outcome bookkeeping."""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from forge.db.enums import MarketingOutcome, MarketingTaskStatus
from forge.db.models import MarketingTask
from forge.services.outcome_service import OutcomeResult, TaskMetrics, classify_outcome

logger = logging.getLogger(__name__)

METRIC_FIELDS = (
    "likes",
    "comments",
    "shares",
    "views",
    "sent",
    "opens",
    "replies",
    "attendees",
    "meetings_booked",
    "icp_engagement",
    "leads_generated_count",
    "response_type",
    "connection_accepted",
)

# Fields that can be cleared (set to None)
CLEARABLE_FIELDS = {
    "likes",
    "comments",
    "shares",
    "views",
    "sent",
    "opens",
    "replies",
    "attendees",
    "meetings_booked",
    "response_type",
    "connection_accepted",
    "title",
}


def get_marketing_task(db: Session, task_id: UUID) -> MarketingTask | None:
    return db.get(MarketingTask, task_id)


def preview_outcome(task: MarketingTask) -> OutcomeResult:
    """What the classifier would assign from the task's current metrics."""
    return classify_outcome(task.type, TaskMetrics.from_task(task))


def apply_task_update(db: Session, task: MarketingTask, updates: dict[str, Any]) -> MarketingTask:
    """
    Apply a partial update and settle the outcome.

    Outcome rules:
    - ``outcome_override=True`` stores the supplied outcome and reason as given.
    - Otherwise a completed task gets the classifier outcome; any other
      status clears it.
    Override reasons are validated by the request schema, not here.
    """
    for field in ("title", "status", *METRIC_FIELDS):
        if field not in updates:
            continue
        value = updates[field]
        if value is None and field not in CLEARABLE_FIELDS:
            continue
        if hasattr(value, "value"):
            value = value.value
        setattr(task, field, value)

    if "outcome_override" in updates:
        task.outcome_override = bool(updates["outcome_override"])
        if not task.outcome_override:
            task.override_reason = None

    if task.outcome_override:
        outcome = updates.get("outcome")
        if outcome is not None:
            task.outcome = MarketingOutcome(outcome).value
        if "override_reason" in updates:
            task.override_reason = updates["override_reason"]
    elif task.status == MarketingTaskStatus.COMPLETED.value:
        task.outcome = preview_outcome(task).outcome.value
    else:
        task.outcome = None

    db.commit()
    db.refresh(task)
    logger.info(
        "Marketing task %s updated: status=%s outcome=%s override=%s",
        task.id,
        task.status,
        task.outcome,
        task.outcome_override,
    )
    return task
