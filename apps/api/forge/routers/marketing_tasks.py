"""Marketing task endpoints: read with outcome preview, partial update."""

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from forge.core.deps import get_db, verify_internal_secret
from forge.db.models import MarketingTask
from forge.schemas.marketing_task import MarketingTaskRead, MarketingTaskUpdate, OutcomeCheckRead
from forge.services import marketing_task_service
from forge.services.outcome_service import optional_fields_for_type, required_fields_for_type

router = APIRouter(
    prefix="/marketing-tasks",
    tags=["marketing-tasks"],
    dependencies=[Depends(verify_internal_secret)],
)


def _task_read(task: MarketingTask) -> MarketingTaskRead:
    preview = marketing_task_service.preview_outcome(task)
    return MarketingTaskRead(
        id=task.id,
        user_id=task.user_id,
        type=task.type,
        title=task.title,
        status=task.status,
        task_date=task.task_date,
        likes=task.likes,
        comments=task.comments,
        shares=task.shares,
        views=task.views,
        sent=task.sent,
        opens=task.opens,
        replies=task.replies,
        attendees=task.attendees,
        meetings_booked=task.meetings_booked,
        icp_engagement=task.icp_engagement,
        leads_generated_count=task.leads_generated_count,
        response_type=task.response_type,
        connection_accepted=task.connection_accepted,
        outcome=task.outcome,
        outcome_override=task.outcome_override,
        override_reason=task.override_reason,
        template_id=task.template_id,
        template_name=task.template_name,
        updated_at=task.updated_at,
        calculated_outcome=preview.outcome,
        checks=[OutcomeCheckRead.model_validate(c) for c in preview.checks],
        required_fields=required_fields_for_type(task.type),
        optional_fields=optional_fields_for_type(task.type),
    )


def _get_task_or_404(db: Session, task_id: uuid.UUID) -> MarketingTask:
    task = marketing_task_service.get_marketing_task(db, task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Marketing task not found")
    return task


@router.get("/{task_id}", response_model=MarketingTaskRead)
def get_marketing_task(task_id: uuid.UUID, db: Session = Depends(get_db)):
    return _task_read(_get_task_or_404(db, task_id))


@router.put("/{task_id}", response_model=MarketingTaskRead)
def update_marketing_task(
    task_id: uuid.UUID,
    data: MarketingTaskUpdate,
    db: Session = Depends(get_db),
):
    """
    Update metrics and status.

    Completing a task without an override stores the classifier outcome;
    with ``outcome_override`` the supplied outcome is stored as given.
    """
    task = _get_task_or_404(db, task_id)
    updated = marketing_task_service.apply_task_update(db, task, data.model_dump(exclude_unset=True))
    return _task_read(updated)
