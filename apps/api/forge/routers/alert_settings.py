"""Alert settings router.

Endpoints for per-category thresholds, global delivery settings, user
exclusions and the alert audit history.
"""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from forge.core.deps import get_db, verify_internal_secret
from forge.db.enums import AlertCategory
from forge.db.models import EmailLog, UserAlertExclusion
from forge.schemas.alert_settings import (
    AlertConfigRead,
    AlertConfigUpdate,
    AlertHistoryItem,
    AlertSettingsResponse,
    AlertUserRead,
    ExclusionCreate,
    ExclusionRead,
    ExclusionUpdate,
    GlobalAlertSettingsRead,
    GlobalAlertSettingsUpdate,
)
from forge.services import alert_settings_service
from forge.services.alert_settings_service import UNSET

router = APIRouter(
    prefix="/settings/alerts",
    tags=["alert-settings"],
    dependencies=[Depends(verify_internal_secret)],
)
logger = logging.getLogger(__name__)


def _exclusion_read(exclusion: UserAlertExclusion) -> ExclusionRead:
    return ExclusionRead(
        id=exclusion.id,
        user_id=exclusion.user_id,
        user_name=exclusion.user.name if exclusion.user else None,
        start_date=exclusion.start_date,
        end_date=exclusion.end_date,
        reason=exclusion.reason,
    )


def _history_item(log: EmailLog) -> AlertHistoryItem:
    return AlertHistoryItem(
        id=log.id,
        alert_type=log.alert_type,
        severity=log.severity,
        user_id=log.user_id,
        user_name=log.user.name if log.user else None,
        recipient_to=log.recipient_to,
        recipients_cc=log.recipients_cc or [],
        subject=log.subject,
        sent_at=log.sent_at,
        ses_message_id=log.ses_message_id,
        error=log.error,
        period=log.period,
    )


def _parse_category(category: str) -> AlertCategory:
    try:
        return AlertCategory(category)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown alert category: {category}")


# ============================================================================
# Overview
# ============================================================================


@router.get("", response_model=AlertSettingsResponse)
def get_alert_settings(db: Session = Depends(get_db)) -> AlertSettingsResponse:
    """Configs, global settings, active exclusions, recent history and users."""
    configs = alert_settings_service.list_alert_configs(db)
    global_settings = alert_settings_service.get_or_create_global_settings(db)
    return AlertSettingsResponse(
        configs=[AlertConfigRead.model_validate(c) for c in configs],
        global_settings=GlobalAlertSettingsRead.model_validate(global_settings),
        exclusions=[_exclusion_read(e) for e in alert_settings_service.list_active_exclusions(db)],
        history=[_history_item(log) for log in alert_settings_service.list_alert_history(db)],
        users=[AlertUserRead.model_validate(u) for u in alert_settings_service.list_active_users(db)],
    )


@router.get("/history", response_model=list[AlertHistoryItem])
def get_alert_history(
    days: int = Query(30, ge=1, le=365),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
) -> list[AlertHistoryItem]:
    logs = alert_settings_service.list_alert_history(db, days=days, limit=limit)
    return [_history_item(log) for log in logs]


# ============================================================================
# Configs
# ============================================================================


@router.patch("/configs/{category}", response_model=AlertConfigRead)
def update_alert_config(
    category: str,
    data: AlertConfigUpdate,
    db: Session = Depends(get_db),
) -> AlertConfigRead:
    alert_category = _parse_category(category)
    try:
        config = alert_settings_service.update_alert_config(
            db, alert_category, **data.model_dump(exclude_unset=True)
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    logger.info("Alert config updated: %s", alert_category.value)
    return AlertConfigRead.model_validate(config)


@router.patch("/global", response_model=GlobalAlertSettingsRead)
def update_global_settings(
    data: GlobalAlertSettingsUpdate,
    db: Session = Depends(get_db),
) -> GlobalAlertSettingsRead:
    updated = alert_settings_service.update_global_settings(db, **data.model_dump(exclude_unset=True))
    return GlobalAlertSettingsRead.model_validate(updated)


# ============================================================================
# Exclusions
# ============================================================================


@router.post("/exclusions", response_model=ExclusionRead, status_code=status.HTTP_201_CREATED)
def create_exclusion(data: ExclusionCreate, db: Session = Depends(get_db)) -> ExclusionRead:
    try:
        exclusion = alert_settings_service.create_exclusion(
            db,
            user_id=data.user_id,
            start_date=data.start_date,
            end_date=data.end_date,
            reason=data.reason,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    return _exclusion_read(exclusion)


@router.patch("/exclusions/{exclusion_id}", response_model=ExclusionRead)
def update_exclusion(
    exclusion_id: uuid.UUID,
    data: ExclusionUpdate,
    db: Session = Depends(get_db),
) -> ExclusionRead:
    fields = data.model_dump(exclude_unset=True)
    try:
        exclusion = alert_settings_service.update_exclusion(
            db,
            exclusion_id,
            start_date=fields.get("start_date"),
            end_date=fields.get("end_date"),
            reason=fields.get("reason", UNSET),
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    return _exclusion_read(exclusion)


@router.delete("/exclusions/{exclusion_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_exclusion(exclusion_id: uuid.UUID, db: Session = Depends(get_db)) -> None:
    if not alert_settings_service.delete_exclusion(db, exclusion_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Exclusion not found")
