"""
Internal endpoints for scheduled/cron operations.

Protected by X-Internal-Secret header.
Call from external cron (one job per alert category and schedule).
"""
from fastapi import APIRouter, Header, HTTPException, Request

from forge.core.deps import verify_internal_secret
from forge.core.rate_limit import limiter
from forge.db.enums import AlertCategory
from forge.db.session import SessionLocal
from forge.schemas.alert_settings import (
    AlertRunResponse,
    AlertRunResultRead,
    AlertTestSendRequest,
    AlertTestSendResponse,
    AlertTestSendResult,
)
from forge.services import alert_engine, alert_settings_service, alert_test_send_service, ses_email_service
from forge.services.alert_checks import UnknownAlertCategoryError, get_check


router = APIRouter(prefix="/internal/scheduled", tags=["internal"])


@router.post("/alerts/test-send", response_model=AlertTestSendResponse)
@limiter.limit("10/minute")
def test_send_alerts(request: Request, body: AlertTestSendRequest, x_internal_secret: str = Header(...)):
    """
    Send sample alerts to one inbox.

    No CC/BCC, no ledger write; each attempt is audited under a TEST period.
    """
    verify_internal_secret(x_internal_secret)

    sender = ses_email_service.get_alert_sender()
    categories = [body.category] if body.category else list(AlertCategory)
    with SessionLocal() as db:
        from_email = alert_settings_service.effective_global_settings(db).from_email
        outcomes = alert_test_send_service.send_test_alerts(
            db,
            sender,
            to_email=body.to_email,
            from_email=from_email,
            categories=categories,
        )

    return AlertTestSendResponse(
        to_email=body.to_email,
        sent=sum(1 for o in outcomes if o.success),
        failed=sum(1 for o in outcomes if not o.success),
        results=[
            AlertTestSendResult(
                alert_type=o.alert_type,
                subject=o.subject,
                success=o.success,
                message_id=o.message_id,
                error=o.error,
            )
            for o in outcomes
        ],
    )


@router.post("/alerts/{category}", response_model=AlertRunResponse)
def run_alert_category(category: str, x_internal_secret: str = Header(...)):
    """
    Run one alert category for every eligible user.

    Safe to call repeatedly: the dedup ledger keeps each alert to one
    send per user per period.
    """
    verify_internal_secret(x_internal_secret)

    try:
        check = get_check(category)
    except UnknownAlertCategoryError as exc:
        raise HTTPException(status_code=404, detail=str(exc))

    sender = ses_email_service.get_alert_sender()
    with SessionLocal() as db:
        summary = alert_engine.run_alert_check(db, check, sender)

    return AlertRunResponse(
        category=summary.category,
        period=summary.period,
        enabled=summary.enabled,
        processed=summary.processed,
        timestamp=summary.timestamp,
        results=[
            AlertRunResultRead(
                user_id=r.user_id,
                user_name=r.user_name,
                status=r.status.value,
                severity=r.severity.value if r.severity else None,
                detail=r.detail,
            )
            for r in summary.results
        ],
    )
