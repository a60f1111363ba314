"""Tests for the scheduled alert trigger endpoints."""

from datetime import datetime, timedelta, timezone

import pytest

from forge.core.config import settings
from forge.db.enums import AlertCategory
from forge.db.models import EmailLog, QuotaAlert, Task
from forge.services import ses_email_service
from conftest import INTERNAL_SECRET, RecordingSender


@pytest.fixture
def recording_sender(monkeypatch) -> RecordingSender:
    sender = RecordingSender()
    monkeypatch.setattr(ses_email_service, "get_alert_sender", lambda: sender)
    return sender


@pytest.mark.asyncio
async def test_missing_secret_config_returns_501(client, monkeypatch):
    monkeypatch.setattr(settings, "INTERNAL_SECRET", "")
    response = await client.post("/internal/scheduled/alerts/task")
    assert response.status_code == 501


@pytest.mark.asyncio
async def test_wrong_secret_returns_403(client):
    response = await client.post(
        "/internal/scheduled/alerts/task",
        headers={"X-Internal-Secret": "nope"},
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_unknown_category_returns_404(client, internal_session, recording_sender):
    response = await client.post("/internal/scheduled/alerts/weather")
    assert response.status_code == 404
    assert recording_sender.sent == []


@pytest.mark.asyncio
async def test_run_category_sends_and_dedups(client, internal_session, recording_sender, sales_rep):
    db = internal_session
    now = datetime.now(timezone.utc)
    for days in (1, 2, 3):
        db.add(Task(user_id=sales_rep.id, title=f"Call back {days}", due_date=now - timedelta(days=days)))
    db.flush()

    response = await client.post("/internal/scheduled/alerts/task")

    assert response.status_code == 200
    data = response.json()
    assert data["category"] == "task"
    assert data["enabled"] is True
    assert data["processed"] == 1
    assert data["results"][0]["status"] == "alert_sent"
    assert data["results"][0]["severity"] == "red"
    assert len(recording_sender.sent) == 1
    assert db.query(QuotaAlert).filter(QuotaAlert.user_id == sales_rep.id).count() == 1

    again = await client.post("/internal/scheduled/alerts/task")
    assert again.json()["results"][0]["status"] == "already_sent"
    assert len(recording_sender.sent) == 1


@pytest.mark.asyncio
async def test_test_send_all_categories(client, internal_session, recording_sender):
    response = await client.post(
        "/internal/scheduled/alerts/test-send",
        json={"to_email": "qa@forge-crm.com"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["sent"] == len(AlertCategory)
    assert data["failed"] == 0
    assert all(r["subject"].startswith("[TEST] ") for r in data["results"])
    assert all(m.to == "qa@forge-crm.com" and m.cc == () and m.bcc == () for m in recording_sender.sent)

    logs = internal_session.query(EmailLog).all()
    assert len(logs) == len(AlertCategory)
    assert all(log.user_id is None and log.period.startswith("TEST-") for log in logs)
    assert internal_session.query(QuotaAlert).count() == 0


@pytest.mark.asyncio
async def test_test_send_single_category_reports_failures(client, internal_session, monkeypatch):
    failing = RecordingSender(fail_with=RuntimeError("SES down"))
    monkeypatch.setattr(ses_email_service, "get_alert_sender", lambda: failing)

    response = await client.post(
        "/internal/scheduled/alerts/test-send",
        json={"to_email": "qa@forge-crm.com", "category": "quota"},
    )

    data = response.json()
    assert data["sent"] == 0
    assert data["failed"] == 1
    assert data["results"][0]["alert_type"] == "quota_red"
    assert "SES down" in data["results"][0]["error"]


@pytest.mark.asyncio
async def test_test_send_rejects_bad_address(client, internal_session, recording_sender):
    response = await client.post(
        "/internal/scheduled/alerts/test-send",
        json={"to_email": "not-an-email"},
        headers={"X-Internal-Secret": INTERNAL_SECRET},
    )
    assert response.status_code == 422
