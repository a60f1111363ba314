"""Tests for alert settings endpoints."""

import uuid
from datetime import timedelta

import pytest

from forge.db.enums import AlertCategory
from forge.db.models import AlertConfig, EmailLog, UserAlertExclusion
from forge.utils.datetimes import utc_now


@pytest.mark.asyncio
async def test_settings_requires_secret(client):
    response = await client.get("/settings/alerts", headers={"X-Internal-Secret": "wrong"})
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_get_settings_creates_defaults(client, db, sales_rep):
    response = await client.get("/settings/alerts")

    assert response.status_code == 200
    data = response.json()
    assert [c["alert_category"] for c in data["configs"]] == [c.value for c in AlertCategory]
    quota = data["configs"][0]
    assert (quota["red_threshold"], quota["yellow_threshold"], quota["green_threshold"]) == (50, 80, 100)
    assert data["global_settings"]["test_mode"] is False
    assert [u["name"] for u in data["users"]] == ["Sam Sales"]
    assert db.query(AlertConfig).count() == len(AlertCategory)


@pytest.mark.asyncio
async def test_update_config(client, db):
    response = await client.patch(
        "/settings/alerts/configs/stale",
        json={"red_threshold": 21, "cc_recipients": ["coach@forge-crm.com"], "bcc_admin": True},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["red_threshold"] == 21
    assert data["yellow_threshold"] == 7
    assert data["cc_recipients"] == ["coach@forge-crm.com"]
    assert data["bcc_admin"] is True


@pytest.mark.asyncio
async def test_update_config_validation(client):
    unknown = await client.patch("/settings/alerts/configs/weather", json={"enabled": False})
    assert unknown.status_code == 404

    bad_cron = await client.patch("/settings/alerts/configs/quota", json={"schedule": "daily"})
    assert bad_cron.status_code == 400

    bad_cc = await client.patch("/settings/alerts/configs/quota", json={"cc_recipients": ["nobody"]})
    assert bad_cc.status_code == 422


@pytest.mark.asyncio
async def test_update_global_settings(client):
    response = await client.patch(
        "/settings/alerts/global",
        json={"admin_email": "ops@forge-crm.com", "test_mode": True},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["admin_email"] == "ops@forge-crm.com"
    assert data["test_mode"] is True


@pytest.mark.asyncio
async def test_exclusion_lifecycle(client, db, sales_rep):
    start = utc_now()
    end = start + timedelta(days=7)

    created = await client.post(
        "/settings/alerts/exclusions",
        json={
            "user_id": str(sales_rep.id),
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
            "reason": "Parental leave",
        },
    )
    assert created.status_code == 201
    exclusion = created.json()
    assert exclusion["user_name"] == "Sam Sales"
    assert exclusion["reason"] == "Parental leave"

    # Omitting reason keeps it; null clears it
    kept = await client.patch(
        f"/settings/alerts/exclusions/{exclusion['id']}",
        json={"end_date": (end + timedelta(days=3)).isoformat()},
    )
    assert kept.json()["reason"] == "Parental leave"

    cleared = await client.patch(f"/settings/alerts/exclusions/{exclusion['id']}", json={"reason": None})
    assert cleared.json()["reason"] is None

    listing = await client.get("/settings/alerts")
    assert [e["id"] for e in listing.json()["exclusions"]] == [exclusion["id"]]

    deleted = await client.delete(f"/settings/alerts/exclusions/{exclusion['id']}")
    assert deleted.status_code == 204
    assert db.query(UserAlertExclusion).count() == 0

    missing = await client.delete(f"/settings/alerts/exclusions/{exclusion['id']}")
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_exclusion_errors(client, sales_rep):
    start = utc_now()

    backwards = await client.post(
        "/settings/alerts/exclusions",
        json={
            "user_id": str(sales_rep.id),
            "start_date": start.isoformat(),
            "end_date": (start - timedelta(days=1)).isoformat(),
        },
    )
    assert backwards.status_code == 400

    unknown_user = await client.post(
        "/settings/alerts/exclusions",
        json={
            "user_id": str(uuid.uuid4()),
            "start_date": start.isoformat(),
            "end_date": (start + timedelta(days=1)).isoformat(),
        },
    )
    assert unknown_user.status_code == 404


@pytest.mark.asyncio
async def test_history_lists_recent_logs(client, db, sales_rep):
    now = utc_now()
    db.add_all(
        [
            EmailLog(
                alert_type="quota_red",
                severity="red",
                user_id=sales_rep.id,
                recipient_to=sales_rep.email,
                recipients_cc=["hr@forge-crm.com"],
                recipients_bcc=[],
                subject="Recent",
                body="<p>recent</p>",
                ses_message_id="msg-1",
                period="2026-10",
                sent_at=now - timedelta(days=1),
            ),
            EmailLog(
                alert_type="task_red",
                severity="red",
                user_id=sales_rep.id,
                recipient_to=sales_rep.email,
                recipients_cc=[],
                recipients_bcc=[],
                subject="Old",
                body="<p>old</p>",
                period="2026-08-01",
                sent_at=now - timedelta(days=60),
            ),
        ]
    )
    db.flush()

    response = await client.get("/settings/alerts/history", params={"days": 30})

    assert response.status_code == 200
    items = response.json()
    assert [i["subject"] for i in items] == ["Recent"]
    assert items[0]["user_name"] == "Sam Sales"
    assert items[0]["recipients_cc"] == ["hr@forge-crm.com"]
