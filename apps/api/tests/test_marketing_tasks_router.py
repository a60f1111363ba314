"""Tests for marketing task outcome updates."""

import uuid

import pytest

from forge.db.enums import MarketingTaskStatus, MarketingTaskType
from forge.db.models import MarketingTask


@pytest.fixture
def make_task(db, marketing_rep):
    def _make(task_type: MarketingTaskType = MarketingTaskType.COLD_EMAIL, **kwargs) -> MarketingTask:
        task = MarketingTask(
            user_id=marketing_rep.id,
            type=task_type.value,
            title=kwargs.pop("title", "Q4 outreach"),
            status=kwargs.pop("status", MarketingTaskStatus.IN_PROGRESS.value),
            **kwargs,
        )
        db.add(task)
        db.flush()
        return task

    return _make


@pytest.mark.asyncio
async def test_get_task_includes_preview(client, make_task):
    task = make_task(sent=100, opens=25, replies=3)

    response = await client.get(f"/marketing-tasks/{task.id}")

    assert response.status_code == 200
    data = response.json()
    assert data["outcome"] is None
    assert data["calculated_outcome"] == "partial"
    assert data["required_fields"] == ["sent", "opens", "replies"]
    labels = {c["label"]: c["passed"] for c in data["checks"]}
    assert labels == {"Open Rate >= 20%": True, "Reply Rate >= 5%": False, "Leads Generated": False}


@pytest.mark.asyncio
async def test_get_missing_task_returns_404(client):
    response = await client.get(f"/marketing-tasks/{uuid.uuid4()}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_completing_task_stores_classified_outcome(client, make_task):
    task = make_task()

    response = await client.put(
        f"/marketing-tasks/{task.id}",
        json={"status": "completed", "sent": 100, "opens": 25, "replies": 5},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "completed"
    assert data["outcome"] == "success"
    assert data["outcome_override"] is False


@pytest.mark.asyncio
async def test_in_progress_task_has_no_outcome(client, make_task):
    task = make_task(status=MarketingTaskStatus.COMPLETED.value, outcome="failed")

    response = await client.put(f"/marketing-tasks/{task.id}", json={"status": "in_progress"})

    assert response.json()["outcome"] is None


@pytest.mark.asyncio
async def test_override_requires_reason(client, make_task):
    task = make_task()

    missing_reason = await client.put(
        f"/marketing-tasks/{task.id}",
        json={"status": "completed", "outcome_override": True, "outcome": "success"},
    )
    assert missing_reason.status_code == 422

    missing_outcome = await client.put(
        f"/marketing-tasks/{task.id}",
        json={"outcome_override": True, "override_reason": "Verbal commit at the event"},
    )
    assert missing_outcome.status_code == 422


@pytest.mark.asyncio
async def test_override_is_stored_as_given(client, make_task):
    task = make_task(MarketingTaskType.EVENT)

    response = await client.put(
        f"/marketing-tasks/{task.id}",
        json={
            "status": "completed",
            "attendees": 3,
            "outcome_override": True,
            "outcome": "success",
            "override_reason": "Booked a meeting off-platform",
        },
    )

    data = response.json()
    assert data["calculated_outcome"] == "failed"
    assert data["outcome"] == "success"
    assert data["outcome_override"] is True
    assert data["override_reason"] == "Booked a meeting off-platform"

    # Later metric edits keep the manual outcome
    edited = await client.put(f"/marketing-tasks/{task.id}", json={"attendees": 4})
    assert edited.json()["outcome"] == "success"

    # Dropping the override re-classifies and clears the reason
    dropped = await client.put(f"/marketing-tasks/{task.id}", json={"outcome_override": False})
    assert dropped.json()["outcome"] == "failed"
    assert dropped.json()["override_reason"] is None


@pytest.mark.asyncio
async def test_negative_metrics_are_rejected(client, make_task):
    task = make_task()
    response = await client.put(f"/marketing-tasks/{task.id}", json={"likes": -1})
    assert response.status_code == 422
