"""Tests for Health endpoint."""

import pytest
from httpx import ASGITransport, AsyncClient

from forge.main import app


@pytest.mark.asyncio
async def test_health_check():
    """
    Health runs its own connection, so it is called without the
    transactional ``client`` fixture.
    """
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        response = await c.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert "env" in data
    assert "version" in data
