"""
Test configuration and fixtures.

Provides:
- In-memory SQLite database with savepoint isolation (rollback after each test)
- Model factories for users and CRM records
- A recording fake email sender
- HTTPX AsyncClient wired to the app with the internal secret header
"""
import os
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import AsyncGenerator, Generator

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ["TESTING"] = "1"
os.environ.setdefault("INTERNAL_SECRET", "test-secret")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.orm import Session

from forge.core.config import settings
from forge.core.deps import get_db
from forge.db.base import Base
from forge.db.enums import Role
from forge.db.models import User
from forge.db.session import SessionLocal, engine
from forge.main import app
from forge.services.email_sender import OutboundEmail

INTERNAL_SECRET = "test-secret"

# Wednesday, 2026-10-21 (ISO week 43); 10 days left in October
FIXED_NOW = datetime(2026, 10, 21, 12, 0, tzinfo=timezone.utc)


# =============================================================================
# Database Fixtures (Savepoint pattern)
# =============================================================================

@pytest.fixture(scope="session", autouse=True)
def _create_schema() -> Generator[None, None, None]:
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Database session isolated in an outer transaction.

    App code can call commit(); each commit only releases a savepoint and
    the outer transaction is rolled back at teardown.
    """
    connection = engine.connect()
    transaction = connection.begin()
    session = SessionLocal(bind=connection, join_transaction_mode="create_savepoint")

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture(autouse=True)
def _internal_secret(monkeypatch):
    monkeypatch.setattr(settings, "INTERNAL_SECRET", INTERNAL_SECRET)


# =============================================================================
# Factories
# =============================================================================

@pytest.fixture
def make_user(db: Session):
    def _make(
        name: str = "Test Rep",
        role: Role = Role.SALES_REP,
        **kwargs,
    ) -> User:
        user = User(
            id=uuid.uuid4(),
            name=name,
            email=kwargs.pop("email", f"rep-{uuid.uuid4().hex[:8]}@test.com"),
            role=role.value,
            **kwargs,
        )
        db.add(user)
        db.flush()
        return user

    return _make


@pytest.fixture
def sales_rep(make_user) -> User:
    return make_user(name="Sam Sales", role=Role.SALES_REP)


@pytest.fixture
def marketing_rep(make_user) -> User:
    return make_user(name="Mia Marketing", role=Role.MARKETING_REP)


# =============================================================================
# Email sender fakes
# =============================================================================

@dataclass
class RecordingSender:
    """Captures outbound messages instead of calling SES."""

    key: str = "fake"
    fail_with: Exception | None = None
    sent: list[OutboundEmail] = field(default_factory=list)

    def send(self, message: OutboundEmail) -> str:
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append(message)
        return f"msg-{len(self.sent)}"


@pytest.fixture
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def failing_sender() -> RecordingSender:
    return RecordingSender(fail_with=RuntimeError("SES throttled"))


# =============================================================================
# Client Fixtures
# =============================================================================

@pytest.fixture(scope="function")
async def client(db: Session) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient sending the internal secret header."""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"X-Internal-Secret": INTERNAL_SECRET},
    ) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def internal_session(db: Session, monkeypatch):
    """Route the internal router's SessionLocal to the test session."""
    from forge.routers import internal as internal_router

    class _TestSession:
        def __enter__(self):
            return db

        def __exit__(self, exc_type, exc, tb):
            return False

    monkeypatch.setattr(internal_router, "SessionLocal", lambda: _TestSession())
    return db
