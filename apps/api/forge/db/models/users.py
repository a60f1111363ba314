"""SQLAlchemy ORM models for users and quota targets."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    Uuid,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from forge.db.base import Base
from forge.db.enums import Role


class User(Base):
    """
    CRM user.

    Owned by the CRM; alert checks only read these rows.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    role: Mapped[str] = mapped_column(
        String(30), default=Role.SALES_REP.value, server_default=text("'sales_rep'")
    )
    monthly_quota: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    hired_at: Mapped[datetime | None] = mapped_column(nullable=True)
    exclude_from_reporting: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=text("false")
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, server_default=text("true"))
    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)

    quotas: Mapped[list["UserQuota"]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )


class UserQuota(Base):
    """Per-month quota override for a user."""

    __tablename__ = "user_quotas"
    __table_args__ = (
        UniqueConstraint("user_id", "year", "month", name="uq_user_quotas_user_month"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    target_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    user: Mapped[User] = relationship(back_populates="quotas")
