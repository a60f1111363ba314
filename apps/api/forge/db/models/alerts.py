"""SQLAlchemy ORM models for alert configuration, ledger and audit log."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    JSON,
    Boolean,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from forge.db.base import Base
from forge.db.models.users import User

JSONType = JSON().with_variant(JSONB(), "postgresql")


class AlertConfig(Base):
    """
    Per-category alert configuration (one row per category).

    Missing rows are created with category defaults when the settings
    surface reads them. Checks never write here.
    """

    __tablename__ = "alert_configs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    alert_category: Mapped[str] = mapped_column(String(30), unique=True, nullable=False)
    enabled: Mapped[bool] = mapped_column(Boolean, default=True, server_default=text("true"))
    schedule: Mapped[str] = mapped_column(
        String(100), default="0 9 * * 1-5", server_default=text("'0 9 * * 1-5'")
    )
    red_threshold: Mapped[int] = mapped_column(Integer, nullable=False)
    yellow_threshold: Mapped[int] = mapped_column(Integer, nullable=False)
    green_threshold: Mapped[int] = mapped_column(Integer, nullable=False)
    cc_recipients: Mapped[list] = mapped_column(JSONType, default=list, nullable=False)
    bcc_admin: Mapped[bool] = mapped_column(Boolean, default=False, server_default=text("false"))
    test_mode: Mapped[bool] = mapped_column(Boolean, default=False, server_default=text("false"))
    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now(), nullable=False
    )


class GlobalAlertSettings(Base):
    """Singleton delivery settings shared by every category."""

    __tablename__ = "global_alert_settings"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    from_email: Mapped[str] = mapped_column(String(255), nullable=False)
    bcc_all_to_admin: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=text("false")
    )
    admin_email: Mapped[str] = mapped_column(String(255), nullable=False)
    test_mode: Mapped[bool] = mapped_column(Boolean, default=False, server_default=text("false"))
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now(), nullable=False
    )


class UserAlertExclusion(Base):
    """Date range during which a user is skipped by every alert check."""

    __tablename__ = "user_alert_exclusions"
    __table_args__ = (
        Index("idx_alert_exclusions_user_range", "user_id", "start_date", "end_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    start_date: Mapped[datetime] = mapped_column(nullable=False)
    end_date: Mapped[datetime] = mapped_column(nullable=False)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)

    user: Mapped[User] = relationship()


class QuotaAlert(Base):
    """
    Dedup ledger: one row per (user, alert type, period).

    Existence of a row means the alert was already sent for that period.
    """

    __tablename__ = "quota_alerts"
    __table_args__ = (
        UniqueConstraint("user_id", "alert_type", "period", name="uq_quota_alerts_user_type_period"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    alert_type: Mapped[str] = mapped_column(String(50), nullable=False)
    severity: Mapped[str] = mapped_column(String(10), nullable=False)
    period: Mapped[str] = mapped_column(String(30), nullable=False)
    sent_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)


class EmailLog(Base):
    """
    Immutable audit row for every alert send attempt.

    ``ses_message_id`` is null when delivery failed.
    """

    __tablename__ = "alert_email_logs"
    __table_args__ = (
        Index("idx_alert_email_logs_sent", "sent_at"),
        Index("idx_alert_email_logs_user", "user_id", "alert_type"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    alert_type: Mapped[str] = mapped_column(String(50), nullable=False)
    severity: Mapped[str] = mapped_column(String(10), nullable=False)
    user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    recipient_to: Mapped[str] = mapped_column(String(255), nullable=False)
    recipients_cc: Mapped[list] = mapped_column(JSONType, default=list, nullable=False)
    recipients_bcc: Mapped[list] = mapped_column(JSONType, default=list, nullable=False)
    subject: Mapped[str] = mapped_column(String(500), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    ses_message_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)
    quota_target: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    quota_actual: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    period: Mapped[str] = mapped_column(String(30), nullable=False)
    sent_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)

    user: Mapped[User | None] = relationship()
