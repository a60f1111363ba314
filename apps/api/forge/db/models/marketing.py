"""SQLAlchemy ORM model for marketing tasks."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from forge.db.base import Base
from forge.db.enums import MarketingTaskStatus


class MarketingTask(Base):
    """
    A logged marketing activity (post, outreach, campaign, event).

    Engagement metrics are optional and type-dependent. Alert code only
    writes the outcome fields.
    """

    __tablename__ = "marketing_tasks"
    __table_args__ = (
        Index("idx_marketing_tasks_user_date", "user_id", "task_date"),
        Index("idx_marketing_tasks_status", "status", "outcome"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    type: Mapped[str] = mapped_column(String(30), nullable=False)
    title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        default=MarketingTaskStatus.IN_PROGRESS.value,
        server_default=text("'in_progress'"),
    )
    task_date: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)

    # Engagement metrics
    likes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    comments: Mapped[int | None] = mapped_column(Integer, nullable=True)
    shares: Mapped[int | None] = mapped_column(Integer, nullable=True)
    views: Mapped[int | None] = mapped_column(Integer, nullable=True)
    sent: Mapped[int | None] = mapped_column(Integer, nullable=True)
    opens: Mapped[int | None] = mapped_column(Integer, nullable=True)
    replies: Mapped[int | None] = mapped_column(Integer, nullable=True)
    attendees: Mapped[int | None] = mapped_column(Integer, nullable=True)
    meetings_booked: Mapped[int | None] = mapped_column(Integer, nullable=True)
    icp_engagement: Mapped[bool] = mapped_column(Boolean, default=False, server_default=text("false"))
    leads_generated_count: Mapped[int] = mapped_column(Integer, default=0, server_default=text("0"))

    # LinkedIn only
    response_type: Mapped[str | None] = mapped_column(String(20), nullable=True)
    connection_accepted: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    # Outcome (null until computed or overridden)
    outcome: Mapped[str | None] = mapped_column(String(20), nullable=True)
    outcome_override: Mapped[bool] = mapped_column(Boolean, default=False, server_default=text("false"))
    override_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Template lineage
    is_template: Mapped[bool] = mapped_column(Boolean, default=False, server_default=text("false"))
    template_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("marketing_tasks.id", ondelete="SET NULL"), nullable=True
    )
    template_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now(), nullable=False
    )

    @property
    def lead_generated(self) -> bool:
        return (self.leads_generated_count or 0) >= 1
