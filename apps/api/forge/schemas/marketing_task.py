"""Pydantic schemas for marketing tasks."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from forge.db.enums import (
    MarketingOutcome,
    MarketingTaskStatus,
    MarketingTaskType,
    ResponseType,
)


class MarketingTaskUpdate(BaseModel):
    """Request to update a marketing task (partial)."""
    title: str | None = Field(None, max_length=255)
    status: MarketingTaskStatus | None = None

    likes: int | None = Field(None, ge=0)
    comments: int | None = Field(None, ge=0)
    shares: int | None = Field(None, ge=0)
    views: int | None = Field(None, ge=0)
    sent: int | None = Field(None, ge=0)
    opens: int | None = Field(None, ge=0)
    replies: int | None = Field(None, ge=0)
    attendees: int | None = Field(None, ge=0)
    meetings_booked: int | None = Field(None, ge=0)
    icp_engagement: bool | None = None
    leads_generated_count: int | None = Field(None, ge=0)
    response_type: ResponseType | None = None
    connection_accepted: bool | None = None

    outcome_override: bool | None = None
    outcome: MarketingOutcome | None = None
    override_reason: str | None = Field(None, max_length=2000)

    @model_validator(mode="after")
    def validate_override(self) -> "MarketingTaskUpdate":
        """A manual outcome needs both the outcome and a reason."""
        if self.outcome_override:
            if self.outcome is None:
                raise ValueError("outcome is required when outcome_override is set")
            if not (self.override_reason or "").strip():
                raise ValueError("override_reason is required when outcome_override is set")
        return self


class OutcomeCheckRead(BaseModel):
    label: str
    passed: bool
    value: str | int | bool
    threshold: str | None = None

    model_config = {"from_attributes": True}


class MarketingTaskRead(BaseModel):
    id: UUID
    user_id: UUID
    type: MarketingTaskType
    title: str | None
    status: MarketingTaskStatus
    task_date: datetime

    likes: int | None
    comments: int | None
    shares: int | None
    views: int | None
    sent: int | None
    opens: int | None
    replies: int | None
    attendees: int | None
    meetings_booked: int | None
    icp_engagement: bool
    leads_generated_count: int
    response_type: ResponseType | None
    connection_accepted: bool | None

    outcome: MarketingOutcome | None
    outcome_override: bool
    override_reason: str | None
    template_id: UUID | None
    template_name: str | None
    updated_at: datetime

    # Live classifier preview from current metrics
    calculated_outcome: MarketingOutcome
    checks: list[OutcomeCheckRead]
    required_fields: list[str]
    optional_fields: list[str]
