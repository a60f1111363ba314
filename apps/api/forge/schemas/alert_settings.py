"""Pydantic schemas for alert settings, exclusions and history."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from forge.db.enums import AlertCategory


class AlertConfigRead(BaseModel):
    alert_category: AlertCategory
    enabled: bool
    schedule: str
    red_threshold: int
    yellow_threshold: int
    green_threshold: int
    cc_recipients: list[str]
    bcc_admin: bool
    test_mode: bool

    model_config = {"from_attributes": True}


class AlertConfigUpdate(BaseModel):
    """Partial update of a category config."""
    enabled: bool | None = None
    schedule: str | None = Field(None, max_length=100)
    red_threshold: int | None = Field(None, ge=0)
    yellow_threshold: int | None = Field(None, ge=0)
    green_threshold: int | None = Field(None, ge=0)
    cc_recipients: list[str] | None = None
    bcc_admin: bool | None = None
    test_mode: bool | None = None

    @field_validator("cc_recipients")
    @classmethod
    def validate_cc(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return value
        for address in value:
            if address and "@" not in address:
                raise ValueError(f"Invalid email address: {address}")
        return value


class GlobalAlertSettingsRead(BaseModel):
    from_email: str
    admin_email: str
    bcc_all_to_admin: bool
    test_mode: bool

    model_config = {"from_attributes": True}


class GlobalAlertSettingsUpdate(BaseModel):
    from_email: str | None = Field(None, max_length=255)
    admin_email: str | None = Field(None, max_length=255)
    bcc_all_to_admin: bool | None = None
    test_mode: bool | None = None


class AlertUserRead(BaseModel):
    id: UUID
    name: str
    email: str
    role: str

    model_config = {"from_attributes": True}


class ExclusionCreate(BaseModel):
    user_id: UUID
    start_date: datetime
    end_date: datetime
    reason: str | None = Field(None, max_length=500)


class ExclusionUpdate(BaseModel):
    start_date: datetime | None = None
    end_date: datetime | None = None
    reason: str | None = Field(None, max_length=500)


class ExclusionRead(BaseModel):
    id: UUID
    user_id: UUID
    user_name: str | None = None
    start_date: datetime
    end_date: datetime
    reason: str | None


class AlertHistoryItem(BaseModel):
    id: UUID
    alert_type: str
    severity: str
    user_id: UUID | None
    user_name: str | None = None
    recipient_to: str
    recipients_cc: list[str]
    subject: str
    sent_at: datetime
    ses_message_id: str | None
    error: str | None = None
    period: str


class AlertSettingsResponse(BaseModel):
    """Everything the alert settings page needs in one call."""
    configs: list[AlertConfigRead]
    global_settings: GlobalAlertSettingsRead
    exclusions: list[ExclusionRead]
    history: list[AlertHistoryItem]
    users: list[AlertUserRead]


class AlertRunResultRead(BaseModel):
    user_id: UUID
    user_name: str
    status: str
    severity: str | None = None
    detail: str | None = None


class AlertRunResponse(BaseModel):
    category: str
    period: str
    enabled: bool
    processed: int
    results: list[AlertRunResultRead]
    timestamp: datetime


class AlertTestSendRequest(BaseModel):
    """Send sample alerts for one category (or all) to a single inbox."""
    to_email: str = Field(..., max_length=255)
    category: AlertCategory | None = None

    @field_validator("to_email")
    @classmethod
    def validate_to_email(cls, value: str) -> str:
        value = value.strip()
        if "@" not in value:
            raise ValueError("Invalid email address")
        return value


class AlertTestSendResult(BaseModel):
    alert_type: str
    subject: str
    success: bool
    message_id: str | None = None
    error: str | None = None


class AlertTestSendResponse(BaseModel):
    to_email: str
    sent: int
    failed: int
    results: list[AlertTestSendResult]
