"""Marketing task enums."""

from enum import Enum


class MarketingTaskType(str, Enum):
    """Type tag that selects the outcome rule for a marketing task."""

    LINKEDIN_OUTREACH = "linkedin_outreach"
    COLD_EMAIL = "cold_email"
    SOCIAL_POST = "social_post"
    BLOG_POST = "blog_post"
    EMAIL_CAMPAIGN = "email_campaign"
    EVENT = "event"
    WEBINAR = "webinar"
    CONTENT_CREATION = "content_creation"
    OTHER = "other"


class MarketingTaskStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    NO_RESPONSE = "no_response"


class MarketingOutcome(str, Enum):
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"


class ResponseType(str, Enum):
    """Reply classification for LinkedIn outreach."""

    INTERESTED = "interested"
    NOT_INTERESTED = "not_interested"
    NO_RESPONSE = "no_response"
