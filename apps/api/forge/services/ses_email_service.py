"""Amazon SES delivery for alert emails."""

from __future__ import annotations

import logging

import boto3
from botocore.client import BaseClient
from botocore.config import Config

from forge.core.config import settings
from forge.services.email_sender import OutboundEmail

logger = logging.getLogger(__name__)


def _build_ses_config() -> Config:
    return Config(
        connect_timeout=settings.SES_CONNECT_TIMEOUT_SECONDS,
        read_timeout=settings.SES_READ_TIMEOUT_SECONDS,
        retries={"max_attempts": 2, "mode": "standard"},
    )


def get_ses_client(*, region: str | None = None) -> BaseClient:
    """Return a configured SES client (credential chain when keys are unset)."""
    return boto3.client(
        "ses",
        region_name=region or settings.AWS_SES_REGION,
        aws_access_key_id=settings.AWS_ACCESS_KEY_ID or None,
        aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY or None,
        config=_build_ses_config(),
    )


class SesEmailSender:
    """Sends alert emails with ``SendEmail``. Errors propagate to the caller."""

    key = "ses"

    def __init__(self, client: BaseClient | None = None):
        self._client = client

    @property
    def client(self) -> BaseClient:
        if self._client is None:
            self._client = get_ses_client()
        return self._client

    def send(self, message: OutboundEmail) -> str:
        destination: dict[str, list[str]] = {"ToAddresses": [message.to]}
        if message.cc:
            destination["CcAddresses"] = list(message.cc)
        if message.bcc:
            destination["BccAddresses"] = list(message.bcc)

        response = self.client.send_email(
            Source=message.from_email,
            Destination=destination,
            Message={
                "Subject": {"Data": message.subject, "Charset": "UTF-8"},
                "Body": {
                    "Html": {"Data": message.html_body, "Charset": "UTF-8"},
                    "Text": {"Data": message.text_body, "Charset": "UTF-8"},
                },
            },
        )
        message_id = response["MessageId"]
        logger.info("SES accepted alert email message_id=%s", message_id)
        return message_id


def get_alert_sender() -> SesEmailSender:
    """Sender used by scheduled runs and the CLI."""
    return SesEmailSender()
