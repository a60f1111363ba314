"""Email sender interface for alert delivery."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol


@dataclass(frozen=True)
class OutboundEmail:
    from_email: str
    to: str
    subject: str
    html_body: str
    text_body: str
    cc: tuple[str, ...] = field(default_factory=tuple)
    bcc: tuple[str, ...] = field(default_factory=tuple)


class AlertEmailSender(Protocol):
    key: str

    def send(self, message: OutboundEmail) -> str:
        """Deliver ``message`` and return the provider message id. Raises on failure."""
