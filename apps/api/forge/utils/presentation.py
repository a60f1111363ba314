"""Presentation helpers for alert emails and API payloads."""

from __future__ import annotations

import re
from decimal import Decimal


_SEPARATORS_RE = re.compile(r"[_-]+")
_WHITESPACE_RE = re.compile(r"\s+")
_SMALL_WORDS = {"a", "an", "and", "for", "in", "of", "on", "or", "the", "to"}

# Labels that .capitalize() would mangle
_DISPLAY_OVERRIDES = {
    "linkedin_outreach": "LinkedIn Outreach",
    "icp": "ICP",
}


def humanize_identifier(value: str | None) -> str:
    """Convert identifiers (e.g. snake_case) into human-friendly text.

    Examples:
        "social_post" -> "Social Post"
        "linkedin_outreach" -> "LinkedIn Outreach"
    """
    if value is None:
        return ""
    text = str(value).strip()
    if not text:
        return ""
    if text.lower() in _DISPLAY_OVERRIDES:
        return _DISPLAY_OVERRIDES[text.lower()]

    text = _SEPARATORS_RE.sub(" ", text)
    text = _WHITESPACE_RE.sub(" ", text).strip()

    if any(ch.isupper() for ch in text):
        return text

    words = text.split(" ")
    last_idx = len(words) - 1
    titled: list[str] = []
    for i, word in enumerate(words):
        if i not in (0, last_idx) and word in _SMALL_WORDS:
            titled.append(word)
        else:
            titled.append(word.capitalize())
    return " ".join(titled)


def format_currency(amount: float | Decimal | int | None) -> str:
    """USD with thousands separators and no cents: 12345.6 -> "$12,346"."""
    value = float(amount or 0)
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.0f}"


def format_percentage(value: float | int | None) -> str:
    """Whole-number percentage: 84.6 -> "85%"."""
    return f"{round(float(value or 0))}%"


def mask_email(value: str | None) -> str:
    """Mask the local part of an email for logs."""
    if not value or "@" not in value:
        return "[REDACTED]"
    local, domain = value.split("@", 1)
    return f"{local[:1]}***@{domain}"
