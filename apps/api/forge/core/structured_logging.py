"""Structured logging helpers (PII-safe)."""

from typing import Any


def build_log_context(
    *,
    user_id: str | None = None,
    alert_type: str | None = None,
    period: str | None = None,
    category: str | None = None,
    route: str | None = None,
) -> dict[str, Any]:
    """Return a PII-safe log context dict."""
    context: dict[str, Any] = {}
    if user_id:
        context["user_id"] = user_id
    if alert_type:
        context["alert_type"] = alert_type
    if period:
        context["period"] = period
    if category:
        context["category"] = category
    if route:
        context["route"] = route
    return context
