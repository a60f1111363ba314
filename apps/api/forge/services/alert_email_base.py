"""Shared layout for performance alert emails."""

from __future__ import annotations

import html
import re
from dataclasses import dataclass

from forge.core.config import settings
from forge.db.enums import AlertSeverity


@dataclass(frozen=True)
class SeverityPalette:
    background: str
    border: str
    text: str
    header: str


SEVERITY_COLORS = {
    AlertSeverity.RED: SeverityPalette("#FEE2E2", "#EF4444", "#991B1B", "#DC2626"),
    AlertSeverity.YELLOW: SeverityPalette("#FEF3C7", "#F59E0B", "#92400E", "#D97706"),
    AlertSeverity.GREEN: SeverityPalette("#D1FAE5", "#10B981", "#065F46", "#059669"),
}

FOOTER_TEXT = "This is an automated notification from Forge CRM. Do not reply to this email."


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html: str
    text: str


def esc(value: object) -> str:
    return html.escape(str(value), quote=True)


def html_to_text(content: str) -> str:
    """Plain-text alternative that keeps block boundaries as line breaks."""
    text = re.sub(r"<(script|style)[^>]*>.*?</\1>", "", content, flags=re.DOTALL | re.I)
    text = re.sub(r"<br\s*/?>", "\n", text, flags=re.I)
    text = re.sub(r"</(p|div|tr|h[1-6]|li)>", "\n", text, flags=re.I)
    text = re.sub(r"</t[dh]>", " ", text, flags=re.I)
    text = re.sub(r"<[^>]+>", "", text)
    text = html.unescape(text)
    lines = [re.sub(r"[ \t]+", " ", line).strip() for line in text.splitlines()]
    return "\n".join(line for line in lines if line)


def summary_table(rows: list[tuple[str, str]], palette: SeverityPalette, highlight: set[str] = frozenset()) -> str:
    """Two-column label/value box. ``rows`` values must already be escaped."""
    body = "".join(
        f'<tr><td style="padding: 6px 0; color: #374151;"><strong>{esc(label)}:</strong></td>'
        f'<td style="padding: 6px 0; text-align: right; color: '
        f'{palette.text if label in highlight else "#374151"};'
        f'{" font-weight: 600;" if label in highlight else ""}">{value}</td></tr>'
        for label, value in rows
    )
    return (
        f'<div style="margin: 20px 0; padding: 16px; background: {palette.background}; '
        f'border-radius: 6px; border: 1px solid {palette.border};">'
        f'<table style="width: 100%; font-size: 14px;">{body}</table></div>'
    )


def data_table(headers: list[str], rows: list[list[str]]) -> str:
    """Bordered grid. Cell values must already be escaped."""
    head = "".join(
        f'<th style="padding: 10px; text-align: left; border: 1px solid #e5e7eb;">{esc(h)}</th>'
        for h in headers
    )
    body = "".join(
        "<tr>"
        + "".join(f'<td style="padding: 10px; border: 1px solid #e5e7eb;">{cell}</td>' for cell in row)
        + "</tr>"
        for row in rows
    )
    return (
        '<table style="width: 100%; border-collapse: collapse; font-size: 14px;">'
        f'<thead><tr style="background: #f3f4f6;">{head}</tr></thead><tbody>{body}</tbody></table>'
    )


def section(title: str, content: str) -> str:
    return (
        '<div style="margin: 20px 0;">'
        f'<h3 style="margin: 0 0 12px; color: #1f2937; font-size: 14px; text-transform: uppercase;">{esc(title)}</h3>'
        f"{content}</div>"
    )


def bullet_list(items: list[str]) -> str:
    """Escaped bullet list."""
    return (
        '<ul style="margin: 0; padding-left: 20px; color: #4b5563;">'
        + "".join(f'<li style="margin-bottom: 8px;">{esc(item)}</li>' for item in items)
        + "</ul>"
    )


def build_alert_email(
    *,
    subject: str,
    user_name: str,
    severity: AlertSeverity,
    title: str,
    main_content: str,
    action_items: list[str] | None = None,
    footer_note: str | None = None,
    dashboard_path: str = "/dashboard",
) -> RenderedEmail:
    """
    Wrap category content in the standard alert layout.

    ``main_content`` is trusted HTML produced by the category renderers;
    everything else is escaped here.
    """
    palette = SEVERITY_COLORS[severity]
    dashboard_url = f"{settings.dashboard_base_url}{dashboard_path}"

    actions_html = ""
    if action_items:
        actions_html = (
            f'<div style="margin: 24px 0; padding: 16px; background: #f9fafb; border-radius: 6px; '
            f'border-left: 4px solid {palette.border};">'
            '<h3 style="margin: 0 0 12px; color: #1f2937; font-size: 14px; text-transform: uppercase;">'
            "Required Actions:</h3>"
            f"{bullet_list(action_items)}</div>"
        )

    footer_html = ""
    if footer_note:
        footer_html = (
            '<p style="margin-top: 24px; padding-top: 16px; border-top: 1px solid #e5e7eb; '
            f'color: #6b7280; font-size: 13px;">{esc(footer_note)}</p>'
        )

    html_body = f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{esc(title)}</title>
</head>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; margin: 0; padding: 20px; background-color: #f3f4f6;">
  <div style="max-width: 600px; margin: 0 auto; background: white; border-radius: 8px; overflow: hidden;">
    <div style="background: {palette.background}; border-bottom: 3px solid {palette.border}; padding: 20px;">
      <h1 style="margin: 0; color: {palette.text}; font-size: 20px;">{esc(title)}</h1>
    </div>
    <div style="padding: 24px;">
      <p style="margin: 0 0 16px; color: #374151;">{esc(user_name)},</p>
      <div style="margin: 16px 0;">{main_content}</div>
      {actions_html}
      <a href="{esc(dashboard_url)}" style="display: inline-block; margin-top: 16px; padding: 12px 24px; background: #0891b2; color: white; text-decoration: none; border-radius: 6px;">View Dashboard</a>
      {footer_html}
    </div>
    <div style="padding: 16px 24px; background: #1a1f2e;">
      <p style="margin: 0; color: #9ca3af; font-size: 12px;">{esc(FOOTER_TEXT)}</p>
    </div>
  </div>
</body>
</html>"""

    text_parts = [title, "", f"{user_name},", "", html_to_text(main_content), ""]
    if action_items:
        text_parts.append("REQUIRED ACTIONS:")
        text_parts.extend(f"- {item}" for item in action_items)
        text_parts.append("")
    text_parts.append(f"View your dashboard: {dashboard_url}")
    text_parts.append("")
    if footer_note:
        text_parts.extend([footer_note, ""])
    text_parts.append(f"---\n{FOOTER_TEXT}")

    return RenderedEmail(subject=subject, html=html_body, text="\n".join(text_parts))
