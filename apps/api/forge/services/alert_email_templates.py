"""
Alert email templates for sales categories.

Each renderer takes the user's display name, the graded severity and the
category snapshot from ``alert_metrics``. ``render_alert`` picks the
renderer by category; marketing renderers live in
``marketing_email_templates``.
"""
from __future__ import annotations

from typing import Any, Callable

from forge.core.config import settings
from forge.db.enums import AlertCategory, AlertSeverity
from forge.services import marketing_email_templates
from forge.services.alert_email_base import (
    SEVERITY_COLORS,
    RenderedEmail,
    build_alert_email,
    data_table,
    esc,
    section,
    summary_table,
)
from forge.services.alert_metrics import (
    ActivitySnapshot,
    MonthlyReviewSnapshot,
    OverdueSnapshot,
    QuotaSnapshot,
    StaleItem,
)
from forge.services.alert_severity import StaleBuckets
from forge.utils.presentation import format_currency, format_percentage


def _lead(text: str, severity: AlertSeverity) -> str:
    color = SEVERITY_COLORS[severity].text
    return f'<p style="color: {color}; font-weight: 600; font-size: 15px;">{esc(text)}</p>'


def _para(text: str) -> str:
    return f'<p style="color: #374151;">{esc(text)}</p>'


# =============================================================================
# Quota
# =============================================================================

def render_quota_alert(user_name: str, severity: AlertSeverity, snapshot: QuotaSnapshot) -> RenderedEmail:
    pct = format_percentage(snapshot.attainment)
    progress = f"{format_currency(snapshot.actual)} / {format_currency(snapshot.target)}"
    palette = SEVERITY_COLORS[severity]
    action_items: list[str] = []
    footer_note = None

    if severity == AlertSeverity.RED:
        title = "URGENT: Quota Performance Alert"
        lead = (
            f"Your current quota attainment is {pct} ({progress}) with "
            f"{snapshot.days_remaining} days remaining."
        )
        closing = "This is significantly below expectations. Immediate action required."
        progress_label = "Current Progress"
        action_items = [
            "Review your pipeline in Forge CRM",
            "Identify deals to close this month",
            "Schedule time with your manager today",
        ]
        footer_note = "This performance alert has been copied to HR for record-keeping."
        subject_prefix = "Performance Alert"
    elif severity == AlertSeverity.GREEN:
        title = "Outstanding Performance: Quota Exceeded"
        lead = f"Congratulations! You've achieved {pct} of your monthly quota ({progress})."
        closing = "Your outstanding performance this month has been recognized. Keep up the excellent work!"
        progress_label = "Current Achievement"
        footer_note = "This achievement has been recognized and copied to HR for your personnel file."
        subject_prefix = "Congratulations"
    else:
        title = "Monthly Progress Update: On Track"
        lead = (
            f"You're on track with {pct} quota attainment ({progress}) and "
            f"{snapshot.days_remaining} days remaining."
        )
        closing = "Keep pushing to close the gap. You're doing well."
        progress_label = "Current Progress"
        action_items = [
            "Review open deals in negotiation",
            "Continue following up on active opportunities",
        ]
        subject_prefix = "Progress Update"

    main = (
        _lead(lead, severity)
        + summary_table(
            [
                ("Quota Target", esc(format_currency(snapshot.target))),
                (progress_label, esc(f"{format_currency(snapshot.actual)} ({pct})")),
                ("Days Remaining", esc(snapshot.days_remaining)),
            ],
            palette,
            highlight={progress_label},
        )
        + _para(closing)
    )
    return build_alert_email(
        subject=f"{subject_prefix}: {user_name} - {pct} to Monthly Quota",
        user_name=user_name,
        severity=severity,
        title=title,
        main_content=main,
        action_items=action_items,
        footer_note=footer_note,
    )


# =============================================================================
# Stale items
# =============================================================================

def _stale_table(items: list[StaleItem], kind: str, window: str, severity: AlertSeverity) -> str:
    base = settings.dashboard_base_url
    color = SEVERITY_COLORS[severity].text
    rows = [
        [
            esc(item.name),
            f'<span style="color: {color}; font-weight: 600;">{item.days_since_update}</span>',
            f'<a href="{esc(f"{base}/{kind}s/{item.id}")}" style="color: #0891b2;">View</a>',
        ]
        for item in items
    ]
    label = kind.capitalize()
    return section(
        f"Stale {label}s ({window} idle)",
        data_table([f"{label} Name", "Days Idle", "Action"], rows),
    )


def render_stale_alert(user_name: str, severity: AlertSeverity, buckets: StaleBuckets) -> RenderedEmail:
    is_red = severity == AlertSeverity.RED
    deals = buckets.red_deals if is_red else buckets.yellow_deals
    leads = buckets.red_leads if is_red else buckets.yellow_leads

    main = _lead(
        "The following items have been idle for too long and require immediate attention."
        if is_red
        else "Reminder to follow up on the items below. Keep momentum going.",
        severity,
    )
    if deals:
        main += _stale_table(deals, "deal", ">14 days" if is_red else "7-13 days", severity)
    if leads:
        main += _stale_table(leads, "lead", ">7 days" if is_red else "3-6 days", severity)

    if is_red:
        action_items = [
            "Update each item with current status or next steps",
            "Move forward or close as lost",
            "Schedule follow-up activities for active opportunities",
        ]
        subject = f"URGENT: {user_name} - {len(deals) + len(leads)} Stale Items Need Attention"
    else:
        action_items = [
            "Schedule discovery call or follow-up",
            "Log next contact attempt",
        ]
        subject = f"Reminder: {user_name} - Follow-Up Needed"

    return build_alert_email(
        subject=subject,
        user_name=user_name,
        severity=severity,
        title="URGENT: Stale Items Require Immediate Action" if is_red else "Reminder: Follow-Up Needed",
        main_content=main,
        action_items=action_items,
        footer_note="This alert has been copied to HR." if is_red else None,
    )


# =============================================================================
# Activity
# =============================================================================

def render_activity_alert(user_name: str, severity: AlertSeverity, snapshot: ActivitySnapshot) -> RenderedEmail:
    b = snapshot.breakdown
    palette = SEVERITY_COLORS[severity]
    rows = [
        (
            "Your Activity",
            esc(
                f"{snapshot.actual} (calls: {b.calls}, emails: {b.emails}, "
                f"meetings: {b.meetings}, notes: {b.notes})"
            ),
        ),
    ]
    if snapshot.team_average:
        rows.append(("Team Average", esc(snapshot.team_average)))
    rows.append(("Expected Minimum", esc(snapshot.expected)))
    rows.append(("Achievement", esc(f"{format_percentage(snapshot.attainment)} of expected")))

    if severity == AlertSeverity.RED:
        main = (
            _lead("Your activity level this week is significantly below expectations.", severity)
            + summary_table(rows, palette, highlight={"Your Activity", "Achievement"})
            + _para("This indicates insufficient client engagement. Immediate improvement required.")
        )
        return build_alert_email(
            subject=f"Performance Alert: Low Activity - {user_name}",
            user_name=user_name,
            severity=severity,
            title="URGENT: Low Activity Alert",
            main_content=main,
            action_items=[
                "Schedule more calls and meetings this week",
                "Log all client interactions in the CRM",
                "Review your weekly schedule and block time for outreach",
            ],
            footer_note="This alert has been copied to HR for documentation.",
        )

    main = (
        _lead("Your activity level this week has been exceptional!", severity)
        + summary_table(rows, palette, highlight={"Your Activity", "Achievement"})
        + _para("Your dedication to engaging with prospects and clients is commendable.")
    )
    return build_alert_email(
        subject=f"Recognition: Outstanding Activity - {user_name}",
        user_name=user_name,
        severity=severity,
        title="Outstanding: High Activity Performance",
        main_content=main,
        footer_note="This recognition has been copied to HR for your personnel file.",
    )


# =============================================================================
# Overdue tasks
# =============================================================================

def render_task_alert(user_name: str, severity: AlertSeverity, snapshot: OverdueSnapshot) -> RenderedEmail:
    is_red = severity == AlertSeverity.RED
    count = snapshot.count
    plural = count != 1
    rows = [
        [
            esc(task.title),
            esc(task.due_date.strftime("%b %d")),
            esc(f"{task.days_overdue} day{'s' if task.days_overdue != 1 else ''}"),
        ]
        for task in snapshot.tasks
    ]
    main = _lead(
        f"You have {count} task{'s' if plural else ''} that {'are' if plural else 'is'} overdue.",
        severity,
    )
    main += section("Overdue Tasks", data_table(["Task", "Due Date", "Days Overdue"], rows))
    if count > len(snapshot.tasks):
        main += (
            f'<p style="margin-top: 8px; color: #6b7280; font-size: 13px;">'
            f"...and {count - len(snapshot.tasks)} more</p>"
        )

    if is_red:
        subject = f"Performance Alert: {user_name} - {count} Tasks Overdue"
        action_items = [
            "Complete these tasks today or reschedule with realistic dates",
            "Update task status in the CRM",
            "Discuss workload with your manager if overwhelmed",
        ]
    else:
        first = snapshot.tasks[0].title if snapshot.tasks else "Task"
        subject = f"Task Reminder: {first} Overdue"
        action_items = [
            "Complete or reschedule overdue task today",
            "Review upcoming tasks to avoid future delays",
        ]

    return build_alert_email(
        subject=subject,
        user_name=user_name,
        severity=severity,
        title="URGENT: Multiple Overdue Tasks" if is_red else "Reminder: Overdue Task",
        main_content=main,
        action_items=action_items,
        footer_note="This has been copied to HR for documentation." if is_red else None,
        dashboard_path="/tasks",
    )


# =============================================================================
# Monthly review
# =============================================================================

_MONTHLY_COPY = {
    AlertSeverity.RED: (
        "Below Expectations",
        "Your {month} performance requires immediate attention.",
        "This performance review has been shared with HR and leadership.",
        [
            "Performance improvement meeting with your manager this week",
            "Increase activity to 20/week minimum",
            "Clean up stale deals within 3 days",
            "Tighten your qualification process",
        ],
    ),
    AlertSeverity.YELLOW: (
        "On Target",
        "You are close to quota for {month}. Solid performance.",
        "Keep pushing to exceed expectations next month.",
        [
            "Review pipeline for opportunities to exceed quota",
            "Continue consistent activity levels",
        ],
    ),
    AlertSeverity.GREEN: (
        "Excellent",
        "Outstanding {month} performance! Congratulations on reaching your quota.",
        "This recognition has been copied to HR for your personnel file.",
        [
            "Share your best practices with the team",
            "Set ambitious goals for next month",
        ],
    ),
}


def render_monthly_review(user_name: str, severity: AlertSeverity, snapshot: MonthlyReviewSnapshot) -> RenderedEmail:
    verdict, intro, footer_note, action_items = _MONTHLY_COPY[severity]
    palette = SEVERITY_COLORS[severity]
    month = snapshot.month_name

    rows = [
        ("Quota Attainment", esc(
            f"{format_percentage(snapshot.attainment)} "
            f"({format_currency(snapshot.actual)} / {format_currency(snapshot.target)})"
        )),
        ("Deals Closed", esc(f"{snapshot.deals_won} won / {snapshot.deals_closed} total")),
        ("Win Rate", esc(format_percentage(snapshot.win_rate))),
        ("Average Deal Size", esc(format_currency(snapshot.average_deal_size))),
        ("Total Activities", esc(snapshot.activities)),
        ("Stale Deals", esc(snapshot.stale_deal_count)),
        ("Task Completion", esc(format_percentage(snapshot.task_completion_rate))),
    ]
    if snapshot.rank and snapshot.team_size:
        rows.append(("Rank", esc(f"{snapshot.rank} of {snapshot.team_size}")))

    main = (
        _lead(intro.format(month=month), severity)
        + summary_table(rows, palette, highlight={"Quota Attainment"})
    )
    return build_alert_email(
        subject=f"{month} Performance: {verdict} - {user_name}",
        user_name=user_name,
        severity=severity,
        title=f"{month} Performance: {verdict}",
        main_content=main,
        action_items=action_items,
        footer_note=footer_note,
    )


# =============================================================================
# Registry
# =============================================================================

Renderer = Callable[[str, AlertSeverity, Any], RenderedEmail]

ALERT_RENDERERS: dict[AlertCategory, Renderer] = {
    AlertCategory.QUOTA: render_quota_alert,
    AlertCategory.STALE: render_stale_alert,
    AlertCategory.ACTIVITY: render_activity_alert,
    AlertCategory.TASK: render_task_alert,
    AlertCategory.MARKETING: marketing_email_templates.render_marketing_alert,
    AlertCategory.MARKETING_WEEKLY: marketing_email_templates.render_marketing_weekly,
    AlertCategory.MARKETING_MONTHLY: marketing_email_templates.render_marketing_monthly,
    AlertCategory.MONTHLY: render_monthly_review,
}


def render_alert(
    category: AlertCategory,
    severity: AlertSeverity,
    user_name: str,
    snapshot: Any,
) -> RenderedEmail:
    """Render the subject and bodies for a graded alert."""
    return ALERT_RENDERERS[category](user_name, severity, snapshot)
