"""Marketing performance alert emails."""

from __future__ import annotations

from forge.db.enums import AlertSeverity
from forge.services.alert_email_base import (
    SEVERITY_COLORS,
    RenderedEmail,
    bullet_list,
    build_alert_email,
    data_table,
    esc,
    section,
    summary_table,
)
from forge.services.alert_metrics import (
    MarketingCheckSnapshot,
    MarketingMonthlySnapshot,
    MarketingSummary,
    MarketingWeeklySnapshot,
    TemplateStats,
)
from forge.utils.presentation import format_percentage


def _outcome_rows(summary: MarketingSummary) -> list[tuple[str, str]]:
    return [
        ("Tasks Logged", esc(summary.total)),
        ("Success Rate", esc(
            f"{format_percentage(summary.success_rate)} "
            f"({summary.success} of {summary.with_outcome} with outcomes)"
        )),
        ("Outcomes", esc(
            f"{summary.success} success / {summary.partial} partial / {summary.failed} failed"
        )),
        ("Leads Generated", esc(summary.leads_generated)),
    ]


def _type_table(summary: MarketingSummary) -> str:
    rows = [
        [
            esc(t.display_name),
            esc(t.count),
            esc(format_percentage(t.success_rate)),
            esc(t.leads_generated),
        ]
        for t in summary.active_types
    ]
    if not rows:
        return ""
    return section(
        "By Task Type",
        data_table(["Type", "Tasks", "Success Rate", "Leads"], rows),
    )


def _template_rows(templates: list[TemplateStats], stop_label: bool = False) -> list[list[str]]:
    rows = []
    for t in templates:
        name = esc(t.name)
        if stop_label:
            name += ' <strong style="color: #991B1B;">RECOMMEND STOPPING</strong>'
        rows.append([name, esc(format_percentage(t.success_rate)), esc(t.leads_generated)])
    return rows


# =============================================================================
# Marketing check
# =============================================================================

def render_marketing_alert(
    user_name: str, severity: AlertSeverity, snapshot: MarketingCheckSnapshot
) -> RenderedEmail:
    summary = snapshot.summary
    palette = SEVERITY_COLORS[severity]
    rows = _outcome_rows(summary)
    if snapshot.team_success_rate:
        rows.append(("Team Success Rate", esc(format_percentage(snapshot.team_success_rate))))

    if severity == AlertSeverity.RED:
        subject = f"Performance Alert: Marketing Below Threshold - {user_name}"
        title = "URGENT: Marketing Performance Below Threshold"
        lead = "Your marketing success rate this week is well below the expected level."
        action_items = [
            "Review which task types are underperforming",
            "Refine targeting toward your ideal customer profile",
            "Log outcomes for all completed tasks",
        ]
        footer_note = "This alert has been copied to HR for documentation."
    elif severity == AlertSeverity.YELLOW:
        subject = f"Performance Warning: Marketing Needs Attention - {user_name}"
        title = "Marketing Performance Needs Attention"
        lead = "Your marketing success rate this week is below target."
        action_items = [
            "Focus on the task types with the best results",
            "Follow up on pending responses",
        ]
        footer_note = None
    else:
        subject = f"Recognition: Outstanding Marketing Performance - {user_name}"
        title = "Outstanding Marketing Performance"
        lead = "Your marketing results this week have been excellent!"
        action_items = []
        footer_note = "This recognition has been copied to HR for your personnel file."

    main = (
        f'<p style="color: {palette.text}; font-weight: 600; font-size: 15px;">{esc(lead)}</p>'
        + summary_table(rows, palette, highlight={"Success Rate"})
        + _type_table(summary)
    )
    return build_alert_email(
        subject=subject,
        user_name=user_name,
        severity=severity,
        title=title,
        main_content=main,
        action_items=action_items,
        footer_note=footer_note,
        dashboard_path="/marketing",
    )


# =============================================================================
# Weekly marketing summary
# =============================================================================

_WEEKLY_VERDICT = {
    AlertSeverity.RED: "Below Expectations",
    AlertSeverity.YELLOW: "On Track",
    AlertSeverity.GREEN: "Excellent",
}


def render_marketing_weekly(
    user_name: str, severity: AlertSeverity, snapshot: MarketingWeeklySnapshot
) -> RenderedEmail:
    summary = snapshot.summary
    palette = SEVERITY_COLORS[severity]
    verdict = _WEEKLY_VERDICT[severity]

    rows = _outcome_rows(summary)
    rows.append(("Awaiting Outcomes", esc(snapshot.pending_backlog)))

    main = summary_table(rows, palette, highlight={"Success Rate"}) + _type_table(summary)

    if snapshot.top_templates:
        main += section(
            "Top Performing Templates",
            data_table(["Template", "Success Rate", "Leads"], _template_rows(snapshot.top_templates)),
        )
    if snapshot.bottom_templates:
        main += section(
            "Underperforming Templates",
            data_table(
                ["Template", "Success Rate", "Leads"],
                _template_rows(snapshot.bottom_templates, stop_label=True),
            ),
        )
    if severity == AlertSeverity.RED and snapshot.issues:
        main += section("Issues", bullet_list(snapshot.issues))

    if severity == AlertSeverity.RED:
        action_items = [
            "Log outcomes for every completed task",
            "Stop using templates with poor results",
            "Meet with your manager to review your approach",
        ]
    elif severity == AlertSeverity.GREEN:
        action_items = ["Share your best-performing templates with the team"]
    else:
        action_items = ["Keep logging outcomes and double down on what works"]

    return build_alert_email(
        subject=f"Marketing Performance: {verdict} - {user_name}",
        user_name=user_name,
        severity=severity,
        title=f"Weekly Marketing Performance: {verdict}",
        main_content=main,
        action_items=action_items,
        footer_note="This weekly summary has been shared with leadership.",
        dashboard_path="/marketing",
    )


# =============================================================================
# Monthly marketing review
# =============================================================================

def render_marketing_monthly(
    user_name: str, severity: AlertSeverity, snapshot: MarketingMonthlySnapshot
) -> RenderedEmail:
    summary = snapshot.summary
    palette = SEVERITY_COLORS[severity]

    rows = _outcome_rows(summary)
    if snapshot.best_type:
        rows.append(("Best Performing Type", esc(snapshot.best_type)))
    if snapshot.needs_improvement:
        rows.append(("Needs Improvement", esc(snapshot.needs_improvement)))
    if snapshot.rank and snapshot.team_size:
        rows.append(("Team Ranking", esc(f"{snapshot.rank} of {snapshot.team_size}")))

    main = (
        f'<p style="color: #374151;">Here is your marketing summary for {esc(snapshot.month_name)}.</p>'
        + summary_table(rows, palette, highlight={"Success Rate"})
        + _type_table(summary)
    )

    if severity == AlertSeverity.RED:
        action_items = [
            "Review your monthly plan with your manager",
            "Reallocate effort toward higher-performing task types",
        ]
    else:
        action_items = []

    return build_alert_email(
        subject=f"Monthly Marketing Review: {snapshot.month_name} - {user_name}",
        user_name=user_name,
        severity=severity,
        title=f"Monthly Marketing Review: {snapshot.month_name}",
        main_content=main,
        action_items=action_items,
        footer_note="This monthly review has been archived.",
        dashboard_path="/marketing",
    )
