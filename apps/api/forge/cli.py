"""CLI tools for alert administration."""

from datetime import datetime

import click

from forge.db.enums import AlertCategory, AlertRunStatus
from forge.db.session import SessionLocal
from forge.services import alert_engine, alert_settings_service, ses_email_service
from forge.services.alert_checks import UnknownAlertCategoryError, get_check


@click.group()
def cli():
    """Forge alert CLI tools."""
    pass


@cli.command()
@click.argument("category", type=click.Choice([c.value for c in AlertCategory]))
@click.option("--now", "now_iso", default=None, help="Evaluate as of this ISO timestamp (UTC if naive)")
def run_check(category: str, now_iso: str | None):
    """
    Run one alert category for every eligible user.

    Example:
        python -m forge.cli run-check quota
    """
    try:
        check = get_check(category)
    except UnknownAlertCategoryError as e:
        raise click.BadParameter(str(e))

    now = datetime.fromisoformat(now_iso) if now_iso else None
    db = SessionLocal()
    try:
        summary = alert_engine.run_alert_check(db, check, ses_email_service.get_alert_sender(), now=now)
    finally:
        db.close()

    if not summary.enabled:
        click.echo(f"Category '{category}' is disabled; nothing to do")
        return

    click.echo(f"✓ {summary.category} period {summary.period}: {summary.processed} users processed")
    for status in AlertRunStatus:
        count = summary.count(status)
        if count:
            click.echo(f"  {status.value}: {count}")
    for result in summary.results:
        if result.status in (AlertRunStatus.EMAIL_FAILED, AlertRunStatus.FAILED):
            click.echo(f"❌ {result.user_name}: {result.status.value} {result.detail or ''}".rstrip())


@cli.command()
def seed_alert_configs():
    """
    Create any missing alert config rows and the global settings row.

    Example:
        python -m forge.cli seed-alert-configs
    """
    db = SessionLocal()
    try:
        configs = alert_settings_service.list_alert_configs(db)
        alert_settings_service.get_or_create_global_settings(db)
        for config in configs:
            click.echo(
                f"✓ {config.alert_category}: red={config.red_threshold} "
                f"yellow={config.yellow_threshold} green={config.green_threshold} "
                f"schedule='{config.schedule}' enabled={config.enabled}"
            )
    except Exception as e:
        db.rollback()
        click.echo(f"❌ Error: {e}")
    finally:
        db.close()


if __name__ == "__main__":
    cli()
