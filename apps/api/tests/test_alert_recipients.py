"""Tests for alert recipient routing."""

from forge.core.config import settings
from forge.db.enums import AlertCategory, AlertSeverity
from forge.services.alert_recipients import resolve_recipients, route_cc
from forge.services.alert_settings_service import EffectiveConfig, EffectiveGlobalSettings
from forge.services.alert_severity import Thresholds


def _config(category=AlertCategory.QUOTA, **overrides) -> EffectiveConfig:
    values = dict(
        category=category,
        enabled=True,
        schedule="0 9 * * 1-5",
        thresholds=Thresholds(50, 80, 100),
        cc_recipients=(),
        bcc_admin=False,
        test_mode=False,
    )
    values.update(overrides)
    return EffectiveConfig(**values)


def _global(**overrides) -> EffectiveGlobalSettings:
    values = dict(
        from_email="alerts@test.com",
        admin_email="admin@test.com",
        bcc_all_to_admin=False,
        test_mode=False,
    )
    values.update(overrides)
    return EffectiveGlobalSettings(**values)


def test_red_copies_hr():
    assert route_cc(AlertSeverity.RED, AlertCategory.QUOTA) == (settings.HR_EMAIL,)


def test_red_monthly_copies_leadership():
    cc = route_cc(AlertSeverity.RED, AlertCategory.MONTHLY)
    assert cc == (settings.HR_EMAIL, settings.LEADERSHIP_EMAIL)


def test_yellow_copies_reviewer():
    assert route_cc(AlertSeverity.YELLOW, AlertCategory.STALE) == (settings.REVIEWER_EMAIL,)
    assert route_cc(AlertSeverity.YELLOW, AlertCategory.MONTHLY) == (
        settings.HR_EMAIL,
        settings.REVIEWER_EMAIL,
    )


def test_green_copies_hr():
    assert route_cc(AlertSeverity.GREEN, AlertCategory.ACTIVITY) == (settings.HR_EMAIL,)


def test_marketing_weekly_always_copies_leadership():
    cc = route_cc(AlertSeverity.GREEN, AlertCategory.MARKETING_WEEKLY)
    assert settings.LEADERSHIP_EMAIL in cc


def test_extra_cc_is_unioned_and_deduped():
    cc = route_cc(
        AlertSeverity.RED,
        AlertCategory.QUOTA,
        extra_cc=["coach@test.com", settings.HR_EMAIL.upper()],
    )
    assert cc == (settings.HR_EMAIL, "coach@test.com")


def test_bcc_admin_from_category_or_global():
    r = resolve_recipients("rep@test.com", AlertSeverity.RED, AlertCategory.QUOTA, _config(bcc_admin=True), _global())
    assert r.bcc == ("admin@test.com",)

    r = resolve_recipients("rep@test.com", AlertSeverity.RED, AlertCategory.QUOTA, _config(), _global(bcc_all_to_admin=True))
    assert r.bcc == ("admin@test.com",)

    r = resolve_recipients("rep@test.com", AlertSeverity.RED, AlertCategory.QUOTA, _config(), _global())
    assert r.bcc == ()


def test_test_mode_redirects_to_admin_only():
    r = resolve_recipients(
        "rep@test.com", AlertSeverity.RED, AlertCategory.MONTHLY, _config(bcc_admin=True), _global(test_mode=True)
    )
    assert r.to == "admin@test.com"
    assert r.cc == ()
    assert r.bcc == ()
    assert r.test_mode is True

    r = resolve_recipients(
        "rep@test.com", AlertSeverity.RED, AlertCategory.QUOTA, _config(test_mode=True), _global()
    )
    assert r.to == "admin@test.com"


def test_user_is_never_copied_on_their_own_alert():
    r = resolve_recipients(
        "rep@test.com",
        AlertSeverity.RED,
        AlertCategory.QUOTA,
        _config(cc_recipients=("rep@test.com",)),
        _global(),
    )
    assert r.to == "rep@test.com"
    assert "rep@test.com" not in r.cc
