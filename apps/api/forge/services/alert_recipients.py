"""
Recipient routing for performance alerts.

Copy recipients follow severity:
- RED: HR (plus leadership for month-end categories)
- YELLOW: the designated reviewer (plus HR for the monthly review)
- GREEN: HR, as a recognition copy

Category overrides and configured CCs are unioned, never replacing the
defaults. Test mode redirects the whole message to the admin inbox.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from forge.core.config import settings
from forge.db.enums import AlertCategory, AlertSeverity
from forge.services.alert_settings_service import EffectiveConfig, EffectiveGlobalSettings

# Categories whose RED copies leadership
LEADERSHIP_ON_RED = frozenset({AlertCategory.MONTHLY, AlertCategory.MARKETING_MONTHLY})

# Categories that always copy leadership, whatever the severity
LEADERSHIP_ALWAYS = frozenset({AlertCategory.MARKETING_WEEKLY})


@dataclass(frozen=True)
class Recipients:
    to: str
    cc: tuple[str, ...] = ()
    bcc: tuple[str, ...] = ()
    test_mode: bool = False


def _dedupe(addresses: Iterable[str], exclude: Iterable[str] = ()) -> tuple[str, ...]:
    skip = {a.lower() for a in exclude}
    seen: set[str] = set()
    result = []
    for address in addresses:
        if not address:
            continue
        key = address.strip().lower()
        if key in seen or key in skip:
            continue
        seen.add(key)
        result.append(address.strip())
    return tuple(result)


def route_cc(
    severity: AlertSeverity,
    category: AlertCategory,
    extra_cc: Iterable[str] = (),
) -> tuple[str, ...]:
    """Default copy list for a severity/category pair, unioned with ``extra_cc``."""
    cc: list[str] = []
    if category in LEADERSHIP_ALWAYS:
        cc.append(settings.LEADERSHIP_EMAIL)

    if severity == AlertSeverity.RED:
        cc.append(settings.HR_EMAIL)
        if category in LEADERSHIP_ON_RED:
            cc.append(settings.LEADERSHIP_EMAIL)
    elif severity == AlertSeverity.YELLOW:
        if category == AlertCategory.MONTHLY:
            cc.append(settings.HR_EMAIL)
        cc.append(settings.REVIEWER_EMAIL)
    else:
        cc.append(settings.HR_EMAIL)

    cc.extend(extra_cc)
    return _dedupe(cc)


def resolve_recipients(
    user_email: str,
    severity: AlertSeverity,
    category: AlertCategory,
    config: EffectiveConfig,
    global_settings: EffectiveGlobalSettings,
) -> Recipients:
    """Final to/cc/bcc for one alert, honoring BCC and test-mode policy."""
    if global_settings.test_mode or config.test_mode:
        return Recipients(to=global_settings.admin_email, test_mode=True)

    cc = _dedupe(route_cc(severity, category, config.cc_recipients), exclude=[user_email])
    bcc: tuple[str, ...] = ()
    if config.bcc_admin or global_settings.bcc_all_to_admin:
        bcc = _dedupe([global_settings.admin_email], exclude=[user_email, *cc])
    return Recipients(to=user_email, cc=cc, bcc=bcc)
