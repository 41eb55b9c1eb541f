from __future__ import annotations

import logging

from django.apps import AppConfig
from django.conf import settings
from django.core.checks import register, Warning, Error

logger = logging.getLogger(__name__)


class PaymentsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "payments"
    verbose_name = "Payments"


# ---------------------------------------------------------------------------
# System checks: surface gateway config issues with `manage.py check`
# ---------------------------------------------------------------------------
@register()
def payments_system_checks(app_configs, **kwargs):
    messages = []

    mode = str(getattr(settings, "PAYONEER_MODE", "mock")).lower()
    if mode not in ("live", "mock"):
        messages.append(
            Error(
                f"PAYONEER_MODE must be 'live' or 'mock', got {mode!r}.",
                id="payments.E001",
            )
        )

    if mode == "live":
        missing = [k for k, v in {
            "PAYONEER_CLIENT_ID": getattr(settings, "PAYONEER_CLIENT_ID", ""),
            "PAYONEER_API_KEY": getattr(settings, "PAYONEER_API_KEY", ""),
            "PAYONEER_PROGRAM_ID": getattr(settings, "PAYONEER_PROGRAM_ID", ""),
        }.items() if not v]
        if missing:
            messages.append(
                Warning(
                    "Payoneer live mode is enabled but some credentials are missing.",
                    id="payments.W001",
                    hint=f"Missing settings: {', '.join(missing)}",
                )
            )
        if str(getattr(settings, "BACKEND_URL", "")).startswith("http://") and not settings.DEBUG:
            messages.append(
                Warning(
                    "BACKEND_URL is not HTTPS; Payoneer return URLs will be insecure.",
                    id="payments.W002",
                )
            )

    if not getattr(settings, "PAYONEER_ENABLED", False):
        messages.append(
            Warning(
                "PAYONEER_ENABLED is off; checkout cannot be paid.",
                id="payments.W003",
                hint="Set PAYONEER_ENABLED=True once the gateway is configured.",
            )
        )

    return messages
