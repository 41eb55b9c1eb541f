from __future__ import annotations

import logging
from importlib import import_module

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class OrdersConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "orders"
    verbose_name = "SocialBoost Orders"

    def ready(self):
        # Commission bookkeeping lives in signals; a broken import must be loud
        try:
            import_module("orders.signals")
            logger.debug("orders.signals imported successfully")
        except Exception:  # pragma: no cover
            logger.exception("orders.signals import failed")
            raise
