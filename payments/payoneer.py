# payments/payoneer.py
"""
Payoneer checkout gateway.

``get_gateway()`` picks the implementation from ``PAYONEER_MODE``:
``live`` talks to the Payoneer API over HTTPS, ``mock`` (default) simulates
the hosted checkout page on the storefront. Both refuse to work while
``PAYONEER_ENABLED`` is off.

The gateway trusts the amount it is given; callers must pass the amount
stored on the Payment row, never a client value.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict
from urllib.parse import urlencode

import requests
from django.conf import settings

from .models import GatewayLog

logger = logging.getLogger(__name__)

TIMEOUT = (5, 25)  # connect, read
PAID_STATES = {"COMPLETED", "PAID", "SUCCEEDED", "CHARGED"}


class GatewayError(Exception):
    pass


class GatewayDisabled(GatewayError):
    def __init__(self):
        super().__init__("Payoneer is disabled")


@dataclass
class PaymentIntent:
    url: str
    gateway_token: str
    data: Dict[str, Any] = field(default_factory=dict)


# ---- helpers ----------------------------------------------------------------

def mask_email(s: str | None) -> str:
    s = str(s or "")
    if "@" not in s:
        return "***"
    name, domain = s.split("@", 1)
    return f"{name[:2]}***@{domain}"


def log_gateway_call(user, transaction_id, endpoint, req, resp, status_code, error="", provider="payoneer"):
    """Best-effort audit row; never breaks the payment flow."""
    try:
        GatewayLog.objects.create(
            user=user if getattr(user, "pk", None) else None,
            provider=provider,
            transaction_id=transaction_id or "",
            endpoint=endpoint,
            request_payload=req or {},
            response_payload=resp or {},
            status_code=str(status_code),
            error_message=str(error)[:255],
        )
    except Exception:
        logger.warning("GatewayLog write failed for %s %s", endpoint, transaction_id, exc_info=True)


def callback_url(transaction_id: str, **extra) -> str:
    query = urlencode({"refId": transaction_id, **extra})
    return f"{settings.BACKEND_URL}/api/v1/payments/payoneer/callback/?{query}"


def dollars(cents: int) -> str:
    return str((Decimal(cents) / 100).quantize(Decimal("0.01")))


# ---- gateways ---------------------------------------------------------------

class PayoneerGateway:
    mode = "base"

    def _ensure_enabled(self):
        if not getattr(settings, "PAYONEER_ENABLED", False):
            raise GatewayDisabled()

    def create_payment_intent(self, amount: int, currency: str, transaction_id: str, user=None) -> PaymentIntent:
        raise NotImplementedError

    def verify_payment(self, gateway_token: str, user=None) -> bool:
        raise NotImplementedError


class LivePayoneerGateway(PayoneerGateway):
    mode = "live"

    @property
    def base(self) -> str:
        return settings.PAYONEER_BASE_URL.rstrip("/")

    def _auth_headers(self):
        return {
            "Authorization": f"Bearer {settings.PAYONEER_API_KEY}",
            "X-Client-Id": settings.PAYONEER_CLIENT_ID,
            "Content-Type": "application/json",
        }

    def create_payment_intent(self, amount, currency, transaction_id, user=None):
        self._ensure_enabled()
        payload = {
            "reference": transaction_id,
            "amount": dollars(amount),
            "currency": currency,
            "program_id": settings.PAYONEER_PROGRAM_ID,
            "return_url": callback_url(transaction_id, status="success"),
            "cancel_url": callback_url(transaction_id, status="cancelled"),
            "customer_email": getattr(user, "email", None),
        }
        endpoint = "/checkout/sessions"
        masked = {**payload, "customer_email": mask_email(payload["customer_email"])}
        try:
            r = requests.post(f"{self.base}{endpoint}", headers=self._auth_headers(), json=payload, timeout=TIMEOUT)
        except requests.RequestException as e:
            log_gateway_call(user, transaction_id, endpoint, masked, None, "error", error=e)
            raise GatewayError(f"Payoneer unreachable: {e}") from e

        body = parse_json(r)
        log_gateway_call(user, transaction_id, endpoint, masked, body, r.status_code)
        if r.status_code >= 400 or not body.get("id") or not body.get("redirect_url"):
            raise GatewayError(f"Payoneer session rejected (HTTP {r.status_code})")

        return PaymentIntent(
            url=body["redirect_url"],
            gateway_token=str(body["id"]),
            data={"provider": "payoneer", "env": settings.PAYONEER_ENV, "mode": self.mode},
        )

    def verify_payment(self, gateway_token, user=None):
        self._ensure_enabled()
        if not gateway_token:
            return False
        endpoint = f"/checkout/sessions/{gateway_token}"
        try:
            r = requests.get(f"{self.base}{endpoint}", headers=self._auth_headers(), timeout=TIMEOUT)
        except requests.RequestException as e:
            log_gateway_call(user, "", endpoint, None, None, "error", error=e)
            logger.warning("Payoneer verify failed for %s: %s", gateway_token, e)
            return False

        body = parse_json(r)
        log_gateway_call(user, str(body.get("reference") or ""), endpoint, None, body, r.status_code)
        return r.status_code == 200 and str(body.get("status", "")).upper() in PAID_STATES


def parse_json(r: requests.Response) -> Dict:
    if "application/json" in r.headers.get("Content-Type", ""):
        try:
            body = r.json()
            return body if isinstance(body, dict) else {"data": body}
        except ValueError:
            pass
    return {"raw": r.text[:500], "http_status": r.status_code}


def get_gateway() -> PayoneerGateway:
    mode = str(getattr(settings, "PAYONEER_MODE", "mock")).lower()
    if mode == "live":
        return LivePayoneerGateway()
    from .payoneer_mock import MockPayoneerGateway
    return MockPayoneerGateway()
