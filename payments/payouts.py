# payments/payouts.py
from __future__ import annotations

import logging
import secrets
import time
from typing import Dict

import requests
from django.conf import settings

from .payoneer import GatewayDisabled, GatewayError, TIMEOUT, dollars, log_gateway_call, parse_json, mask_email

logger = logging.getLogger(__name__)

SANDBOX_FAIL_EMAIL = "fail@payoneer.com"
STATUS_MAP = {
    "PENDING": "pending",
    "PROCESSING": "pending",
    "TRANSFERRED": "completed",
    "COMPLETED": "completed",
    "FAILED": "failed",
    "CANCELLED": "failed",
}


class PayoutFailed(GatewayError):
    pass


class PayoneerPayoutProvider:
    """
    Mass-payout client. In ``mock`` mode nothing leaves the process; in the
    sandbox environment ``fail@payoneer.com`` always fails so the failure
    path can be exercised end to end.
    """

    def __init__(self, enabled=None, env=None, mode=None):
        self.enabled = settings.PAYONEER_ENABLED if enabled is None else enabled
        self.env = (env or settings.PAYONEER_ENV).lower()
        self.mode = (mode or settings.PAYONEER_MODE).lower()

    # ---- recipients ----
    def validate_recipient(self, details: Dict) -> bool:
        email = (details or {}).get("email")
        return bool(email) and "@" in str(email)

    # ---- payouts ----
    def create_payout(self, amount: int, currency: str, recipient: Dict, reference: str) -> str:
        if not self.enabled:
            raise GatewayDisabled()
        if not self.validate_recipient(recipient):
            raise PayoutFailed("Recipient email is missing or invalid")

        email = recipient["email"]
        if self.env == "sandbox" and email.strip().lower() == SANDBOX_FAIL_EMAIL:
            log_gateway_call(None, reference, "payout:create", {"amount": amount, "email": mask_email(email)},
                             {"error": "sandbox failure"}, 400, error="Mock Payoneer payout failed")
            raise PayoutFailed("Mock Payoneer payout failed")

        if self.mode != "live":
            tx = f"payoneer_tx_{int(time.time() * 1000)}_{secrets.token_hex(5)}"
            logger.info("MOCK payout %s: %s %s -> %s", reference, amount, currency, mask_email(email))
            log_gateway_call(None, reference, "mock:payout", {"amount": amount, "email": mask_email(email)}, {"id": tx}, 200)
            return tx

        payload = {
            "client_reference_id": reference,
            "payee_id": recipient.get("payeeId") or email,
            "amount": dollars(amount),
            "currency": currency,
            "description": f"Affiliate payout {reference}",
        }
        endpoint = f"/programs/{settings.PAYONEER_PROGRAM_ID}/payouts"
        masked = {**payload, "payee_id": mask_email(payload["payee_id"])}
        try:
            r = requests.post(
                f"{settings.PAYONEER_BASE_URL.rstrip('/')}{endpoint}",
                headers={"Authorization": f"Bearer {settings.PAYONEER_API_KEY}", "Content-Type": "application/json"},
                json=payload,
                timeout=TIMEOUT,
            )
        except requests.RequestException as e:
            log_gateway_call(None, reference, endpoint, masked, None, "error", error=e)
            raise PayoutFailed(f"Payoneer unreachable: {e}") from e

        body = parse_json(r)
        log_gateway_call(None, reference, endpoint, masked, body, r.status_code)
        if r.status_code >= 400 or not body.get("payout_id"):
            raise PayoutFailed(f"Payoneer payout rejected (HTTP {r.status_code})")
        return str(body["payout_id"])

    def get_payout_status(self, transaction_id: str) -> str:
        """Returns ``pending`` | ``completed`` | ``failed``."""
        if not self.enabled:
            raise GatewayDisabled()
        if self.mode != "live":
            return "pending"

        endpoint = f"/programs/{settings.PAYONEER_PROGRAM_ID}/payouts/{transaction_id}/status"
        try:
            r = requests.get(
                f"{settings.PAYONEER_BASE_URL.rstrip('/')}{endpoint}",
                headers={"Authorization": f"Bearer {settings.PAYONEER_API_KEY}"},
                timeout=TIMEOUT,
            )
        except requests.RequestException as e:
            raise GatewayError(f"Payoneer unreachable: {e}") from e
        body = parse_json(r)
        return STATUS_MAP.get(str(body.get("status", "")).upper(), "pending")
