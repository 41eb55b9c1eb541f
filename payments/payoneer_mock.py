# payments/payoneer_mock.py
"""
Sandbox stand-in for the Payoneer hosted checkout.

The "hosted page" is the storefront's /mock-payoneer/checkout route, which
sends the customer back to the callback with ``status=success`` or
``status=failed``. Tokens look like ``pay_tx_<transaction>_<ms>``.
"""
import logging
import time
from urllib.parse import urlencode

from django.conf import settings

from .payoneer import PayoneerGateway, PaymentIntent, log_gateway_call

logger = logging.getLogger(__name__)

TOKEN_PREFIX = "pay_tx_"


def generate_token(transaction_id: str) -> str:
    return f"{TOKEN_PREFIX}{transaction_id}_{int(time.time() * 1000)}"


class MockPayoneerGateway(PayoneerGateway):
    mode = "mock"

    def create_payment_intent(self, amount, currency, transaction_id, user=None):
        self._ensure_enabled()
        token = generate_token(transaction_id)
        query = urlencode({"txId": token, "refId": transaction_id, "amount": amount})
        url = f"{settings.FRONTEND_URL}/mock-payoneer/checkout?{query}"

        logger.info("MOCK Payoneer intent %s: %s %s", transaction_id, amount, currency)
        log_gateway_call(
            user, transaction_id, "mock:create",
            {"amount": amount, "currency": currency}, {"token": token, "url": url}, 200,
        )
        return PaymentIntent(
            url=url,
            gateway_token=token,
            data={"provider": "payoneer", "env": settings.PAYONEER_ENV, "mode": self.mode},
        )

    def verify_payment(self, gateway_token, user=None):
        self._ensure_enabled()
        return str(gateway_token or "").startswith(TOKEN_PREFIX)
