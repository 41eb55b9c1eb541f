# payments/services.py
"""
Payment finalization, shared by the gateway callback, the admin payment
status endpoint and the reconcile command.

Every transition claims the Payment row with a conditional UPDATE
(``WHERE status = 'pending'``). Only the caller whose UPDATE hits one row
moves the orders and writes notifications; replays and concurrent
deliveries see zero rows and stop there.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional
from urllib.parse import urlencode

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from notifications.utils import notify_order_paid, send_payment_receipt
from orders.models import Order
from .models import Payment
from .payoneer import GatewayError, PayoneerGateway, get_gateway, log_gateway_call

logger = logging.getLogger(__name__)

SUCCESS_VALUES = {"success"}
FAILURE_VALUES = {"failed", "failure", "cancelled", "declined"}


@dataclass(frozen=True)
class Outcome:
    result: str  # paid | failed | expired | already_final | not_found | verification_failed | ignored
    transaction_id: str = ""
    payment: Optional[Payment] = None


# ---- transitions ------------------------------------------------------------

def _claim(payment: Payment, new_status: str, **extra) -> bool:
    now = timezone.now()
    claimed = Payment.objects.filter(pk=payment.pk, status="pending").update(
        status=new_status, updated_at=now, **extra
    )
    return claimed == 1


def _close_orders(transaction_id: str, order_status: str) -> int:
    """Unpaid orders of a checkout that will never be paid; drop their commission too."""
    pending = Order.objects.filter(transaction_id=transaction_id, status="pending")
    pending.filter(commission_status="pending").update(commission_status="cancelled")
    return pending.update(status=order_status, updated_at=timezone.now())


def mark_paid(payment: Payment, gateway_token: str = "") -> Outcome:
    now = timezone.now()
    extra = {"paid_at": now}
    if gateway_token:
        extra["gateway_reference"] = gateway_token

    with transaction.atomic():
        if not _claim(payment, "paid", **extra):
            payment.refresh_from_db()
            logger.info("Payment %s already %s; callback ignored", payment.transaction_id, payment.status)
            return Outcome("already_final", payment.transaction_id, payment)

        orders: List[Order] = list(
            Order.objects.select_for_update()
            .select_related("service", "user")
            .filter(transaction_id=payment.transaction_id, status="pending")
        )
        Order.objects.filter(pk__in=[o.pk for o in orders]).update(status="processing", updated_at=now)
        for order in orders:
            order.status = "processing"
            notify_order_paid(order)

        payment.refresh_from_db()
        transaction.on_commit(lambda: send_payment_receipt(payment, orders))

    logger.info("Payment %s paid; %s order(s) -> processing", payment.transaction_id, len(orders))
    return Outcome("paid", payment.transaction_id, payment)


def mark_failed(payment: Payment) -> Outcome:
    with transaction.atomic():
        if not _claim(payment, "failed"):
            payment.refresh_from_db()
            return Outcome("already_final", payment.transaction_id, payment)
        n = _close_orders(payment.transaction_id, "failed")
        payment.refresh_from_db()
    logger.info("Payment %s failed; %s order(s) -> failed", payment.transaction_id, n)
    return Outcome("failed", payment.transaction_id, payment)


def mark_expired(payment: Payment) -> Outcome:
    with transaction.atomic():
        if not _claim(payment, "expired"):
            payment.refresh_from_db()
            return Outcome("already_final", payment.transaction_id, payment)
        n = _close_orders(payment.transaction_id, "cancelled")
        payment.refresh_from_db()
    logger.info("Payment %s expired; %s order(s) -> cancelled", payment.transaction_id, n)
    return Outcome("expired", payment.transaction_id, payment)


# ---- entry point ------------------------------------------------------------

def finalize_payment(
    transaction_id: str,
    status: str,
    gateway_token: str = "",
    gateway: PayoneerGateway | None = None,
) -> Outcome:
    """Apply a gateway callback. Unknown ids and unknown statuses never mutate."""
    payment = Payment.objects.filter(transaction_id=transaction_id or "").first()
    if payment is None:
        logger.error("Payoneer callback for unknown transaction %r", transaction_id)
        return Outcome("not_found", transaction_id or "")

    log_gateway_call(
        payment.user, payment.transaction_id, "callback",
        {"status": status, "txId": gateway_token}, {}, 200,
    )

    s = (status or "").strip().lower()
    if s in SUCCESS_VALUES:
        token = gateway_token or payment.gateway_reference
        if payment.gateway_reference and gateway_token and gateway_token != payment.gateway_reference:
            logger.warning("Payoneer token mismatch for %s", payment.transaction_id)
            return Outcome("verification_failed", payment.transaction_id, payment)
        try:
            valid = (gateway or get_gateway()).verify_payment(token, user=payment.user)
        except GatewayError as e:
            logger.warning("Payoneer verification unavailable for %s: %s", payment.transaction_id, e)
            valid = False
        if not valid:
            return Outcome("verification_failed", payment.transaction_id, payment)
        return mark_paid(payment, token)

    if s in FAILURE_VALUES:
        return mark_failed(payment)

    logger.info("Payoneer callback with unhandled status %r for %s", status, payment.transaction_id)
    return Outcome("ignored", payment.transaction_id, payment)


def redirect_for(outcome: Outcome, requested_status: str = "") -> str:
    base = settings.FRONTEND_URL
    tx = outcome.transaction_id
    payment_status = outcome.payment.status if outcome.payment else None
    asked_to_fail = (requested_status or "").strip().lower() in FAILURE_VALUES
    if outcome.result == "paid" or (
        outcome.result == "already_final" and payment_status == "paid" and not asked_to_fail
    ):
        return f"{base}/payment/success?{urlencode({'transactionId': tx})}"

    error = {
        "not_found": "record_missing",
        "verification_failed": "verification_failed",
    }.get(outcome.result)
    query = {"error": error} if error else {"status": payment_status or "unknown"}
    query["transactionId"] = tx
    return f"{base}/payment/failed?{urlencode(query)}"


def reverify(payment: Payment, gateway: PayoneerGateway | None = None) -> Outcome:
    """Ask the gateway about a pending payment whose callback never arrived."""
    if payment.status != "pending" or not payment.gateway_reference:
        return Outcome("ignored", payment.transaction_id, payment)
    try:
        valid = (gateway or get_gateway()).verify_payment(payment.gateway_reference, user=payment.user)
    except GatewayError as e:
        logger.warning("Reverify skipped for %s: %s", payment.transaction_id, e)
        return Outcome("ignored", payment.transaction_id, payment)
    if not valid:
        return Outcome("ignored", payment.transaction_id, payment)
    return mark_paid(payment)
