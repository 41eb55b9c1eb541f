from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from notifications.utils import notify_order_status_change, notify_order_delay
from payments.models import Payment
from services.pricing import percent_of
from .delays import parse_duration, REPORT_COOLDOWN
from .models import Order, InvalidTransition

logger = logging.getLogger(__name__)


class DelayNotAllowed(Exception):
    pass


class OrderLocked(Exception):
    pass


# ---------------------------------------------------------------------------
# Admin status changes
# ---------------------------------------------------------------------------
def change_status(order_id: int, new_status: str, actor) -> Order:
    """
    Admin transition. Leaving ``pending`` towards processing/failed is the
    payment callback's job, so admins may only cancel an unpaid order.
    """
    with transaction.atomic():
        order = Order.objects.select_for_update().select_related("service", "user").get(pk=order_id)
        if order.status == "pending" and new_status != "cancelled":
            raise InvalidTransition(order.status, new_status)
        old = order.transition_to(new_status)
        order.save(update_fields=["status", "updated_at"])
        if old == "pending":
            _reprice_checkout(order.transaction_id)

        # Unpaid orders never produce customer notifications
        if old != "pending" and order.user_id != getattr(actor, "id", None):
            notify_order_status_change(order, new_status, actor)

    logger.info("Order %s: %s -> %s by %s", order.id, old, new_status, getattr(actor, "id", None))
    return order


# ---------------------------------------------------------------------------
# Customer actions
# ---------------------------------------------------------------------------
def delete_pending_order(order: Order) -> None:
    """Remove an unpaid order and shrink (or expire) its checkout's payment."""
    with transaction.atomic():
        order = Order.objects.select_for_update().get(pk=order.pk)
        if order.status != "pending":
            raise OrderLocked("Only unpaid orders can be deleted.")
        tx_id = order.transaction_id
        order.delete()
        _reprice_checkout(tx_id)


def _reprice_checkout(tx_id: str) -> None:
    """Charge only the checkout's still-unpaid orders; expire the payment once none are left."""
    payment = Payment.objects.select_for_update().filter(transaction_id=tx_id, status="pending").first()
    if payment is None:
        return
    remaining = sum(
        Order.objects.filter(transaction_id=tx_id, status="pending").values_list("total_amount", flat=True)
    )
    if remaining == 0:
        payment.status = "expired"
        payment.save(update_fields=["status", "updated_at"])
    else:
        payment.amount = remaining + percent_of(remaining, payment.tax_rate)
        payment.save(update_fields=["amount", "updated_at"])


def report_delay(order: Order, now=None) -> Order:
    now = now or timezone.now()
    with transaction.atomic():
        order = Order.objects.select_for_update().select_related("service", "user").get(pk=order.pk)
        if order.status != "processing":
            raise DelayNotAllowed("Order must be in progress to report a delay.")
        if now < order.created_at + parse_duration(order.service.duration):
            raise DelayNotAllowed("Estimated completion time has not passed yet.")
        if order.last_notify_at and now < order.last_notify_at + REPORT_COOLDOWN:
            raise DelayNotAllowed("You can only report a delay once every 24 hours.")

        order.last_notify_at = now
        order.save(update_fields=["last_notify_at", "updated_at"])
        notify_order_delay(order)
    return order
