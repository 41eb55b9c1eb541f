import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.mail import send_mail

from services.pricing import format_cents
from .models import EmailLog, Notification

logger = logging.getLogger(__name__)


def _staff():
    return get_user_model().objects.filter(is_staff=True, is_active=True)


# ---- in-app -----------------------------------------------------------------

def notify_order_paid(order):
    """One ``order_paid`` row per order, however many times payment is confirmed."""
    note, created = Notification.objects.get_or_create(
        order=order,
        kind="order_paid",
        defaults={
            "user_id": order.user_id,
            "title": "notifications.orderPaidTitle",
            "message": f"Payment received for order #{order.id}. We are processing it now.",
            "params": {"orderId": order.id, "amount": format_cents(order.total_amount)},
        },
    )
    if created:
        for admin in _staff().exclude(pk=order.user_id):
            Notification.objects.create(
                user=admin,
                order=order,
                kind="new_order",
                title="notifications.newOrderAdminTitle",
                message=f"New paid order #{order.id} ({format_cents(order.total_amount)}).",
                params={"orderId": order.id, "amount": format_cents(order.total_amount)},
            )
    return note


def notify_order_status_change(order, new_status, actor=None):
    if actor is not None and order.user_id == getattr(actor, "id", None):
        return None
    return Notification.objects.create(
        user_id=order.user_id,
        order=order,
        kind="order_status",
        title="notifications.orderStatusTitle",
        message=f"Order #{order.id} is now {new_status}.",
        params={"orderId": order.id, "status": f"statusLabels.{new_status}"},
    )


def notify_order_delay(order):
    who = order.user.display_name
    rows = [
        Notification(
            user=admin,
            order=order,
            kind="order_delayed",
            title="notifications.orderDelayedTitle",
            message=f"{who} reported a delay on order #{order.id}.",
            params={"orderId": order.id, "serviceId": order.service_id, "userName": who},
        )
        for admin in _staff()
    ]
    Notification.objects.bulk_create(rows)
    return len(rows)


def notify_payout_requested(affiliate, amount=None):
    name = affiliate.user.display_name
    params = {"name": name}
    if amount is not None:
        params["amount"] = format_cents(amount)
    rows = [
        Notification(
            user=admin,
            kind="payout_requested",
            title="notifications.payoutRequestedTitle",
            message=f"{name} requested a commission payout.",
            params=params,
        )
        for admin in _staff()
    ]
    Notification.objects.bulk_create(rows)
    return len(rows)


# ---- email ------------------------------------------------------------------

def send_receipt_email(to_email: str, subject: str, body: str):
    log = EmailLog.objects.create(to=to_email, subject=subject, body=body, status="queued")
    try:
        # Only actually send against the live gateway
        if settings.PAYONEER_MODE == "live" and settings.RECEIPT_EMAILS_ENABLED:
            send_mail(subject, body, None, [to_email], fail_silently=False)
            log.status = "sent"
        else:
            log.status = "skipped"
    except Exception as e:
        log.status = "failed"
        log.error = str(e)
        logger.warning("Receipt email to %s failed: %s", to_email, e)
    finally:
        log.save()
    return log


def send_payment_receipt(payment, orders):
    """Best-effort receipt after a payment commits."""
    try:
        lines = [f"- #{o.id} {o.service.name}: {format_cents(o.total_amount)}" for o in orders]
        body = "\n".join([
            f"Thanks for your order. Transaction {payment.transaction_id}.",
            "",
            *lines,
            "",
            f"Total charged: {format_cents(payment.amount)} {payment.currency}",
        ])
        return send_receipt_email(payment.user.email, f"Receipt {payment.transaction_id}", body)
    except Exception:
        logger.exception("Receipt for %s could not be prepared", payment.transaction_id)
        return None
