# orders/signals
from __future__ import annotations

from django.db.models.signals import pre_save, post_save
from django.dispatch import receiver

from .models import Order


def commission_after(status: str, commission_status: str) -> str:
    """Commission state implied by an order reaching ``status``."""
    if commission_status == "none":
        return commission_status
    if status == "completed" and commission_status == "pending":
        return "approved"
    if status in {"cancelled", "failed"} and commission_status in {"pending", "approved"}:
        return "cancelled"
    return commission_status


# ---------------------------------------------------------------------------
# Capture previous status so we only act on transitions
# ---------------------------------------------------------------------------

@receiver(pre_save, sender=Order)
def _order_presave(sender, instance: Order, **kwargs):
    if not getattr(instance, "pk", None):
        instance._old_status = None
        return
    try:
        instance._old_status = sender.objects.only("status").get(pk=instance.pk).status
    except sender.DoesNotExist:
        instance._old_status = None


# ---------------------------------------------------------------------------
# Post-save: keep the affiliate commission in step with the order
# ---------------------------------------------------------------------------

@receiver(post_save, sender=Order)
def on_order_status_change(sender, instance: Order, created, **kwargs):
    old = getattr(instance, "_old_status", None)
    if created or old is None or old == instance.status or not instance.affiliate_id:
        return
    new_commission = commission_after(instance.status, instance.commission_status)
    if new_commission != instance.commission_status:
        sender.objects.filter(pk=instance.pk).update(commission_status=new_commission)
        instance.commission_status = new_commission
