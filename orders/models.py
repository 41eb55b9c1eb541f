from __future__ import annotations

from django.conf import settings
from django.db import models

# ---------------------------------------------------------------------------
# Choices
# ---------------------------------------------------------------------------
STATUS_CHOICES = [
    ("pending", "Pending payment"),
    ("processing", "Processing"),
    ("completed", "Completed"),
    ("cancelled", "Cancelled"),
    ("failed", "Failed"),
]

COMMISSION_CHOICES = [
    ("none", "None"),
    ("pending", "Pending"),
    ("approved", "Approved"),
    ("requested", "Requested"),
    ("paid", "Paid"),
    ("cancelled", "Cancelled"),
]

# Forward-only lifecycle; completed / cancelled / failed are terminal
TRANSITIONS = {
    "pending": {"processing", "failed", "cancelled"},
    "processing": {"completed", "cancelled"},
    "completed": set(),
    "cancelled": set(),
    "failed": set(),
}


class InvalidTransition(Exception):
    def __init__(self, current: str, new: str):
        super().__init__(f"Cannot change order status from '{current}' to '{new}'.")
        self.current = current
        self.new = new


def can_transition(current: str, new: str) -> bool:
    return new in TRANSITIONS.get(current, set())


# ---------------------------------------------------------------------------
# Order (one per checkout line item)
# ---------------------------------------------------------------------------
class Order(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="orders")
    service = models.ForeignKey("services.Service", on_delete=models.PROTECT, related_name="orders")

    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default="pending")
    total_amount = models.PositiveIntegerField(help_text="USD cents, fixed at checkout from the catalog price")
    currency = models.CharField(max_length=8, default="USD")

    # Shared by every order of one checkout; the Payment row holds it uniquely
    transaction_id = models.CharField(max_length=64, db_index=True)
    details = models.JSONField(default=dict, blank=True)

    # Affiliate attribution
    affiliate = models.ForeignKey(
        "affiliates.Affiliate", on_delete=models.SET_NULL, null=True, blank=True, related_name="referred_orders",
    )
    commission_amount = models.PositiveIntegerField(default=0)
    commission_status = models.CharField(max_length=16, choices=COMMISSION_CHOICES, default="none")
    payout = models.ForeignKey(
        "affiliates.Payout", on_delete=models.SET_NULL, null=True, blank=True, related_name="orders",
    )

    last_notify_at = models.DateTimeField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("-created_at", "-id")
        indexes = [
            models.Index(fields=["status", "created_at"], name="order_status_created_idx"),
            models.Index(fields=["affiliate", "commission_status"], name="order_aff_commission_idx"),
        ]

    def __str__(self):
        return f"#{self.pk} {self.user_id} | {self.service_id} | {self.total_amount}c | {self.status}"

    def transition_to(self, new_status: str) -> str:
        """Set a new status in memory; the caller saves. Returns the old status."""
        old = self.status
        if not can_transition(old, new_status):
            raise InvalidTransition(old, new_status)
        self.status = new_status
        return old
