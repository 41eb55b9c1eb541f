# payments/models.py
from decimal import Decimal

from django.db import models
from django.conf import settings


class Payment(models.Model):
    """One payment per checkout; ``transaction_id`` is shared with its orders."""

    STATUS = [
        ("pending", "Pending"),
        ("paid", "Paid"),
        ("failed", "Failed"),
        ("expired", "Expired"),
        ("refunded", "Refunded"),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="payments")
    transaction_id = models.CharField(max_length=64, unique=True, db_index=True)

    # USD cents: order totals plus tax, fixed at checkout
    amount = models.PositiveIntegerField()
    tax_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal("0"))
    currency = models.CharField(max_length=8, default="USD")
    method = models.CharField(max_length=16, default="payoneer")
    status = models.CharField(max_length=16, choices=STATUS, default="pending")

    # Gateway fields
    gateway_reference = models.CharField(max_length=128, blank=True)
    redirect_url = models.URLField(max_length=500, blank=True)
    paid_at = models.DateTimeField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("-created_at", "-id")
        indexes = [models.Index(fields=["status", "created_at"], name="payment_status_created_idx")]

    def __str__(self):
        return f"{self.transaction_id} | {self.amount}c | {self.status}"


class GatewayLog(models.Model):
    """Gateway I/O audit with masked payloads where possible."""

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True)
    provider = models.CharField(max_length=32, default="payoneer")

    # Correlation
    transaction_id = models.CharField(max_length=64, blank=True, db_index=True)

    endpoint = models.CharField(max_length=128, blank=True)
    request_payload = models.JSONField(default=dict, blank=True)
    response_payload = models.JSONField(default=dict, blank=True)
    status_code = models.CharField(max_length=10, blank=True)
    error_message = models.CharField(max_length=255, blank=True)

    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("-timestamp",)
        indexes = [
            models.Index(fields=["provider", "timestamp"], name="gwlog_provider_ts_idx"),
            models.Index(fields=["status_code", "timestamp"], name="gwlog_status_ts_idx"),
        ]

    def __str__(self):
        return f"{self.provider} | {self.transaction_id or '-'} | {self.endpoint} | {self.status_code}"
