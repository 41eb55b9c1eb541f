from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator, MinLengthValidator
from django.db import models


class Affiliate(models.Model):
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="affiliate")
    referral_code = models.CharField(max_length=32, unique=True, validators=[MinLengthValidator(3)])
    # Percent of each referred order's total
    commission_rate = models.DecimalField(
        max_digits=5, decimal_places=2, default=Decimal("10"),
        validators=[MinValueValidator(0), MaxValueValidator(100)],
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("-created_at",)

    def __str__(self):
        return f"{self.referral_code} ({self.user})"


class Payout(models.Model):
    METHOD_CHOICES = [("manual", "Manual"), ("payoneer", "Payoneer")]
    STATUS_CHOICES = [("pending", "Pending"), ("completed", "Completed"), ("failed", "Failed")]

    affiliate = models.ForeignKey(Affiliate, on_delete=models.CASCADE, related_name="payouts")
    amount = models.PositiveIntegerField()  # cents
    currency = models.CharField(max_length=8, default="USD")
    method = models.CharField(max_length=16, choices=METHOD_CHOICES, default="manual")
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default="pending")
    details = models.JSONField(default=dict, blank=True)
    transaction_id = models.CharField(max_length=128, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("-created_at", "-id")
        indexes = [models.Index(fields=["affiliate", "status"], name="payout_aff_status_idx")]

    def __str__(self):
        return f"payout #{self.pk} {self.affiliate.referral_code} {self.amount}c {self.status}"
