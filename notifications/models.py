from django.conf import settings
from django.db import models
from django.db.models import Q

KIND_CHOICES = [
    ("order_paid", "Order paid"),
    ("new_order", "New paid order (admin)"),
    ("order_status", "Order status changed"),
    ("order_delayed", "Order delay reported"),
    ("payout_requested", "Payout requested"),
]


class Notification(models.Model):
    """
    In-app notification. ``title`` is a translation key; ``params`` carries
    the values the storefront interpolates into it.
    """

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="notifications")
    order = models.ForeignKey(
        "orders.Order", on_delete=models.CASCADE, null=True, blank=True, related_name="notifications"
    )
    kind = models.CharField(max_length=32, choices=KIND_CHOICES)
    title = models.CharField(max_length=120)
    message = models.TextField(blank=True)
    params = models.JSONField(default=dict, blank=True)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("-created_at", "-id")
        indexes = [models.Index(fields=["user", "is_read"], name="notif_user_read_idx")]
        constraints = [
            models.UniqueConstraint(
                fields=["order", "kind"],
                condition=Q(kind="order_paid"),
                name="uniq_order_paid_notification",
            ),
        ]

    def __str__(self):
        return f"{self.user_id} | {self.kind} | {self.title}"


class EmailLog(models.Model):
    to = models.EmailField()
    subject = models.CharField(max_length=200)
    body = models.TextField(blank=True)
    status = models.CharField(max_length=16, choices=[("queued","Queued"),("sent","Sent"),("skipped","Skipped"),("failed","Failed")], default="queued")
    error = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [models.Index(fields=["to", "created_at"], name="emaillog_to_created_idx")]

    def __str__(self):
        return f"{self.to} [{self.status}] {self.subject}"
