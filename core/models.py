# core/models.py
from django.db import models
from django.conf import settings


class IdempotencyKey(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="idempotency_keys")
    key = models.CharField(max_length=128)
    success = models.BooleanField(default=False)
    response_json = models.JSONField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["user", "key"], name="uniq_idempotency_user_key"),
        ]

    def __str__(self):
        return f"{self.user_id}:{self.key} ({'done' if self.success else 'open'})"


class SiteSetting(models.Model):
    """Runtime-editable key/value settings (e.g. ``taxRate``)."""

    key = models.CharField(max_length=64, primary_key=True)
    value = models.CharField(max_length=255)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.key}={self.value}"

    @classmethod
    def get_value(cls, key: str, default=None):
        row = cls.objects.filter(key=key).only("value").first()
        return row.value if row else default
