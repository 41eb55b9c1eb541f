import decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Payment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("transaction_id", models.CharField(db_index=True, max_length=64, unique=True)),
                ("amount", models.PositiveIntegerField()),
                ("tax_rate", models.DecimalField(decimal_places=2, default=decimal.Decimal("0"), max_digits=5)),
                ("currency", models.CharField(default="USD", max_length=8)),
                ("method", models.CharField(default="payoneer", max_length=16)),
                ("status", models.CharField(choices=[("pending", "Pending"), ("paid", "Paid"), ("failed", "Failed"), ("expired", "Expired"), ("refunded", "Refunded")], default="pending", max_length=16)),
                ("gateway_reference", models.CharField(blank=True, max_length=128)),
                ("redirect_url", models.URLField(blank=True, max_length=500)),
                ("paid_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="payments", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ("-created_at", "-id"),
                "indexes": [models.Index(fields=["status", "created_at"], name="payment_status_created_idx")],
            },
        ),
        migrations.CreateModel(
            name="GatewayLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("provider", models.CharField(default="payoneer", max_length=32)),
                ("transaction_id", models.CharField(blank=True, db_index=True, max_length=64)),
                ("endpoint", models.CharField(blank=True, max_length=128)),
                ("request_payload", models.JSONField(blank=True, default=dict)),
                ("response_payload", models.JSONField(blank=True, default=dict)),
                ("status_code", models.CharField(blank=True, max_length=10)),
                ("error_message", models.CharField(blank=True, max_length=255)),
                ("timestamp", models.DateTimeField(auto_now_add=True)),
                ("user", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ("-timestamp",),
                "indexes": [
                    models.Index(fields=["provider", "timestamp"], name="gwlog_provider_ts_idx"),
                    models.Index(fields=["status_code", "timestamp"], name="gwlog_status_ts_idx"),
                ],
            },
        ),
    ]
