import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("services", "0001_initial"),
        ("affiliates", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("status", models.CharField(choices=[("pending", "Pending payment"), ("processing", "Processing"), ("completed", "Completed"), ("cancelled", "Cancelled"), ("failed", "Failed")], default="pending", max_length=16)),
                ("total_amount", models.PositiveIntegerField(help_text="USD cents, fixed at checkout from the catalog price")),
                ("currency", models.CharField(default="USD", max_length=8)),
                ("transaction_id", models.CharField(db_index=True, max_length=64)),
                ("details", models.JSONField(blank=True, default=dict)),
                ("commission_amount", models.PositiveIntegerField(default=0)),
                ("commission_status", models.CharField(choices=[("none", "None"), ("pending", "Pending"), ("approved", "Approved"), ("requested", "Requested"), ("paid", "Paid"), ("cancelled", "Cancelled")], default="none", max_length=16)),
                ("last_notify_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("affiliate", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="referred_orders", to="affiliates.affiliate")),
                ("payout", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="orders", to="affiliates.payout")),
                ("service", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="orders", to="services.service")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="orders", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ("-created_at", "-id"),
                "indexes": [
                    models.Index(fields=["status", "created_at"], name="order_status_created_idx"),
                    models.Index(fields=["affiliate", "commission_status"], name="order_aff_commission_idx"),
                ],
            },
        ),
    ]
