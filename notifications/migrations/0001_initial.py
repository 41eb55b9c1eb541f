import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("orders", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="EmailLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("to", models.EmailField(max_length=254)),
                ("subject", models.CharField(max_length=200)),
                ("body", models.TextField(blank=True)),
                ("status", models.CharField(choices=[("queued", "Queued"), ("sent", "Sent"), ("skipped", "Skipped"), ("failed", "Failed")], default="queued", max_length=16)),
                ("error", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "indexes": [models.Index(fields=["to", "created_at"], name="emaillog_to_created_idx")],
            },
        ),
        migrations.CreateModel(
            name="Notification",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("kind", models.CharField(choices=[("order_paid", "Order paid"), ("new_order", "New paid order (admin)"), ("order_status", "Order status changed"), ("order_delayed", "Order delay reported"), ("payout_requested", "Payout requested")], max_length=32)),
                ("title", models.CharField(max_length=120)),
                ("message", models.TextField(blank=True)),
                ("params", models.JSONField(blank=True, default=dict)),
                ("is_read", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("order", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name="notifications", to="orders.order")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="notifications", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ("-created_at", "-id"),
                "indexes": [models.Index(fields=["user", "is_read"], name="notif_user_read_idx")],
                "constraints": [
                    models.UniqueConstraint(condition=models.Q(("kind", "order_paid")), fields=("order", "kind"), name="uniq_order_paid_notification"),
                ],
            },
        ),
    ]
