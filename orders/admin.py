from __future__ import annotations

from django.contrib import admin

from services.pricing import format_cents
from .models import Order


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "transaction_id",
        "user",
        "service",
        "amount_display",
        "status",
        "commission_status",
        "created_at",
    )
    list_filter = ("status", "commission_status", "service__category", "created_at")
    search_fields = ("transaction_id", "user__email", "service__name")
    date_hierarchy = "created_at"
    ordering = ("-created_at",)
    readonly_fields = (
        "user",
        "status",
        "commission_status",
        "service",
        "total_amount",
        "currency",
        "transaction_id",
        "details",
        "affiliate",
        "commission_amount",
        "payout",
        "last_notify_at",
        "created_at",
        "updated_at",
    )

    @admin.display(description="Total", ordering="total_amount")
    def amount_display(self, obj: Order) -> str:
        return format_cents(obj.total_amount)
