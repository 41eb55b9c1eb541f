from __future__ import annotations

from django.contrib import admin, messages

from .models import Payment, GatewayLog
from .services import reverify


def _short(s, n=120):
    if s is None:
        return ""
    s = str(s)
    return s[:n] + ("..." if len(s) > n else "")


# -----------------------------
# Payments
# -----------------------------
@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("transaction_id", "user", "amount_display", "tax_rate", "method", "status", "paid_at", "created_at")
    search_fields = ("transaction_id", "gateway_reference", "user__email")
    list_filter = ("status", "method", "currency", "created_at")
    date_hierarchy = "created_at"
    ordering = ("-created_at",)
    readonly_fields = (
        "user", "transaction_id", "amount", "tax_rate", "currency", "method", "status",
        "gateway_reference", "redirect_url", "paid_at", "created_at", "updated_at",
    )
    actions = ("admin_reverify",)

    @admin.display(description="Amount")
    def amount_display(self, obj: Payment) -> str:
        return f"{obj.amount / 100:.2f} {obj.currency}"

    @admin.action(description="Re-verify with Payoneer")
    def admin_reverify(self, request, queryset):
        paid = 0
        for payment in queryset.filter(status="pending"):
            outcome = reverify(payment)
            if outcome.result == "paid":
                paid += 1
        self.message_user(request, f"Re-verify complete. {paid} payment(s) marked paid.", level=messages.INFO)


# -----------------------------
# Gateway logs
# -----------------------------
@admin.register(GatewayLog)
class GatewayLogAdmin(admin.ModelAdmin):
    list_display = ("provider", "transaction_id", "endpoint", "status_code", "timestamp", "response_preview")
    list_filter = ("provider", "status_code", "timestamp")
    search_fields = ("transaction_id", "endpoint", "status_code")
    date_hierarchy = "timestamp"
    ordering = ("-timestamp",)
    readonly_fields = (
        "user", "provider", "transaction_id", "endpoint", "request_payload",
        "response_payload", "status_code", "error_message", "timestamp",
    )

    @admin.display(description="Response")
    def response_preview(self, obj: GatewayLog) -> str:
        return _short(obj.response_payload)
