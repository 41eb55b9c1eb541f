from django.contrib import admin, messages

from .models import Affiliate, Payout
from .services import payout_affiliate


@admin.register(Affiliate)
class AffiliateAdmin(admin.ModelAdmin):
    list_display = ("referral_code", "user", "commission_rate", "is_active", "created_at")
    search_fields = ("referral_code", "user__email")
    list_filter = ("is_active",)
    actions = ("admin_pay_requested",)

    @admin.action(description="Pay out requested commissions")
    def admin_pay_requested(self, request, queryset):
        total = 0
        for affiliate in queryset:
            total += payout_affiliate(affiliate.id)
        self.message_user(request, f"Payout complete. {total} order commission(s) marked paid.", level=messages.INFO)


@admin.register(Payout)
class PayoutAdmin(admin.ModelAdmin):
    list_display = ("id", "affiliate", "amount", "method", "status", "transaction_id", "created_at")
    list_filter = ("method", "status", "created_at")
    search_fields = ("affiliate__referral_code", "transaction_id")
    readonly_fields = ("affiliate", "amount", "currency", "method", "status", "details", "transaction_id", "created_at", "updated_at")
