from __future__ import annotations

from django.contrib import admin

from .models import Service, Review
from .pricing import format_cents


@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "category", "price_display", "duration", "is_active", "has_file", "updated_at")
    list_filter = ("category", "is_active")
    search_fields = ("name", "name_en", "description")
    ordering = ("category", "price")
    actions = ("activate", "deactivate")

    @admin.display(description="Price", ordering="price")
    def price_display(self, obj: Service) -> str:
        return format_cents(obj.price)

    @admin.display(description="File", boolean=True)
    def has_file(self, obj: Service) -> bool:
        return bool(obj.digital_file)

    @admin.action(description="Activate selected services")
    def activate(self, request, queryset):
        n = queryset.update(is_active=True)
        self.message_user(request, f"Activated {n} service(s).")

    @admin.action(description="Deactivate selected services")
    def deactivate(self, request, queryset):
        n = queryset.update(is_active=False)
        self.message_user(request, f"Deactivated {n} service(s).")


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ("id", "service", "user", "rating", "created_at")
    list_filter = ("rating", "created_at")
    search_fields = ("service__name", "user__email", "comment")
    date_hierarchy = "created_at"
