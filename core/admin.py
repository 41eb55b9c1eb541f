from django.contrib import admin
from .models import IdempotencyKey, SiteSetting


@admin.register(SiteSetting)
class SiteSettingAdmin(admin.ModelAdmin):
    list_display = ("key", "value", "updated_at")
    search_fields = ("key",)


@admin.register(IdempotencyKey)
class IdempotencyKeyAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "key", "success", "created_at")
    list_filter = ("success",)
    search_fields = ("key", "user__email")
    readonly_fields = ("user", "key", "success", "response_json", "created_at")
