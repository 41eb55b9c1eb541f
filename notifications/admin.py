from django.contrib import admin
from .models import EmailLog, Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "kind", "title", "order", "is_read", "created_at")
    search_fields = ("user__email", "title", "message")
    list_filter = ("kind", "is_read", "created_at")
    date_hierarchy = "created_at"


@admin.register(EmailLog)
class EmailLogAdmin(admin.ModelAdmin):
    list_display = ("id", "to", "subject", "status", "created_at")
    search_fields = ("to", "subject")
    list_filter = ("status", "created_at")
    date_hierarchy = "created_at"
