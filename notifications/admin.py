# ===============================================
# notifications/admin.py
# ===============================================

from django.contrib import admin
from django.utils import timezone

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("id", "recipient", "title", "notification_type", "priority", "is_read", "created_at")
    list_filter = ("notification_type", "priority", "is_read")
    search_fields = ("title", "message", "recipient__university_id", "recipient__email")
    readonly_fields = ("read_at", "created_at")
    list_select_related = ("recipient",)
    ordering = ("-created_at",)
    actions = ["mark_selected_read"]

    @admin.action(description="Mark selected notifications as read")
    def mark_selected_read(self, request, queryset):
        count = queryset.filter(is_read=False).update(is_read=True, read_at=timezone.now())
        self.message_user(request, f"{count} notifications marked as read.")
