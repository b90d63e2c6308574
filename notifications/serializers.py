# ===========================================================
# notifications/serializers.py
# ===========================================================
from rest_framework import serializers

from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    type_display = serializers.CharField(source="get_notification_type_display", read_only=True)
    form_title = serializers.CharField(source="related_form.title", read_only=True, allow_null=True)

    class Meta:
        model = Notification
        fields = [
            "id",
            "title",
            "message",
            "notification_type",
            "type_display",
            "priority",
            "related_form",
            "form_title",
            "is_read",
            "read_at",
            "created_at",
        ]
        read_only_fields = fields


class NotificationMarkReadSerializer(serializers.Serializer):
    """Optional ids; an empty list means every unread notification."""

    notification_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1),
        required=False,
        default=list,
    )
