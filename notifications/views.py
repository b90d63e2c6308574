# ===============================================
# notifications/views.py
# ===============================================

from rest_framework import generics, status
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from rest_framework.pagination import PageNumberPagination
from django.shortcuts import get_object_or_404
import logging

from .models import Notification
from .serializers import NotificationSerializer, NotificationMarkReadSerializer

logger = logging.getLogger(__name__)


# ===============================================================
# Pagination
# ===============================================================
class NotificationPagination(PageNumberPagination):
    page_size = 15
    page_size_query_param = "page_size"
    max_page_size = 100


# ===============================================================
# Notification List View (All Roles)
# ===============================================================
class NotificationListView(generics.ListAPIView):
    """
    Notifications of the logged-in user, newest first.

    Query Parameters:
      - status: unread|read|all (default: all)
      - type: feedback_reminder|response_received|system_update
    """
    serializer_class = NotificationSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = NotificationPagination

    def get_queryset(self):
        qs = Notification.objects.for_recipient(self.request.user).select_related("related_form")

        status_filter = self.request.query_params.get("status", "all").lower()
        if status_filter == "unread":
            qs = qs.unread()
        elif status_filter == "read":
            qs = qs.read()

        notification_type = self.request.query_params.get("type")
        if notification_type in dict(Notification.TYPE_CHOICES):
            qs = qs.filter(notification_type=notification_type)
        return qs.order_by("-created_at")


# ===============================================================
# Unread Count (badge)
# ===============================================================
class UnreadCountView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        count = Notification.objects.for_recipient(request.user).unread().count()
        return Response({"unread_count": count}, status=status.HTTP_200_OK)


# ===============================================================
# Mark Single Notification as Read
# ===============================================================
class MarkNotificationReadView(APIView):
    """
    PATCH /api/notifications/{id}/mark-read/
    Only the recipient may mark a notification; others get 404.
    """
    permission_classes = [IsAuthenticated]

    def patch(self, request, pk):
        notification = get_object_or_404(Notification, pk=pk, recipient=request.user)
        if not notification.mark_as_read():
            return Response(
                {"message": "Notification already marked as read.", "notification_id": pk},
                status=status.HTTP_200_OK,
            )
        return Response(
            {"message": "Notification marked as read.", "notification_id": pk},
            status=status.HTTP_200_OK,
        )


# ===============================================================
# Mark All/Multiple Notifications as Read
# ===============================================================
class BulkMarkReadView(APIView):
    """
    POST /api/notifications/mark-all-read/
    Body (optional): {"notification_ids": [1, 2, 3]}
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = NotificationMarkReadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        count = Notification.objects.mark_all_read(
            request.user, serializer.validated_data.get("notification_ids")
        )
        return Response(
            {"message": f"Marked {count} notifications as read.", "marked_read": count},
            status=status.HTTP_200_OK,
        )
