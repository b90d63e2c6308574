# ===============================================
# notifications/urls.py
# ===============================================
"""
Notification Endpoints:
-------------------------------------------------------------
GET    /api/notifications/                  → List own notifications (?status=unread|read)
GET    /api/notifications/unread-count/     → Unread count (for badge)
PATCH  /api/notifications/<id>/mark-read/   → Mark one as read
POST   /api/notifications/mark-all-read/    → Mark all (or the given ids) as read
-------------------------------------------------------------
All endpoints require authentication.
"""

from django.urls import path
from .views import (
    NotificationListView,
    UnreadCountView,
    MarkNotificationReadView,
    BulkMarkReadView,
)

app_name = "notifications"

urlpatterns = [
    path("", NotificationListView.as_view(), name="notification_list"),
    path("unread-count/", UnreadCountView.as_view(), name="unread_count"),
    path("<int:pk>/mark-read/", MarkNotificationReadView.as_view(), name="mark_read"),
    path("mark-all-read/", BulkMarkReadView.as_view(), name="mark_all_read"),
]
