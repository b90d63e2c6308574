# ===============================================
# notifications/apps.py
# ===============================================
# App configuration for in-app notifications.
# Feedback triggers are connected in ready().
# ===============================================

from django.apps import AppConfig


class NotificationsConfig(AppConfig):
    """AppConfig for the Notifications module."""
    default_auto_field = "django.db.models.BigAutoField"
    name = "notifications"
    verbose_name = "User Notifications"

    def ready(self):
        from . import signals  # noqa: F401
