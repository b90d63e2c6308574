# ===============================================
# feedback/apps.py
# ===============================================
# Defines the configuration for the 'feedback' app.
# Signal handlers are connected in ready().
# ===============================================

from django.apps import AppConfig


class FeedbackConfig(AppConfig):
    """AppConfig for course feedback forms and responses."""
    default_auto_field = "django.db.models.BigAutoField"
    name = "feedback"
    verbose_name = "Course Feedback Management"

    def ready(self):
        from . import signals  # noqa: F401
