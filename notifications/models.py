# ===========================================================
# notifications/models.py
# ===========================================================
"""
In-app notifications raised by feedback events.

- Students hear about forms published to their section
- Faculty hear about responses on forms they may read
"""

from django.db import models
from django.conf import settings
from django.utils import timezone
from django.core.exceptions import ValidationError
import logging

logger = logging.getLogger(__name__)


class NotificationQuerySet(models.QuerySet):
    """Custom QuerySet for common notification queries."""

    def unread(self):
        return self.filter(is_read=False)

    def read(self):
        return self.filter(is_read=True)

    def for_recipient(self, user):
        return self.filter(recipient=user)

    def about_form(self, form):
        return self.filter(related_form=form)


class NotificationManager(models.Manager):
    """Custom manager with helper methods for notifications."""

    def get_queryset(self):
        return NotificationQuerySet(self.model, using=self._db)

    def unread(self):
        return self.get_queryset().unread()

    def for_recipient(self, user):
        return self.get_queryset().for_recipient(user)

    def about_form(self, form):
        return self.get_queryset().about_form(form)

    def create_for_users(self, users, title, message, **kwargs):
        """
        One notification per user, inserted in a single query.

        Returns:
            List of created Notification instances
        """
        notifications = self.bulk_create(
            [self.model(recipient=user, title=title, message=message, **kwargs) for user in users]
        )
        logger.info(f"Created {len(notifications)} notifications: {title}")
        return notifications

    def mark_all_read(self, user, ids=None):
        """
        Mark the user's unread notifications as read, optionally only ``ids``.

        Returns:
            Number of notifications marked as read
        """
        qs = self.filter(recipient=user, is_read=False)
        if ids:
            qs = qs.filter(pk__in=ids)
        count = qs.update(is_read=True, read_at=timezone.now())
        logger.info(f"Marked {count} notifications as read for {user.university_id}")
        return count


class Notification(models.Model):
    """A message shown in one user's notification tray."""

    TYPE_FEEDBACK_REMINDER = "feedback_reminder"
    TYPE_RESPONSE_RECEIVED = "response_received"
    TYPE_SYSTEM_UPDATE = "system_update"

    TYPE_CHOICES = [
        (TYPE_FEEDBACK_REMINDER, "Feedback Reminder"),
        (TYPE_RESPONSE_RECEIVED, "Response Received"),
        (TYPE_SYSTEM_UPDATE, "System Update"),
    ]

    PRIORITY_LOW = "low"
    PRIORITY_MEDIUM = "medium"
    PRIORITY_HIGH = "high"

    PRIORITY_CHOICES = [
        (PRIORITY_LOW, "Low"),
        (PRIORITY_MEDIUM, "Medium"),
        (PRIORITY_HIGH, "High"),
    ]

    # =======================================================
    # Core Fields
    # =======================================================
    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
        help_text="User who will receive this notification.",
    )
    title = models.CharField(max_length=200)
    message = models.CharField(max_length=255)
    notification_type = models.CharField(max_length=30, choices=TYPE_CHOICES, db_index=True)
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default=PRIORITY_MEDIUM)
    related_form = models.ForeignKey(
        "feedback.FeedbackForm",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="notifications",
    )

    # =======================================================
    # Status Fields
    # =======================================================
    is_read = models.BooleanField(default=False, db_index=True)
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    objects = NotificationManager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["recipient", "is_read"], name="notif_recipient_read_idx"),
        ]

    def clean(self):
        super().clean()
        if self.read_at and not self.is_read:
            raise ValidationError({"read_at": "read_at can only be set when is_read is True"})

    def mark_as_read(self):
        if self.is_read:
            return False
        self.is_read = True
        self.read_at = timezone.now()
        self.save(update_fields=["is_read", "read_at"])
        return True

    def __str__(self):
        status = "read" if self.is_read else "unread"
        return f"[{status}] {self.recipient_id}: {self.title}"
