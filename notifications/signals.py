# ===============================================
# notifications/signals.py
# ===============================================
"""
Signal handlers turning feedback events into notifications.

Handles:
- Form published to sections -> eligible students
- Response received on a form shown to faculty -> owning faculty
"""

from django.db.models.signals import post_save
from django.dispatch import receiver
import logging

from feedback.models import FeedbackForm, FeedbackResponse
from .models import Notification

logger = logging.getLogger(__name__)


@receiver(post_save, sender=FeedbackForm)
def notify_students_on_publish(sender, instance, **kwargs):
    """
    Tell eligible students about a form the first time it is saved as active.
    Drafts activated later are announced at that point.
    """
    if instance.status != FeedbackForm.STATUS_ACTIVE:
        return
    if Notification.objects.about_form(instance).filter(
        notification_type=Notification.TYPE_FEEDBACK_REMINDER
    ).exists():
        return

    students = instance.eligible_students()
    if not students:
        logger.info(f"Form {instance.pk} published; no students in {instance.target_sections}")
        return

    Notification.objects.create_for_users(
        students,
        title="New Feedback Form Available",
        message=f"{instance.title} is now available"[:255],
        notification_type=Notification.TYPE_FEEDBACK_REMINDER,
        related_form=instance,
    )


@receiver(post_save, sender=FeedbackResponse)
def notify_faculty_on_response(sender, instance, created, **kwargs):
    if not created:
        return
    form = instance.form
    if not form.show_to_faculty or not form.faculty_id:
        return

    Notification.objects.create(
        recipient_id=form.faculty_id,
        title="New Feedback Response",
        message=f"A student has submitted feedback for {form.title}"[:255],
        notification_type=Notification.TYPE_RESPONSE_RECEIVED,
        related_form=form,
    )
    logger.info(f"Faculty {form.faculty_id} notified of response {instance.pk} to form {form.pk}")
