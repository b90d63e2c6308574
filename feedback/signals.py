# ===========================================================
# feedback/signals.py
# ===========================================================
"""
Signal handlers keeping form response counters in step with deletions.
"""

from django.db.models import F
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging

from .models import FeedbackForm, FeedbackResponse

logger = logging.getLogger(__name__)


@receiver(post_save, sender=FeedbackForm)
def form_saved_handler(sender, instance, created, **kwargs):
    if created:
        logger.info(f"[FeedbackForm] Created: {instance.id} targeting {instance.target_sections}")
    else:
        logger.info(f"[FeedbackForm] Updated: {instance.id} ({instance.status})")


@receiver(post_delete, sender=FeedbackResponse)
def response_deleted_handler(sender, instance, **kwargs):
    """
    Decrement the owning form's counter, never below zero.
    """
    logger.info(f"[FeedbackResponse] Deleted: {instance.id} (form {instance.form_id})")
    FeedbackForm.objects.filter(pk=instance.form_id, response_count__gt=0).update(
        response_count=F("response_count") - 1
    )
