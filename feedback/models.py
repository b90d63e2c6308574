# ===========================================================
# feedback/models.py
# ===========================================================
"""
Feedback forms published by faculty and the responses students submit.

- Forms target one or more class sections
- Questions are stored inline as JSON (rating / text / multiple choice)
- One response per student per form
"""

import uuid
import logging

from django.db import models
from django.db.models import Q
from django.conf import settings
from django.utils import timezone
from django.core.exceptions import ValidationError

from .sections import SectionMatcher, normalize_section

logger = logging.getLogger(__name__)

User = settings.AUTH_USER_MODEL

# -----------------------------------------------------------
# Constants
# -----------------------------------------------------------
RATING_MIN = 1
RATING_MAX = 5

QUESTION_RATING = "rating"
QUESTION_TEXT = "text"
QUESTION_MULTIPLE_CHOICE = "multiple_choice"
QUESTION_TYPES = (QUESTION_RATING, QUESTION_TEXT, QUESTION_MULTIPLE_CHOICE)


# ===========================================================
# Custom QuerySet and Manager
# ===========================================================
class FeedbackFormQuerySet(models.QuerySet):
    """Custom queryset for feedback form filtering."""

    def active(self):
        return self.filter(status=FeedbackForm.STATUS_ACTIVE)

    def open_at(self, when=None):
        """Forms whose schedule window contains ``when`` (default: now)."""
        when = when or timezone.now()
        return self.filter(open_date__lte=when).filter(
            Q(close_date__isnull=True) | Q(close_date__gte=when)
        )

    def for_faculty(self, user):
        return self.filter(faculty=user)

    def with_active_faculty(self):
        """Drop orphaned forms and forms owned by deactivated faculty."""
        return self.filter(faculty__isnull=False, faculty__is_active=True)


class FeedbackFormManager(models.Manager):
    def get_queryset(self):
        return FeedbackFormQuerySet(self.model, using=self._db)

    def active(self):
        return self.get_queryset().active()

    def available_now(self):
        """Active, inside the schedule window and owned by active faculty."""
        return self.get_queryset().active().open_at().with_active_faculty()


# ===========================================================
# Feedback Form
# ===========================================================
class FeedbackForm(models.Model):
    """A questionnaire a faculty member publishes to some sections."""

    TYPE_CHOICES = [
        ("lecture", "Lecture"),
        ("unit", "Unit"),
        ("module", "Module"),
        ("semester", "Semester"),
        ("module_bank", "Module Bank"),
    ]

    STATUS_DRAFT = "draft"
    STATUS_ACTIVE = "active"
    STATUS_CLOSED = "closed"
    STATUS_ARCHIVED = "archived"

    STATUS_CHOICES = [
        (STATUS_DRAFT, "Draft"),
        (STATUS_ACTIVE, "Active"),
        (STATUS_CLOSED, "Closed"),
        (STATUS_ARCHIVED, "Archived"),
    ]

    # =======================================================
    # Core Fields
    # =======================================================
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    form_type = models.CharField(max_length=20, choices=TYPE_CHOICES)

    faculty = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name="feedback_forms",
        help_text="Faculty member who owns this form.",
    )
    department = models.CharField(max_length=100)
    course_name = models.CharField(max_length=200)
    course_code = models.CharField(max_length=50, blank=True)

    target_sections = models.JSONField(
        default=list,
        blank=True,
        help_text='Sections allowed to answer, e.g. ["2B", "2C"].',
    )
    questions = models.JSONField(default=list, blank=True)

    # =======================================================
    # Settings
    # =======================================================
    is_anonymous = models.BooleanField(default=True)
    allow_comments = models.BooleanField(default=True)
    show_to_faculty = models.BooleanField(
        default=False,
        help_text="Let the owning faculty read individual responses.",
    )

    # =======================================================
    # Schedule & Status
    # =======================================================
    open_date = models.DateTimeField(default=timezone.now, db_index=True)
    close_date = models.DateTimeField(null=True, blank=True, db_index=True)
    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_DRAFT,
        db_index=True,
    )
    response_count = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = FeedbackFormManager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["faculty", "status"], name="form_faculty_status_idx"),
            models.Index(fields=["status", "close_date"], name="form_status_close_idx"),
        ]

    def __str__(self):
        return f"{self.title} ({self.course_name}) [{self.status}]"

    # =======================================================
    # Validation
    # =======================================================
    def clean(self):
        super().clean()

        if self.close_date and self.open_date and self.close_date < self.open_date:
            raise ValidationError({"close_date": "Close date cannot be before the open date."})

        if not isinstance(self.target_sections, list):
            raise ValidationError({"target_sections": "Target sections must be a list."})

        if not isinstance(self.questions, list):
            raise ValidationError({"questions": "Questions must be a list."})
        for question in self.questions:
            if not isinstance(question, dict) or not question.get("question_text"):
                raise ValidationError({"questions": "Every question needs question_text."})
            if question.get("type", QUESTION_RATING) not in QUESTION_TYPES:
                raise ValidationError({"questions": f"Unknown question type {question.get('type')!r}."})

    def save(self, *args, **kwargs):
        """Normalize target sections and assign question ids."""
        if isinstance(self.target_sections, list):
            self.target_sections = [
                s for s in (normalize_section(raw) for raw in self.target_sections) if s
            ]

        if isinstance(self.questions, list):
            for question in self.questions:
                if isinstance(question, dict):
                    question.setdefault("question_id", uuid.uuid4().hex)
                    question.setdefault("type", QUESTION_RATING)
                    question.setdefault("options", [])
                    question.setdefault("required", True)

        super().save(*args, **kwargs)

    # =======================================================
    # Helpers
    # =======================================================
    def is_open(self, when=None):
        when = when or timezone.now()
        if self.status != self.STATUS_ACTIVE:
            return False
        if self.open_date and self.open_date > when:
            return False
        return self.close_date is None or self.close_date >= when

    def eligible_students(self, matcher=None):
        """Active students of the form's department whose section it targets."""
        from django.contrib.auth import get_user_model

        matcher = matcher or SectionMatcher()
        students = get_user_model().objects.filter(
            role="student", is_active=True, department__iexact=self.department
        ).exclude(section="")
        return [s for s in students if matcher.matches(s.section, self.target_sections)]

    def increment_response_count(self):
        FeedbackForm.objects.filter(pk=self.pk).update(response_count=models.F("response_count") + 1)
        self.refresh_from_db(fields=["response_count"])


# ===========================================================
# Feedback Response
# ===========================================================
class FeedbackResponse(models.Model):
    """One student's answers to one form."""

    form = models.ForeignKey(FeedbackForm, on_delete=models.CASCADE, related_name="responses")
    student = models.ForeignKey(User, on_delete=models.CASCADE, related_name="feedback_responses")
    is_anonymous = models.BooleanField(default=True)
    answers = models.JSONField(default=list)

    time_spent = models.PositiveIntegerField(null=True, blank=True, help_text="Seconds spent on the form.")
    device = models.CharField(max_length=255, blank=True)
    submitted_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        ordering = ["-submitted_at"]
        constraints = [
            models.UniqueConstraint(fields=["form", "student"], name="unique_response_per_student"),
        ]

    def __str__(self):
        return f"Response to {self.form_id} by {self.student_id}"

    def rating_values(self):
        return [
            a["rating"] for a in self.answers
            if a.get("type") == QUESTION_RATING and a.get("rating") is not None
        ]

    def average_rating(self):
        ratings = self.rating_values()
        if not ratings:
            return None
        return round(sum(ratings) / len(ratings), 2)
