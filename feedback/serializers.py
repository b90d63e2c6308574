# ===========================================================
# feedback/serializers.py
# ===========================================================
"""
Serializers for feedback forms, submissions and responses.
"""

import math

from rest_framework import serializers
from django.contrib.auth import get_user_model
from django.utils import timezone

from .models import (
    FeedbackForm,
    FeedbackResponse,
    RATING_MIN,
    RATING_MAX,
    QUESTION_RATING,
    QUESTION_MULTIPLE_CHOICE,
    QUESTION_TYPES,
)
from .sections import normalize_section

User = get_user_model()


# ===========================================================
# Simple User Serializer (Reusable)
# ===========================================================
class SimpleUserSerializer(serializers.ModelSerializer):
    """Lightweight user serializer for nested representations."""

    full_name = serializers.SerializerMethodField(read_only=True)

    class Meta:
        model = User
        fields = ["id", "university_id", "first_name", "last_name", "full_name", "email", "role"]

    def get_full_name(self, obj):
        return obj.get_full_name() or obj.university_id


class StudentSummarySerializer(SimpleUserSerializer):
    class Meta(SimpleUserSerializer.Meta):
        fields = SimpleUserSerializer.Meta.fields + ["department", "semester", "section", "roll_number"]


# ===========================================================
# Question Serializer
# ===========================================================
class QuestionSerializer(serializers.Serializer):
    question_id = serializers.CharField(required=False, max_length=64)
    question_text = serializers.CharField()
    type = serializers.ChoiceField(choices=QUESTION_TYPES, default=QUESTION_RATING)
    options = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    required = serializers.BooleanField(default=True)

    def validate(self, attrs):
        if attrs["type"] == QUESTION_MULTIPLE_CHOICE and not attrs.get("options"):
            raise serializers.ValidationError(
                {"options": "Multiple choice questions need at least one option."}
            )
        return attrs


# ===========================================================
# Feedback Form Serializer (Full Detail)
# ===========================================================
class FeedbackFormSerializer(serializers.ModelSerializer):
    faculty = SimpleUserSerializer(read_only=True)
    faculty_name = serializers.SerializerMethodField(read_only=True)
    target_sections = serializers.ListField(
        child=serializers.CharField(allow_blank=True, trim_whitespace=True),
        allow_empty=False,
    )
    questions = serializers.ListField(child=serializers.DictField(), required=False)
    status_display = serializers.CharField(source="get_status_display", read_only=True)
    is_open = serializers.SerializerMethodField(read_only=True)

    class Meta:
        model = FeedbackForm
        fields = [
            "id",
            "title",
            "description",
            "form_type",
            "faculty",
            "faculty_name",
            "department",
            "course_name",
            "course_code",
            "target_sections",
            "questions",
            "is_anonymous",
            "allow_comments",
            "show_to_faculty",
            "open_date",
            "close_date",
            "status",
            "status_display",
            "is_open",
            "response_count",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["faculty", "response_count", "created_at", "updated_at"]

    def get_faculty_name(self, obj):
        return obj.faculty.get_full_name() if obj.faculty_id else None

    def get_is_open(self, obj):
        return obj.is_open()

    def validate_target_sections(self, value):
        sections = [normalize_section(s) for s in value]
        sections = [s for s in sections if s]
        if not sections:
            raise serializers.ValidationError("At least one target section is required.")
        return sections

    def validate_questions(self, value):
        serializer = QuestionSerializer(data=value, many=True)
        serializer.is_valid(raise_exception=True)
        return [dict(q) for q in serializer.validated_data]

    def validate(self, attrs):
        open_date = attrs.get("open_date", getattr(self.instance, "open_date", None))
        close_date = attrs.get("close_date", getattr(self.instance, "close_date", None))
        if open_date and close_date and close_date < open_date:
            raise serializers.ValidationError({"close_date": "Close date cannot be before the open date."})
        return attrs

    def create(self, validated_data):
        request = self.context.get("request")
        if request and request.user.is_authenticated:
            validated_data["faculty"] = request.user

        # Auto-activate when no explicit status is given and the form is already open
        if "status" not in validated_data:
            open_date = validated_data.get("open_date") or timezone.now()
            if open_date <= timezone.now():
                validated_data["status"] = FeedbackForm.STATUS_ACTIVE

        return super().create(validated_data)

    def update(self, instance, validated_data):
        # Edited questions keep the id of the question they replace, by position,
        # so answers already stored still line up with them.
        questions = validated_data.get("questions")
        if questions is not None:
            previous = instance.questions or []
            for index, question in enumerate(questions):
                if not question.get("question_id") and index < len(previous):
                    old_id = previous[index].get("question_id")
                    if old_id:
                        question["question_id"] = old_id
        return super().update(instance, validated_data)


# ===========================================================
# List Serializer (Lightweight)
# ===========================================================
class FeedbackFormListSerializer(serializers.ModelSerializer):
    faculty_name = serializers.SerializerMethodField()
    question_count = serializers.SerializerMethodField()

    class Meta:
        model = FeedbackForm
        fields = [
            "id",
            "title",
            "form_type",
            "faculty",
            "faculty_name",
            "department",
            "course_name",
            "course_code",
            "target_sections",
            "question_count",
            "open_date",
            "close_date",
            "status",
            "response_count",
            "created_at",
        ]

    def get_faculty_name(self, obj):
        return obj.faculty.get_full_name() if obj.faculty_id else None

    def get_question_count(self, obj):
        return len(obj.questions or [])


class StudentFormSerializer(FeedbackFormListSerializer):
    """Form as shown on a student's active list (questions included)."""

    class Meta(FeedbackFormListSerializer.Meta):
        fields = FeedbackFormListSerializer.Meta.fields + [
            "description",
            "questions",
            "is_anonymous",
            "allow_comments",
        ]


# ===========================================================
# Submission
# ===========================================================
class FeedbackSubmissionSerializer(serializers.Serializer):
    form_id = serializers.IntegerField()
    responses = serializers.ListField(child=serializers.DictField(), required=False, default=list)
    time_spent = serializers.IntegerField(required=False, allow_null=True, min_value=0)


def _first_present(data, *keys):
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


def _coerce_number(value):
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def build_answers(form, responses):
    """
    Match incoming answers to the form's questions and validate them.

    Answers carrying a ``question_id`` are matched by id, the rest by list position.
    Raises ``serializers.ValidationError`` naming the first bad question.
    """
    by_key = {}
    for index, incoming in enumerate(responses):
        if not incoming:
            continue
        if incoming.get("question_id") is not None:
            by_key[str(incoming["question_id"])] = incoming
        else:
            by_key.setdefault(f"#{index}", incoming)

    answers = []
    for index, question in enumerate(form.questions):
        question_id = str(question.get("question_id", index))
        incoming = by_key.get(question_id) or by_key.get(f"#{index}") or {}
        q_type = question.get("type", QUESTION_RATING)
        q_text = question.get("question_text", "")
        required = question.get("required", True)

        answer = {"question_id": question_id, "question_text": q_text, "type": q_type}

        if q_type == QUESTION_RATING:
            parsed = _coerce_number(_first_present(incoming, "rating", "answer", "value", "score"))
            rating = None
            if parsed is not None:
                rating = min(RATING_MAX, max(RATING_MIN, int(math.floor(parsed + 0.5))))
                answer["rating"] = rating
            if required and rating is None:
                raise serializers.ValidationError({"responses": f'Rating required for question "{q_text}"'})
            answer["answer"] = rating

        elif q_type == QUESTION_MULTIPLE_CHOICE:
            raw = _first_present(incoming, "selected_option", "answer", "value")
            option = None
            if raw is not None:
                option = str(raw)
                options = question.get("options") or []
                if options and option not in options:
                    raise serializers.ValidationError(
                        {"responses": f'Invalid option selected for question "{q_text}"'}
                    )
                answer["selected_option"] = option
            if required and not option:
                raise serializers.ValidationError(
                    {"responses": f'An option must be selected for question "{q_text}"'}
                )
            answer["answer"] = option

        else:
            raw = _first_present(incoming, "text_response", "answer", "value")
            text = str(raw).strip() if raw is not None else ""
            if required and not text:
                raise serializers.ValidationError({"responses": f'Response required for question "{q_text}"'})
            answer["text_response"] = text
            answer["answer"] = text

        answers.append(answer)
    return answers


# ===========================================================
# Response Serializers
# ===========================================================
class FeedbackResponseSerializer(serializers.ModelSerializer):
    student = serializers.SerializerMethodField()
    average_rating = serializers.SerializerMethodField()

    class Meta:
        model = FeedbackResponse
        fields = [
            "id",
            "form",
            "student",
            "is_anonymous",
            "answers",
            "average_rating",
            "time_spent",
            "submitted_at",
        ]

    def get_student(self, obj):
        if self.context.get("anonymize"):
            return None
        return StudentSummarySerializer(obj.student).data

    def get_average_rating(self, obj):
        return obj.average_rating()


class FeedbackHistorySerializer(serializers.ModelSerializer):
    """A student's own submission, with the form it answered."""

    form_id = serializers.IntegerField(source="form.id", read_only=True)
    title = serializers.CharField(source="form.title", read_only=True)
    course_name = serializers.CharField(source="form.course_name", read_only=True)
    course_code = serializers.CharField(source="form.course_code", read_only=True)
    form_type = serializers.CharField(source="form.form_type", read_only=True)
    average_rating = serializers.SerializerMethodField()

    class Meta:
        model = FeedbackResponse
        fields = [
            "id",
            "form_id",
            "title",
            "course_name",
            "course_code",
            "form_type",
            "submitted_at",
            "answers",
            "average_rating",
        ]

    def get_average_rating(self, obj):
        return obj.average_rating()
