# ===========================================================
# feedback/views.py
# ===========================================================
"""
Feedback views:
- Form CRUD for faculty and admins
- Active form listing for students (section matched, with fallback)
- Response submission, history and stats for students
- Responses, analytics and Excel export for faculty and admins
- Department, course and faculty analytics for department admins
"""

from rest_framework import viewsets, permissions, filters, status
from rest_framework.decorators import action
from rest_framework.views import APIView
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend
from django.contrib.auth import get_user_model
from django.db import transaction, IntegrityError
from django.shortcuts import get_object_or_404
import logging

from users.permissions import IsStudent, IsFaculty, IsDepartmentAdmin
from .models import FeedbackForm, FeedbackResponse
from .serializers import (
    FeedbackFormSerializer,
    FeedbackFormListSerializer,
    StudentFormSerializer,
    FeedbackSubmissionSerializer,
    FeedbackResponseSerializer,
    FeedbackHistorySerializer,
    build_answers,
)
from .permissions import (
    CanCreateForm,
    IsFormOwnerOrAdmin,
    CanViewFormResponses,
    CanViewFormAnalytics,
)
from .sections import SectionMatcher, normalize_section
from .utils_export import generate_responses_excel
from . import analytics as form_analytics

logger = logging.getLogger(__name__)
User = get_user_model()


# ===========================================================
# Helper Functions
# ===========================================================
def forms_for_student(student, matcher=None):
    """
    Forms a student should see right now.

    Returns ``(forms, section_match)``. When no available form targets the
    student's section, every available form is returned and
    ``section_match`` is False so the client can flag them.
    """
    if not normalize_section(student.section):
        return [], False

    matcher = matcher or SectionMatcher()
    candidates = list(
        FeedbackForm.objects.available_now().select_related("faculty").order_by("-created_at")
    )
    matched = [f for f in candidates if matcher.matches(student.section, f.target_sections)]
    if matched:
        return matched, True

    if candidates:
        logger.warning(
            f"No form targets section {student.section!r} of {student.university_id}; "
            f"falling back to all {len(candidates)} active forms"
        )
    return candidates, False


# ===========================================================
# Feedback Form ViewSet
# ===========================================================
class FeedbackFormViewSet(viewsets.ModelViewSet):
    """
    List: GET /api/feedback/forms/
    Create: POST /api/feedback/forms/
    Detail: GET /api/feedback/forms/{id}/
    Update: PUT/PATCH /api/feedback/forms/{id}/
    Delete: DELETE /api/feedback/forms/{id}/

    Actions:
    - GET /api/feedback/forms/{id}/responses/
    - GET /api/feedback/forms/{id}/analytics/
    - GET /api/feedback/forms/{id}/export/
    """

    queryset = FeedbackForm.objects.select_related("faculty")
    serializer_class = FeedbackFormSerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ["status", "form_type", "department", "course_code"]
    search_fields = ["title", "course_name", "course_code"]
    ordering_fields = ["created_at", "open_date", "close_date", "response_count"]
    ordering = ["-created_at"]

    def get_permissions(self):
        if self.action == "create":
            return [permissions.IsAuthenticated(), CanCreateForm()]
        if self.action in ("update", "partial_update", "destroy"):
            return [permissions.IsAuthenticated(), IsFormOwnerOrAdmin()]
        if self.action in ("responses", "export"):
            return [permissions.IsAuthenticated(), CanViewFormResponses()]
        if self.action == "analytics":
            return [permissions.IsAuthenticated(), CanViewFormAnalytics()]
        return [permissions.IsAuthenticated()]

    def get_serializer_class(self):
        if self.action == "list":
            return FeedbackFormListSerializer
        return FeedbackFormSerializer

    def get_queryset(self):
        """
        Role-based filtering for the list view.
        Faculty: own forms. Students: active forms. Admins: everything.
        """
        qs = super().get_queryset()
        if self.action != "list":
            return qs

        user = self.request.user
        if user.is_admin():
            return qs
        if user.is_faculty():
            return qs.for_faculty(user)
        if user.is_student():
            return qs.active()
        return qs.none()

    @transaction.atomic
    def perform_create(self, serializer):
        form = serializer.save()
        logger.info(
            f"Form {form.pk} '{form.title}' created by {self.request.user.university_id} "
            f"for sections {form.target_sections} ({form.status})"
        )

    def perform_update(self, serializer):
        form = serializer.save()
        logger.info(f"Form {form.pk} updated by {self.request.user.university_id}")

    def perform_destroy(self, instance):
        form_id = instance.pk
        instance.delete()
        logger.info(f"Form {form_id} deleted by {self.request.user.university_id}")

    @action(detail=True, methods=["get"])
    def responses(self, request, pk=None):
        """Individual responses; anonymous forms hide students from faculty."""
        form = self.get_object()
        anonymize = form.is_anonymous and request.user.is_faculty()
        qs = form.responses.select_related("student").order_by("-submitted_at")
        data = FeedbackResponseSerializer(qs, many=True, context={"anonymize": anonymize}).data
        return Response(data)

    @action(detail=True, methods=["get"])
    def analytics(self, request, pk=None):
        form = self.get_object()
        return Response(form_analytics.build_form_analytics(form))

    @action(detail=True, methods=["get"])
    def export(self, request, pk=None):
        form = self.get_object()
        anonymize = form.is_anonymous and request.user.is_faculty()
        qs = form.responses.select_related("student").order_by("submitted_at")
        logger.info(f"Responses of form {form.pk} exported by {request.user.university_id}")
        return generate_responses_excel(form, qs, anonymize=anonymize)


# ===========================================================
# Active Feedback (Student Dashboard)
# ===========================================================
class ActiveFeedbackView(APIView):
    """
    GET /api/feedback/active/

    Forms open to the logged-in student, each with:
    - submitted: the student already answered it
    - section_match: False when shown only through the fallback
    """

    permission_classes = [IsStudent]

    def get(self, request):
        student = request.user
        forms, section_match = forms_for_student(student)

        submitted_ids = set(
            FeedbackResponse.objects.filter(
                student=student, form__in=[f.pk for f in forms]
            ).values_list("form_id", flat=True)
        )

        data = []
        for form in forms:
            item = StudentFormSerializer(form).data
            item["submitted"] = form.pk in submitted_ids
            item["section_match"] = section_match
            data.append(item)

        logger.info(
            f"Active forms for {student.university_id} (section {student.section!r}): "
            f"{len(data)} listed, section_match={section_match}"
        )
        return Response(data)


# ===========================================================
# Submit Response
# ===========================================================
class SubmitResponseView(APIView):
    """
    POST /api/feedback/responses/
    Body: {"form_id": 1, "responses": [{"question_id": "...", "rating": 4}], "time_spent": 95}
    """

    permission_classes = [IsStudent]

    def post(self, request):
        serializer = FeedbackSubmissionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        payload = serializer.validated_data

        form = get_object_or_404(FeedbackForm, pk=payload["form_id"])

        if FeedbackResponse.objects.filter(form=form, student=request.user).exists():
            return Response(
                {"error": "You have already submitted this feedback."},
                status=status.HTTP_400_BAD_REQUEST
            )

        if form.status != FeedbackForm.STATUS_ACTIVE:
            return Response(
                {"error": "This feedback form is not active."},
                status=status.HTTP_400_BAD_REQUEST
            )

        answers = build_answers(form, payload.get("responses", []))

        try:
            with transaction.atomic():
                response = FeedbackResponse.objects.create(
                    form=form,
                    student=request.user,
                    is_anonymous=form.is_anonymous,
                    answers=answers,
                    time_spent=payload.get("time_spent"),
                    device=request.META.get("HTTP_USER_AGENT", "")[:255],
                )
                form.increment_response_count()
        except IntegrityError:
            return Response(
                {"error": "You have already submitted this feedback."},
                status=status.HTTP_400_BAD_REQUEST
            )

        logger.info(f"Response {response.pk} submitted to form {form.pk} by {request.user.university_id}")
        return Response(
            FeedbackResponseSerializer(response, context={"anonymize": True}).data,
            status=status.HTTP_201_CREATED
        )


# ===========================================================
# Student History & Stats
# ===========================================================
class MyFeedbackHistoryView(APIView):
    """
    GET /api/feedback/my-history/
    """

    permission_classes = [IsStudent]

    def get(self, request):
        qs = (
            FeedbackResponse.objects.filter(student=request.user)
            .select_related("form")
            .order_by("-submitted_at")
        )
        return Response(FeedbackHistorySerializer(qs, many=True).data)


class StudentFeedbackStatsView(APIView):
    """
    GET /api/feedback/student-stats/
    """

    permission_classes = [IsStudent]

    def get(self, request):
        student = request.user
        responses = list(FeedbackResponse.objects.filter(student=student))
        submitted_ids = {r.form_id for r in responses}

        forms, section_match = forms_for_student(student)
        pending = sum(1 for f in forms if f.pk not in submitted_ids) if section_match else 0

        ratings = [value for r in responses for value in r.rating_values()]
        return Response({
            "total_submitted": len(responses),
            "pending": pending,
            "average_rating_given": form_analytics.average(ratings),
        })


# ===========================================================
# Department Analytics (Department / System Admin)
# ===========================================================
def department_scope(request):
    """
    Department the caller may look at.
    Department admins are pinned to their own; system admins may pass
    ``?department=`` or see everything.
    """
    user = request.user
    if user.is_system_admin():
        return request.query_params.get("department") or None
    return user.managed_department or user.department


def get_faculty_or_404(faculty_id):
    return get_object_or_404(User, pk=faculty_id, role=User.ROLE_FACULTY)


class DepartmentAnalyticsView(APIView):
    """
    GET /api/feedback/department/analytics/
    One row per course with form, response and rating totals.
    """

    permission_classes = [IsDepartmentAdmin]

    def get(self, request):
        return Response(form_analytics.department_analytics(department_scope(request)))


class CourseAnalyticsView(APIView):
    """
    GET /api/feedback/department/courses/{course_code}/analytics/
    """

    permission_classes = [IsDepartmentAdmin]

    def get(self, request, course_code):
        data = form_analytics.course_analytics(course_code, department_scope(request))
        if data is None:
            return Response(
                {"error": f"No feedback forms found for course {course_code}."},
                status=status.HTTP_404_NOT_FOUND
            )
        return Response(data)


class FacultyAnalyticsView(APIView):
    """
    GET /api/feedback/department/faculty/{faculty_id}/analytics/?course_code=CS201
    """

    permission_classes = [IsDepartmentAdmin]

    def get(self, request, faculty_id):
        faculty = get_faculty_or_404(faculty_id)
        return Response(form_analytics.faculty_analytics(
            faculty,
            course_code=request.query_params.get("course_code"),
            department=department_scope(request),
        ))


class FacultyTrendsView(APIView):
    """
    GET /api/feedback/faculty/{faculty_id}/trends/?section=2B&course_code=CS201&form_type=lecture

    Faculty may only read their own trend line.
    """

    permission_classes = [IsFaculty]

    def get(self, request, faculty_id):
        faculty = get_faculty_or_404(faculty_id)
        if not request.user.is_admin() and faculty.pk != request.user.pk:
            logger.warning(f"{request.user.university_id} denied trends of faculty {faculty.university_id}")
            return Response(
                {"error": "You can only view your own performance trends."},
                status=status.HTTP_403_FORBIDDEN
            )

        params = request.query_params
        return Response(form_analytics.faculty_trends(
            faculty,
            section=params.get("section"),
            course_code=params.get("course_code"),
            form_type=params.get("form_type"),
            department=department_scope(request) if request.user.is_admin() else None,
        ))
