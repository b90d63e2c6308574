# ===============================================
# feedback/urls.py
# ===============================================
"""
Feedback Module API Routes
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import (
    FeedbackFormViewSet,
    ActiveFeedbackView,
    SubmitResponseView,
    MyFeedbackHistoryView,
    StudentFeedbackStatsView,
    DepartmentAnalyticsView,
    CourseAnalyticsView,
    FacultyAnalyticsView,
    FacultyTrendsView,
)

app_name = "feedback"

# Router Configuration
router = DefaultRouter()
router.register(r"forms", FeedbackFormViewSet, basename="forms")

# URL Patterns
urlpatterns = [
    # Router URLs
    path("", include(router.urls)),

    # Student Endpoints
    path("active/", ActiveFeedbackView.as_view(), name="active"),
    path("responses/", SubmitResponseView.as_view(), name="submit-response"),
    path("my-history/", MyFeedbackHistoryView.as_view(), name="my-history"),
    path("student-stats/", StudentFeedbackStatsView.as_view(), name="student-stats"),

    # Department Admin Endpoints
    path("department/analytics/", DepartmentAnalyticsView.as_view(), name="department-analytics"),
    path(
        "department/courses/<str:course_code>/analytics/",
        CourseAnalyticsView.as_view(),
        name="course-analytics",
    ),
    path(
        "department/faculty/<int:faculty_id>/analytics/",
        FacultyAnalyticsView.as_view(),
        name="faculty-analytics",
    ),

    # Faculty Trends
    path("faculty/<int:faculty_id>/trends/", FacultyTrendsView.as_view(), name="faculty-trends"),
]

"""
Available Endpoints:
--------------------
FORMS (faculty / admins):
  GET     /api/feedback/forms/                  → List
  POST    /api/feedback/forms/                  → Create
  GET     /api/feedback/forms/{id}/             → Detail
  PATCH   /api/feedback/forms/{id}/             → Update
  DELETE  /api/feedback/forms/{id}/             → Delete
  GET     /api/feedback/forms/{id}/responses/   → Individual responses
  GET     /api/feedback/forms/{id}/analytics/   → Aggregated analytics
  GET     /api/feedback/forms/{id}/export/      → Excel export

STUDENTS:
  GET     /api/feedback/active/                 → Forms for my section
  POST    /api/feedback/responses/              → Submit answers
  GET     /api/feedback/my-history/             → My submissions
  GET     /api/feedback/student-stats/          → Submitted / pending counts

DEPARTMENT (department / system admins):
  GET     /api/feedback/department/analytics/                     → Per-course overview
  GET     /api/feedback/department/courses/{code}/analytics/      → Course with faculty breakdown
  GET     /api/feedback/department/faculty/{id}/analytics/        → Faculty with section breakdown

FACULTY:
  GET     /api/feedback/faculty/{id}/trends/     → Rating per form over time

Query Parameters (form list):
  - status: draft|active|closed|archived
  - form_type: lecture|unit|module|semester|module_bank
  - department, course_code
  - search: title / course name / course code
  - ordering: created_at|open_date|close_date|response_count
"""
