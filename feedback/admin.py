# ===========================================================
# feedback/admin.py
# ===========================================================
"""
Django admin for feedback forms and responses.
"""

from django.contrib import admin
from django.utils.html import format_html

from .models import FeedbackForm, FeedbackResponse


@admin.register(FeedbackForm)
class FeedbackFormAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "title",
        "course_name",
        "faculty_name",
        "sections_display",
        "status_badge",
        "response_count",
        "open_date",
        "close_date",
    )
    list_filter = ("status", "form_type", "department", "is_anonymous", "show_to_faculty")
    search_fields = (
        "title",
        "course_name",
        "course_code",
        "faculty__university_id",
        "faculty__first_name",
        "faculty__last_name",
    )
    readonly_fields = ("response_count", "created_at", "updated_at")
    ordering = ("-created_at",)
    list_select_related = ("faculty",)

    fieldsets = (
        ("Form", {
            "fields": ("title", "description", "form_type", "faculty")
        }),
        ("Course", {
            "fields": ("department", "course_name", "course_code", "target_sections")
        }),
        ("Questions", {
            "fields": ("questions",)
        }),
        ("Settings", {
            "fields": ("is_anonymous", "allow_comments", "show_to_faculty")
        }),
        ("Schedule & Status", {
            "fields": ("open_date", "close_date", "status", "response_count")
        }),
        ("Timestamps", {
            "fields": ("created_at", "updated_at"),
            "classes": ("collapse",)
        }),
    )

    def faculty_name(self, obj):
        if obj.faculty:
            return format_html(
                '<strong>{}</strong> ({})',
                obj.faculty.get_full_name() or obj.faculty.university_id,
                obj.faculty.university_id,
            )
        return "-"
    faculty_name.short_description = "Faculty"

    def sections_display(self, obj):
        return ", ".join(obj.target_sections or []) or "-"
    sections_display.short_description = "Sections"

    def status_badge(self, obj):
        colors = {
            FeedbackForm.STATUS_DRAFT: "#6c757d",
            FeedbackForm.STATUS_ACTIVE: "#198754",
            FeedbackForm.STATUS_CLOSED: "#dc3545",
            FeedbackForm.STATUS_ARCHIVED: "#adb5bd",
        }
        return format_html(
            '<span style="background-color: {}; color: white; '
            'padding: 2px 6px; border-radius: 3px; font-size: 10px;">{}</span>',
            colors.get(obj.status, "#6c757d"),
            obj.get_status_display()
        )
    status_badge.short_description = "Status"
    status_badge.admin_order_field = "status"


@admin.register(FeedbackResponse)
class FeedbackResponseAdmin(admin.ModelAdmin):
    list_display = ("id", "form", "student_display", "average_display", "time_spent", "submitted_at")
    list_filter = ("is_anonymous", "form__department", "submitted_at")
    search_fields = ("form__title", "student__university_id")
    readonly_fields = ("submitted_at",)
    list_select_related = ("form", "student")
    ordering = ("-submitted_at",)

    def student_display(self, obj):
        if obj.is_anonymous:
            return format_html('<em>{}</em>', "Anonymous")
        return obj.student.university_id
    student_display.short_description = "Student"

    def average_display(self, obj):
        average = obj.average_rating()
        return "-" if average is None else f"{average}/5"
    average_display.short_description = "Avg Rating"
