# ===============================================
# users/admin.py
# ===============================================
# Django Admin configuration for the custom User model.
# ===============================================

from django.contrib import admin, messages
from django.utils.html import format_html
from django.utils.translation import gettext_lazy as _
from django.db import transaction

from feedback.sections import canonical_student_section
from .models import User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    """Portal accounts with role colouring and a section clean-up action."""

    list_display = (
        "university_id",
        "get_full_name",
        "email",
        "colored_role",
        "department",
        "section",
        "semester",
        "is_active",
    )
    list_filter = ("role", "department", "section", "is_active", "is_staff")
    search_fields = ("university_id", "email", "first_name", "last_name", "roll_number")
    ordering = ("university_id",)
    list_per_page = 25
    readonly_fields = ("created_at", "updated_at", "last_login")
    exclude = ("password",)

    fieldsets = (
        (_("Login Info"), {"fields": ("university_id", "email")}),
        (_("Personal Info"), {"fields": ("first_name", "last_name", "phone")}),
        (
            _("Academic Info"),
            {
                "fields": (
                    "department",
                    "program",
                    "semester",
                    "section",
                    "roll_number",
                    "designation",
                    "managed_department",
                )
            },
        ),
        (_("Role & Access"), {"fields": ("role", "is_active", "is_staff", "is_superuser")}),
        (_("System Info"), {"fields": ("last_login", "created_at", "updated_at")}),
    )

    actions = ["fix_sections"]

    def get_full_name(self, obj):
        return obj.get_full_name() or "-"
    get_full_name.short_description = "Full Name"
    get_full_name.admin_order_field = "first_name"

    def colored_role(self, obj):
        color_map = {
            User.ROLE_SYSTEM_ADMIN: "#28a745",
            User.ROLE_DEPARTMENT_ADMIN: "#6f42c1",
            User.ROLE_FACULTY: "#fd7e14",
            User.ROLE_STUDENT: "#007bff",
        }
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            color_map.get(obj.role, "#6c757d"),
            obj.get_role_display(),
        )
    colored_role.short_description = "Role"
    colored_role.admin_order_field = "role"

    @admin.action(description="Canonicalize section labels of selected students")
    def fix_sections(self, request, queryset):
        updated = 0
        with transaction.atomic():
            for student in queryset.filter(role=User.ROLE_STUDENT).exclude(section=""):
                fixed = canonical_student_section(student.section, student.semester)
                if fixed != student.section:
                    student.section = fixed
                    student.save(update_fields=["section"])
                    updated += 1
        self.message_user(request, f"Updated {updated} student section(s).", messages.SUCCESS)
