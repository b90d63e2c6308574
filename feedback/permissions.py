# ===========================================================
# feedback/permissions.py
# ===========================================================
"""
Permission classes for the feedback module.
"""

from rest_framework import permissions
import logging

logger = logging.getLogger(__name__)


class CanCreateForm(permissions.BasePermission):
    """
    Faculty and system admins may publish forms.
    """
    message = "Only faculty or a system admin can create feedback forms."

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return user.is_faculty() or user.is_system_admin()


class IsFormOwnerOrAdmin(permissions.BasePermission):
    """
    Object-level permission:
    - Admins (department or system): full access
    - Faculty: can modify their own forms
    - Others: read-only
    """
    message = "Not authorized to modify this form."

    def has_object_permission(self, request, view, obj):
        user = request.user

        if not user or not user.is_authenticated:
            return False

        if request.method in permissions.SAFE_METHODS:
            return True

        if user.is_admin():
            return True

        if user.is_faculty() and obj.faculty_id == user.id:
            return True

        logger.warning(f"{user.university_id} denied write access to form {obj.pk}")
        return False


class CanViewFormResponses(permissions.BasePermission):
    """
    Owning faculty and admins may read a form's responses.
    Faculty additionally need the form's ``show_to_faculty`` flag.
    """
    message = "Not authorized to view responses for this form."

    def has_object_permission(self, request, view, obj):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        if user.is_admin():
            return True

        if user.is_faculty() and obj.faculty_id == user.id:
            if not obj.show_to_faculty:
                self.message = "Responses are not visible to faculty yet."
                return False
            return True

        return False


class CanViewFormAnalytics(permissions.BasePermission):
    """
    Aggregated analytics are open to the owning faculty and admins,
    regardless of ``show_to_faculty``.
    """
    message = "Not authorized to view analytics for this form."

    def has_object_permission(self, request, view, obj):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return user.is_admin() or (user.is_faculty() and obj.faculty_id == user.id)
