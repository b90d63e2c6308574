from rest_framework import permissions


class IsSystemAdmin(permissions.BasePermission):
    """
    Allows access only to system admins (or superusers).
    """
    message = "Access denied. System admin role required."

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and request.user.is_system_admin())


class IsDepartmentAdmin(permissions.BasePermission):
    """
    Allows access to department admins and system admins.
    """
    message = "Access denied. Department admin role required."

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and request.user.is_admin())


class IsFaculty(permissions.BasePermission):
    """
    Allows access to faculty and to both admin roles.
    """
    message = "Access denied. Faculty role required."

    def has_permission(self, request, view):
        return bool(
            request.user
            and request.user.is_authenticated
            and (request.user.is_faculty() or request.user.is_admin())
        )


class IsStudent(permissions.BasePermission):
    message = "Access denied. Student role required."

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and request.user.is_student())
