# ===========================================================
# users/views.py
# Academic Feedback Management System (AFMS)
# ===========================================================

from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework import generics, status, filters, serializers
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.pagination import PageNumberPagination
from django.contrib.auth import get_user_model
from django.shortcuts import get_object_or_404
from django.db import transaction
import logging

from feedback.sections import canonical_student_section
from .permissions import IsSystemAdmin, IsDepartmentAdmin
from .serializers import (
    CustomTokenObtainPairSerializer,
    RegisterSerializer,
    BulkStudentRowSerializer,
    BulkFacultyRowSerializer,
    BulkDeptAdminRowSerializer,
    ProfileSerializer,
    ProfileUpdateSerializer,
    ChangePasswordSerializer,
)

logger = logging.getLogger("users")
User = get_user_model()


# ===========================================================
# 1. LOGIN (university_id / email)
# ===========================================================
class ObtainTokenPairView(TokenObtainPairView):
    """
    POST /api/users/login/
    Returns JWT tokens + user payload.
    """
    serializer_class = CustomTokenObtainPairSerializer
    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        try:
            serializer.is_valid(raise_exception=True)
        except serializers.ValidationError as e:
            logger.warning(f"Login failed for {request.data.get('university_id')!r}")
            detail = e.detail.get("detail", e.detail) if isinstance(e.detail, dict) else e.detail
            if isinstance(detail, list) and len(detail) == 1:
                detail = detail[0]
            return Response(
                {"detail": detail, "status": "failed"},
                status=status.HTTP_400_BAD_REQUEST
            )

        data = serializer.validated_data
        return Response(
            {
                "refresh": data.get("refresh"),
                "access": data.get("access"),
                "user": data.get("user"),
                "status": "success",
                "message": "Login successful."
            },
            status=status.HTTP_200_OK
        )


# ===========================================================
# 2. REFRESH TOKEN
# ===========================================================
class RefreshTokenView(TokenRefreshView):
    """
    POST /api/users/token/refresh/
    """
    permission_classes = [AllowAny]


# ===========================================================
# 3. REGISTER USER (Department / System Admin)
# ===========================================================
class RegisterView(generics.CreateAPIView):
    """
    POST /api/users/register/
    """
    queryset = User.objects.all()
    serializer_class = RegisterSerializer
    permission_classes = [IsDepartmentAdmin]

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()

        logger.info(f"User {user.university_id} registered by {request.user.university_id}")
        return Response(
            {"message": "User registered successfully.", "user": ProfileSerializer(user).data},
            status=status.HTTP_201_CREATED
        )


# ===========================================================
# 4. BULK IMPORTS (System Admin)
# ===========================================================
class BulkUserCreateView(APIView):
    """
    Shared flow for spreadsheet imports: one row serializer per row.
    Bad rows are reported back; good rows are still created.
    """
    permission_classes = [IsSystemAdmin]
    row_serializer_class = None
    id_field = "university_id"
    label = "users"

    def describe(self, user):
        return {self.id_field: user.university_id, "name": user.get_full_name(), "email": user.email}

    def post(self, request):
        rows = request.data
        if not isinstance(rows, list):
            return Response({"error": f"Expected a list of {self.label}."}, status=status.HTTP_400_BAD_REQUEST)

        created, errors = [], []
        for row in rows:
            row = row if isinstance(row, dict) else {}
            serializer = self.row_serializer_class(data=row)
            if not serializer.is_valid():
                errors.append({self.id_field: row.get(self.id_field) or row.get("email"), "error": serializer.errors})
                continue
            with transaction.atomic():
                user = serializer.save()
            created.append(self.describe(user))

        logger.info(
            f"Bulk {self.label} import by {request.user.university_id}: "
            f"{len(created)} created, {len(errors)} failed"
        )
        return Response(
            {
                "message": f"Created {len(created)} {self.label}.",
                "created": created,
                "errors": errors,
            },
            status=status.HTTP_201_CREATED if created else status.HTTP_400_BAD_REQUEST
        )


class BulkStudentCreateView(BulkUserCreateView):
    """
    POST /api/users/bulk-students/
    Body: list of rows {reg_id, name, email, department, section, mobile_number}.
    """
    row_serializer_class = BulkStudentRowSerializer
    id_field = "reg_id"
    label = "students"

    def describe(self, user):
        return {"reg_id": user.university_id, "name": user.get_full_name(), "section": user.section}


class BulkFacultyCreateView(BulkUserCreateView):
    """
    POST /api/users/bulk-faculty/
    Body: list of rows {faculty_id, name, email, department, designation, mobile_number}.
    """
    row_serializer_class = BulkFacultyRowSerializer
    id_field = "faculty_id"
    label = "faculty"

    def describe(self, user):
        data = super().describe(user)
        data["designation"] = user.designation
        return data


class BulkDeptAdminCreateView(BulkUserCreateView):
    """
    POST /api/users/bulk-deptadmin/
    Body: list of rows {dept_id (optional), name, email, department, mobile_number}.
    """
    row_serializer_class = BulkDeptAdminRowSerializer
    id_field = "dept_id"
    label = "department admins"

    def describe(self, user):
        data = super().describe(user)
        data["department"] = user.managed_department
        return data


# ===========================================================
# 5. FIX STUDENT SECTIONS (System Admin)
# ===========================================================
class FixStudentSectionsView(APIView):
    """
    POST /api/users/fix-student-sections/
    Rewrites legacy section labels ("b" -> "1B" for a first-year student).
    """
    permission_classes = [IsSystemAdmin]

    @transaction.atomic
    def post(self, request):
        students = User.objects.filter(role=User.ROLE_STUDENT).exclude(section="")
        total = User.objects.filter(role=User.ROLE_STUDENT).count()
        updated = 0

        for student in students.select_for_update():
            fixed = canonical_student_section(student.section, student.semester)
            if fixed != student.section:
                logger.info(f"Section for {student.university_id}: {student.section!r} -> {fixed!r}")
                student.section = fixed
                student.save(update_fields=["section"])
                updated += 1

        return Response({
            "message": f"Fixed sections for {updated} students",
            "total_students": total,
            "updated": updated,
        })


# ===========================================================
# 6. CHANGE PASSWORD
# ===========================================================
class ChangePasswordView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        if request.user.is_system_admin():
            return Response(
                {"error": "Password change via this endpoint is not allowed for system administrators."},
                status=status.HTTP_403_FORBIDDEN
            )
        serializer = ChangePasswordSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        return Response(serializer.save(), status=200)


# ===========================================================
# 7. PROFILE (GET / PATCH)
# ===========================================================
class ProfileView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        """Return logged-in user's profile."""
        return Response(ProfileSerializer(request.user).data, status=200)

    def patch(self, request):
        """Allow user to update limited profile fields."""
        user = request.user
        serializer = ProfileUpdateSerializer(user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        if serializer.validated_data:
            user = serializer.save()
            logger.info(f"Profile updated by {user.university_id}: {sorted(serializer.validated_data)}")

        return Response(
            {"message": "Profile updated successfully.", "user": ProfileSerializer(user).data},
            status=200,
        )


# ===========================================================
# 8. ROLE LIST
# ===========================================================
class RoleListView(APIView):
    permission_classes = [AllowAny]

    def get(self, request):
        roles = [role for role, _ in User.ROLE_CHOICES]
        return Response({"roles": roles}, status=200)


# ===========================================================
# 9. USER LIST (Admins)
# ===========================================================
class UserPagination(PageNumberPagination):
    page_size = 20


class UserListView(generics.ListAPIView):
    queryset = User.objects.all().order_by("university_id")
    serializer_class = ProfileSerializer
    permission_classes = [IsDepartmentAdmin]
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ["university_id", "email", "first_name", "last_name", "roll_number"]
    ordering_fields = ["university_id", "created_at", "section"]
    pagination_class = UserPagination

    def get_queryset(self):
        qs = super().get_queryset()
        role_param = self.request.query_params.get("role")
        dept_param = self.request.query_params.get("department")
        section_param = self.request.query_params.get("section")

        if role_param:
            qs = qs.filter(role=role_param)
        if dept_param:
            qs = qs.filter(department__iexact=dept_param)
        if section_param:
            qs = qs.filter(section__iexact=section_param.strip())

        # Department admins only see their own department
        user = self.request.user
        if user.is_department_admin() and not user.is_system_admin():
            qs = qs.filter(department__iexact=user.managed_department or user.department)
        return qs


# ===========================================================
# 10. TOGGLE ACTIVE STATUS (System Admin)
# ===========================================================
class ToggleUserStatusView(APIView):
    permission_classes = [IsSystemAdmin]

    def put(self, request, pk):
        user = get_object_or_404(User, pk=pk)
        if user == request.user:
            return Response({"error": "You cannot deactivate your own account."}, status=400)

        user.is_active = not user.is_active
        user.save(update_fields=["is_active"])
        logger.warning(
            f"User {user.university_id} {'activated' if user.is_active else 'deactivated'} "
            f"by {request.user.university_id}"
        )
        return Response({
            "message": f"User {'activated' if user.is_active else 'deactivated'}",
            "is_active": user.is_active,
        })
