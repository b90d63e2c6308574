# ===========================================================
# users/urls.py
# Academic Feedback Management System (AFMS)
# ===========================================================

from django.urls import path
from .views import (
    ObtainTokenPairView,
    RefreshTokenView,
    RegisterView,
    BulkStudentCreateView,
    BulkFacultyCreateView,
    BulkDeptAdminCreateView,
    FixStudentSectionsView,
    ProfileView,
    ChangePasswordView,
    RoleListView,
    UserListView,
    ToggleUserStatusView,
)

app_name = "users"

# ===========================================================
# ROUTES SUMMARY
# ===========================================================
# 1. /api/users/login/                  → JWT Login (university_id or email)
# 2. /api/users/token/refresh/          → Refresh JWT token
# 3. /api/users/register/               → Create a user (admins)
# 4. /api/users/bulk-students/          → Import students (system admin)
#    /api/users/bulk-faculty/           → Import faculty (system admin)
#    /api/users/bulk-deptadmin/         → Import department admins (system admin)
# 5. /api/users/fix-student-sections/   → Canonicalize stored sections (system admin)
# 6. /api/users/profile/                → Get or update own profile
# 7. /api/users/change-password/        → Change own password
# 8. /api/users/roles/                  → Available roles
# 9. /api/users/list/                   → Paginated user list (admins)
# 10. /api/users/<id>/toggle-status/    → Activate / deactivate (system admin)
# ===========================================================

urlpatterns = [
    path("login/", ObtainTokenPairView.as_view(), name="token_obtain_pair"),
    path("token/refresh/", RefreshTokenView.as_view(), name="token_refresh"),

    path("register/", RegisterView.as_view(), name="user_register"),
    path("bulk-students/", BulkStudentCreateView.as_view(), name="bulk_students"),
    path("bulk-faculty/", BulkFacultyCreateView.as_view(), name="bulk_faculty"),
    path("bulk-deptadmin/", BulkDeptAdminCreateView.as_view(), name="bulk_deptadmin"),
    path("fix-student-sections/", FixStudentSectionsView.as_view(), name="fix_student_sections"),
    path("profile/", ProfileView.as_view(), name="user_profile"),
    path("change-password/", ChangePasswordView.as_view(), name="change_password"),

    path("roles/", RoleListView.as_view(), name="role_list"),
    path("list/", UserListView.as_view(), name="user_list"),
    path("<int:pk>/toggle-status/", ToggleUserStatusView.as_view(), name="toggle_status"),
]
