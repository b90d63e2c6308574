import pytest

from users.models import User

pytestmark = pytest.mark.django_db


def test_login_with_university_id(api_client, student):
    response = api_client.post(
        "/api/users/login/", {"university_id": "STU001", "password": "secret123"}, format="json"
    )
    assert response.status_code == 200
    assert response.data["status"] == "success"
    assert response.data["access"]
    assert response.data["user"]["university_id"] == "STU001"


def test_login_with_email(api_client, student):
    response = api_client.post(
        "/api/users/login/", {"university_id": "STU001@uni.test", "password": "secret123"}, format="json"
    )
    assert response.status_code == 200


def test_login_wrong_password(api_client, student):
    response = api_client.post(
        "/api/users/login/", {"university_id": "STU001", "password": "nope"}, format="json"
    )
    assert response.status_code == 400
    assert response.data["status"] == "failed"
    assert response.data["detail"] == "Invalid credentials."


def test_login_deactivated_account(api_client, student):
    student.is_active = False
    student.save()
    response = api_client.post(
        "/api/users/login/", {"university_id": "STU001", "password": "secret123"}, format="json"
    )
    assert response.status_code == 400
    assert response.data["detail"] == "Account is deactivated."


def test_profile_requires_auth(api_client):
    assert api_client.get("/api/users/profile/").status_code == 401


def test_profile_returns_own_data(client_for, student):
    response = client_for(student).get("/api/users/profile/")
    assert response.status_code == 200
    assert response.data["section"] == "2B"


def test_profile_update(client_for, student):
    response = client_for(student).patch(
        "/api/users/profile/", {"first_name": "Asha M", "email": "Asha.Rao@Uni.test", "phone": "+919876543210",
                                "role": "system_admin"}, format="json"
    )

    assert response.status_code == 200
    student.refresh_from_db()
    assert student.first_name == "Asha M"
    assert student.email == "asha.rao@uni.test"
    assert student.phone == "+919876543210"
    assert student.role == User.ROLE_STUDENT


@pytest.mark.parametrize(
    "payload, field",
    [
        ({"phone": "not-a-number"}, "phone"),
        ({"email": "not-an-email"}, "email"),
        ({"email": "fac001@uni.test"}, "email"),
    ],
)
def test_profile_update_rejects_invalid_fields(client_for, student, faculty, payload, field):
    response = client_for(student).patch("/api/users/profile/", payload, format="json")

    assert response.status_code == 400
    assert field in response.data
    student.refresh_from_db()
    assert student.email == "stu001@uni.test"
    assert student.phone is None


def test_register_normalizes_student_section(client_for, dept_admin):
    response = client_for(dept_admin).post(
        "/api/users/register/",
        {
            "university_id": "STU900",
            "email": "New.Student@Uni.test",
            "password": "secret123",
            "role": "student",
            "section": " 3c ",
            "department": "CSE",
        },
        format="json",
    )
    assert response.status_code == 201
    user = User.objects.get(university_id="STU900")
    assert user.section == "3C"
    assert user.email == "new.student@uni.test"


def test_register_student_without_section_fails(client_for, dept_admin):
    response = client_for(dept_admin).post(
        "/api/users/register/",
        {"university_id": "STU901", "email": "s901@uni.test", "role": "student"},
        format="json",
    )
    assert response.status_code == 400
    assert "section" in response.data


def test_department_admin_cannot_create_admins(client_for, dept_admin):
    response = client_for(dept_admin).post(
        "/api/users/register/",
        {"university_id": "ADM900", "email": "a900@uni.test", "role": "system_admin"},
        format="json",
    )
    assert response.status_code == 400
    assert "role" in response.data


def test_student_cannot_register_users(client_for, student):
    response = client_for(student).post(
        "/api/users/register/",
        {"university_id": "STU902", "email": "s902@uni.test", "section": "1A"},
        format="json",
    )
    assert response.status_code == 403


def test_bulk_student_import(client_for, system_admin, student):
    rows = [
        {"reg_id": "22CS100", "name": "Meera Nair", "email": "meera@uni.test", "section": "2b",
         "department": "CSE", "mobile_number": "9876543210"},
        {"reg_id": "22CS101", "name": "Bad Section", "email": "bad@uni.test", "section": "B"},
        {"reg_id": "STU001", "name": "Duplicate", "email": "dup@uni.test", "section": "2B"},
    ]
    response = client_for(system_admin).post("/api/users/bulk-students/", rows, format="json")

    assert response.status_code == 201
    assert [c["reg_id"] for c in response.data["created"]] == ["22CS100"]
    assert {e["reg_id"] for e in response.data["errors"]} == {"22CS101", "STU001"}

    imported = User.objects.get(university_id="22CS100")
    assert imported.section == "2B"
    assert imported.semester == 3
    assert imported.first_name == "Meera"
    assert imported.check_password("22CS100")


def test_bulk_import_rejects_non_list(client_for, system_admin):
    response = client_for(system_admin).post("/api/users/bulk-students/", {"reg_id": "x"}, format="json")
    assert response.status_code == 400


def test_bulk_import_requires_system_admin(client_for, dept_admin):
    response = client_for(dept_admin).post("/api/users/bulk-students/", [], format="json")
    assert response.status_code == 403


def test_bulk_faculty_import(client_for, system_admin, faculty):
    rows = [
        {"faculty_id": "FAC100", "name": "Lakshmi Menon", "email": "lakshmi@uni.test", "department": "CSE",
         "designation": "Assistant Professor", "mobile_number": 9876543210,
         "course_name": "Data Structures", "course_code": "CS201", "section": "2B, 2C"},
        {"faculty_id": "FAC101", "name": "Prakash", "email": "prakash@uni.test", "mobile_number": "9876500000"},
        {"faculty_id": "FAC102", "name": "No Phone", "email": "nophone@uni.test"},
        {"faculty_id": "FAC001", "name": "Duplicate", "email": "dup@uni.test", "mobile_number": "9876511111"},
    ]
    response = client_for(system_admin).post("/api/users/bulk-faculty/", rows, format="json")

    assert response.status_code == 201
    assert [c["faculty_id"] for c in response.data["created"]] == ["FAC100", "FAC101"]
    assert response.data["created"][0]["designation"] == "Assistant Professor"
    assert {e["faculty_id"] for e in response.data["errors"]} == {"FAC102", "FAC001"}

    imported = User.objects.get(university_id="FAC100")
    assert imported.role == User.ROLE_FACULTY
    assert imported.last_name == "Menon"
    assert imported.check_password("9876543210")
    single = User.objects.get(university_id="FAC101")
    assert single.department == "General"
    assert single.last_name == "Prakash"


def test_bulk_department_admin_import(client_for, system_admin):
    rows = [
        {"dept_id": "DEP100", "name": "Kavya Iyer", "email": "kavya@uni.test", "department": "ECE",
         "mobile_number": "9876543210"},
        {"name": "Generated Id", "email": "gen@uni.test", "department": "MECH", "mobile_number": "9123456789"},
        {"name": "Bad Phone", "email": "badphone@uni.test", "department": "CIVIL", "mobile_number": "call me"},
    ]
    response = client_for(system_admin).post("/api/users/bulk-deptadmin/", rows, format="json")

    assert response.status_code == 201
    created = response.data["created"]
    assert created[0] == {"dept_id": "DEP100", "name": "Kavya Iyer", "email": "kavya@uni.test", "department": "ECE"}
    assert created[1]["dept_id"].startswith("DEPT")
    assert [e["dept_id"] for e in response.data["errors"]] == ["badphone@uni.test"]

    admin = User.objects.get(university_id="DEP100")
    assert admin.role == User.ROLE_DEPARTMENT_ADMIN
    assert admin.managed_department == "ECE"
    assert admin.check_password("9876543210")


@pytest.mark.parametrize("url", ["/api/users/bulk-faculty/", "/api/users/bulk-deptadmin/"])
def test_staff_imports_require_system_admin(client_for, dept_admin, url):
    assert client_for(dept_admin).post(url, [], format="json").status_code == 403


def test_fix_student_sections(client_for, system_admin, make_user):
    legacy = make_user(section="b", semester=4)
    fine = make_user(section="1A", semester=1)

    response = client_for(system_admin).post("/api/users/fix-student-sections/")

    assert response.status_code == 200
    assert response.data["updated"] == 1
    legacy.refresh_from_db()
    fine.refresh_from_db()
    assert legacy.section == "2B"
    assert fine.section == "1A"


def test_toggle_status(client_for, system_admin, student):
    response = client_for(system_admin).put(f"/api/users/{student.pk}/toggle-status/")
    assert response.status_code == 200
    assert response.data["is_active"] is False
    student.refresh_from_db()
    assert student.is_active is False


def test_cannot_toggle_self(client_for, system_admin):
    response = client_for(system_admin).put(f"/api/users/{system_admin.pk}/toggle-status/")
    assert response.status_code == 400


def test_system_admin_cannot_change_password_here(client_for, system_admin):
    response = client_for(system_admin).post(
        "/api/users/change-password/",
        {"current_password": "secret123", "new_password": "another123"},
        format="json",
    )
    assert response.status_code == 403


def test_user_list_scoped_to_department(client_for, dept_admin, make_user):
    make_user(department="CSE")
    make_user(department="ECE")
    response = client_for(dept_admin).get("/api/users/list/")
    assert response.status_code == 200
    assert {u["department"] for u in response.data["results"]} == {"CSE"}
