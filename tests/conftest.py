from datetime import timedelta

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from feedback.models import FeedbackForm
from users.models import User


@pytest.fixture(autouse=True)
def fast_password_hasher(settings):
    settings.PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role=User.ROLE_STUDENT, password="secret123", **fields):
        counter["n"] += 1
        university_id = fields.pop("university_id", f"U{counter['n']:04d}")
        fields.setdefault("email", f"{university_id.lower()}@uni.test")
        fields.setdefault("department", "CSE")
        if role == User.ROLE_STUDENT:
            fields.setdefault("section", "2B")
            fields.setdefault("semester", 3)
        return User.objects.create_user(university_id, password=password, role=role, **fields)

    return _make


@pytest.fixture
def student(make_user):
    return make_user(university_id="STU001", first_name="Asha", last_name="Rao")


@pytest.fixture
def faculty(make_user):
    return make_user(role=User.ROLE_FACULTY, university_id="FAC001", first_name="Ravi", last_name="Kumar")


@pytest.fixture
def other_faculty(make_user):
    return make_user(role=User.ROLE_FACULTY, university_id="FAC002")


@pytest.fixture
def dept_admin(make_user):
    return make_user(role=User.ROLE_DEPARTMENT_ADMIN, university_id="DEP001", managed_department="CSE")


@pytest.fixture
def system_admin(make_user):
    return make_user(role=User.ROLE_SYSTEM_ADMIN, university_id="ADM001")


@pytest.fixture
def client_for(api_client):
    def _login(user):
        api_client.force_authenticate(user=user)
        return api_client

    return _login


@pytest.fixture
def rating_questions():
    return [
        {"question_id": "q1", "question_text": "Clarity of lectures", "type": "rating"},
        {"question_id": "q2", "question_text": "Pace", "type": "multiple_choice",
         "options": ["Too slow", "Just right", "Too fast"]},
        {"question_id": "q3", "question_text": "Comments", "type": "text", "required": False},
    ]


@pytest.fixture
def make_form(faculty, rating_questions):
    def _make(**fields):
        fields.setdefault("title", "Mid-term lecture feedback")
        fields.setdefault("form_type", "lecture")
        fields.setdefault("faculty", faculty)
        fields.setdefault("department", "CSE")
        fields.setdefault("course_name", "Data Structures")
        fields.setdefault("course_code", "CS201")
        fields.setdefault("target_sections", ["2B", "2C"])
        fields.setdefault("questions", [dict(q) for q in rating_questions])
        fields.setdefault("status", FeedbackForm.STATUS_ACTIVE)
        fields.setdefault("open_date", timezone.now() - timedelta(days=1))
        return FeedbackForm.objects.create(**fields)

    return _make
