import pytest
from datetime import timedelta
from django.utils import timezone

from feedback.models import FeedbackForm, FeedbackResponse

pytestmark = pytest.mark.django_db

ACTIVE_URL = "/api/feedback/active/"


def ids(response):
    return [item["id"] for item in response.data]


def test_lists_forms_for_student_section(client_for, student, make_form):
    matching = make_form(target_sections=["2B", "2C"])
    make_form(target_sections=["3A"])

    response = client_for(student).get(ACTIVE_URL)

    assert response.status_code == 200
    assert ids(response) == [matching.pk]
    assert response.data[0]["section_match"] is True
    assert response.data[0]["submitted"] is False
    assert len(response.data[0]["questions"]) == 3


def test_lowercase_student_section_matches(client_for, make_user, make_form):
    student = make_user(section="2b")
    form = make_form(target_sections=["2B"])
    assert ids(client_for(student).get(ACTIVE_URL)) == [form.pk]


def test_bare_letter_section_matches_year_prefixed_target(client_for, make_user, make_form):
    student = make_user(section="B", semester=3)
    form = make_form(target_sections=["2B"])
    response = client_for(student).get(ACTIVE_URL)
    assert ids(response) == [form.pk]
    assert response.data[0]["section_match"] is True


def test_falls_back_to_all_active_forms(client_for, student, make_form):
    first = make_form(target_sections=["3A"])
    second = make_form(target_sections=["4D"])

    response = client_for(student).get(ACTIVE_URL)

    assert set(ids(response)) == {first.pk, second.pk}
    assert all(item["section_match"] is False for item in response.data)


def test_unavailable_forms_are_hidden(client_for, student, make_form, make_user):
    from users.models import User

    make_form(status=FeedbackForm.STATUS_DRAFT)
    make_form(status=FeedbackForm.STATUS_CLOSED)
    make_form(open_date=timezone.now() + timedelta(days=2))
    make_form(close_date=timezone.now() - timedelta(hours=1), open_date=timezone.now() - timedelta(days=5))
    retired = make_user(role=User.ROLE_FACULTY, is_active=False)
    make_form(faculty=retired)

    assert client_for(student).get(ACTIVE_URL).data == []


def test_submitted_flag(client_for, student, make_form):
    form = make_form()
    FeedbackResponse.objects.create(form=form, student=student, answers=[])

    response = client_for(student).get(ACTIVE_URL)

    assert response.data[0]["submitted"] is True


def test_student_without_section_gets_nothing(client_for, make_user, make_form):
    student = make_user(section="")
    make_form()
    assert client_for(student).get(ACTIVE_URL).data == []


def test_faculty_cannot_use_student_listing(client_for, faculty):
    assert client_for(faculty).get(ACTIVE_URL).status_code == 403
