import pytest
from datetime import timedelta
from django.utils import timezone

from feedback.models import FeedbackForm

pytestmark = pytest.mark.django_db

FORMS_URL = "/api/feedback/forms/"


def form_payload(**overrides):
    payload = {
        "title": "Unit 2 feedback",
        "form_type": "unit",
        "department": "CSE",
        "course_name": "Operating Systems",
        "course_code": "CS301",
        "target_sections": [" 2b", "2C", ""],
        "questions": [
            {"question_text": "How clear was the unit?", "type": "rating"},
            {"question_text": "Preferred format", "type": "multiple_choice", "options": ["Slides", "Board"]},
        ],
    }
    payload.update(overrides)
    return payload


def test_faculty_creates_form(client_for, faculty):
    response = client_for(faculty).post(FORMS_URL, form_payload(), format="json")

    assert response.status_code == 201
    form = FeedbackForm.objects.get(pk=response.data["id"])
    assert form.faculty == faculty
    assert form.target_sections == ["2B", "2C"]
    assert form.status == FeedbackForm.STATUS_ACTIVE
    assert all(q["question_id"] for q in form.questions)
    assert form.questions[0]["required"] is True


def test_future_form_stays_draft(client_for, faculty):
    open_date = (timezone.now() + timedelta(days=3)).isoformat()
    response = client_for(faculty).post(FORMS_URL, form_payload(open_date=open_date), format="json")
    assert response.status_code == 201
    assert response.data["status"] == FeedbackForm.STATUS_DRAFT


def test_form_requires_target_sections(client_for, faculty):
    response = client_for(faculty).post(FORMS_URL, form_payload(target_sections=["  "]), format="json")
    assert response.status_code == 400
    assert "target_sections" in response.data


def test_multiple_choice_question_needs_options(client_for, faculty):
    payload = form_payload(questions=[{"question_text": "Pick one", "type": "multiple_choice"}])
    response = client_for(faculty).post(FORMS_URL, payload, format="json")
    assert response.status_code == 400


def test_close_date_before_open_date_rejected(client_for, faculty):
    now = timezone.now()
    payload = form_payload(open_date=now.isoformat(), close_date=(now - timedelta(days=1)).isoformat())
    response = client_for(faculty).post(FORMS_URL, payload, format="json")
    assert response.status_code == 400
    assert "close_date" in response.data


def test_student_cannot_create_form(client_for, student):
    response = client_for(student).post(FORMS_URL, form_payload(), format="json")
    assert response.status_code == 403


def test_faculty_lists_only_own_forms(client_for, faculty, other_faculty, make_form):
    own = make_form()
    make_form(faculty=other_faculty, title="Someone else's")

    response = client_for(faculty).get(FORMS_URL)

    assert response.status_code == 200
    assert [f["id"] for f in response.data["results"]] == [own.pk]
    assert response.data["results"][0]["question_count"] == 3


def test_list_filters_by_status(client_for, dept_admin, make_form):
    make_form()
    draft = make_form(status=FeedbackForm.STATUS_DRAFT)
    response = client_for(dept_admin).get(FORMS_URL, {"status": "draft"})
    assert [f["id"] for f in response.data["results"]] == [draft.pk]


def test_other_faculty_cannot_update(client_for, other_faculty, make_form):
    form = make_form()
    response = client_for(other_faculty).patch(f"{FORMS_URL}{form.pk}/", {"title": "Hijacked"}, format="json")
    assert response.status_code == 403
    form.refresh_from_db()
    assert form.title != "Hijacked"


def test_owner_updates_form(client_for, faculty, make_form):
    form = make_form()
    response = client_for(faculty).patch(
        f"{FORMS_URL}{form.pk}/", {"target_sections": ["3a"]}, format="json"
    )
    assert response.status_code == 200
    form.refresh_from_db()
    assert form.target_sections == ["3A"]


def test_department_admin_can_delete(client_for, dept_admin, make_form):
    form = make_form()
    response = client_for(dept_admin).delete(f"{FORMS_URL}{form.pk}/")
    assert response.status_code == 204
    assert not FeedbackForm.objects.filter(pk=form.pk).exists()


def test_any_user_can_view_detail(client_for, student, make_form):
    form = make_form()
    response = client_for(student).get(f"{FORMS_URL}{form.pk}/")
    assert response.status_code == 200
    assert response.data["faculty_name"] == "Ravi Kumar"
    assert response.data["is_open"] is True
