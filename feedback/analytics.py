# ===========================================================
# feedback/analytics.py
# ===========================================================
"""
Aggregations over feedback responses.

- Per form: question-level summaries, eligibility and response rate
- Per department: one row per course
- Per course: overall numbers plus a faculty breakdown
- Per faculty: section breakdown and a form-by-form trend line

Everything returns plain dicts ready for ``Response``. Averages are
``None`` when there is nothing to average.
"""

from collections import Counter, OrderedDict
import logging

from .models import (
    FeedbackForm,
    FeedbackResponse,
    RATING_MIN,
    RATING_MAX,
    QUESTION_RATING,
    QUESTION_TEXT,
    QUESTION_MULTIPLE_CHOICE,
)
from .sections import SectionMatcher

logger = logging.getLogger(__name__)


# ===========================================================
# Helpers
# ===========================================================
def average(values):
    return round(sum(values) / len(values), 2) if values else None


def rating_distribution(ratings):
    return {str(value): ratings.count(value) for value in range(RATING_MIN, RATING_MAX + 1)}


def ratings_of(responses):
    return [value for response in responses for value in response.rating_values()]


def faculty_summary(user):
    if user is None:
        return None
    return {
        "id": user.pk,
        "name": user.get_full_name() or user.university_id,
        "university_id": user.university_id,
        "designation": user.designation,
    }


def _responses_by_form(forms):
    grouped = {form.pk: [] for form in forms}
    qs = FeedbackResponse.objects.filter(form__in=list(grouped)).select_related("student")
    for response in qs:
        grouped[response.form_id].append(response)
    return grouped


def _course_key(form):
    return (form.course_code or form.course_name).strip().upper()


# ===========================================================
# Single Form
# ===========================================================
def build_form_analytics(form, matcher=None):
    """Aggregate a form's responses per question."""
    responses = list(form.responses.all())
    total = len(responses)

    question_stats = []
    for index, question in enumerate(form.questions or []):
        question_id = str(question.get("question_id", index))
        q_type = question.get("type", QUESTION_RATING)
        answers = [
            a for r in responses for a in r.answers
            if str(a.get("question_id")) == question_id
        ]
        entry = {
            "question_id": question_id,
            "question_text": question.get("question_text", ""),
            "type": q_type,
            "answered": sum(1 for a in answers if a.get("answer") not in (None, "")),
        }

        if q_type == QUESTION_RATING:
            ratings = [a["rating"] for a in answers if a.get("rating") is not None]
            entry["average_rating"] = average(ratings)
            entry["distribution"] = rating_distribution(ratings)
        elif q_type == QUESTION_MULTIPLE_CHOICE:
            counts = Counter(a.get("selected_option") for a in answers if a.get("selected_option"))
            entry["option_counts"] = {opt: counts.get(opt, 0) for opt in question.get("options", [])}
        elif q_type == QUESTION_TEXT:
            entry["responses"] = [a["text_response"] for a in answers if a.get("text_response")]

        question_stats.append(entry)

    eligible = len(form.eligible_students(matcher))
    return {
        "form_id": form.pk,
        "title": form.title,
        "total_responses": total,
        "eligible_students": eligible,
        "response_rate": round(total * 100 / eligible, 2) if eligible else 0,
        "average_rating": average(ratings_of(responses)),
        "questions": question_stats,
    }


# ===========================================================
# Department Overview
# ===========================================================
def department_analytics(department=None):
    """
    One row per course taught in the department.
    Courses are keyed on course code, falling back to the course name.
    """
    forms = list(FeedbackForm.objects.select_related("faculty").order_by("course_code", "course_name"))
    if department:
        forms = [f for f in forms if f.department.lower() == department.lower()]
    responses = _responses_by_form(forms)

    courses = OrderedDict()
    for form in forms:
        course = courses.setdefault(_course_key(form), {
            "course_code": form.course_code,
            "course_name": form.course_name,
            "forms": [],
            "faculty": OrderedDict(),
        })
        course["forms"].append(form)
        if form.faculty_id:
            course["faculty"].setdefault(form.faculty_id, faculty_summary(form.faculty))

    rows = []
    for course in courses.values():
        course_responses = [r for f in course["forms"] for r in responses[f.pk]]
        rows.append({
            "course_code": course["course_code"],
            "course_name": course["course_name"],
            "total_forms": len(course["forms"]),
            "total_responses": len(course_responses),
            "average_rating": average(ratings_of(course_responses)),
            "faculty_count": len(course["faculty"]),
            "faculty": list(course["faculty"].values()),
        })

    return {
        "department": department or "All Departments",
        "total_courses": len(rows),
        "total_responses": sum(row["total_responses"] for row in rows),
        "courses": rows,
    }


# ===========================================================
# Course Breakdown
# ===========================================================
def course_analytics(course_code, department=None):
    """Overall numbers for one course plus a per-faculty breakdown. None if unknown."""
    forms = FeedbackForm.objects.select_related("faculty").filter(course_code__iexact=course_code.strip())
    if department:
        forms = forms.filter(department__iexact=department)
    forms = list(forms)
    if not forms:
        return None

    responses = _responses_by_form(forms)
    all_responses = [r for f in forms for r in responses[f.pk]]
    all_ratings = ratings_of(all_responses)

    by_faculty = OrderedDict()
    for form in forms:
        item = by_faculty.setdefault(form.faculty_id, {"faculty": form.faculty, "forms": [], "sections": set()})
        item["forms"].append(form)
        item["sections"].update(form.target_sections or [])

    faculty_rows = []
    for item in by_faculty.values():
        faculty_responses = [r for f in item["forms"] for r in responses[f.pk]]
        ratings = ratings_of(faculty_responses)
        faculty_rows.append({
            **faculty_summary(item["faculty"]),
            "sections": sorted(item["sections"]),
            "total_forms": len(item["forms"]),
            "total_responses": len(faculty_responses),
            "average_rating": average(ratings),
            "rating_distribution": rating_distribution(ratings),
        })

    return {
        "course": {"code": forms[0].course_code, "name": forms[0].course_name},
        "overall": {
            "total_forms": len(forms),
            "total_responses": len(all_responses),
            "average_rating": average(all_ratings),
            "rating_distribution": rating_distribution(all_ratings),
        },
        "faculty": faculty_rows,
    }


# ===========================================================
# Faculty Breakdown
# ===========================================================
def _faculty_forms(faculty, course_code=None, department=None):
    forms = FeedbackForm.objects.for_faculty(faculty)
    if course_code:
        forms = forms.filter(course_code__iexact=course_code.strip())
    if department:
        forms = forms.filter(department__iexact=department)
    return forms


def faculty_analytics(faculty, course_code=None, department=None, matcher=None):
    """
    A faculty member's forms broken down by target section.

    A response counts towards a section when the form targets that section
    and the responding student's section matches it.
    """
    matcher = matcher or SectionMatcher()
    forms = list(_faculty_forms(faculty, course_code, department))
    responses = _responses_by_form(forms)

    sections = OrderedDict()
    for form in forms:
        for section in form.target_sections or []:
            sections.setdefault(section, []).append(form)

    section_rows = []
    for section, section_forms in sorted(sections.items()):
        section_responses = [
            r for f in section_forms for r in responses[f.pk]
            if matcher.matches(r.student.section, [section])
        ]
        ratings = ratings_of(section_responses)
        section_rows.append({
            "section": section,
            "courses": sorted({f.course_code or f.course_name for f in section_forms}),
            "total_forms": len(section_forms),
            "total_responses": len(section_responses),
            "average_rating": average(ratings),
            "rating_distribution": rating_distribution(ratings),
        })

    all_responses = [r for f in forms for r in responses[f.pk]]
    return {
        "faculty": faculty_summary(faculty),
        "course_code": course_code,
        "total_forms": len(forms),
        "total_responses": len(all_responses),
        "average_rating": average(ratings_of(all_responses)),
        "sections": section_rows,
    }


def faculty_trends(faculty, section=None, course_code=None, form_type=None, department=None, matcher=None):
    """Average rating form by form, oldest first."""
    matcher = matcher or SectionMatcher()
    forms = _faculty_forms(faculty, course_code, department)
    if form_type:
        forms = forms.filter(form_type=form_type)
    forms = list(forms.order_by("created_at", "pk"))
    responses = _responses_by_form(forms)

    trends = []
    for form in forms:
        form_responses = responses[form.pk]
        if section:
            form_responses = [r for r in form_responses if matcher.matches(r.student.section, [section])]
        trends.append({
            "form_id": form.pk,
            "title": form.title,
            "form_type": form.form_type,
            "course_name": form.course_name,
            "course_code": form.course_code,
            "target_sections": form.target_sections,
            "created_at": form.created_at,
            "average_rating": average(ratings_of(form_responses)),
            "total_responses": len(form_responses),
        })

    return {
        "faculty": faculty_summary(faculty),
        "filters": {"section": section, "course_code": course_code, "form_type": form_type},
        "trends": trends,
    }
