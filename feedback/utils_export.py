# ===========================================================
# feedback/utils_export.py
# ===========================================================
from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill
from openpyxl.utils import get_column_letter
from django.http import HttpResponse
from django.utils import timezone
import logging

logger = logging.getLogger("feedback")

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def generate_responses_excel(form, responses, anonymize=True, filename=None):
    """
    Excel workbook with one row per response and one column per question.

    Args:
        form: FeedbackForm the responses belong to
        responses: QuerySet of FeedbackResponse (student pre-selected)
        anonymize: hide student identity columns
        filename: download name; derived from the form when omitted

    Returns:
        HttpResponse with the .xlsx attachment
    """
    wb = Workbook()
    ws = wb.active
    ws.title = "Responses"

    questions = form.questions or []
    identity_headers = [] if anonymize else ["University ID", "Student Name", "Section"]
    headers = ["#", *identity_headers, "Submitted At", *[q.get("question_text", "") for q in questions]]
    ws.append(headers)

    header_fill = PatternFill(start_color="1976D2", end_color="1976D2", fill_type="solid")
    for col in range(1, len(headers) + 1):
        cell = ws.cell(row=1, column=col)
        cell.font = Font(bold=True, color="FFFFFF")
        cell.alignment = Alignment(horizontal="center", vertical="center")
        cell.fill = header_fill

    row_count = 0
    for row_count, response in enumerate(responses.iterator(chunk_size=500), start=1):
        by_question = {str(a.get("question_id")): a.get("answer") for a in response.answers}
        identity = []
        if not anonymize:
            student = response.student
            identity = [student.university_id, student.get_full_name(), student.section]

        ws.append([
            row_count,
            *identity,
            timezone.localtime(response.submitted_at).strftime("%Y-%m-%d %H:%M"),
            *[by_question.get(str(q.get("question_id"))) for q in questions],
        ])

    for col in range(1, len(headers) + 1):
        ws.column_dimensions[get_column_letter(col)].width = 18 if col > 1 else 6

    filename = filename or f"feedback_{form.pk}_{timezone.now().strftime('%Y%m%d_%H%M')}.xlsx"
    response = HttpResponse(content_type=XLSX_CONTENT_TYPE)
    response["Content-Disposition"] = f'attachment; filename="{filename}"'
    wb.save(response)

    logger.info(f"Excel export for form {form.pk}: {row_count} rows")
    return response
