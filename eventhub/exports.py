# eventhub/exports.py
"""
Spreadsheet helpers: attendee exports (CSV/XLSX) and stakeholder import/export.
"""

import csv
import io
import logging

from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import IntegrityError, transaction
from django.http import HttpResponse
from django.utils import timezone
from openpyxl import Workbook, load_workbook

from .models import Stakeholder, StakeholderImport

logger = logging.getLogger(__name__)

ATTENDEE_HEADERS = [
    "ticket_id", "entry_code", "ticket_status", "order_id", "user_email", "first_name", "last_name",
    "student_id", "phone_number", "sub_event", "issued_at", "verified_at",
]

STAKEHOLDER_HEADERS = [
    "name", "email", "role", "attendance_status", "company", "title", "phone", "notes",
    "certificate_generated",
]

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

ROLES = {key for key, _ in Stakeholder.ROLE_CHOICES}
ATTENDANCE = {key for key, _ in Stakeholder.ATTENDANCE_CHOICES}


def attendee_rows(event, status=None):
    tickets = event.tickets.select_related("user", "order__sub_event").order_by("issued_at")
    if status:
        tickets = tickets.filter(status=status)
    for t in tickets:
        u = t.user
        yield [
            t.ticket_id,
            t.entry_code,
            t.status,
            t.order_id,
            u.email or "",
            u.first_name or "",
            u.last_name or "",
            u.student_id or "",
            u.phone_number or "",
            t.order.sub_event.title if t.order.sub_event_id else "",
            t.issued_at.isoformat() if t.issued_at else "",
            t.verified_at.isoformat() if t.verified_at else "",
        ]


def csv_response(filename, headers, rows):
    response = HttpResponse(content_type="text/csv; charset=utf-8")
    response["Content-Disposition"] = f'attachment; filename="{filename}"'
    writer = csv.writer(response)
    writer.writerow(headers)
    for row in rows:
        writer.writerow(row)
    return response


def xlsx_response(filename, headers, rows, title="Sheet1"):
    wb = Workbook()
    ws = wb.active
    ws.title = title[:31]
    ws.append(headers)
    for row in rows:
        ws.append(row)
    out = io.BytesIO()
    wb.save(out)
    response = HttpResponse(out.getvalue(), content_type=XLSX_CONTENT_TYPE)
    response["Content-Disposition"] = f'attachment; filename="{filename}"'
    return response


def stakeholder_rows(event):
    for s in event.stakeholders.order_by("name"):
        info = s.additional_info or {}
        yield [
            s.name,
            s.email,
            s.role,
            s.attendance_status,
            info.get("company", ""),
            info.get("title", ""),
            info.get("phone", ""),
            info.get("notes", ""),
            "yes" if s.certificate_generated else "no",
        ]


# ── Import ─────────────────────────────────────────────────

def read_table(django_file, file_name):
    """Return a list of dict rows (lower-cased headers) from a CSV or XLSX upload."""
    django_file.seek(0)
    data = django_file.read()
    if file_name.lower().endswith((".xlsx", ".xlsm")):
        wb = load_workbook(filename=io.BytesIO(data), read_only=True, data_only=True)
        ws = wb.active
        rows = list(ws.iter_rows(values_only=True))
        wb.close()
        if not rows:
            return []
        headers = [str(h or "").strip().lower() for h in rows[0]]
        return [
            {headers[i]: ("" if v is None else str(v).strip()) for i, v in enumerate(row) if i < len(headers)}
            for row in rows[1:]
            if any(v not in (None, "") for v in row)
        ]

    text = data.decode("utf-8-sig") if isinstance(data, bytes) else data
    reader = csv.DictReader(io.StringIO(text))
    return [
        {str(k or "").strip().lower(): (v or "").strip() for k, v in row.items()}
        for row in reader
        if any((v or "").strip() for v in row.values() if isinstance(v, str))
    ]


def _row_error(row_number, field, value, message):
    return {"row": row_number, "field": field, "value": value, "error": message}


def process_stakeholder_import(import_record):
    """
    Create stakeholders from an uploaded sheet.

    Required columns: name, email. Optional: role, attendance_status, company,
    title, phone, notes. Row numbers in errors are 1-based sheet rows (the
    header is row 1).
    """
    event = import_record.event
    try:
        rows = read_table(import_record.file, import_record.file_name)
    except Exception as exc:
        logger.exception("Could not read stakeholder import %s", import_record.pk)
        import_record.status = StakeholderImport.FAILED
        import_record.errors = [_row_error(0, "file", import_record.file_name, str(exc))]
        import_record.completed_at = timezone.now()
        import_record.save()
        return import_record

    errors = []
    ok = 0
    now = timezone.now()
    for index, row in enumerate(rows, start=2):
        name = row.get("name", "")
        email = row.get("email", "").lower()
        role = (row.get("role") or Stakeholder.ROLE_ATTENDEE).lower()
        attendance = (row.get("attendance_status") or Stakeholder.REGISTERED).lower()

        if not name:
            errors.append(_row_error(index, "name", name, "Name is required"))
            continue
        try:
            validate_email(email)
        except ValidationError:
            errors.append(_row_error(index, "email", email, "Invalid email address"))
            continue
        if role not in ROLES:
            errors.append(_row_error(index, "role", role, "Invalid role"))
            continue
        if attendance not in ATTENDANCE:
            errors.append(_row_error(index, "attendance_status", attendance, "Invalid attendance status"))
            continue

        info = {k: row[k] for k in ("company", "title", "phone", "notes") if row.get(k)}
        try:
            with transaction.atomic():
                Stakeholder.objects.create(
                    event=event,
                    name=name,
                    email=email,
                    role=role,
                    attendance_status=attendance,
                    additional_info=info,
                    imported_at=now,
                    imported_by=import_record.imported_by,
                )
        except IntegrityError:
            errors.append(_row_error(index, "email", email, "Stakeholder with this email already exists for this event"))
            continue
        ok += 1

    import_record.total_records = len(rows)
    import_record.successful_imports = ok
    import_record.failed_imports = len(errors)
    import_record.errors = errors
    import_record.status = StakeholderImport.COMPLETED
    import_record.completed_at = timezone.now()
    import_record.save()
    logger.info(
        "Stakeholder import %s for event %s: %s ok, %s failed",
        import_record.pk, event.pk, ok, len(errors),
    )
    return import_record
