"""
Excel export of the job board.
"""
import io

from django.utils import timezone
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

COLUMNS = [
    ("Job ID", "job_id"),
    ("Customer", "customer_name"),
    ("Address", "address"),
    ("Status", "status"),
    ("Phase", "lifecycle_phase"),
    ("Scheduler Stage", "scheduler_stage"),
    ("Assigned", "assigned_staff"),
    ("Urgency", "urgency"),
    ("Quote Value", "quote_value"),
    ("Install Stage", "install_stage"),
    ("Posts", "post_install_date"),
    ("Panels", "panel_install_date"),
    ("Tentative Posts", "tentative_post_date"),
    ("Tentative Panels", "tentative_panel_date"),
]

_DATE_FIELDS = {"post_install_date", "panel_install_date", "tentative_post_date", "tentative_panel_date"}


def _cell_value(job, field):
    value = getattr(job, field)
    if value is None:
        return ""
    if field in _DATE_FIELDS:
        # Excel has no timezone support
        return timezone.localtime(value).replace(tzinfo=None)
    if field == "quote_value":
        return float(value)
    return value


def jobs_workbook(jobs, title="Jobs"):
    wb = Workbook()
    ws = wb.active
    ws.title = title[:31]

    header_fill = PatternFill(start_color="374151", end_color="374151", fill_type="solid")
    header_font = Font(bold=True, color="FFFFFF")
    border = Border(
        left=Side(style="thin"),
        right=Side(style="thin"),
        top=Side(style="thin"),
        bottom=Side(style="thin"),
    )
    center = Alignment(horizontal="center", vertical="center")

    ws["A1"] = f"Job Board - {timezone.localdate()}"
    ws["A1"].font = Font(bold=True, size=14)

    row = 3
    for col, (header, _) in enumerate(COLUMNS, 1):
        c = ws.cell(row=row, column=col, value=header)
        c.font = header_font
        c.fill = header_fill
        c.alignment = center
        c.border = border
    row += 1

    for job in jobs:
        for col, (_, field) in enumerate(COLUMNS, 1):
            c = ws.cell(row=row, column=col, value=_cell_value(job, field))
            c.border = border
            if field in _DATE_FIELDS and c.value:
                c.number_format = "yyyy-mm-dd hh:mm"
        row += 1

    return wb


def jobs_workbook_bytes(jobs, title="Jobs"):
    buf = io.BytesIO()
    jobs_workbook(jobs, title).save(buf)
    return buf.getvalue()
