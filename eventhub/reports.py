# eventhub/reports.py
"""
Post-event report rendering: PDF (reportlab) and Word-compatible HTML.

Content is the ``{"title", "sections": [{"heading", "content": [...]}]}``
structure produced by ``gemini.generate_report_content``.
"""

import io

from django.template.loader import render_to_string
from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas as pdf_canvas

from .analytics import report_metrics
from .gemini import generate_report_content

MARGIN = 20 * mm
BODY_FONT = ("Helvetica", 10.5)
LINE_HEIGHT = 14


def build_report(report):
    """Compute metrics, draft the content and store it on the report."""
    metrics = report_metrics(report)
    content = generate_report_content(report, metrics)
    report.generated_content = content
    report.save(update_fields=["generated_content", "updated_at"])
    return content, metrics


def _sections(content):
    for section in content.get("sections") or []:
        items = section.get("content") or []
        if isinstance(items, str):
            items = [items]
        yield str(section.get("heading") or ""), [str(i) for i in items]


def render_report_pdf(content, report):
    buf = io.BytesIO()
    width, height = A4
    c = pdf_canvas.Canvas(buf, pagesize=A4)
    c.setTitle(content.get("title") or "Event Report")
    text_width = width - 2 * MARGIN
    y = height - MARGIN

    def ensure_room(lines=1):
        nonlocal y
        if y - lines * LINE_HEIGHT < MARGIN:
            c.showPage()
            y = height - MARGIN

    c.setFillColor(HexColor("#1a365d"))
    c.setFont("Helvetica-Bold", 18)
    for line in simpleSplit(content.get("title") or "Event Report", "Helvetica-Bold", 18, text_width):
        c.drawString(MARGIN, y, line)
        y -= 22
    c.setFillColor(HexColor("#4a5568"))
    c.setFont(*BODY_FONT)
    c.drawString(MARGIN, y, f"Prepared by {report.prepared_by} for {report.event.title}")
    y -= 2 * LINE_HEIGHT

    for heading, items in _sections(content):
        ensure_room(3)
        c.setFillColor(HexColor("#2c5282"))
        c.setFont("Helvetica-Bold", 13)
        c.drawString(MARGIN, y, heading)
        y -= LINE_HEIGHT + 4
        c.setFillColor(HexColor("#000000"))
        c.setFont(*BODY_FONT)
        for item in items:
            for n, line in enumerate(simpleSplit(item, BODY_FONT[0], BODY_FONT[1], text_width - 12)):
                ensure_room()
                c.drawString(MARGIN, y, "•" if n == 0 else "")
                c.drawString(MARGIN + 12, y, line)
                y -= LINE_HEIGHT
        y -= LINE_HEIGHT / 2

    c.showPage()
    c.save()
    return buf.getvalue()


def render_report_word(content, report, metrics):
    """HTML that Word opens as a document."""
    return render_to_string(
        "eventhub/report_word.html",
        {
            "title": content.get("title") or "Event Report",
            "sections": list(_sections(content)),
            "report": report,
            "metrics": metrics,
        },
    )
