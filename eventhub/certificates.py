# eventhub/certificates.py
"""
Certificate templates and PDF rendering.

Template field coordinates (``x``/``y``) are percentages of the page, with
``y`` measured from the top edge. Fields are drawn centred on ``x``.
"""

import io
import logging

from django.core.files.base import ContentFile
from django.db import IntegrityError, transaction
from django.utils import timezone
from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas as pdf_canvas

from .models import Certificate, CertificateTemplate, Stakeholder

logger = logging.getLogger(__name__)

FALLBACK_TEMPLATE = "Participation Certificate"

ROLE_TEMPLATES = {
    Stakeholder.ROLE_ATTENDEE: "Attendance Certificate",
    Stakeholder.ROLE_SPEAKER: "Speaker Certificate",
    Stakeholder.ROLE_VOLUNTEER: "Volunteer Certificate",
}

# reportlab ships the base-14 fonts; map the names organizers pick onto them
FONT_MAP = {
    "arial": "Helvetica",
    "helvetica": "Helvetica",
    "times": "Times-Roman",
    "times new roman": "Times-Roman",
    "georgia": "Times-Roman",
    "courier": "Courier",
    "courier new": "Courier",
}


def _field(field_id, name, y, font_size, color, *, field_type="text", x=50, required=True):
    return {
        "id": field_id,
        "name": name,
        "type": field_type,
        "x": x,
        "y": y,
        "width": None,
        "height": None,
        "font_size": font_size,
        "font_family": "Arial",
        "color": color,
        "required": required,
    }


def _standard_fields(title_color, name_label, extra=None):
    fields = [
        _field("title", "Certificate Title", 20, 32, title_color),
        _field("participantName", name_label, 40, 24, "#2d3748"),
    ]
    if extra:
        fields.append(_field(extra[0], extra[1], 50, 16, "#4a5568"))
        event_y, date_y = 60, 70
    else:
        event_y, date_y = 55, 65
    fields += [
        _field("eventName", "Event Name", event_y, 18, "#4a5568"),
        _field("eventDate", "Event Date", date_y, 14, "#718096", field_type="date"),
        _field("organizerSignature", "Organizer Signature", 85, 12, "#2d3748", x=70, required=False),
    ]
    return fields


DEFAULT_TEMPLATES = [
    {
        "name": "Attendance Certificate",
        "description": "Standard certificate for event attendees",
        "fields": _standard_fields("#1a365d", "Participant Name"),
        "default_values": {"title": "Certificate of Attendance"},
    },
    {
        "name": "Speaker Certificate",
        "description": "Certificate for event speakers and presenters",
        "fields": _standard_fields("#744210", "Speaker Name", ("recognition", "Recognition Text")),
        "default_values": {
            "title": "Certificate of Recognition",
            "recognition": "for outstanding contribution as a speaker",
        },
    },
    {
        "name": "Volunteer Certificate",
        "description": "Certificate for event volunteers",
        "fields": _standard_fields("#22543d", "Volunteer Name", ("appreciation", "Appreciation Text")),
        "default_values": {
            "title": "Certificate of Appreciation",
            "appreciation": "for dedicated volunteer service",
        },
    },
    {
        "name": FALLBACK_TEMPLATE,
        "description": "General certificate for any event participant",
        "fields": _standard_fields("#553c9a", "Participant Name", ("participantRole", "Participant Role")),
        "default_values": {"title": "Certificate of Participation"},
    },
]


class CertificateError(Exception):
    pass


def ensure_default_templates(event, user):
    """Create any missing default template for ``event``. Returns the number created."""
    existing = set(event.certificate_templates.values_list("name", flat=True))
    created = 0
    for template in DEFAULT_TEMPLATES:
        if template["name"] in existing:
            continue
        CertificateTemplate.objects.create(
            event=event,
            name=template["name"],
            description=template["description"],
            template_type=CertificateTemplate.GENERATED,
            fields=template["fields"],
            default_values=template["default_values"],
            created_by=user,
        )
        created += 1
    if created:
        logger.info("Created %s default certificate template(s) for event %s", created, event.pk)
    return created


def template_for_role(event, role):
    """Active template for the role (by default name, then by name match), else the participation one."""
    qs = event.certificate_templates.filter(is_active=True)
    named = ROLE_TEMPLATES.get(role)
    return (
        (named and qs.filter(name=named).first())
        or qs.filter(name__icontains=role).first()
        or qs.filter(name=FALLBACK_TEMPLATE).first()
    )


def build_field_values(template, stakeholder, overrides=None):
    event = stakeholder.event
    values = dict(template.default_values or {})
    values.update({
        "participantName": stakeholder.name,
        "participantEmail": stakeholder.email,
        "participantRole": stakeholder.get_role_display(),
        "eventName": event.title,
        "eventDate": timezone.localtime(event.start_at).strftime("%B %d, %Y"),
        "organizerSignature": event.organizer.get_full_name() or event.organizer.email,
    })
    values.update(overrides or {})
    return values


def render_certificate_pdf(template, field_values):
    """Draw the template's text fields onto a landscape A4 page. Returns PDF bytes."""
    buf = io.BytesIO()
    width, height = landscape(A4)
    c = pdf_canvas.Canvas(buf, pagesize=(width, height))
    c.setTitle(field_values.get("title") or template.name)

    # frame
    c.setStrokeColor(HexColor("#2d3748"))
    c.setLineWidth(2)
    c.rect(10 * mm, 10 * mm, width - 20 * mm, height - 20 * mm)

    for field in template.fields or []:
        value = field_values.get(field.get("id"))
        if value in (None, ""):
            continue
        if field.get("type") in ("image", "signature") and str(value).startswith(("http://", "https://")):
            # remote assets are not fetched; print the signer's name instead
            continue
        font = FONT_MAP.get(str(field.get("font_family", "")).lower(), "Helvetica")
        size = field.get("font_size") or 12
        try:
            c.setFillColor(HexColor(field.get("color") or "#000000"))
        except ValueError:
            c.setFillColor(HexColor("#000000"))
        c.setFont(font, size)
        x = width * float(field.get("x", 50)) / 100.0
        y = height - height * float(field.get("y", 50)) / 100.0
        c.drawCentredString(x, y, str(value))

    c.showPage()
    c.save()
    return buf.getvalue()


def generate_certificate(*, template, stakeholder, overrides=None):
    """
    Render and store a certificate for one stakeholder.

    Raises CertificateError if the stakeholder already has one.
    """
    if Certificate.objects.filter(stakeholder=stakeholder).exists():
        raise CertificateError("Certificate already exists for this stakeholder")

    values = build_field_values(template, stakeholder, overrides)
    pdf = render_certificate_pdf(template, values)

    try:
        with transaction.atomic():
            certificate = Certificate(
                template=template,
                event=stakeholder.event,
                stakeholder=stakeholder,
                field_values=values,
            )
            certificate.file.save(f"certificate_{stakeholder.event_id}_{stakeholder.pk}.pdf", ContentFile(pdf), save=False)
            certificate.save()
            Stakeholder.objects.filter(pk=stakeholder.pk).update(certificate_generated=True)
    except IntegrityError:
        raise CertificateError("Certificate already exists for this stakeholder")

    stakeholder.certificate_generated = True
    logger.info("Certificate %s generated for stakeholder %s", certificate.pk, stakeholder.pk)
    return certificate


def bulk_generate(*, template, stakeholders, overrides=None):
    """Generate for each stakeholder lacking a certificate. Returns per-stakeholder results."""
    results = []
    for stakeholder in stakeholders:
        try:
            cert = generate_certificate(template=template, stakeholder=stakeholder, overrides=overrides)
        except CertificateError as exc:
            results.append({"stakeholder_id": stakeholder.pk, "name": stakeholder.name, "success": False, "error": str(exc)})
        else:
            results.append({"stakeholder_id": stakeholder.pk, "name": stakeholder.name, "success": True, "certificate_id": cert.pk})
    return results


def auto_generate_for_attended(event, user):
    """Certify every attended stakeholder without a certificate, picking the template by role."""
    ensure_default_templates(event, user)
    pending = event.stakeholders.filter(
        attendance_status=Stakeholder.ATTENDED,
        certificate_generated=False,
    )
    results = []
    for stakeholder in pending:
        template = template_for_role(event, stakeholder.role)
        if template is None:
            results.append({"stakeholder_id": stakeholder.pk, "name": stakeholder.name, "success": False, "error": "No active template"})
            continue
        results.extend(bulk_generate(template=template, stakeholders=[stakeholder]))
    return results
