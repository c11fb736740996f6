import io, qrcode, hashlib
from email.utils import make_msgid
from django.conf import settings
from django.template.loader import render_to_string
from django.core.mail import EmailMultiAlternatives
from django.utils.translation import gettext as _
from .email_tokens import make_email_token


def _qr_png(data: str) -> bytes:
    img = qrcode.make(data)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def make_send_key(to_email: str, ticket_id: str, template: str) -> str:
    raw = f"{to_email}|{ticket_id}|{template}"
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


def signed_ticket_url(ticket, to_email: str) -> str:
    token = make_email_token(f"{ticket.ticket_id}:{to_email}")
    return f"{settings.APP_BASE_URL}/tickets/view/?token={token}"


def _message(*, subject: str, template: str, ctx: dict, to: list, html: bool = False) -> EmailMultiAlternatives:
    text_body = render_to_string(f"eventhub/email/{template}.txt", ctx)
    msg = EmailMultiAlternatives(
        subject=subject,
        body=text_body,
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=to,
        headers={
            "X-Transactional": "true",
            "Message-ID": make_msgid("eventhub"),
        },
    )
    if html:
        msg.attach_alternative(render_to_string(f"eventhub/email/{template}.html", ctx), "text/html")
    return msg


def build_confirmation_message(*, order, tickets) -> EmailMultiAlternatives:
    """Order confirmation with one QR attachment per ticket."""
    user = order.buyer
    event = order.event
    to_email = user.email

    ticket_rows = []
    for t in tickets:
        ticket_rows.append({
            "ticket_id": t.ticket_id,
            "entry_code": t.entry_code,
            "view_url": signed_ticket_url(t, to_email),
            "label": t.metadata.get("additional_info", ""),
        })

    ctx = {
        "user_name": user.get_full_name() or user.email,
        "event_title": event.title,
        "sub_event_title": order.sub_event.title if order.sub_event_id else "",
        "event_dt": event.start_at,
        "location": "Online" if event.is_online else event.location,
        "total_tickets": order.total_tickets,
        "total_amount": order.total_amount,
        "tickets": ticket_rows,
        "organizer": event.organizer.get_full_name() or event.organizer.email,
        "support_email": settings.DEFAULT_FROM_EMAIL,
    }

    subject = _("Your tickets for %(event)s") % {"event": event.title}
    msg = _message(subject=subject, template="ticket_confirmation", ctx=ctx, to=[to_email], html=True)

    for t in tickets:
        msg.attach(filename=f"{t.ticket_id}.png", content=_qr_png(t.qr_code_data), mimetype="image/png")

    return msg


def build_issue_notification_message(issue) -> EmailMultiAlternatives:
    ctx = {
        "issue": issue,
        "event_title": issue.event_title,
        "dashboard_url": f"{settings.APP_BASE_URL}/events/{issue.event_id}/issues/",
    }
    subject = _("[%(severity)s] New issue reported for %(event)s") % {
        "severity": issue.severity.upper(),
        "event": issue.event_title,
    }
    return _message(subject=subject, template="issue_notification", ctx=ctx, to=[issue.organizer_email])


def build_feedback_request_message(*, event, user) -> EmailMultiAlternatives:
    ctx = {
        "user_name": user.get_full_name() or user.email,
        "event_title": event.title,
        "feedback_url": f"{settings.APP_BASE_URL}/events/{event.id}/feedback/",
    }
    subject = _("How was %(event)s?") % {"event": event.title}
    return _message(subject=subject, template="feedback_request", ctx=ctx, to=[user.email])


def build_certificate_message(certificate) -> EmailMultiAlternatives:
    stakeholder = certificate.stakeholder
    ctx = {
        "name": stakeholder.name,
        "event_title": certificate.event.title,
        "role": stakeholder.get_role_display(),
    }
    subject = _("Your certificate for %(event)s") % {"event": certificate.event.title}
    msg = _message(subject=subject, template="certificate", ctx=ctx, to=[stakeholder.email], html=True)
    if certificate.file:
        certificate.file.open("rb")
        try:
            msg.attach(
                filename=f"certificate_{stakeholder.pk}.pdf",
                content=certificate.file.read(),
                mimetype="application/pdf",
            )
        finally:
            certificate.file.close()
    return msg


def build_thank_you_message(*, stakeholder, gallery_url=None) -> EmailMultiAlternatives:
    ctx = {
        "name": stakeholder.name,
        "event_title": stakeholder.event.title,
        "role": stakeholder.get_role_display(),
        "gallery_url": gallery_url,
    }
    subject = _("Thank you for joining %(event)s") % {"event": stakeholder.event.title}
    return _message(subject=subject, template="thank_you", ctx=ctx, to=[stakeholder.email])


def build_event_update_message(*, update, to_email: str) -> EmailMultiAlternatives:
    ctx = {
        "update": update,
        "event_title": update.event.title,
        "event_url": f"{settings.APP_BASE_URL}/events/{update.event_id}/",
    }
    subject = f"[{update.event.title}] {update.title}"
    return _message(subject=subject, template="event_update", ctx=ctx, to=[to_email])
