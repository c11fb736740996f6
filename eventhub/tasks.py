# eventhub/tasks.py
from __future__ import annotations

import logging
from datetime import timedelta

from celery import shared_task
from django.utils import timezone

from .models import (
    Certificate,
    EmailLog,
    Event,
    EventUpdate,
    FeedbackTemplate,
    Issue,
    Order,
    Stakeholder,
    StakeholderImport,
    Ticket,
)

logger = logging.getLogger(__name__)


# --- Helpers ------------------------------------------------------------------
def _send_logged(msg, *, template: str, user=None, event_id="", ticket_id="", log=None) -> bool:
    """Send ``msg`` and record the attempt in EmailLog. Never raises."""
    to = msg.to[0] if msg.to else ""
    if log is None:
        log = EmailLog.objects.create(
            to=to,
            subject=msg.subject,
            template=template,
            user=user,
            event_id=str(event_id or ""),
            ticket_id=str(ticket_id or ""),
        )
    log.attempts += 1
    try:
        msg.send(fail_silently=False)
    except Exception as exc:
        logger.exception("Email '%s' to %s failed", msg.subject, to)
        log.status = "failed"
        log.last_error = str(exc)
        log.save(update_fields=["status", "attempts", "last_error"])
        return False
    log.status = "sent"
    log.sent_at = timezone.now()
    log.save(update_fields=["status", "attempts", "sent_at"])
    return True


def event_recipients(event):
    """Distinct buyers of an event's completed orders."""
    seen = {}
    for order in Order.objects.filter(event=event, status=Order.COMPLETED).select_related("buyer"):
        seen.setdefault(order.buyer_id, order.buyer)
    return list(seen.values())


# --- Tickets ------------------------------------------------------------------
@shared_task
def send_order_confirmation_email(order_id: int, log_id: int | None = None) -> dict:
    """Order confirmation with every active ticket's QR code attached."""
    from .emails import build_confirmation_message

    order = Order.objects.select_related("event", "event__organizer", "sub_event", "buyer").get(id=order_id)
    tickets = list(order.tickets.filter(status=Ticket.ACTIVE).order_by("id"))
    if not tickets:
        return {"order_id": order.id, "sent": False}

    log = EmailLog.objects.filter(id=log_id).first() if log_id else None
    sent = _send_logged(
        build_confirmation_message(order=order, tickets=tickets),
        template="eventhub/email/ticket_confirmation",
        user=order.buyer,
        event_id=order.event_id,
        ticket_id=tickets[0].id,
        log=log,
    )
    return {"order_id": order.id, "email_to": order.buyer.email, "sent": sent}


# --- Issues -------------------------------------------------------------------
@shared_task
def send_issue_notification(issue_id: int) -> bool:
    from .emails import build_issue_notification_message

    issue = Issue.objects.select_related("event").get(id=issue_id)
    return _send_logged(
        build_issue_notification_message(issue),
        template="eventhub/email/issue_notification",
        event_id=issue.event_id,
    )


# --- Feedback -----------------------------------------------------------------
@shared_task
def send_feedback_emails(event_id: int) -> dict:
    """Ask every buyer of the event for feedback and stamp the template."""
    from .emails import build_feedback_request_message

    event = Event.objects.get(id=event_id)
    recipients = event_recipients(event)
    sent = 0
    for user in recipients:
        if _send_logged(
            build_feedback_request_message(event=event, user=user),
            template="eventhub/email/feedback_request",
            user=user,
            event_id=event.id,
        ):
            sent += 1

    template, _ = FeedbackTemplate.objects.get_or_create(event=event)
    template.emails_sent_at = timezone.now()
    template.save(update_fields=["emails_sent_at", "updated_at"])

    failed = len(recipients) - sent
    logger.info("Feedback emails for event %s: %s sent, %s failed", event.id, sent, failed)
    return {"totalEmails": len(recipients), "successfulEmails": sent, "failedEmails": failed}


def pending_feedback_events(now=None):
    """Ended events with feedback on whose follow-up delay has passed and no emails went out."""
    now = now or timezone.now()
    candidates = (
        Event.objects
        .filter(feedback_enabled=True, status=Event.PUBLISHED, parent_event__isnull=True, end_at__lte=now)
        .exclude(feedback_template__emails_sent_at__isnull=False)
        .select_related("feedback_template")
    )
    due = []
    for event in candidates:
        template = getattr(event, "feedback_template", None)
        hours = template.feedback_hours if template else 2
        if event.end_at + timedelta(hours=hours) <= now:
            due.append(event)
    return due


@shared_task
def process_pending_feedback_emails() -> dict:
    processed = []
    for event in pending_feedback_events():
        result = send_feedback_emails(event.id)
        processed.append({"event_id": event.id, **result})
    return {"processedEvents": len(processed), "results": processed}


# --- Stakeholders & certificates ---------------------------------------------
@shared_task
def import_stakeholders(import_id: int) -> dict:
    from .exports import process_stakeholder_import

    record = StakeholderImport.objects.select_related("event", "imported_by").get(id=import_id)
    record = process_stakeholder_import(record)
    return {
        "import_id": record.id,
        "status": record.status,
        "successful_imports": record.successful_imports,
        "failed_imports": record.failed_imports,
    }


def send_certificate_email(certificate: Certificate) -> bool:
    from .emails import build_certificate_message

    ok = _send_logged(
        build_certificate_message(certificate),
        template="eventhub/email/certificate",
        user=certificate.stakeholder.user,
        event_id=certificate.event_id,
    )
    if ok:
        Certificate.objects.filter(pk=certificate.pk).update(email_sent=True, email_sent_at=timezone.now())
        certificate.stakeholder.mark_email_sent("certificate")
    return ok


def send_thank_you_email(stakeholder: Stakeholder, gallery_url=None) -> bool:
    from .emails import build_thank_you_message

    ok = _send_logged(
        build_thank_you_message(stakeholder=stakeholder, gallery_url=gallery_url),
        template="eventhub/email/thank_you",
        user=stakeholder.user,
        event_id=stakeholder.event_id,
    )
    if ok:
        stakeholder.mark_email_sent("thank_you")
    return ok


# --- Event updates ------------------------------------------------------------
def update_recipients(update: EventUpdate):
    recipients = event_recipients(update.event)
    selection = update.recipients or {}
    if selection.get("send_to_all", True):
        return recipients
    wanted_ids = {int(pk) for pk in selection.get("specific_users") or []}
    wanted_roles = set(selection.get("user_roles") or [])
    return [u for u in recipients if u.id in wanted_ids or u.role in wanted_roles]


@shared_task
def deliver_event_update(update_id: int) -> dict:
    from .emails import build_event_update_message

    update = EventUpdate.objects.select_related("event").get(id=update_id)
    if not (update.delivery_methods or {}).get("email"):
        return {"update_id": update.id, "sent": 0}

    sent = 0
    for user in update_recipients(update):
        if _send_logged(
            build_event_update_message(update=update, to_email=user.email),
            template="eventhub/email/event_update",
            user=user,
            event_id=update.event_id,
        ):
            sent += 1

    stats = dict(update.email_stats or {})
    stats["sent"] = int(stats.get("sent", 0)) + sent
    stats["delivered"] = int(stats.get("delivered", 0)) + sent
    EventUpdate.objects.filter(pk=update.pk).update(email_stats=stats, status=EventUpdate.SENT)
    return {"update_id": update.id, "sent": sent}


@shared_task
def publish_scheduled_updates() -> int:
    """Publish updates whose scheduled time has come and push them out."""
    now = timezone.now()
    due = EventUpdate.objects.filter(status=EventUpdate.SCHEDULED, scheduled_for__lte=now)
    count = 0
    for update in due:
        update.publish()
        deliver_event_update.delay(update.id)
        count += 1
    return count
