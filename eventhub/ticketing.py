# eventhub/ticketing.py
"""
Order checkout, ticket issuance, door verification and cancellation.

Capacity lives on the main event. ``tickets_left == -1`` means the event has
no limit; limited events are decremented with a single conditional UPDATE so
two concurrent checkouts can never oversell.
"""

import json
import logging
import re
from datetime import timedelta
from decimal import Decimal

from django.db import IntegrityError, transaction
from django.db.models import F, Sum
from django.db.models.functions import Greatest, Least
from django.utils import timezone

from .models import Event, Order, Ticket

logger = logging.getLogger(__name__)

ENTRY_CODE_RE = re.compile(r"\d{6}")
CANCELLATION_CUTOFF = timedelta(hours=1)
TICKET_TYPE = "General Admission"


class TicketingError(Exception):
    """A checkout/verification failure that maps onto an HTTP status."""

    status_code = 400

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


def resolve_target(event, sub_event=None):
    """Normalize (event, sub_event) so that ``event`` is always the main event."""
    if event.parent_event_id:
        return event.parent_event, event
    if sub_event is not None and sub_event.parent_event_id != event.id:
        raise TicketingError("Sub-event does not belong to this event")
    return event, sub_event


def _reserve_capacity(event, sub_event, quantity):
    if event.is_unlimited:
        return
    updated = (
        Event.objects
        .filter(pk=event.pk, tickets_left__gte=quantity)
        .update(tickets_left=F("tickets_left") - quantity)
    )
    if not updated:
        left = Event.objects.values_list("tickets_left", flat=True).get(pk=event.pk)
        raise TicketingError(f"Only {max(left, 0)} tickets available")
    Event.objects.filter(pk=event.pk, tickets_left=0).update(sold_out=True)

    if sub_event is not None and not sub_event.is_unlimited:
        (
            Event.objects
            .filter(pk=sub_event.pk)
            .update(tickets_left=Greatest(F("tickets_left") - quantity, 0))
        )
        Event.objects.filter(pk=sub_event.pk, tickets_left=0).update(sold_out=True)


def _release_capacity(event, sub_event, count):
    """Give ``count`` seats back to a limited event. Returns the seats refunded."""
    if count <= 0 or event.is_unlimited:
        return 0
    (
        Event.objects
        .filter(pk=event.pk)
        .update(
            tickets_left=Least(F("tickets_left") + count, F("total_capacity")),
            sold_out=False,
        )
    )
    if sub_event is not None and not sub_event.is_unlimited:
        Event.objects.filter(pk=sub_event.pk).update(tickets_left=F("tickets_left") + count, sold_out=False)
    return count


def _create_ticket(order, number, total, attempts=3):
    metadata = {
        "ticket_type": TICKET_TYPE,
        "seat_number": "",
        "section": "",
        "additional_info": f"Ticket {number} of {total}",
    }
    for _ in range(attempts):
        try:
            with transaction.atomic():
                return Ticket.objects.create(order=order, event=order.event, user=order.buyer, metadata=metadata)
        except IntegrityError:
            # entry code raced with another checkout on the same event
            logger.warning("Entry code collision on event %s, retrying", order.event_id)
    raise TicketingError("Could not issue ticket, please retry", 500)


def issue_tickets(order):
    """Create the tickets an order is still missing. Returns the new tickets."""
    existing = order.tickets.count()
    total = order.total_tickets
    return [_create_ticket(order, n, total) for n in range(existing + 1, total + 1)]


def place_order(*, user, event, quantity=1, sub_event=None, payment_reference=""):
    """
    Book ``quantity`` tickets for ``user``.

    Returns ``(order, tickets)``. Raises TicketingError when the event is not
    bookable or does not have enough seats left.
    """
    from .tasks import send_order_confirmation_email

    event, sub_event = resolve_target(event, sub_event)

    if quantity < 1:
        raise TicketingError("Quantity must be at least 1")
    if event.status != Event.PUBLISHED:
        raise TicketingError("This event is not open for registration")
    if event.end_at and event.end_at <= timezone.now():
        raise TicketingError("This event has already ended")

    priced = sub_event or event
    if event.is_free or priced.is_free:
        payment_reference = f"free-event-{int(timezone.now().timestamp() * 1000)}"
        total_amount = Decimal("0")
    else:
        if not payment_reference:
            raise TicketingError("A payment reference is required for paid events")
        total_amount = priced.price * quantity

    with transaction.atomic():
        event.refresh_from_db(fields=["tickets_left", "sold_out"])
        _reserve_capacity(event, sub_event, quantity)
        order = Order.objects.create(
            payment_reference=payment_reference,
            total_tickets=quantity,
            total_amount=total_amount,
            event=event,
            sub_event=sub_event,
            buyer=user,
        )
        tickets = issue_tickets(order)

    logger.info("Order %s placed: %s ticket(s) for event %s by %s", order.pk, quantity, event.pk, user.email)
    transaction.on_commit(lambda: send_order_confirmation_email.delay(order.id))
    return order, tickets


def generate_tickets_for_event(event):
    """Backfill tickets for every completed order of an event."""
    created = []
    for order in event.orders.filter(status=Order.COMPLETED).select_related("event", "buyer"):
        created.extend(issue_tickets(order))
    if created:
        logger.info("Generated %s missing ticket(s) for event %s", len(created), event.pk)
    return created


def verify_entry_code(event, entry_code, verified_by=None):
    """Return ``(success, message, ticket)`` for a code presented at the door."""
    code = str(entry_code or "").strip()
    ticket = (
        Ticket.objects
        .select_related("event", "user")
        .filter(event=event, entry_code=code)
        .first()
    )
    if ticket is None:
        return False, "Invalid entry code", None
    success, message = ticket.verify(verified_by=verified_by)
    logger.info("Entry code check on event %s: %s (%s)", event.pk, message, ticket.ticket_id)
    return success, message, ticket


def extract_entry_code(event, payload):
    """
    Pull the entry code out of scanned QR text.

    Our own QR codes carry JSON with ``entry_code``; anything else is searched
    for the first six-digit run.
    """
    payload = (payload or "").strip()
    if not payload:
        return None
    try:
        data = json.loads(payload)
    except ValueError:
        data = None

    if isinstance(data, dict):
        code = str(data.get("entry_code") or "")
        if ENTRY_CODE_RE.fullmatch(code):
            return code
        ticket_id = data.get("ticket_id")
        if ticket_id:
            return (
                Ticket.objects
                .filter(event=event, ticket_id=ticket_id)
                .values_list("entry_code", flat=True)
                .first()
            )

    match = ENTRY_CODE_RE.search(payload)
    return match.group(0) if match else None


def cancel_order_tickets(order_id, user):
    try:
        order = Order.objects.select_related("event", "sub_event").get(pk=order_id)
    except Order.DoesNotExist:
        raise TicketingError("Order not found", 404)

    if order.buyer_id != user.id:
        raise TicketingError("Unauthorized", 403)

    if timezone.now() > order.event.start_at - CANCELLATION_CUTOFF:
        raise TicketingError("Cannot cancel tickets less than 1 hour before the event starts")

    with transaction.atomic():
        cancelled = order.tickets.filter(status=Ticket.ACTIVE).update(status=Ticket.CANCELLED)
        if not cancelled:
            raise TicketingError("No active tickets found for this order")
        refunded = _release_capacity(order.event, order.sub_event, cancelled)
        if not order.tickets.exclude(status=Ticket.CANCELLED).exists():
            order.status = Order.CANCELLED
            order.save(update_fields=["status"])

    logger.info("Order %s: cancelled %s ticket(s), refunded %s seat(s)", order.pk, cancelled, refunded)
    return {
        "message": f"Successfully cancelled {cancelled} ticket(s)",
        "cancelledTickets": cancelled,
        "refundedCapacity": refunded,
    }


def is_registered(user, event):
    return Order.objects.filter(event=event, buyer=user, status=Order.COMPLETED).exists()


def event_statistics(event):
    tickets = event.tickets.all()
    completed = event.orders.filter(status=Order.COMPLETED)
    revenue = completed.aggregate(total=Sum("total_amount"))["total"] or Decimal("0")
    return {
        "event_id": event.id,
        "total_capacity": event.total_capacity,
        "tickets_left": event.tickets_left,
        "sold_out": event.sold_out,
        "tickets_sold": tickets.exclude(status=Ticket.CANCELLED).count(),
        "tickets_checked_in": tickets.filter(status=Ticket.USED).count(),
        "tickets_cancelled": tickets.filter(status=Ticket.CANCELLED).count(),
        "total_orders": completed.count(),
        "revenue": str(revenue),
    }


def sync_sub_events(event):
    """Mirror a main event's counters onto its sub-events."""
    return event.sub_events.update(tickets_left=event.tickets_left, sold_out=event.sold_out)


def fix_event_capacities(dry_run=False):
    """Recompute counters for every event. Returns a list of change descriptions."""
    changes = []
    for event in Event.objects.filter(parent_event__isnull=True).order_by("pk"):
        before = (event.tickets_left, event.sold_out)
        event.recompute_capacity()
        after = (event.tickets_left, event.sold_out)
        if before != after:
            changes.append(f"{event.pk} {event.title}: tickets_left {before[0]} -> {after[0]}, sold_out {before[1]} -> {after[1]}")
            if not dry_run:
                event.save(update_fields=["tickets_left", "sold_out", "updated_at"])
        if not dry_run:
            sync_sub_events(event)
    return changes
