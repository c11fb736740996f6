# tests/test_orders_tickets.py
import datetime as dt
import json
import re
from decimal import Decimal

import pytest
from django.core import mail
from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from eventhub.models import EmailLog, Event, Order, Ticket, User
from eventhub.ticketing import TicketingError, extract_entry_code, place_order


def _client_for(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


# ── Checkout ──────────────────────────────────────────────

@pytest.mark.django_db
def test_checkout_issues_tickets_and_decrements_capacity(student_client, event):
    url = reverse("order_create")
    res = student_client.post(url, {"event_id": event.id, "quantity": 2}, format="json")

    assert res.status_code == status.HTTP_201_CREATED
    assert len(res.data["tickets"]) == 2
    assert res.data["order"]["total_tickets"] == 2
    assert res.data["order"]["payment_reference"].startswith("free-event-")

    codes = {t["entry_code"] for t in res.data["tickets"]}
    assert len(codes) == 2
    for t in res.data["tickets"]:
        assert re.fullmatch(r"TKT-[0-9A-F]{12}", t["ticket_id"])
        assert re.fullmatch(r"\d{6}", t["entry_code"])
        assert t["qr_code_url"]

    event.refresh_from_db()
    assert event.tickets_left == 8
    assert event.sold_out is False


@pytest.mark.django_db
def test_checkout_rejects_more_than_available(student_client, make_event, organizer):
    small = make_event(organizer, capacity=3)
    res = student_client.post(reverse("order_create"), {"event_id": small.id, "quantity": 4}, format="json")

    assert res.status_code == status.HTTP_400_BAD_REQUEST
    assert res.data["error"] == "Only 3 tickets available"
    small.refresh_from_db()
    assert small.tickets_left == 3
    assert Order.objects.count() == 0


@pytest.mark.django_db
def test_last_seat_marks_event_sold_out(student, make_event, organizer):
    small = make_event(organizer, capacity=2)
    place_order(user=student, event=small, quantity=2)

    small.refresh_from_db()
    assert small.tickets_left == 0
    assert small.sold_out is True

    with pytest.raises(TicketingError) as exc:
        place_order(user=student, event=small, quantity=1)
    assert exc.value.message == "Only 0 tickets available"


@pytest.mark.django_db
def test_unlimited_event_never_decrements(student, unlimited_event):
    order, tickets = place_order(user=student, event=unlimited_event, quantity=5)

    unlimited_event.refresh_from_db()
    assert len(tickets) == 5
    assert unlimited_event.tickets_left == Event.UNLIMITED
    assert unlimited_event.sold_out is False


@pytest.mark.django_db
def test_sub_event_order_books_against_parent_and_mirrors(student, event, organizer):
    sub = Event.objects.create(
        title="Git Branching Deep Dive",
        location="H-110",
        start_at=event.start_at,
        end_at=event.end_at,
        organizer=organizer,
        parent_event=event,
        event_type=Event.SUB,
        tickets_left=event.tickets_left,
    )

    order, tickets = place_order(user=student, event=sub, quantity=3)

    assert order.event == event
    assert order.sub_event == sub
    assert all(t.event_id == event.id for t in tickets)
    event.refresh_from_db()
    sub.refresh_from_db()
    assert event.tickets_left == 7
    assert sub.tickets_left == 7


@pytest.mark.django_db
def test_paid_event_requires_payment_reference(student, make_event, organizer):
    paid = make_event(organizer, is_free=False, price=Decimal("15.00"))

    with pytest.raises(TicketingError):
        place_order(user=student, event=paid, quantity=1)

    order, _ = place_order(user=student, event=paid, quantity=2, payment_reference="pi_123")
    assert order.payment_reference == "pi_123"
    assert str(order.total_amount) == "30.00"


@pytest.mark.django_db
def test_cannot_book_draft_or_ended_event(student, make_event, organizer):
    draft = make_event(organizer, status=Event.DRAFT)
    with pytest.raises(TicketingError):
        place_order(user=student, event=draft)

    now = timezone.now()
    past = make_event(organizer, start_at=now - dt.timedelta(days=2), end_at=now - dt.timedelta(days=1))
    with pytest.raises(TicketingError) as exc:
        place_order(user=student, event=past)
    assert exc.value.message == "This event has already ended"


@pytest.mark.django_db
def test_my_orders_and_registration_check(student_client, student, event):
    res = student_client.get(reverse("registration_check", args=[event.id]))
    assert res.data["is_registered"] is False

    place_order(user=student, event=event, quantity=1)

    res = student_client.get(reverse("registration_check", args=[event.id]))
    assert res.data["is_registered"] is True

    res = student_client.get(reverse("my_orders"))
    assert res.status_code == 200
    assert res.data["count"] == 1
    assert res.data["results"][0]["event_title"] == event.title


# ── Door verification ─────────────────────────────────────

@pytest.mark.django_db
def test_verify_entry_code_once(organizer_client, student, event):
    _, (ticket,) = place_order(user=student, event=event)
    url = reverse("verify_entry_code", args=[event.id])

    res = organizer_client.post(url, {"entry_code": ticket.entry_code}, format="json")
    assert res.status_code == 200
    assert res.data["success"] is True
    assert res.data["method"] == "entry_code"

    ticket.refresh_from_db()
    assert ticket.status == Ticket.USED
    assert ticket.verified_at is not None

    res = organizer_client.post(url, {"entry_code": ticket.entry_code}, format="json")
    assert res.status_code == 400
    assert res.data["error"] == "Ticket already verified"


@pytest.mark.django_db
def test_stale_copies_admit_a_ticket_only_once(student, organizer, event):
    _, (ticket,) = place_order(user=student, event=event)
    first_scanner = Ticket.objects.get(pk=ticket.pk)
    second_scanner = Ticket.objects.get(pk=ticket.pk)

    assert first_scanner.verify(verified_by=organizer) == (True, "Ticket verified successfully")
    assert second_scanner.verify(verified_by=organizer) == (False, "Ticket already verified")

    second_scanner.refresh_from_db()
    assert second_scanner.status == Ticket.USED
    assert second_scanner.verified_by == organizer


@pytest.mark.django_db
def test_stale_copy_of_cancelled_ticket_is_refused(student, event):
    _, (ticket,) = place_order(user=student, event=event)
    stale = Ticket.objects.get(pk=ticket.pk)
    ticket.cancel_ticket()

    assert stale.verify() == (False, "Ticket cancelled")
    assert Ticket.objects.get(pk=ticket.pk).status == Ticket.CANCELLED


@pytest.mark.django_db
def test_verify_and_scan_through_sub_event(organizer_client, student, event, organizer):
    sub = Event.objects.create(
        title="Git Branching Deep Dive", location="H-110",
        start_at=event.start_at, end_at=event.end_at,
        organizer=organizer, parent_event=event, event_type=Event.SUB,
        tickets_left=event.tickets_left,
    )
    _, (first, second) = place_order(user=student, event=sub, quantity=2)

    res = organizer_client.post(
        reverse("verify_entry_code", args=[sub.id]), {"entry_code": first.entry_code}, format="json"
    )
    assert res.status_code == 200
    assert res.data["success"] is True

    res = organizer_client.post(reverse("qr_scan", args=[sub.id]), {"qr_data": second.qr_code_data}, format="json")
    assert res.status_code == 200
    assert res.data["entry_code"] == second.entry_code


@pytest.mark.django_db
def test_verify_rejects_unknown_and_malformed_codes(organizer_client, event):
    url = reverse("verify_entry_code", args=[event.id])

    res = organizer_client.post(url, {"entry_code": "000000"}, format="json")
    assert res.status_code == 400
    assert res.data["error"] == "Invalid entry code"

    res = organizer_client.post(url, {"entry_code": "12ab"}, format="json")
    assert res.status_code == 400


@pytest.mark.django_db
def test_expired_is_reported_before_cancelled(organizer_client, student, event):
    _, (ticket,) = place_order(user=student, event=event)
    Ticket.objects.filter(pk=ticket.pk).update(
        status=Ticket.CANCELLED, expires_at=timezone.now() - dt.timedelta(minutes=1)
    )

    res = organizer_client.post(
        reverse("verify_entry_code", args=[event.id]), {"entry_code": ticket.entry_code}, format="json"
    )

    assert res.status_code == 400
    assert res.data["error"] == "Ticket expired"
    ticket.refresh_from_db()
    assert ticket.status == Ticket.EXPIRED


@pytest.mark.django_db
def test_cancelled_ticket_cannot_enter(organizer_client, student, event):
    _, (ticket,) = place_order(user=student, event=event)
    ticket.cancel_ticket()

    res = organizer_client.post(
        reverse("verify_entry_code", args=[event.id]), {"entry_code": ticket.entry_code}, format="json"
    )
    assert res.data["error"] == "Ticket cancelled"


@pytest.mark.django_db
def test_only_the_organizer_can_verify(student_client, student, event):
    _, (ticket,) = place_order(user=student, event=event)
    res = student_client.post(
        reverse("verify_entry_code", args=[event.id]), {"entry_code": ticket.entry_code}, format="json"
    )
    assert res.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
def test_qr_scan_with_ticket_payload(organizer_client, student, event):
    _, (ticket,) = place_order(user=student, event=event)

    res = organizer_client.post(
        reverse("qr_scan", args=[event.id]), {"qr_data": ticket.qr_code_data}, format="json"
    )

    assert res.status_code == 200
    assert res.data["method"] == "qr_scan"
    assert res.data["entry_code"] == ticket.entry_code
    assert res.data["ticket"]["ticket_id"] == ticket.ticket_id


@pytest.mark.django_db
def test_qr_scan_with_photo_of_code(organizer_client, student, event):
    _, (ticket,) = place_order(user=student, event=event)
    ticket.qr_code.open("rb")
    image = SimpleUploadedFile("scan.png", ticket.qr_code.read(), content_type="image/png")
    ticket.qr_code.close()

    res = organizer_client.post(reverse("qr_scan", args=[event.id]), {"qr_image": image}, format="multipart")

    assert res.status_code == 200
    assert res.data["success"] is True


@pytest.mark.django_db
def test_extract_entry_code_fallbacks(student, event):
    _, (ticket,) = place_order(user=student, event=event)

    assert extract_entry_code(event, json.dumps({"ticket_id": ticket.ticket_id})) == ticket.entry_code
    assert extract_entry_code(event, f"Entry: {ticket.entry_code}") == ticket.entry_code
    assert extract_entry_code(event, "no digits here") is None
    assert extract_entry_code(event, "") is None


@pytest.mark.django_db
def test_generate_missing_tickets(organizer_client, student, event):
    order = Order.objects.create(
        payment_reference="manual", total_tickets=2, event=event, buyer=student
    )

    res = organizer_client.post(reverse("generate_tickets", args=[event.id]))
    assert res.status_code == 201
    assert res.data["generated"] == 2
    assert order.tickets.count() == 2

    res = organizer_client.post(reverse("generate_tickets", args=[event.id]))
    assert res.status_code == 200
    assert res.data["generated"] == 0


@pytest.mark.django_db
def test_event_statistics(organizer_client, student, event):
    place_order(user=student, event=event, quantity=3)

    res = organizer_client.get(reverse("event_statistics", args=[event.id]))

    assert res.status_code == 200
    assert res.data["tickets_sold"] == 3
    assert res.data["tickets_left"] == 7
    assert res.data["total_orders"] == 1


# ── Cancellation ──────────────────────────────────────────

@pytest.mark.django_db
def test_cancel_order_refunds_capacity(student_client, student, event):
    order, _ = place_order(user=student, event=event, quantity=2)

    res = student_client.post(reverse("order_cancel", args=[order.id]))

    assert res.status_code == 200
    assert res.data["cancelledTickets"] == 2
    assert res.data["refundedCapacity"] == 2
    event.refresh_from_db()
    order.refresh_from_db()
    assert event.tickets_left == 10
    assert order.status == Order.CANCELLED


@pytest.mark.django_db
def test_cancel_counts_only_active_tickets(student_client, student, event):
    order, tickets = place_order(user=student, event=event, quantity=3)
    tickets[0].verify()

    res = student_client.post(reverse("order_cancel", args=[order.id]))

    assert res.data["cancelledTickets"] == 2
    event.refresh_from_db()
    order.refresh_from_db()
    assert event.tickets_left == 9
    assert order.status == Order.COMPLETED


@pytest.mark.django_db
def test_cancel_someone_elses_order(student, event):
    order, _ = place_order(user=student, event=event)
    intruder = User.objects.create_user(
        email="intruder@example.com", password="pass1234", first_name="In", last_name="Truder"
    )

    res = _client_for(intruder).post(reverse("order_cancel", args=[order.id]))

    assert res.status_code == status.HTTP_403_FORBIDDEN
    assert res.data["error"] == "Unauthorized"


@pytest.mark.django_db
def test_cancel_inside_last_hour_is_refused(student_client, student, make_event, organizer):
    soon = make_event(organizer, start_at=timezone.now() + dt.timedelta(minutes=30))
    order, _ = place_order(user=student, event=soon)

    res = student_client.post(reverse("order_cancel", args=[order.id]))

    assert res.status_code == 400
    assert "1 hour" in res.data["error"]


@pytest.mark.django_db
def test_cancel_twice(student_client, student, event):
    order, _ = place_order(user=student, event=event)
    student_client.post(reverse("order_cancel", args=[order.id]))

    res = student_client.post(reverse("order_cancel", args=[order.id]))
    assert res.status_code == 400
    assert res.data["error"] == "No active tickets found for this order"


# ── Confirmation emails ───────────────────────────────────

@pytest.mark.django_db
def test_checkout_sends_confirmation_with_qr(student_client, event, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True):
        res = student_client.post(reverse("order_create"), {"event_id": event.id, "quantity": 2}, format="json")

    assert res.status_code == 201
    assert len(mail.outbox) == 1
    message = mail.outbox[0]
    assert message.to == ["student@example.com"]
    assert len(message.attachments) == 2
    assert EmailLog.objects.filter(status="sent", to="student@example.com").count() == 1


@pytest.mark.django_db
def test_resend_confirmation_is_rate_limited(student_client, student, event):
    _, (ticket,) = place_order(user=student, event=event)
    url = reverse("resend_confirmation", args=[ticket.id])

    for _ in range(3):
        res = student_client.post(url)
        assert res.status_code == 200
        assert res.data["ok"] is True

    res = student_client.post(url)
    assert res.status_code == status.HTTP_429_TOO_MANY_REQUESTS
    assert res.data == {"ok": False, "error": "Rate limit: 3 per 24h"}


@pytest.mark.django_db
def test_checkout_confirmation_does_not_use_up_resends(student_client, event, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True):
        res = student_client.post(reverse("order_create"), {"event_id": event.id, "quantity": 1}, format="json")
    assert res.status_code == 201
    ticket = Ticket.objects.get(event=event)
    assert EmailLog.objects.filter(ticket_id=str(ticket.id)).count() == 1

    url = reverse("resend_confirmation", args=[ticket.id])
    for _ in range(3):
        assert student_client.post(url).status_code == 200
    assert student_client.post(url).status_code == status.HTTP_429_TOO_MANY_REQUESTS


@pytest.mark.django_db
def test_resend_confirmation_for_other_users_ticket(student, event, organizer):
    _, (ticket,) = place_order(user=student, event=event)
    res = _client_for(organizer).post(reverse("resend_confirmation", args=[ticket.id]))
    assert res.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
def test_signed_ticket_link(client, student, event):
    from eventhub.emails import signed_ticket_url

    _, (ticket,) = place_order(user=student, event=event)
    url = signed_ticket_url(ticket, student.email).replace("http://testserver", "")

    res = client.get(url)
    assert res.status_code == 200
    assert ticket.entry_code in res.content.decode()

    res = client.get(reverse("view_ticket_signed"), {"token": "garbage"})
    assert res.status_code == 400
