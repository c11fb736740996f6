# tests/test_exports.py
import csv
import datetime as dt
import io

from django.core import mail
from django.urls import reverse
from django.utils import timezone
from openpyxl import load_workbook
from rest_framework.test import APIClient, APITestCase

from eventhub.models import Event, Gallery, Stakeholder, Ticket, User
from eventhub.ticketing import place_order


class EventAttendeesExportTests(APITestCase):
    """Attendee exports for organizers."""

    def setUp(self):
        self.organizer = User.objects.create_user(
            email="org@example.com", password="pw", first_name="Org", last_name="User",
            role=User.ROLE_ORGANIZER, is_verified=True,
        )
        self.other_organizer = User.objects.create_user(
            email="other_org@example.com", password="pw", first_name="Other", last_name="Organizer",
            role=User.ROLE_ORGANIZER, is_verified=True,
        )
        self.alice = User.objects.create_user(
            email="student1@example.com", password="pw", first_name="Alice", last_name="Student",
            student_id="12345678", phone_number="555-1234",
        )
        self.bob = User.objects.create_user(
            email="student2@example.com", password="pw", first_name="Bob", last_name="Student",
            student_id="87654321",
        )

        start = timezone.now() + dt.timedelta(days=1)
        self.event = Event.objects.create(
            title="Career Fair", location="Hall Building", organizer=self.organizer,
            start_at=start, end_at=start + dt.timedelta(hours=3),
            total_capacity=20, tickets_left=20, status=Event.PUBLISHED,
        )
        place_order(user=self.alice, event=self.event, quantity=2)
        _, bob_tickets = place_order(user=self.bob, event=self.event, quantity=1)
        Ticket.objects.filter(pk=bob_tickets[0].pk).update(status=Ticket.USED)

        self.client = APIClient()

    def test_csv_lists_every_ticket(self):
        self.client.force_authenticate(user=self.organizer)
        res = self.client.get(reverse("event_attendees_csv", args=[self.event.id]))

        self.assertEqual(res.status_code, 200)
        self.assertTrue(res["Content-Type"].startswith("text/csv"))
        self.assertIn(f'attendees_event_{self.event.id}.csv', res["Content-Disposition"])

        rows = list(csv.DictReader(io.StringIO(res.content.decode())))
        self.assertEqual(len(rows), 3)
        alice_rows = [r for r in rows if r["user_email"] == "student1@example.com"]
        self.assertEqual(len(alice_rows), 2)
        self.assertEqual(alice_rows[0]["student_id"], "12345678")
        self.assertEqual(alice_rows[0]["phone_number"], "555-1234")
        self.assertRegex(alice_rows[0]["ticket_id"], r"^TKT-[0-9A-F]{12}$")

    def test_csv_status_filter(self):
        self.client.force_authenticate(user=self.organizer)
        res = self.client.get(reverse("event_attendees_csv", args=[self.event.id]), {"status": "used"})

        rows = list(csv.DictReader(io.StringIO(res.content.decode())))
        self.assertEqual([r["first_name"] for r in rows], ["Bob"])

    def test_xlsx_export(self):
        self.client.force_authenticate(user=self.organizer)
        res = self.client.get(reverse("event_attendees_xlsx", args=[self.event.id]))

        self.assertEqual(res.status_code, 200)
        self.assertEqual(
            res["Content-Type"], "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
        ws = load_workbook(io.BytesIO(res.content)).active
        self.assertEqual(ws.title, "Attendees")
        rows = list(ws.iter_rows(values_only=True))
        self.assertEqual(rows[0][:3], ("ticket_id", "entry_code", "ticket_status"))
        self.assertEqual(len(rows), 4)

    def test_other_organizer_cannot_export(self):
        self.client.force_authenticate(user=self.other_organizer)
        res = self.client.get(reverse("event_attendees_csv", args=[self.event.id]))
        self.assertEqual(res.status_code, 403)

    def test_student_cannot_export(self):
        self.client.force_authenticate(user=self.alice)
        res = self.client.get(reverse("event_attendees_xlsx", args=[self.event.id]))
        self.assertEqual(res.status_code, 403)

    def test_unknown_event(self):
        self.client.force_authenticate(user=self.organizer)
        res = self.client.get(reverse("event_attendees_csv", args=[99999]))
        self.assertEqual(res.status_code, 404)


class StakeholderEmailTests(APITestCase):
    """Thank-you and certificate emails to stakeholders."""

    def setUp(self):
        self.organizer = User.objects.create_user(
            email="org@example.com", password="pw", first_name="Org", last_name="User",
            role=User.ROLE_ORGANIZER,
        )
        start = timezone.now() + dt.timedelta(days=1)
        self.event = Event.objects.create(
            title="Demo Day", location="EV", organizer=self.organizer,
            start_at=start, end_at=start + dt.timedelta(hours=2), status=Event.PUBLISHED,
        )
        self.ada = Stakeholder.objects.create(
            event=self.event, name="Ada Lovelace", email="ada@example.com", role=Stakeholder.ROLE_SPEAKER,
        )
        self.grace = Stakeholder.objects.create(
            event=self.event, name="Grace Hopper", email="grace@example.com",
        )
        self.gallery = Gallery.objects.create(event=self.event, name="Photos", created_by=self.organizer)
        self.url = reverse("stakeholder_email", args=[self.event.id])

        self.client = APIClient()
        self.client.force_authenticate(user=self.organizer)

    def test_thank_you_links_gallery(self):
        res = self.client.post(
            self.url, {"email_type": "thank_you", "gallery_id": self.gallery.id}, format="json"
        )

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["sent"], 2)
        self.assertEqual(len(mail.outbox), 2)
        link = f"http://testserver/gallery/{self.gallery.shareable_link}"
        self.assertIn(link, mail.outbox[0].body)
        self.ada.refresh_from_db()
        self.assertEqual(self.ada.emails_sent, {"thank_you": True})

    def test_selected_stakeholders_only(self):
        res = self.client.post(
            self.url, {"email_type": "thank_you", "stakeholder_ids": [self.grace.id]}, format="json"
        )
        self.assertEqual(res.data["sent"], 1)
        self.assertEqual(mail.outbox[0].to, ["grace@example.com"])

    def test_certificate_emails_skip_stakeholders_without_one(self):
        res = self.client.post(self.url, {"email_type": "certificate"}, format="json")

        self.assertEqual(res.data["sent"], 0)
        self.assertEqual(res.data["skipped"], 2)
        self.assertEqual(len(mail.outbox), 0)

    def test_invalid_email_type(self):
        res = self.client.post(self.url, {"email_type": "newsletter"}, format="json")
        self.assertEqual(res.status_code, 400)

    def test_gallery_must_belong_to_event(self):
        start = timezone.now() + dt.timedelta(days=5)
        other_event = Event.objects.create(
            title="Other", location="X", organizer=self.organizer,
            start_at=start, end_at=start + dt.timedelta(hours=1),
        )
        other_gallery = Gallery.objects.create(event=other_event, name="Elsewhere", created_by=self.organizer)

        res = self.client.post(
            self.url, {"email_type": "thank_you", "gallery_id": other_gallery.id}, format="json"
        )
        self.assertEqual(res.status_code, 404)
