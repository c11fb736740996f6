# tests/test_issues_updates.py
import datetime as dt

import pytest
from django.core import mail
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from eventhub.models import EventUpdate, Issue
from eventhub.tasks import publish_scheduled_updates
from eventhub.ticketing import place_order
from eventsite.celery import app as celery_app


def _issue(event, student, **extra):
    fields = dict(
        event=event, event_title=event.title, reported_by=student, reporter_name="Stu Dent",
        reporter_email=student.email, organizer=event.organizer, organizer_email=event.organizer.email,
        category="event-info", title="Room changed?", description="The door is locked",
    )
    fields.update(extra)
    return Issue.objects.create(**fields)


def _update(event, organizer, **extra):
    fields = dict(event=event, title="Room change", content="We moved to H-820", created_by=organizer)
    fields.update(extra)
    return EventUpdate.objects.create(**fields)


# ── Issues ────────────────────────────────────────────────

@pytest.mark.django_db
def test_report_issue_notifies_organizer(student_client, event, organizer, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True):
        res = student_client.post(
            reverse("issue_report"),
            {
                "event": event.id,
                "category": "tickets-registration",
                "severity": "high",
                "title": "QR code not scanning",
                "description": "The scanner at the door rejects my ticket",
            },
            format="json",
        )

    assert res.status_code == status.HTTP_201_CREATED
    issue = res.data["issue"]
    assert issue["status"] == "open"
    assert issue["event_title"] == "Intro to Git"
    assert issue["reporter_name"] == "Stu Dent"
    assert issue["organizer_email"] == organizer.email

    assert len(mail.outbox) == 1
    assert mail.outbox[0].to == [organizer.email]
    assert mail.outbox[0].subject.startswith("[HIGH]")


@pytest.mark.django_db
def test_report_issue_validation(student_client, event):
    res = student_client.post(
        reverse("issue_report"),
        {"event": event.id, "category": "weather", "title": "x", "description": "y"},
        format="json",
    )
    assert res.status_code == 400
    assert "category" in res.data


@pytest.mark.django_db
def test_my_issues(student_client, student, event, other_organizer):
    _issue(event, student)
    _issue(event, other_organizer, title="Someone else's")

    res = student_client.get(reverse("my_issues"))
    assert [i["title"] for i in res.data["results"]] == ["Room changed?"]


@pytest.mark.django_db
def test_status_transitions_set_resolved_at(organizer_client, event, student):
    issue = _issue(event, student)
    url = reverse("issue_status", args=[issue.id])

    res = organizer_client.patch(url, {}, format="json")
    assert res.status_code == 400
    assert res.data["error"] == "Status is required"

    res = organizer_client.patch(url, {"status": "in-progress"}, format="json")
    assert res.data["status"] == "in-progress"
    assert res.data["resolved_at"] is None

    res = organizer_client.patch(url, {"status": "resolved", "admin_notes": "Door unlocked"}, format="json")
    assert res.data["resolved_at"] is not None
    assert res.data["admin_notes"] == "Door unlocked"

    res = organizer_client.patch(url, {"status": "open"}, format="json")
    assert res.data["resolved_at"] is None

    res = organizer_client.patch(url, {"status": "done"}, format="json")
    assert res.status_code == 400


@pytest.mark.django_db
def test_status_requires_event_organizer(student_client, event, student):
    issue = _issue(event, student)
    res = student_client.patch(reverse("issue_status", args=[issue.id]), {"status": "closed"}, format="json")
    assert res.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
def test_event_issues_filters(organizer_client, event, student):
    _issue(event, student, severity="high")
    _issue(event, student, severity="low", status=Issue.CLOSED)
    url = reverse("event_issues", args=[event.id])

    res = organizer_client.get(url, {"severity": "high"})
    assert res.data["count"] == 1
    res = organizer_client.get(url, {"status": "closed"})
    assert res.data["results"][0]["severity"] == "low"


@pytest.mark.django_db
def test_issue_analytics(organizer_client, event, student):
    now = timezone.now()
    resolved = _issue(event, student, status=Issue.RESOLVED)
    Issue.objects.filter(pk=resolved.pk).update(created_at=now - dt.timedelta(hours=4), resolved_at=now)
    _issue(event, student, severity="high")
    _issue(event, student, category="payments", status=Issue.CLOSED)
    _issue(event, student, status=Issue.IN_PROGRESS)

    res = organizer_client.get(reverse("issue_analytics", args=[event.id]))

    data = res.data
    assert data["total"] == 4
    assert data["by_status"] == {"open": 1, "in-progress": 1, "resolved": 1, "closed": 1}
    assert data["by_severity"]["high"] == 1
    assert data["by_category"]["payments"] == 1
    assert data["resolution_rate"] == 50
    assert data["average_resolution_hours"] == 4


# ── Event updates ─────────────────────────────────────────

@pytest.mark.django_db
def test_create_update_as_draft(organizer_client, event):
    res = organizer_client.post(
        reverse("event_update_list", args=[event.id]),
        {
            "title": "Bring a laptop",
            "content": "You will need git installed",
            "update_type": "reminder",
            "delivery_methods": {"sms": True},
        },
        format="json",
    )

    assert res.status_code == status.HTTP_201_CREATED
    assert res.data["status"] == "draft"
    assert res.data["delivery_methods"] == {"email": True, "sms": True, "in_app": True, "push": False}


@pytest.mark.django_db
def test_update_delivery_methods_validation(organizer_client, event):
    res = organizer_client.post(
        reverse("event_update_list", args=[event.id]),
        {"title": "t", "content": "c", "delivery_methods": {"pigeon": True}},
        format="json",
    )
    assert res.status_code == 400


@pytest.mark.django_db
def test_attendees_only_see_published_updates(student_client, organizer_client, event, organizer):
    _update(event, organizer, title="Draft note")
    _update(event, organizer, title="Live note", status=EventUpdate.PUBLISHED, published_at=timezone.now())
    url = reverse("event_update_list", args=[event.id])

    res = student_client.get(url)
    assert [u["title"] for u in res.data["results"]] == ["Live note"]

    res = organizer_client.get(url)
    assert res.data["count"] == 2
    res = organizer_client.get(url, {"status": "draft"})
    assert [u["title"] for u in res.data["results"]] == ["Draft note"]


@pytest.mark.django_db
def test_draft_detail_hidden_from_attendees(student_client, event, organizer):
    draft = _update(event, organizer)
    res = student_client.get(reverse("event_update_detail", args=[draft.id]))
    assert res.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.django_db
def test_publish_delivers_to_buyers(organizer_client, event, organizer, student, django_capture_on_commit_callbacks):
    place_order(user=student, event=event, quantity=1)
    update = _update(event, organizer)
    url = reverse("event_update_publish", args=[update.id])

    with django_capture_on_commit_callbacks(execute=True):
        res = organizer_client.post(url)

    assert res.data["message"] == "Update published"
    update.refresh_from_db()
    assert update.status == EventUpdate.SENT
    assert update.published_at is not None
    assert update.email_stats["sent"] == 1
    assert len(mail.outbox) == 1
    assert mail.outbox[0].to == [student.email]
    assert mail.outbox[0].subject == "[Intro to Git] Room change"

    res = organizer_client.post(url)
    assert res.status_code == 400
    assert res.data["error"] == "Update is already published"


@pytest.mark.django_db
def test_publish_respects_recipient_selection(organizer_client, event, organizer, student, django_capture_on_commit_callbacks):
    place_order(user=student, event=event, quantity=1)
    update = _update(event, organizer, recipients={"send_to_all": False, "user_roles": ["organizer"]})

    with django_capture_on_commit_callbacks(execute=True):
        organizer_client.post(reverse("event_update_publish", args=[update.id]))

    update.refresh_from_db()
    assert update.email_stats["sent"] == 0


@pytest.mark.django_db
def test_future_update_is_scheduled(organizer_client, event, organizer):
    update = _update(event, organizer, scheduled_for=timezone.now() + dt.timedelta(hours=3))

    res = organizer_client.post(reverse("event_update_publish", args=[update.id]))

    assert res.data["message"] == "Update scheduled"
    update.refresh_from_db()
    assert update.status == EventUpdate.SCHEDULED
    assert update.published_at is None


@pytest.mark.django_db
def test_scheduled_updates_go_out_when_due(event, organizer, student):
    place_order(user=student, event=event, quantity=1)
    _update(event, organizer, status=EventUpdate.SCHEDULED, scheduled_for=timezone.now() - dt.timedelta(minutes=1))
    _update(event, organizer, title="Later", status=EventUpdate.SCHEDULED,
            scheduled_for=timezone.now() + dt.timedelta(days=1))
    mail.outbox.clear()

    assert publish_scheduled_updates() == 1
    assert len(mail.outbox) == 1
    assert EventUpdate.objects.get(title="Later").status == EventUpdate.SCHEDULED


@pytest.mark.django_db
def test_only_organizer_publishes(event, organizer, other_organizer):
    update = _update(event, organizer)
    client = APIClient()
    client.force_authenticate(user=other_organizer)
    res = client.post(reverse("event_update_publish", args=[update.id]))
    assert res.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
def test_update_stats(organizer_client, event, organizer):
    _update(event, organizer, update_type="reminder")
    _update(event, organizer, status=EventUpdate.SENT, email_stats={"sent": 3, "delivered": 3, "opened": 1, "clicked": 0})

    res = organizer_client.get(reverse("event_update_stats", args=[event.id]))

    assert res.data["total"] == 2
    assert res.data["by_status"] == {"draft": 1, "sent": 1}
    assert res.data["by_type"] == {"reminder": 1, "general": 1}
    assert res.data["email"] == {"sent": 3, "delivered": 3, "opened": 1, "clicked": 0}


@pytest.mark.django_db
def test_background_tasks_run_inline(event, organizer, student):
    place_order(user=student, event=event, quantity=1)
    _update(event, organizer, status=EventUpdate.SCHEDULED, scheduled_for=timezone.now() - dt.timedelta(minutes=1))
    mail.outbox.clear()

    assert celery_app.conf.task_always_eager is True
    result = publish_scheduled_updates.delay()

    assert result.successful()
    assert result.get() == 1
    assert len(mail.outbox) == 1
