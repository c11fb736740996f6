# tests/test_feedback.py
import pytest
from django.core import mail
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from eventhub.models import Event, FeedbackResponse, FeedbackTemplate, Order
from eventhub.tasks import pending_feedback_events
from eventhub.ticketing import place_order


def _answers(**extra):
    data = {
        "overall_satisfaction": 5,
        "content_quality": 4,
        "organization_rating": 4,
        "recommendation_score": 10,
        "liked_most": "The live demo",
    }
    data.update(extra)
    return data


@pytest.mark.django_db
def test_template_defaults_then_save(organizer_client, event):
    url = reverse("feedback_template", args=[event.id])

    res = organizer_client.get(url)
    assert res.status_code == 200
    assert res.data["id"] is None
    assert res.data["feedback_hours"] == 2
    assert res.data["custom_questions"] == []

    questions = [
        {"id": "q1", "question": "Would you come back?", "type": "yesNo", "required": True},
        {"id": "q2", "question": "Best track?", "type": "multipleChoice", "options": ["Web", "AI"]},
    ]
    res = organizer_client.put(url, {"custom_questions": questions, "feedback_hours": 24}, format="json")
    assert res.status_code == status.HTTP_201_CREATED
    assert res.data["feedback_hours"] == 24

    res = organizer_client.put(url, {"feedback_hours": 6}, format="json")
    assert res.status_code == 200
    template = FeedbackTemplate.objects.get(event=event)
    assert template.feedback_hours == 6
    assert len(template.custom_questions) == 2


@pytest.mark.django_db
def test_template_validation(organizer_client, event):
    url = reverse("feedback_template", args=[event.id])

    res = organizer_client.put(
        url,
        {"custom_questions": [{"id": "q", "question": "Pick", "type": "multipleChoice", "options": ["Only"]}]},
        format="json",
    )
    assert res.status_code == 400

    res = organizer_client.put(url, {"feedback_hours": 200}, format="json")
    assert res.status_code == 400


@pytest.mark.django_db
def test_students_cannot_edit_template(student_client, event):
    res = student_client.put(reverse("feedback_template", args=[event.id]), {"feedback_hours": 3}, format="json")
    assert res.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
def test_submit_feedback_once(student_client, student, event):
    url = reverse("feedback_submit", args=[event.id])

    res = student_client.post(url, _answers(), format="json")
    assert res.status_code == status.HTTP_201_CREATED
    assert res.data["feedback"]["user"]["email"] == student.email

    res = student_client.post(url, _answers(overall_satisfaction=1), format="json")
    assert res.status_code == 400
    assert res.data["error"] == "You have already submitted feedback for this event"


@pytest.mark.django_db
def test_anonymous_feedback_stores_no_user(student_client, event):
    url = reverse("feedback_submit", args=[event.id])
    student_client.post(url, _answers(), format="json")

    res = student_client.post(url, _answers(is_anonymous=True), format="json")

    assert res.status_code == status.HTTP_201_CREATED
    assert res.data["feedback"]["user"] is None
    assert FeedbackResponse.objects.filter(user__isnull=True).count() == 1


@pytest.mark.django_db
def test_submit_validates_ratings(student_client, event):
    res = student_client.post(
        reverse("feedback_submit", args=[event.id]), _answers(recommendation_score=11), format="json"
    )
    assert res.status_code == 400
    assert "recommendation_score" in res.data


@pytest.mark.django_db
def test_submit_when_disabled(student_client, organizer, make_event):
    event = make_event(organizer, feedback_enabled=False)
    res = student_client.post(reverse("feedback_submit", args=[event.id]), _answers(), format="json")
    assert res.status_code == 400
    assert res.data["error"] == "Feedback is not enabled for this event"


@pytest.mark.django_db
def test_analytics(organizer_client, event, student):
    place_order(user=student, event=event, quantity=1)
    FeedbackResponse.objects.create(event=event, user=student, overall_satisfaction=5, content_quality=5,
                                    organization_rating=4, venue_rating=4, recommendation_score=10)
    FeedbackResponse.objects.create(event=event, overall_satisfaction=3, content_quality=3,
                                    organization_rating=2, recommendation_score=4, is_anonymous=True)
    FeedbackResponse.objects.create(event=event, overall_satisfaction=4, content_quality=4,
                                    organization_rating=4, recommendation_score=8, is_anonymous=True)

    res = organizer_client.get(reverse("feedback_analytics", args=[event.id]))

    assert res.status_code == 200
    data = res.data
    assert data["total_responses"] == 3
    assert data["response_rate"] == 300
    assert data["averages"]["overall_satisfaction"] == 4
    assert data["averages"]["venue_rating"] == 4
    assert data["nps"] == 0
    assert data["distribution"] == {"1": 0, "2": 0, "3": 1, "4": 1, "5": 1}


@pytest.mark.django_db
def test_analytics_without_responses(organizer_client, event):
    res = organizer_client.get(reverse("feedback_analytics", args=[event.id]))
    assert res.data["total_responses"] == 0
    assert res.data["nps"] == 0


@pytest.mark.django_db
def test_responses_are_organizer_only(student_client, organizer_client, event, student):
    FeedbackResponse.objects.create(event=event, user=student, overall_satisfaction=5, content_quality=5,
                                    organization_rating=5, recommendation_score=9)
    url = reverse("feedback_responses", args=[event.id])

    assert student_client.get(url).status_code == status.HTTP_403_FORBIDDEN
    res = organizer_client.get(url)
    assert res.data["count"] == 1


@pytest.mark.django_db
def test_send_feedback_emails(organizer_client, event, student):
    url = reverse("feedback_send", args=[event.id])
    res = organizer_client.post(url)
    assert res.status_code == 400

    place_order(user=student, event=event, quantity=2)
    mail.outbox.clear()

    res = organizer_client.post(url)

    assert res.status_code == 200
    assert res.data["totalEmails"] == 1
    assert res.data["successfulEmails"] == 1
    assert len(mail.outbox) == 1
    assert mail.outbox[0].to == [student.email]
    assert FeedbackTemplate.objects.get(event=event).emails_sent_at is not None


@pytest.mark.django_db
def test_cron_requires_secret(api_client):
    url = reverse("feedback_cron")

    assert api_client.get(url).status_code == status.HTTP_401_UNAUTHORIZED
    assert api_client.get(url, HTTP_AUTHORIZATION="Bearer wrong").status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
def test_cron_disabled_without_secret(api_client, settings):
    settings.CRON_SECRET = ""
    res = api_client.get(reverse("feedback_cron"), HTTP_AUTHORIZATION="Bearer ")
    assert res.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
def test_cron_sends_for_due_events(organizer, student, make_event):
    ended = make_event(organizer, title="Yesterday", days_ahead=-1)
    Event.objects.create(
        title="Also Ended", location="H-110", organizer=organizer, status=Event.PUBLISHED,
        start_at=ended.start_at, end_at=ended.end_at, tickets_left=5,
    )
    Order.objects.create(event=ended, buyer=student, payment_reference="free-event-1")
    mail.outbox.clear()

    client = APIClient()
    res = client.get(reverse("feedback_cron"), HTTP_AUTHORIZATION="Bearer cron-secret")

    assert res.status_code == 200
    assert res.data["processedEvents"] == 2
    assert len(mail.outbox) == 1

    res = client.get(reverse("feedback_cron"), HTTP_AUTHORIZATION="Bearer cron-secret")
    assert res.data["processedEvents"] == 0


@pytest.mark.django_db
def test_pending_events_respect_feedback_delay(organizer, make_event):
    event = make_event(organizer, days_ahead=-1)
    FeedbackTemplate.objects.create(event=event, feedback_hours=48)
    assert pending_feedback_events() == []

    FeedbackTemplate.objects.filter(event=event).update(feedback_hours=1)
    assert pending_feedback_events() == [event]
