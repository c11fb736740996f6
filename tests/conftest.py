# tests/conftest.py
import datetime as dt

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from eventhub.models import Event, User
from eventsite.celery import app as celery_app


@pytest.fixture(autouse=True)
def test_settings(settings, tmp_path):
    """Keep uploads, QR codes and PDFs out of the real media folder."""
    settings.MEDIA_ROOT = tmp_path / "media"
    settings.EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"
    settings.APP_BASE_URL = "http://testserver"
    settings.GEMINI_API_KEY = ""
    settings.CRON_SECRET = "cron-secret"
    settings.ROBOFLOW_API_KEY = ""
    return settings


@pytest.fixture(autouse=True)
def eager_celery():
    """Run .delay() inline so background work is observable in tests."""
    # settings are read through the CELERY_ namespace
    previous = {
        "CELERY_TASK_ALWAYS_EAGER": celery_app.conf.task_always_eager,
        "CELERY_TASK_EAGER_PROPAGATES": celery_app.conf.task_eager_propagates,
    }
    celery_app.conf.update(CELERY_TASK_ALWAYS_EAGER=True, CELERY_TASK_EAGER_PROPAGATES=True)
    yield
    celery_app.conf.update(**previous)


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def create_users(db):
    """Student, two organizers and an admin."""
    student = User.objects.create_user(
        email="student@example.com", password="pass1234",
        first_name="Stu", last_name="Dent", role=User.ROLE_STUDENT,
    )
    organizer = User.objects.create_user(
        email="org@example.com", password="pass1234",
        first_name="Org", last_name="Anizer", role=User.ROLE_ORGANIZER,
    )
    other_organizer = User.objects.create_user(
        email="other_org@example.com", password="pass1234",
        first_name="Other", last_name="Organizer", role=User.ROLE_ORGANIZER,
    )
    admin = User.objects.create_superuser(
        email="admin@example.com", password="pass1234",
        first_name="Ad", last_name="Min",
    )
    return student, organizer, other_organizer, admin


@pytest.fixture
def student(create_users):
    return create_users[0]


@pytest.fixture
def organizer(create_users):
    return create_users[1]


@pytest.fixture
def other_organizer(create_users):
    return create_users[2]


@pytest.fixture
def site_admin(create_users):
    return create_users[3]


def _make_event(organizer, capacity=10, days_ahead=2, **extra):
    now = timezone.now()
    fields = dict(
        title="Intro to Git",
        description="Hands-on workshop",
        location="H-110",
        start_at=now + dt.timedelta(days=days_ahead),
        end_at=now + dt.timedelta(days=days_ahead, hours=2),
        total_capacity=capacity,
        tickets_left=capacity if capacity else Event.UNLIMITED,
        organizer=organizer,
        status=Event.PUBLISHED,
    )
    fields.update(extra)
    return Event.objects.create(**fields)


@pytest.fixture
def make_event(db):
    return _make_event


@pytest.fixture
def event(organizer):
    return _make_event(organizer)


@pytest.fixture
def unlimited_event(organizer):
    return _make_event(organizer, capacity=0, title="Open Lecture")


@pytest.fixture
def student_client(api_client, student):
    api_client.force_authenticate(user=student)
    return api_client


@pytest.fixture
def organizer_client(organizer):
    client = APIClient()
    client.force_authenticate(user=organizer)
    return client
