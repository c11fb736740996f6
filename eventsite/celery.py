# eventsite/celery.py
import os

from celery import Celery
from celery.schedules import crontab

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "eventsite.settings")

app = Celery("eventsite")
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()

app.conf.beat_schedule = {
    "process-pending-feedback-emails": {
        "task": "eventhub.tasks.process_pending_feedback_emails",
        "schedule": crontab(minute=0),
    },
    "publish-scheduled-updates": {
        "task": "eventhub.tasks.publish_scheduled_updates",
        "schedule": crontab(minute="*/5"),
    },
}
