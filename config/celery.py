import os

from celery import Celery
from celery.schedules import crontab  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("triply")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Calendar unlock window reminders, daily at 09:00 UTC
    "send-calendar-expiry-reminders": {
        "task": "bookings.send_calendar_expiry_reminders",
        "schedule": crontab(minute=0, hour=9),
    },
    # Flip stale pending invitations to expired, hourly
    "expire-stale-invitations": {
        "task": "invitations.expire_stale_invitations",
        "schedule": crontab(minute=30),
    },
}

app.conf.timezone = "UTC"
