import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("parkinghub")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Pending requests whose start time passed without approval
    "expire-stale-bookings": {
        "task": "bookings.expire_stale_bookings",
        "schedule": 60.0,
        "options": {"expires": 50},
    },
    # Approved bookings not checked in within the grace period
    "mark-no-show-bookings": {
        "task": "bookings.mark_no_shows",
        "schedule": 300.0,
        "options": {"expires": 280},
    },
}
