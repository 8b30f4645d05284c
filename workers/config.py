# =============================================================================
# workers/config.py - Celery Worker Configuration
# =============================================================================
# Applied to the Celery app via app.config_from_object().
# =============================================================================

from celery.schedules import crontab

from app.config import settings


class CeleryConfig:
    """Celery configuration settings."""

    # -------------------------------------------------------------------------
    # Broker Settings (Redis)
    # -------------------------------------------------------------------------

    broker_url = settings.REDIS_URL
    result_backend = settings.REDIS_URL

    # -------------------------------------------------------------------------
    # Task Settings
    # -------------------------------------------------------------------------

    # Acknowledge after completion so a crashed worker's task is redelivered
    task_acks_late = True
    worker_prefetch_multiplier = 1

    result_expires = 3600

    # Hard limit 2 minutes, soft 90 seconds
    task_time_limit = 120
    task_soft_time_limit = 90

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    task_serializer = "json"
    result_serializer = "json"
    accept_content = ["json"]

    # -------------------------------------------------------------------------
    # Task Routing
    # -------------------------------------------------------------------------

    task_queues = {
        "default": {
            "exchange": "default",
            "routing_key": "default",
        },
        "notifications": {
            "exchange": "notifications",
            "routing_key": "notifications",
        },
    }

    # Per-event emails/SMS run on their own queue
    task_routes = {
        "workers.tasks.send_delivery_notification": {"queue": "notifications"},
        "workers.tasks.send_message_notification": {"queue": "notifications"},
    }

    task_default_queue = "default"

    # -------------------------------------------------------------------------
    # Periodic Jobs (celery beat)
    # -------------------------------------------------------------------------

    beat_schedule = {
        "send-daily-digest": {
            "task": "workers.tasks.send_daily_digest",
            "schedule": crontab(hour=settings.DIGEST_SEND_HOUR, minute=0),
        },
        "dispatch-due-reminders": {
            "task": "workers.tasks.dispatch_due_reminders",
            "schedule": settings.REMINDER_POLL_MINUTES * 60.0,
        },
    }

    # -------------------------------------------------------------------------
    # Monitoring
    # -------------------------------------------------------------------------

    worker_send_task_events = True
    task_send_sent_event = True

    # -------------------------------------------------------------------------
    # Timezone
    # -------------------------------------------------------------------------

    timezone = "UTC"
    enable_utc = True
