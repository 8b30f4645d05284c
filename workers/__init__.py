# =============================================================================
# workers/ - Celery Background Task Workers
# =============================================================================
# Background jobs for the client portal.
#
# Components:
# - celery_app.py: Celery application and lifecycle logging
# - tasks.py: Task definitions (digest, reminders, notifications)
# - config.py: Worker settings and beat schedule
#
# Usage:
#   celery -A workers.celery_app worker --loglevel=info
#   celery -A workers.celery_app beat --loglevel=info
#
#   # Submit task (from API)
#   from workers.tasks import send_message_notification
#   send_message_notification.delay(message_row)
# =============================================================================

from .celery_app import celery_app
from . import tasks

__all__ = [
    "celery_app",
    "tasks",
]
