# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - clients.py: Client CRUD, service change, rush toggle, history
# - command_center.py: Admin overview and recent activity
# - deliveries.py: Delivery upload (single and bulk), approval, comments
# - revisions.py: Revision requests
# - messages.py: Client message threads
# - progress.py: Progress tracker and intake form
# - notifications.py: In-app notifications and notification rules
# - reminders.py: Reminder templates and scheduled reminders
# - digest.py: Daily digest preferences and sending
# - integrations.py: SMS, Calendly, resume parsing
# - accounts.py: Onboarding emails and login removal
# - exports.py: Client data export
# - service_types.py: Service catalogue and training materials
# - documents.py: Client document uploads
#
# Each router is mounted in main.py under /api/v1.
# =============================================================================

from . import (
    accounts,
    clients,
    command_center,
    deliveries,
    digest,
    documents,
    exports,
    health,
    integrations,
    messages,
    notifications,
    progress,
    reminders,
    revisions,
    service_types,
)

__all__ = [
    "accounts",
    "clients",
    "command_center",
    "deliveries",
    "digest",
    "documents",
    "exports",
    "health",
    "integrations",
    "messages",
    "notifications",
    "progress",
    "reminders",
    "revisions",
    "service_types",
]
