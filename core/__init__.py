# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the portal's business logic:
# - models/: Pydantic schemas for data validation
# - services/: Clients, deliveries, messages, reminders, digest, exports
# - email_templates.py: Subjects and HTML bodies of every email sent
#
# Services raise app.exceptions errors but never touch requests directly,
# so they can be called from routers and Celery tasks alike.
# =============================================================================
