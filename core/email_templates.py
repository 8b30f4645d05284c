# =============================================================================
# core/email_templates.py - Email Subjects & Bodies
# =============================================================================
# Minimal HTML bodies for every email the portal sends. Each builder returns
# (subject, html). User-supplied text is HTML-escaped.
# =============================================================================

from html import escape
from typing import Any

from app.config import settings

SIGNATURE = "Best regards,<br><strong>The Results Driven Resumes Team</strong>"


def _wrap(body: str, footer: str | None = None) -> str:
    footer_html = f"<p style=\"color:#666;font-size:14px\">{footer}</p>" if footer else ""
    return (
        "<div style=\"font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;\">"
        f"{body}{footer_html}<p>{SIGNATURE}</p></div>"
    )


def _button(url: str, label: str) -> str:
    return f"<p><a href=\"{escape(url, quote=True)}\">{escape(label)}</a></p>"


# -----------------------------------------------------------------------------
# Delivery notifications
# -----------------------------------------------------------------------------

def delivery_notification(
    notification_type: str,
    client_name: str,
    document_title: str,
    portal_url: str,
) -> tuple[str, str]:
    """Email for a new delivery (delivery_ready) or finished revision."""
    title = escape(document_title)
    if notification_type == "delivery_ready":
        subject = f"Your {document_title} is ready for review!"
        lead = f"Great news! Your <strong>{title}</strong> is ready for review."
    else:
        subject = f"Your {document_title} revisions are complete!"
        lead = (
            f"Your <strong>{title}</strong> has been updated based on your "
            "feedback and is ready for your review."
        )

    body = (
        f"<h2>Hi {escape(client_name)}!</h2><p>{lead}</p>"
        "<p>Review your document in the client portal, download your files, "
        "then approve it or request revisions.</p>"
        + _button(portal_url, "View Your Document")
    )
    return subject, _wrap(body)


def delivery_sms(notification_type: str, client_name: str, document_title: str) -> str:
    if notification_type == "delivery_ready":
        return (
            f"Hi {client_name}! Your {document_title} is ready for review. Check your "
            "email or login to your portal to view it. - Results Driven Resumes"
        )
    return (
        f"Hi {client_name}! Your {document_title} revisions are complete. Please "
        "review the updated version in your portal. - Results Driven Resumes"
    )


# -----------------------------------------------------------------------------
# Messages
# -----------------------------------------------------------------------------

def message_preview(text: str, limit: int = 100) -> str:
    """Cut a message to `limit` characters, marking the cut with '...'."""
    return text if len(text) <= limit else text[:limit] + "..."


def message_to_client(client_name: str, sender_name: str, message: str, sent_at: str) -> tuple[str, str]:
    body = (
        f"<h2>Hello {escape(client_name)},</h2>"
        f"<p>You have received a new message from <strong>{escape(sender_name)}</strong>:</p>"
        f"<blockquote>{escape(message_preview(message))}</blockquote>"
        f"<p><strong>Sent:</strong> {escape(sent_at)}</p>"
        + _button(f"{settings.PORTAL_URL}/client-portal", "View & Reply in Portal")
    )
    return (
        f"New message from {sender_name}",
        _wrap(body, "This is an automated notification. Please do not reply to this email."),
    )


def message_to_admin(
    admin_name: str,
    client: dict[str, Any],
    message: str,
    sent_at: str,
) -> tuple[str, str]:
    name = client.get("name") or "Client"
    body = (
        f"<h2>Hello {escape(admin_name)},</h2>"
        f"<p>You have received a new message from client <strong>{escape(name)}</strong>:</p>"
        f"<blockquote>{escape(message_preview(message))}</blockquote>"
        f"<p><strong>Client:</strong> {escape(name)} ({escape(client.get('email') or '')})<br>"
        f"<strong>Sent:</strong> {escape(sent_at)}</p>"
        + _button(f"{settings.PORTAL_URL}/admin/clients/{client.get('id')}", "View & Reply in Admin Portal")
    )
    return (
        f"New message from client: {name}",
        _wrap(body, "This is an automated notification. Please do not reply to this email."),
    )


# -----------------------------------------------------------------------------
# Reminders & digest
# -----------------------------------------------------------------------------

def reminder(message: str) -> str:
    body = (
        "<h1>Results Driven Resumes</h1>"
        f"<div style=\"white-space: pre-line; line-height: 1.6;\">{escape(message)}</div>"
        + _button(f"{settings.PORTAL_URL}/client-portal", "Access Your Client Portal")
    )
    return _wrap(
        body,
        f"Questions? Reply to this email or contact us at {settings.SUPPORT_EMAIL}",
    )


def _client_list(title: str, clients: list[dict[str, Any]]) -> str:
    if not clients:
        return ""
    items = "".join(
        f"<li>{escape(c.get('name') or '')} ({escape(c.get('email') or '')}) - "
        f"{escape(c.get('service_name') or 'Service')}, due {escape(str(c.get('estimated_delivery_date') or 'TBD'))}</li>"
        for c in clients
    )
    return f"<h3>{title} ({len(clients)})</h3><ul>{items}</ul>"


def daily_digest(digest: dict[str, Any]) -> tuple[str, str]:
    """
    Digest email from build_digest() output.

    Subject counts due today + due tomorrow + overdue; uploads are listed
    but not counted.
    """
    items = len(digest["due_today"]) + len(digest["due_tomorrow"]) + len(digest["overdue"])
    subject = f"Daily Digest - {digest['date']} ({items} items)"

    uploads = "".join(
        f"<li>{escape(u.get('client_name') or 'Unknown Client')}: {escape(u.get('description') or '')}</li>"
        for u in digest["new_uploads"]
    )
    sections = (
        _client_list("Overdue", digest["overdue"])
        + _client_list("Due Today", digest["due_today"])
        + _client_list("Due Tomorrow", digest["due_tomorrow"])
        + (f"<h3>New Uploads ({len(digest['new_uploads'])})</h3><ul>{uploads}</ul>" if uploads else "")
    )
    if not sections:
        sections = "<p>Nothing due and no new uploads. All caught up!</p>"

    body = f"<h1>Daily Digest</h1><p>{escape(digest['date'])}</p>{sections}"
    return subject, _wrap(body + _button(f"{settings.PORTAL_URL}/admin", "Open Admin Dashboard"))


# -----------------------------------------------------------------------------
# Account emails
# -----------------------------------------------------------------------------

def onboarding(
    client_name: str,
    client_email: str,
    service_name: str,
    temp_password: str,
    service_price: str | None = None,
    estimated_delivery_date: str | None = None,
    login_url: str | None = None,
) -> tuple[str, str]:
    url = login_url or f"{settings.PORTAL_URL}/client-portal"
    details = f"<li><strong>Service:</strong> {escape(service_name)}</li>"
    if service_price:
        details += f"<li><strong>Investment:</strong> {escape(service_price)}</li>"
    if estimated_delivery_date:
        details += f"<li><strong>Estimated delivery:</strong> {escape(estimated_delivery_date)}</li>"

    body = (
        f"<h2>Welcome, {escape(client_name)}!</h2>"
        "<p>Thank you for choosing Results Driven Resumes. Here are your project details:</p>"
        f"<ul>{details}</ul>"
        "<h3>Your portal login</h3>"
        f"<p><strong>Email:</strong> {escape(client_email)}<br>"
        f"<strong>Temporary password:</strong> {escape(temp_password)}</p>"
        "<p>Please change your password after your first login, then complete your intake form.</p>"
        + _button(url, "Access Your Client Portal")
    )
    return (
        "Welcome to Results Driven Resumes - Let's Get Started!",
        _wrap(body, f"Questions? Contact us at {settings.SUPPORT_EMAIL}"),
    )


def login_credentials(
    client_name: str,
    client_email: str,
    temp_password: str,
    login_url: str | None = None,
) -> tuple[str, str]:
    url = login_url or f"{settings.PORTAL_URL}/client-portal"
    body = (
        f"<h2>Hi {escape(client_name)},</h2>"
        "<p>Here are your login credentials for the client portal:</p>"
        f"<p><strong>Email:</strong> {escape(client_email)}<br>"
        f"<strong>Temporary password:</strong> {escape(temp_password)}</p>"
        "<p>Please change your password after logging in.</p>"
        + _button(url, "Log In")
    )
    return "Your Login Credentials", _wrap(body)
