# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Installs an in-memory Supabase double (tests/fakes.py)
# - Records outgoing emails instead of calling Resend
# - Builds an API client with authentication overridden
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")
os.environ.setdefault("RESEND_API_KEY", "test-resend-key")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

from datetime import date, timedelta
from uuid import uuid4

import pytest

from lib.email_client import EmailClient
from lib.supabase_client import SupabaseClient
from tests.fakes import FakeSupabase


# =============================================================================
# Database
# =============================================================================

@pytest.fixture
def db():
    """Fresh in-memory database installed as the shared Supabase client."""
    fake = FakeSupabase()
    SupabaseClient.set_client(fake)
    yield fake
    SupabaseClient.set_client(None)


@pytest.fixture
def outbox(monkeypatch):
    """Every email "sent" during the test, in order."""
    sent = []

    def fake_send(self, to, subject, html, sender=None):
        sent.append({
            "to": to,
            "subject": subject,
            "html": html,
            "sender": sender or self.default_sender,
        })
        return {"id": f"email-{len(sent)}"}

    monkeypatch.setattr(EmailClient, "send", fake_send)
    return sent


# =============================================================================
# Sample Rows
# =============================================================================

@pytest.fixture
def today():
    return date(2024, 6, 10)


@pytest.fixture
def service_type(db):
    return db.seed("service_types", [{
        "name": "Executive Resume Package",
        "default_timeline_days": 5,
        "is_active": True,
    }])[0]


@pytest.fixture
def client_user_id():
    return str(uuid4())


@pytest.fixture
def client_row(db, service_type, client_user_id, today):
    """An active client linked to an auth user."""
    return db.seed("clients", [{
        "name": "Jane Doe",
        "email": "jane@example.com",
        "phone": None,
        "user_id": client_user_id,
        "service_type_id": service_type["id"],
        "status": "active",
        "payment_status": "paid",
        "estimated_delivery_date": (today + timedelta(days=5)).isoformat(),
        "is_rush": False,
    }])[0]


@pytest.fixture
def delivery_row(db, client_row):
    return db.seed("deliveries", [{
        "client_id": client_row["id"],
        "document_type": "resume",
        "document_title": "Executive Resume",
        "file_path": "deliveries/1718000000000.pdf",
        "file_url": "https://test-project.supabase.co/storage/v1/object/public/resumes/deliveries/1718000000000.pdf",
        "status": "delivered",
        "delivered_at": "2024-06-09T10:00:00+00:00",
    }])[0]


@pytest.fixture
def progress_rows(db, client_row):
    from core.services.progress_service import ProgressService
    return ProgressService.seed_steps(client_row["id"])


# =============================================================================
# API
# =============================================================================

@pytest.fixture
def admin_user(db):
    from app.auth.models import AuthUser
    user = AuthUser(id=uuid4(), email="admin@rdr.com", role="admin")
    db.seed("user_roles", [{"user_id": str(user.id), "role": "admin"}])
    db.seed("profiles", [{"id": str(user.id), "email": user.email, "display_name": "Riley Admin"}])
    return user


@pytest.fixture
def portal_user(db, client_user_id):
    from app.auth.models import AuthUser
    from uuid import UUID
    db.seed("user_roles", [{"user_id": client_user_id, "role": "client"}])
    return AuthUser(id=UUID(client_user_id), email="jane@example.com", role="client")


@pytest.fixture
def api(db, outbox):
    """
    TestClient whose caller is chosen per test:

        api.as_user(admin_user)
        api.post("/api/v1/clients", json=...)

    The lifespan (Redis listener) is not started.
    """
    from fastapi.testclient import TestClient

    from app.auth import get_current_user
    from app.main import app

    client = TestClient(app)

    def as_user(user):
        app.dependency_overrides[get_current_user] = lambda: user
        return client

    client.as_user = as_user
    yield client
    app.dependency_overrides.clear()
