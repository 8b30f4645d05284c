# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for Supabase database operations.
# It implements the singleton pattern to reuse a single client connection
# and provides specialized methods for the lookups shared across services:
# - Clients and their service types
# - Deliveries
# - User roles and profiles (admin contact list for notifications)
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   client_row = SupabaseClient.fetch_client(client_id)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from supabase import create_client, Client

from app.config import settings
from lib.utils import ApplicationError

# Set up logging for this module
logger = logging.getLogger(__name__)


class SupabaseClientError(ApplicationError):
    """
    Error during Supabase operations.

    Provides actionable error messages:
    "Errors should tell HOW to fix, not just WHAT failed."
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code=code, suggestion=suggestion, details=details)

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


class SupabaseClient:
    """
    Typed wrapper for Supabase database operations.

    Implements singleton pattern - one client instance is shared across
    the application. All methods are class methods for easy access without
    instantiation.

    Example:
        client_row = SupabaseClient.fetch_client("550e8400-...")
        role = SupabaseClient.fetch_user_role(user_id)
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS).
        This is appropriate for server-side operations.

        Returns:
            Client: Supabase client instance

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    @classmethod
    def set_client(cls, client: Client | None) -> None:
        """Replace the shared client (used by tests and scripts)."""
        cls._instance = client

    @classmethod
    def _normalize_uuid(cls, uuid_value: str | UUID) -> str:
        """Convert UUID to string for queries."""
        return str(uuid_value) if isinstance(uuid_value, UUID) else uuid_value

    @classmethod
    def _fetch_one(
        cls,
        table: str,
        column: str,
        value: str | UUID,
        columns: str = "*",
    ) -> dict[str, Any] | None:
        """Fetch the first row where column == value, or None."""
        client = cls.get_client()
        value_str = cls._normalize_uuid(value)

        try:
            response = (
                client.table(table)
                .select(columns)
                .eq(column, value_str)
                .limit(1)
                .execute()
            )
            rows = response.data or []
            return rows[0] if rows else None

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch from {table}: {e}",
                code="FETCH_FAILED",
                suggestion=f"Check that the {table} table is accessible",
                details={"table": table, column: value_str}
            )

    # -------------------------------------------------------------------------
    # Clients
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_client(cls, client_id: str | UUID) -> dict[str, Any] | None:
        """
        Fetch a client by ID.

        Args:
            client_id: The client UUID

        Returns:
            Client dict with all fields, or None if not found

        Raises:
            SupabaseClientError: If query fails
        """
        return cls._fetch_one("clients", "id", client_id)

    @classmethod
    def fetch_client_for_user(cls, user_id: str | UUID) -> dict[str, Any] | None:
        """Fetch the client record linked to an auth user, if any."""
        return cls._fetch_one("clients", "user_id", user_id)

    @classmethod
    def fetch_clients(
        cls,
        columns: str = "*",
        order_by: str = "created_at",
        desc: bool = True,
    ) -> list[dict[str, Any]]:
        """
        Fetch all clients.

        Args:
            columns: Column list for the select
            order_by: Sort column
            desc: Newest first when True

        Returns:
            List of client dicts (empty list if none)
        """
        client = cls.get_client()

        try:
            response = (
                client.table("clients")
                .select(columns)
                .order(order_by, desc=desc)
                .execute()
            )
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch clients: {e}",
                code="FETCH_CLIENTS_FAILED",
                suggestion="Check that the clients table is accessible",
            )

    @classmethod
    def fetch_service_types(cls) -> dict[str, dict[str, Any]]:
        """
        Fetch every service type keyed by ID.

        Used to attach service names to client rows without embedded selects.
        """
        client = cls.get_client()

        try:
            response = client.table("service_types").select("*").execute()
            return {row["id"]: row for row in (response.data or [])}

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch service types: {e}",
                code="FETCH_SERVICE_TYPES_FAILED",
                suggestion="Check that the service_types table is accessible",
            )

    @classmethod
    def fetch_service_type(cls, service_type_id: str | UUID) -> dict[str, Any] | None:
        return cls._fetch_one("service_types", "id", service_type_id)

    # -------------------------------------------------------------------------
    # Deliveries
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_delivery(cls, delivery_id: str | UUID) -> dict[str, Any] | None:
        """Fetch a delivery by ID, or None if not found."""
        return cls._fetch_one("deliveries", "id", delivery_id)

    # -------------------------------------------------------------------------
    # Users, Roles & Profiles
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_user_role(cls, user_id: str | UUID) -> str | None:
        """
        Get the role ("admin" or "client") of an auth user.

        Returns:
            Role string, or None when the user has no role row
        """
        row = cls._fetch_one("user_roles", "user_id", user_id, columns="role")
        return row.get("role") if row else None

    @classmethod
    def fetch_profile(cls, user_id: str | UUID) -> dict[str, Any] | None:
        """Fetch a user's profile (email, display_name, avatar_url)."""
        return cls._fetch_one("profiles", "id", user_id)

    @classmethod
    def fetch_admin_contacts(cls) -> list[dict[str, str]]:
        """
        Get email and display name of every admin user.

        Returns:
            List of {"email": ..., "name": ...}; admins without an email
            on their profile are skipped.
        """
        client = cls.get_client()

        try:
            roles = (
                client.table("user_roles")
                .select("user_id")
                .eq("role", "admin")
                .execute()
            )
            admin_ids = [r["user_id"] for r in (roles.data or [])]
            if not admin_ids:
                return []

            profiles = (
                client.table("profiles")
                .select("id, email, display_name")
                .in_("id", admin_ids)
                .execute()
            )

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch admin users: {e}",
                code="FETCH_ADMINS_FAILED",
                suggestion="Check the user_roles and profiles tables",
            )

        return [
            {"email": p["email"], "name": p.get("display_name") or "Admin"}
            for p in (profiles.data or [])
            if p.get("email")
        ]
