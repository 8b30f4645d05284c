# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.SUPABASE_URL)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# Third-party integrations (email, SMS, scheduling, LLM) are optional.
# Endpoints that need a missing integration fail with a clear error instead
# of the whole app refusing to start.
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------
    # These are required - app won't start without them

    SUPABASE_URL: str = Field(
        ...,
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_ANON_KEY: str = Field(
        ...,
        description="Supabase anon/public API key"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key (bypasses RLS)"
    )

    SUPABASE_JWT_SECRET: str = Field(
        default="",
        description="Legacy HS256 JWT secret used to verify access tokens"
    )

    # -------------------------------------------------------------------------
    # Redis Configuration (Celery broker + realtime pub/sub)
    # -------------------------------------------------------------------------

    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL for Celery and WebSocket broadcasts"
    )

    # -------------------------------------------------------------------------
    # OpenAI (resume text extraction)
    # -------------------------------------------------------------------------

    OPENAI_API_KEY: str = Field(
        default="",
        description="OpenAI API key for resume parsing"
    )

    OPENAI_MODEL: str = Field(
        default="gpt-4o-mini",
        description="Model used to extract resume fields"
    )

    # -------------------------------------------------------------------------
    # Email (Resend)
    # -------------------------------------------------------------------------

    RESEND_API_KEY: str = Field(
        default="",
        description="Resend API key for transactional and digest emails"
    )

    EMAIL_FROM_DEFAULT: str = Field(
        default="Results Driven Resumes <onboarding@resend.dev>",
        description="Sender for onboarding and delivery emails"
    )

    EMAIL_FROM_REMINDERS: str = Field(
        default="Results Driven Resumes <reminders@resend.dev>",
        description="Sender for reminder emails"
    )

    EMAIL_FROM_DIGEST: str = Field(
        default="RDR Project Portal Daily Digest <digest@resend.dev>",
        description="Sender for the daily digest"
    )

    EMAIL_FROM_NOTIFICATIONS: str = Field(
        default="RDR Services <notifications@rdr.com>",
        description="Sender for message notifications"
    )

    SUPPORT_EMAIL: str = Field(
        default="support@resultsdrivenresumes.com",
        description="Support address shown in email footers"
    )

    # -------------------------------------------------------------------------
    # SMS (Twilio)
    # -------------------------------------------------------------------------

    TWILIO_ACCOUNT_SID: str = Field(default="", description="Twilio account SID")
    TWILIO_AUTH_TOKEN: str = Field(default="", description="Twilio auth token")
    TWILIO_PHONE_NUMBER: str = Field(default="", description="Twilio sender number")

    # -------------------------------------------------------------------------
    # Scheduling (Calendly)
    # -------------------------------------------------------------------------

    CALENDLY_ACCESS_TOKEN: str = Field(
        default="",
        description="Calendly personal access token"
    )

    CALENDLY_LOOKAHEAD_DAYS: int = Field(
        default=30,
        ge=1,
        le=365,
        description="How far ahead to list scheduled appointments"
    )

    # -------------------------------------------------------------------------
    # Portal Behaviour
    # -------------------------------------------------------------------------

    PORTAL_URL: str = Field(
        default="http://localhost:3000",
        description="Public URL of the client portal (used in email links)"
    )

    DIGEST_DEFAULT_RECIPIENT: str = Field(
        default="admin@resultsdrivenresumes.com",
        description="Recipient of the daily digest when none is given"
    )

    DIGEST_SEND_HOUR: int = Field(
        default=8,
        ge=0,
        le=23,
        description="Hour of day (UTC) the worker sends the daily digest"
    )

    REMINDER_POLL_MINUTES: int = Field(
        default=15,
        ge=1,
        le=1440,
        description="How often the worker dispatches due reminders"
    )

    DEFAULT_TIMELINE_DAYS: int = Field(
        default=7,
        ge=1,
        description="Delivery timeline used when a service type has none"
    )

    MAX_ATTACHMENT_SIZE_MB: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Maximum size of a revision attachment or document upload"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, auto-reload)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="*",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://myapp.com" -> ["http://localhost:3000", "https://myapp.com"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def max_attachment_size_bytes(self) -> int:
        """Convert MB to bytes for file size validation."""
        return self.MAX_ATTACHMENT_SIZE_MB * 1024 * 1024

    @property
    def email_configured(self) -> bool:
        return bool(self.RESEND_API_KEY)

    @property
    def sms_configured(self) -> bool:
        return bool(
            self.TWILIO_ACCOUNT_SID
            and self.TWILIO_AUTH_TOKEN
            and self.TWILIO_PHONE_NUMBER
        )

    @property
    def calendly_configured(self) -> bool:
        return bool(self.CALENDLY_ACCESS_TOKEN)

    @property
    def openai_configured(self) -> bool:
        return bool(self.OPENAI_API_KEY)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.

    Returns:
        Settings: The application settings instance
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
