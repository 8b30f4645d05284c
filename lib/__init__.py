# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable clients and helpers:
# - supabase_client.py: Typed Supabase wrapper for database operations
# - email_client.py: Transactional email through Resend
# - sms_client.py: Text alerts through Twilio
# - calendly_client.py: Upcoming appointment lookup
# - resume_parser.py: OpenAI resume field extraction
# - utils.py: Shared utilities (error handling, dates, UUID normalization)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import ApplicationError, normalize_uuid

__all__ = [
    # Supabase
    "SupabaseClient",
    "SupabaseClientError",
    # Utils
    "ApplicationError",
    "normalize_uuid",
]
