# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the RDR Client Portal API:
# - fakes.py: In-memory Supabase double used by the service tests
# - test_models.py: Pydantic model validation
# - test_command_center.py, test_bulk_upload.py: Pure admin heuristics
# - test_*_service tests: Business logic against the fake database
# - test_integrations.py: Resend, Twilio and Calendly clients over MockTransport
# - test_api.py: Endpoints through FastAPI's TestClient
#
# Run tests with: pytest
# =============================================================================
