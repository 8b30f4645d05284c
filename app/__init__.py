# =============================================================================
# app/ - Client Portal HTTP Layer
# =============================================================================
# - main.py: FastAPI app, exception handlers, router mounting, Redis listener
# - config.py: Settings from environment / .env
# - auth/: Supabase JWT verification and role checks
# - routers/: One module per portal feature
# - websocket/: Realtime message-thread updates
#
# Routers only translate HTTP to service calls; rules live in core/services.
# =============================================================================
