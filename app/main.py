# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# Configures the client portal API: middleware, exception handlers, routers
# and the Redis listener that feeds the message WebSockets.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import asyncio
import json
import logging
from contextlib import asynccontextmanager

import redis.asyncio as aioredis
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.websocket import websocket_manager, WEBSOCKET_CHANNEL
from app.exceptions import (
    PortalException,
    application_error_handler,
    internal_error_handler,
    portal_exception_handler,
    validation_exception_handler,
)
from app.routers import (
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
from app.auth import routes as auth_routes
from app.websocket import routes as websocket_routes
from lib.utils import ApplicationError

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

# Headers the portal frontend sends with every request
CORS_ALLOWED_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]

_redis_listener_task = None
_shutdown_event = None


async def redis_pubsub_listener():
    """
    Forward events published on WEBSOCKET_CHANNEL to this process's sockets.

    Events come from any API process or Celery worker via
    app.websocket.broadcast.publish_event().
    """
    logger.info("Starting Redis pub/sub listener for WebSocket broadcasts")

    redis_client = aioredis.from_url(settings.REDIS_URL)
    pubsub = redis_client.pubsub()

    try:
        await pubsub.subscribe(WEBSOCKET_CHANNEL)

        async for message in pubsub.listen():
            if _shutdown_event and _shutdown_event.is_set():
                break
            if message["type"] != "message":
                continue

            try:
                data = json.loads(message["data"])
            except json.JSONDecodeError as e:
                logger.warning(f"Invalid JSON in Redis message: {e}")
                continue

            client_id = data.pop("client_id", None)
            if client_id:
                await websocket_manager.broadcast(client_id, data)

    except asyncio.CancelledError:
        logger.info("Redis pub/sub listener cancelled")
    except aioredis.RedisError as e:
        logger.error(f"Redis pub/sub listener error: {e}")
    finally:
        await pubsub.aclose()
        await redis_client.aclose()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the Redis listener on startup, stop it on shutdown."""
    global _redis_listener_task, _shutdown_event

    logger.info(f"Starting RDR Client Portal API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")

    _shutdown_event = asyncio.Event()
    _redis_listener_task = asyncio.create_task(redis_pubsub_listener())

    yield

    logger.info("Shutting down RDR Client Portal API")

    _shutdown_event.set()
    _redis_listener_task.cancel()
    try:
        await _redis_listener_task
    except asyncio.CancelledError:
        pass


app = FastAPI(
    title="RDR Client Portal API",
    description="""
## Resume-writing client portal

Back office and client portal for a resume-writing service.

### Admins

- **Command center**: every client with urgency, next action and filters
- **Deliveries**: upload finished documents, one at a time or in bulk
- **Revisions**: work through client revision requests
- **Reminders & digest**: templated reminder emails and a daily summary
- **Integrations**: SMS, Calendly appointments, AI resume parsing

### Clients

- **Progress**: five-step tracker and intake form
- **Deliveries**: review, approve, request revisions, comment
- **Messages**: thread with the team, live over WebSocket
- **Documents**: upload resumes and reference files

All endpoints take a Supabase Auth bearer token.
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Auth", "description": "Who am I, and is my token valid"},
        {"name": "Clients", "description": "Client records, package and rush changes, history"},
        {"name": "Command Center", "description": "Admin overview and activity feed"},
        {"name": "Deliveries", "description": "Finished documents and client review"},
        {"name": "Revisions", "description": "Revision requests"},
        {"name": "Messages", "description": "Client message threads"},
        {"name": "Progress", "description": "Progress tracker and intake form"},
        {"name": "Notifications", "description": "In-app notifications and rules"},
        {"name": "Reminders", "description": "Reminder templates and schedules"},
        {"name": "Digest", "description": "Daily admin digest"},
        {"name": "Integrations", "description": "SMS, Calendly, resume parsing"},
        {"name": "Accounts", "description": "Client login emails and removal"},
        {"name": "Export", "description": "Client data export"},
        {"name": "Service Types", "description": "Packages and training materials"},
        {"name": "Documents", "description": "Client document uploads"},
        {"name": "WebSocket", "description": "Realtime message updates"},
        {"name": "Health", "description": "API health and readiness checks"},
    ],
)


# =============================================================================
# Middleware
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=CORS_ALLOWED_HEADERS,
)


# =============================================================================
# Exception Handlers
# =============================================================================

app.add_exception_handler(PortalException, portal_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(ApplicationError, application_error_handler)
app.add_exception_handler(Exception, internal_error_handler)


# =============================================================================
# Routers
# =============================================================================

app.include_router(auth_routes.router, prefix=f"{API_PREFIX}/auth", tags=["Auth"])
app.include_router(health.router, prefix=API_PREFIX, tags=["Health"])
app.include_router(clients.router, prefix=f"{API_PREFIX}/clients", tags=["Clients"])
app.include_router(command_center.router, prefix=API_PREFIX, tags=["Command Center"])
app.include_router(deliveries.router, prefix=API_PREFIX, tags=["Deliveries"])
app.include_router(revisions.router, prefix=API_PREFIX, tags=["Revisions"])
app.include_router(messages.router, prefix=API_PREFIX, tags=["Messages"])
app.include_router(progress.router, prefix=API_PREFIX, tags=["Progress"])
app.include_router(notifications.router, prefix=API_PREFIX, tags=["Notifications"])
app.include_router(reminders.router, prefix=f"{API_PREFIX}/reminders", tags=["Reminders"])
app.include_router(digest.router, prefix=f"{API_PREFIX}/digest", tags=["Digest"])
app.include_router(integrations.router, prefix=f"{API_PREFIX}/integrations", tags=["Integrations"])
app.include_router(accounts.router, prefix=f"{API_PREFIX}/accounts", tags=["Accounts"])
app.include_router(exports.router, prefix=API_PREFIX, tags=["Export"])
app.include_router(service_types.router, prefix=API_PREFIX, tags=["Service Types"])
app.include_router(documents.router, prefix=API_PREFIX, tags=["Documents"])
app.include_router(websocket_routes.router, tags=["WebSocket"])


@app.get("/", tags=["Root"])
async def root():
    return {
        "name": "RDR Client Portal API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": f"{API_PREFIX}/health",
    }
