"""
api/main.py -- FastAPI application factory for Taskboard.

Run with:      uvicorn asgi:app --reload

create_app() takes an already-built Settings value. Nothing in the app reads
the environment: asgi.py loads Settings once and passes it in, and tests pass
their own. The same Settings instance is shared read-only by every request
via app.state.settings.

Middleware stack (outermost to innermost):
  1. log_requests    -- one log line per request with status and latency
  2. CORSMiddleware  -- adds CORS headers for allowed browser origins

Lifespan opens the user and tracker stores on startup and closes them on
shutdown.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.models import ErrorResponse, HealthResponse
from api.routes.v1.projects import router as projects_router
from api.routes.v1.tasks import router as tasks_router
from api.routes.v1.users import router as users_router
from auth.store import UserStore
from core.config import Settings
from tracker.store import TrackerStore

VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("taskboard.api")


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the stores on startup and dispose of them on shutdown.

    Everything before yield runs on startup; everything after yield runs on
    shutdown.
    """
    settings: Settings = app.state.settings
    logger.info("Taskboard API starting up")
    app.state.user_store = UserStore(settings.database_url)
    app.state.tracker = TrackerStore(settings.database_url)
    logger.info("Stores initialized")

    yield

    app.state.tracker.close()
    app.state.user_store.close()
    logger.info("Taskboard API shutdown complete")


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def create_app(settings: Settings) -> FastAPI:
    """Build the ASGI app around an immutable Settings value."""
    app = FastAPI(
        title="Taskboard API",
        description="Projects and tasks with token-authenticated CRUD.",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
        max_age=3600,
    )

    app.middleware("http")(log_requests)

    app.include_router(users_router, prefix="/api/v1", tags=["Users"])
    app.include_router(tasks_router, prefix="/api/v1", tags=["Tasks"])
    app.include_router(projects_router, prefix="/api/v1", tags=["Projects"])

    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    app.add_api_route("/api/v1/health", health, methods=["GET"], tags=["Health"])
    return app


# ---------------------------------------------------------------------------
# Request logging middleware
#
# Every request passes through this coroutine before reaching any route
# handler. Wall-clock time is captured around call_next so latency is
# reported on every response, including auth rejections.
# ---------------------------------------------------------------------------


async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so API clients can parse
# errors uniformly: {"error": "<message>"}.
# ---------------------------------------------------------------------------


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 400 when the body is not valid JSON or has the wrong types.

    The field-level errors go to the log, not the response.
    """
    logger.info("Invalid payload on %s %s: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=400, content=ErrorResponse(error="invalid request payload").model_dump())


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Wrap HTTPException.detail in the error envelope.

    Registered for the Starlette base class so routing 404s and 405s get the
    same envelope as errors raised by handlers.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=str(exc.detail)).model_dump(),
        headers=getattr(exc, "headers", None),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception is written to the log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=ErrorResponse(error="internal server error").model_dump())


# ---------------------------------------------------------------------------
# Health endpoint
#
# Registered directly on the app (not in a router) so it is always reachable
# and never sits behind the auth gate.
# ---------------------------------------------------------------------------


async def health() -> HealthResponse:
    """Return API liveness and current version."""
    return HealthResponse(version=VERSION)
