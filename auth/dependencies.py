"""
auth/dependencies.py -- The auth gate for protected routes.

IdentityGatedRoute is the route_class of the task and project routers. It
calls require_identity() before FastAPI reads the request body or validates
any parameter, so an unauthenticated request is rejected with the uniform
401 whatever its payload looks like. On success the handler runs with the
request untouched.

Token sources, checked in priority order:
  1. Authorization header -- the raw token, or "Bearer <token>".
  2. ?token= query parameter.
  Neither present means an empty token, which fails validation like any
  other bad token.

Every failure -- no token, malformed, wrong algorithm, bad signature, expired,
unknown user, storage error -- produces the same PERMISSION_DENIED response.
The distinct cause is written to the log only.

The resolved User is deliberately not returned to handlers: protected routes
do not currently act on the caller's identity.

Layer rule: no imports from api/ or tracker/. auth/dependencies.py may import
from fastapi because it is part of the dependency injection system.
"""

from __future__ import annotations

import logging
from typing import NoReturn

from fastapi import HTTPException, Request, Response
from fastapi.routing import APIRoute
from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool

from auth.errors import IdentityLookupFailed, IdentityNotFound, TokenError
from auth.models import User
from auth.store import UserStore
from auth.tokens import validate_access_token

logger = logging.getLogger("taskboard.auth")

PERMISSION_DENIED = "permission denied"


def extract_token(request: Request) -> str:
    """Return the token presented with the request, or "" if there is none."""
    header = request.headers.get("Authorization", "")
    if header:
        if header.startswith("Bearer "):
            return header[7:]
        return header
    return request.query_params.get("token", "")


def resolve_identity(user_store: UserStore, subject_id: int) -> User:
    """Look the token subject up in the user store.

    Raises IdentityNotFound when the account does not exist and
    IdentityLookupFailed when the store itself errors.
    """
    try:
        user = user_store.get_user_by_id(str(subject_id))
    except SQLAlchemyError as exc:
        raise IdentityLookupFailed(f"lookup failed for user_id={subject_id}: {exc}") from exc
    if user is None:
        raise IdentityNotFound(f"no user with id={subject_id}")
    return user


def require_identity(request: Request) -> None:
    """Require a valid token for an existing user. Raises HTTP 401 otherwise.

    Protected routers run it through IdentityGatedRoute:
        router = APIRouter(route_class=IdentityGatedRoute)
    """
    settings = request.app.state.settings
    user_store: UserStore = request.app.state.user_store

    token = extract_token(request)
    try:
        claims = validate_access_token(token, settings.secret_key)
    except TokenError as exc:
        logger.warning("Rejected %s %s: %s: %s", request.method, request.url.path, type(exc).__name__, exc)
        _deny()

    try:
        resolve_identity(user_store, claims.subject_id)
    except (IdentityNotFound, IdentityLookupFailed) as exc:
        logger.warning("Rejected %s %s: %s: %s", request.method, request.url.path, type(exc).__name__, exc)
        _deny()


def _deny() -> NoReturn:
    raise HTTPException(status_code=401, detail=PERMISSION_DENIED)


class IdentityGatedRoute(APIRoute):
    """APIRoute that runs require_identity() before the body or any parameter is parsed."""

    def get_route_handler(self):
        handler = super().get_route_handler()

        async def gated_handler(request: Request) -> Response:
            await run_in_threadpool(require_identity, request)
            return await handler(request)

        return gated_handler
