"""
api/routes/v1/users.py -- Registration and login.

Routes:
  POST /api/v1/users/register  -- create account; returns token + sets cookie (201)
  POST /api/v1/users/login     -- password login; returns token + sets cookie (200)

Both routes are public. They are the only places a token is minted.

Security:
  Login always runs bcrypt, against DUMMY_HASH when the email is unknown, so
  response time does not reveal whether an account exists. Unknown email and
  wrong password share one response.
  Cache-Control: no-store on every response that carries a token.
  Plaintext passwords and hashes are never logged.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from api.models import LoginRequest, RegisterRequest, TokenResponse
from auth.errors import HashingError, SigningError
from auth.models import User
from auth.passwords import DUMMY_HASH, hash_password, verify_password
from auth.store import UserStore
from auth.tokens import create_access_token, set_auth_cookie

logger = logging.getLogger("taskboard.api")

router = APIRouter()


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@router.post("/users/register", response_model=TokenResponse, status_code=201)
def register(request: Request, body: RegisterRequest) -> JSONResponse:
    """Create an account and log it in.

    A hashing failure is a server problem, not a client one, so it is
    reported as a 500 rather than masked.
    """
    _validate_register(body)
    user_store: UserStore = request.app.state.user_store

    try:
        hashed_pw = hash_password(body.password)
    except HashingError as exc:
        raise HTTPException(status_code=500, detail="error hashing password") from exc

    new_user = User(
        email=body.email,
        first_name=body.first_name,
        last_name=body.last_name,
        hashed_password=hashed_pw,
    )
    try:
        user_id = user_store.create_user(new_user)
    except IntegrityError as exc:
        raise HTTPException(status_code=409, detail="a user with that email already exists") from exc

    logger.info("Registered user id=%d", user_id)
    return _token_response(request, user_id, status_code=201)


@router.post("/users/login", response_model=TokenResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with email and password; return a fresh token."""
    if not body.email:
        raise HTTPException(status_code=400, detail="missing email")

    user_store: UserStore = request.app.state.user_store
    user = user_store.get_user_by_email(body.email)
    if user is None or user.hashed_password is None:
        # Equalize timing -- do NOT return before running bcrypt.
        verify_password(body.password, DUMMY_HASH)
        logger.info("Login failed: unknown email")
        return _wrong_password()
    if not verify_password(body.password, user.hashed_password):
        logger.info("Login failed: password mismatch for user id=%d", user.id)
        return _wrong_password()

    return _token_response(request, user.id, status_code=200)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _validate_register(body: RegisterRequest) -> None:
    if not body.email:
        raise HTTPException(status_code=400, detail="email is required")
    if not body.first_name:
        raise HTTPException(status_code=400, detail="first name is required")
    if not body.last_name:
        raise HTTPException(status_code=400, detail="last name is required")
    if not body.password:
        raise HTTPException(status_code=400, detail="password is required")


def _token_response(request: Request, user_id: int, status_code: int) -> JSONResponse:
    """Mint a token for user_id and return it in the body and as a cookie."""
    settings = request.app.state.settings
    try:
        token = create_access_token(settings.secret_key, user_id, settings.token_expire_seconds)
    except SigningError as exc:
        raise HTTPException(status_code=500, detail="error creating token session") from exc

    resp = JSONResponse(status_code=status_code, content=TokenResponse(token=token).model_dump())
    set_auth_cookie(resp, token, max_age=settings.token_expire_seconds, secure=settings.secure_cookies)
    resp.headers["Cache-Control"] = "no-store"
    return resp


def _wrong_password() -> JSONResponse:
    resp = JSONResponse(status_code=401, content={"error": "wrong password"})
    resp.headers["Cache-Control"] = "no-store"
    return resp
