"""
auth/tokens.py -- Identity token issuance and validation, plus the auth cookie.

Security design decisions:
  JWT: python-jose, signed with HS256. A token carries exactly two claims:
       "sub" (the user ID as a decimal string) and "exp" (the absolute expiry
       instant as a Unix timestamp). Validation returns a TokenClaims record
       or raises a TokenError subclass naming the cause.

  Algorithm pinning: the header's "alg" is checked against the HMAC family
       before the signature is looked at. Tokens declaring "none" or an
       asymmetric algorithm are rejected outright, which closes the
       algorithm-substitution hole where a public key is fed to HMAC.

  Expiry: checked here against an injectable "now" rather than by jose, so
       callers and tests share one clock. A token is valid strictly before its
       expiry instant. "exp" has whole-second granularity and is rounded
       up, so a token never lives shorter than the requested lifetime.

  No server-side state: tokens are never stored, so they cannot be revoked.
       They simply stop validating once they expire.

Layer rule: no imports from api/, core/, or tracker/. The secret and lifetime
are passed in by the caller; this module never reads configuration itself.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import jwt
from jose.exceptions import JOSEError, JWTClaimsError

from auth.errors import SigningError, TokenBadSignature, TokenExpired, TokenMalformed, TokenWrongAlgorithm

logger = logging.getLogger("taskboard.auth")

_ALGORITHM = "HS256"
# Accepted on validation. Issuance always uses _ALGORITHM.
HMAC_ALGORITHMS: frozenset[str] = frozenset({"HS256", "HS384", "HS512"})

AUTH_COOKIE_NAME = "Authorization"

# "sub" carries a signed 64-bit row id.
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


@dataclass(frozen=True)
class TokenClaims:
    """The verified contents of an identity token."""

    subject_id: int
    expires_at: datetime  # timezone-aware, UTC


# ---------------------------------------------------------------------------
# JWT encode / validate
# ---------------------------------------------------------------------------


def create_access_token(secret_key: str, user_id: int, expire_seconds: int, *, now: datetime | None = None) -> str:
    """Encode a signed JWT asserting user_id until now + expire_seconds.

    Args:
        secret_key:     Process-wide signing secret (Settings.secret_key).
        user_id:        Numeric user ID; stored as a string in "sub".
        expire_seconds: Token lifetime (Settings.token_expire_seconds).
        now:            Issue instant. Defaults to the current UTC time.

    Raises SigningError if jose cannot produce a signature.
    """
    issued_at = now or datetime.now(timezone.utc)
    expires_at = issued_at + timedelta(seconds=expire_seconds)
    payload = {
        "sub": str(user_id),
        "exp": math.ceil(expires_at.timestamp()),
    }
    try:
        return jwt.encode(payload, secret_key, algorithm=_ALGORITHM)
    except JOSEError as exc:
        logger.error("Token signing failed for user_id=%s: %s", user_id, exc)
        raise SigningError("token could not be signed") from exc


def validate_access_token(token: str, secret_key: str, *, now: datetime | None = None) -> TokenClaims:
    """Verify a JWT and return its claims.

    Checks run in this order, and the first failure wins:
      1. the token parses as a JWS          -- else TokenMalformed
      2. the header alg is HMAC             -- else TokenWrongAlgorithm
      3. the signature matches secret_key   -- else TokenBadSignature
      4. sub and exp are present and typed  -- else TokenMalformed
      5. now < exp                          -- else TokenExpired

    The exception message is for logs. Never echo it to a client.
    """
    try:
        header = jwt.get_unverified_header(token)
    except JOSEError as exc:
        raise TokenMalformed(str(exc)) from exc

    alg = header.get("alg")
    if alg not in HMAC_ALGORITHMS:
        raise TokenWrongAlgorithm(f"unexpected signing method: {alg!r}")

    try:
        payload = jwt.decode(
            token,
            secret_key,
            algorithms=sorted(HMAC_ALGORITHMS),
            options={"verify_exp": False, "verify_aud": False},
        )
    except JWTClaimsError as exc:
        raise TokenMalformed(str(exc)) from exc
    except JOSEError as exc:
        raise TokenBadSignature(str(exc)) from exc

    claims = _claims_from_payload(payload)
    current = now or datetime.now(timezone.utc)
    if current >= claims.expires_at:
        raise TokenExpired(f"token expired at {claims.expires_at.isoformat()}")
    return claims


def _claims_from_payload(payload: dict) -> TokenClaims:
    sub = payload.get("sub")
    exp = payload.get("exp")
    if not isinstance(sub, str):
        raise TokenMalformed("missing subject claim")
    try:
        subject_id = int(sub)
    except ValueError as exc:
        raise TokenMalformed(f"subject claim is not an integer: {sub!r}") from exc
    if not _INT64_MIN <= subject_id <= _INT64_MAX:
        raise TokenMalformed("subject claim out of int64 range")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        raise TokenMalformed("missing or non-numeric expiry claim")
    try:
        expires_at = datetime.fromtimestamp(exp, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as exc:
        raise TokenMalformed(f"expiry claim out of range: {exp!r}") from exc
    return TokenClaims(subject_id=subject_id, expires_at=expires_at)


# ---------------------------------------------------------------------------
# Cookie helper
# ---------------------------------------------------------------------------


def set_auth_cookie(response, token: str, *, max_age: int, secure: bool = False) -> None:
    """Write the token as the "Authorization" cookie on the response.

    httponly=True: JS cannot read the cookie.
    samesite="lax": not sent on cross-site POSTs.
    max_age: pass the token lifetime so cookie and token expire together.
    """
    response.set_cookie(
        AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="lax",
        secure=secure,
        max_age=max_age,
    )
