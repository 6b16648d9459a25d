"""
auth/errors.py -- Exception taxonomy for the authentication subsystem.

Every failure inside auth/ is raised as one of these. The distinctions exist
for logging only: the auth gate collapses all TokenError and IdentityError
subclasses into a single "permission denied" response, so the client cannot
tell an expired token from a forged one or from a deleted account.

Credential and signing failures are server-side problems and surface as 500s
from the registration and login routes.

Layer rule: no imports from api/, core/, or tracker/.
"""

from __future__ import annotations


class AuthError(Exception):
    """Base class for all authentication failures."""


# ---------------------------------------------------------------------------
# Server-side failures
# ---------------------------------------------------------------------------


class CredentialError(AuthError):
    """The password hashing primitive could not run."""


class HashingError(CredentialError):
    pass


class SigningError(AuthError):
    """A token could not be signed."""


# ---------------------------------------------------------------------------
# Token validation failures
# ---------------------------------------------------------------------------


class TokenError(AuthError):
    """The presented token is not acceptable. Subclasses name the cause."""


class TokenMalformed(TokenError):
    pass


class TokenWrongAlgorithm(TokenError):
    pass


class TokenBadSignature(TokenError):
    pass


class TokenExpired(TokenError):
    pass


# ---------------------------------------------------------------------------
# Identity resolution failures
# ---------------------------------------------------------------------------


class IdentityError(AuthError):
    """The token's subject could not be resolved to a user."""


class IdentityNotFound(IdentityError):
    pass


class IdentityLookupFailed(IdentityError):
    pass
