"""
auth/passwords.py -- One-way password hashing and verification.

bcrypt is used directly rather than through passlib, whose wrap-bug detection
breaks against current bcrypt releases.

bcrypt only reads the first 72 bytes of its input. Older releases truncate
longer passwords silently and newer ones raise, so the limit is enforced here
for every version: hash_password() refuses such input and verify_password()
never matches it.

The plaintext password only ever flows into hash_password() and
verify_password(). Nothing else in the codebase reads it, stores it, or
logs it.

Layer rule: no imports from api/, core/, or tracker/.
"""

from __future__ import annotations

import logging

import bcrypt

from auth.errors import HashingError

logger = logging.getLogger("taskboard.auth")

# Work factor. 10 is the cost the service has always used for stored hashes.
BCRYPT_ROUNDS = 10

# bcrypt input limit in bytes (UTF-8).
MAX_PASSWORD_BYTES = 72


def hash_password(plain: str) -> str:
    """Return a salted bcrypt hash of the given plaintext password.

    Each call draws a fresh salt, so hashing the same password twice yields
    two different strings. Both verify against the original password.

    Raises HashingError if the password is longer than MAX_PASSWORD_BYTES
    once encoded, or if bcrypt cannot run at all. Callers should treat
    this as a server error, not a bad-credentials response.
    """
    encoded = plain.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        logger.error("Password hashing refused: input exceeds %d bytes", MAX_PASSWORD_BYTES)
        raise HashingError("password could not be hashed")
    try:
        hashed = bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=BCRYPT_ROUNDS))
    except (ValueError, MemoryError) as exc:
        logger.error("Password hashing failed: %s", type(exc).__name__)
        raise HashingError("password could not be hashed") from exc
    return hashed.decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    Never raises. Any mismatch or unusable input returns False.
    """
    encoded = plain.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(encoded, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


# Timing equalization dummy hash.
# Computed once at module load so the first login attempt is not measurably
# slower than subsequent ones. Login verifies against this hash when the
# email is unknown, so response time does not reveal whether an account
# exists.
DUMMY_HASH: str = hash_password("taskboard_timing_dummy")
