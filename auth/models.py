"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in tracker/models.py -- dataclasses own domain shape; stores and routes do
the work.

Layer rule: no imports from api/, core/, or tracker/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A registered account.

    hashed_password is the bcrypt string produced by auth.passwords; the
    plaintext is never held on this object. get_user_by_id() leaves it None
    because the auth gate has no use for it.
    """

    email: str
    first_name: str
    last_name: str
    id: int | None = None
    hashed_password: str | None = None
    created_at: str | None = None
