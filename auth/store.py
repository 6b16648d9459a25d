"""
auth/store.py -- SQLAlchemy Core persistence layer for user accounts.

Pattern: Repository + Data Mapper (same as tracker/store.py).
UserStore is the repository; _row_to_user is the mapper. Route and
dependency code never touches SQL directly.

UserStore is also the identity lookup the auth gate calls on every protected
request: get_user_by_id() returns the User, None when no such account
exists, and lets SQLAlchemyError propagate on storage failure.

Security:
  All queries use bound parameters. No f-strings in SQL.
  get_user_by_id() does not select hashed_password -- only login needs it.

Layer rule: no imports from api/ or tracker/. Import from core/ is allowed --
core/ is the kernel and has no reverse dependencies.
"""

from __future__ import annotations

import logging

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, select
from sqlalchemy.engine import Engine

from auth.models import User
from core.db import make_engine, now_iso

logger = logging.getLogger("taskboard.auth")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("first_name", String(255), nullable=False),
    Column("last_name", String(255), nullable=False),
    Column("hashed_password", Text, nullable=False),
    Column("created_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User entities.

    Usage:
        store = UserStore("sqlite:///taskboard.db")
        uid = store.create_user(User(email="joe@mail.com", first_name="John",
                                     last_name="Doe", hashed_password=hash_password("secret")))
        user = store.get_user_by_id(str(uid))
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        self.engine: Engine = make_engine(db_url)
        _metadata.create_all(self.engine)

    def create_user(self, user: User) -> int:
        """Insert a new user and return its assigned database ID.

        Raises sqlalchemy.exc.IntegrityError if the email already exists.
        The register route turns that into a 409.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _users.insert().values(
                    email=user.email,
                    first_name=user.first_name,
                    last_name=user.last_name,
                    hashed_password=user.hashed_password,
                    created_at=now_iso(),
                )
            )
            conn.commit()
            user_id = result.inserted_primary_key[0]
        logger.info("Created user id=%d", user_id)
        return user_id

    def get_user_by_id(self, user_id: str) -> User | None:
        """Look up a user by primary key. Returns None if not found.

        user_id arrives as a string because that is how the token subject is
        encoded. A value that is not a decimal integer, or does not fit in a
        signed 64-bit INTEGER column, cannot match any row.
        """
        try:
            pk = int(user_id)
        except (TypeError, ValueError):
            logger.info("get_user_by_id: non-numeric id %r", user_id)
            return None
        if not -(2**63) <= pk < 2**63:
            logger.info("get_user_by_id: id out of range")
            return None
        columns = [_users.c.id, _users.c.email, _users.c.first_name, _users.c.last_name, _users.c.created_at]
        with self.engine.connect() as conn:
            row = conn.execute(select(*columns).where(_users.c.id == pk)).fetchone()
        if row is None:
            logger.info("get_user_by_id: user not found for id=%d", pk)
            return None
        return _row_to_user(row)

    def get_user_by_email(self, email: str) -> User | None:
        """Look up a user by exact email, including the password hash. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.email == email)).fetchone()
        return _row_to_user(row) if row is not None else None

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        email=row.email,
        first_name=row.first_name,
        last_name=row.last_name,
        hashed_password=getattr(row, "hashed_password", None),
        created_at=row.created_at,
    )
