"""Account service - registration and login business logic.

No HTTP dependencies. Raises `flickhub.errors` exceptions that the API layer maps
to status codes.
"""

from __future__ import annotations

import re
from typing import Dict, Optional

from passlib.context import CryptContext

from flickhub.db import Database, is_unique_violation
from flickhub.errors import AuthError, ConflictError, InternalError, ValidationError

from .crud import find_user_by_id_or_email, get_user_by_login, insert_user
from .security import hash_password, make_password_context, verify_password


MIN_USER_ID_LENGTH = 4
MIN_PASSWORD_LENGTH = 8

_WHITESPACE = re.compile(r"\s")


def _debug(msg: str) -> None:
    print(f"[auth] {msg}")


def _validate_registration(user_id: str, password: str) -> None:
    if len(user_id) < MIN_USER_ID_LENGTH or _WHITESPACE.search(user_id):
        raise ValidationError("Invalid User ID.")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError("Password too short.")


class AccountService:
    """Registration and login against the `users` table.

    One instance per process, sharing the process-wide `Database` pool.
    """

    def __init__(self, db: Database, *, password_context: Optional[CryptContext] = None):
        self.db = db
        self.password_context = password_context or make_password_context()

    def register(
        self,
        *,
        user_id: Optional[str],
        name: Optional[str],
        email: Optional[str],
        phone: Optional[str],
        password: Optional[str],
    ) -> Dict[str, str]:
        """Create a user row.

        Raises:
            ValidationError: a field is missing, the user id or password is malformed
            ConflictError: user id or email already taken (does not say which)
            InternalError: the store failed
        """
        if not user_id or not name or not email or not phone or not password:
            raise ValidationError("All fields are required.")
        _validate_registration(user_id, password)

        try:
            with self.db.connection() as conn:
                existing = find_user_by_id_or_email(conn, user_id, email)
        except Exception as e:
            _debug(f"Register error: {type(e).__name__}: {e}")
            raise InternalError() from e
        if existing is not None:
            raise ConflictError()

        # Hash outside any pooled connection; this is the slow part.
        password_hash = hash_password(password, context=self.password_context)

        try:
            with self.db.connection() as conn:
                insert_user(
                    conn,
                    user_id=user_id,
                    name=name,
                    password_hash=password_hash,
                    email=email,
                    phone=phone,
                )
        except Exception as e:
            # A concurrent registration can pass the pre-check and lose at insert time.
            if is_unique_violation(e):
                raise ConflictError() from e
            _debug(f"Register error: {type(e).__name__}: {e}")
            raise InternalError() from e

        _debug(f"Registered: {user_id}")
        return {"userId": user_id}

    def login(self, *, username: Optional[str], password: Optional[str]) -> Dict[str, str]:
        """Check credentials and return the stored identity.

        Unknown user and wrong password raise the same AuthError so callers cannot
        probe which ids or emails exist. No session token is issued.
        """
        if not username or not password:
            raise ValidationError("All fields required.")

        try:
            with self.db.connection() as conn:
                row = get_user_by_login(conn, username)
        except Exception as e:
            _debug(f"Login error: {type(e).__name__}: {e}")
            raise InternalError() from e

        if row is None:
            # Spend the same hashing time as a real check so response timing does not
            # reveal which ids and emails exist.
            self.password_context.dummy_verify()
            _debug(f"Failed login: {username}")
            raise AuthError()

        if not verify_password(password, str(row["password_hash"]), context=self.password_context):
            _debug(f"Failed login: {username}")
            raise AuthError()

        _debug(f"Login: {row['user_id']}")
        return {"userId": str(row["user_id"]), "name": str(row["name"])}
