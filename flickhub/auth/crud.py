from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def find_user_by_id_or_email(conn: Any, user_id: str, email: str) -> Optional[Any]:
    return conn.execute(
        "SELECT user_id FROM users WHERE user_id=? OR email=?",
        (user_id, email),
    ).fetchone()


def get_user_by_login(conn: Any, username: str) -> Optional[Any]:
    """Look up a user by id or email, exactly as stored."""
    return conn.execute(
        "SELECT * FROM users WHERE user_id=? OR email=?",
        (username, username),
    ).fetchone()


def insert_user(
    conn: Any,
    *,
    user_id: str,
    name: str,
    password_hash: str,
    email: str,
    phone: str,
) -> None:
    conn.execute(
        """
        INSERT INTO users (user_id, name, password_hash, email, phone, created_at)
        VALUES (?,?,?,?,?,?)
        """,
        (user_id, name, password_hash, email, phone, _utcnow_iso()),
    )


def count_users(conn: Any) -> int:
    return int(conn.execute("SELECT COUNT(*) AS n FROM users").fetchone()["n"])
