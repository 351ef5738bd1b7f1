from __future__ import annotations

from passlib.context import CryptContext


DEFAULT_HASH_ROUNDS = 200000


def make_password_context(rounds: int = DEFAULT_HASH_ROUNDS) -> CryptContext:
    """Salted pbkdf2_sha256 with a configurable work factor."""
    return CryptContext(
        schemes=["pbkdf2_sha256"],
        deprecated="auto",
        pbkdf2_sha256__rounds=max(1, int(rounds)),
    )


_pwd = make_password_context()


def hash_password(password: str, *, context: CryptContext | None = None) -> str:
    if not password:
        raise ValueError("password_blank")
    return (context or _pwd).hash(password)


def verify_password(password: str, password_hash: str, *, context: CryptContext | None = None) -> bool:
    if not password or not password_hash:
        return False
    try:
        return (context or _pwd).verify(password, password_hash)
    except (ValueError, TypeError):
        # Unrecognized or corrupt stored hash.
        return False
