"""Account registration and login.

Deliberately minimal:

- Single `users` table keyed by a user-chosen id, with a unique email
- Salted pbkdf2 password hashes (passlib)
- Login confirms the identity once and issues no token or cookie
"""

from .service import AccountService
from .security import hash_password, make_password_context, verify_password

__all__ = [
    "AccountService",
    "hash_password",
    "make_password_context",
    "verify_password",
]
