"""bcrypt password hashing helpers."""

from __future__ import annotations

import bcrypt

# Work factor for newly computed hashes.
PASSWORD_HASH_ROUNDS = 10


def hash_password(password: str) -> str:
    """Return a salted bcrypt hash for ``password``."""
    salt = bcrypt.gensalt(rounds=PASSWORD_HASH_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str | None) -> bool:
    """Check ``password`` against a stored hash.

    ``bcrypt.checkpw`` compares in constant time. A missing or malformed hash
    counts as a mismatch rather than an error.
    """
    if not password_hash or not isinstance(password, str):
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False
