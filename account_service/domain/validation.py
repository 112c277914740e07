"""Shape and strength checks applied to registration and reset input."""

from __future__ import annotations

import re

from email_validator import EmailNotValidError, validate_email

NAME_MAX_LENGTH = 100
EMAIL_MAX_LENGTH = 254
PASSWORD_MIN_LENGTH = 8
# bcrypt only looks at the first 72 bytes of its input.
PASSWORD_MAX_BYTES = 72

_NAME_PATTERN = re.compile(r"[^\W\d_](?:[^\W\d_]|[ '\-.])*")


def normalize_email(email: str) -> str:
    """Return the lookup form of an email address (trimmed, lower-cased)."""
    return email.strip().lower()


def is_valid_name(name: str) -> bool:
    """Return ``True`` for a trimmed, non-empty human name."""
    if not isinstance(name, str) or not name or len(name) > NAME_MAX_LENGTH:
        return False
    return _NAME_PATTERN.fullmatch(name) is not None


def is_valid_email(email: str) -> bool:
    """Return ``True`` when the address is syntactically valid.

    Deliverability (DNS) is not checked so registration never depends on the
    network.
    """
    if not isinstance(email, str) or not email or len(email) > EMAIL_MAX_LENGTH:
        return False
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def is_valid_password(password: str) -> bool:
    """Return ``True`` when the password meets the strength policy.

    At least eight characters and at most 72 UTF-8 bytes, with one lowercase
    letter, one uppercase letter and one digit.
    """
    if not isinstance(password, str) or len(password) < PASSWORD_MIN_LENGTH:
        return False
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        return False
    return (
        any(ch.islower() for ch in password)
        and any(ch.isupper() for ch in password)
        and any(ch.isdigit() for ch in password)
    )
