"""Errors raised by the account lifecycle service."""

from __future__ import annotations


class AccountError(ValueError):
    """Base class for client-visible account failures.

    ``code`` is the machine-readable string reported to HTTP callers.
    """

    code = "account_error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.code)


class InvalidNames(AccountError):
    code = "invalid_names"


class InvalidEmail(AccountError):
    code = "invalid_email"


class InvalidPassword(AccountError):
    code = "invalid_password"


class EmailTaken(AccountError):
    code = "email_taken"


class UserNotFound(AccountError):
    code = "user_not_found"


class ResetTokenNotFound(AccountError):
    code = "not_found"


class InvalidCredentials(AccountError):
    """Login failed; deliberately silent about whether the account exists."""

    code = "unauthorized"


class Unauthorized(AccountError):
    """Bearer token missing, invalid, expired, or its account is gone."""

    code = "unauthorized"


class MailDeliveryError(RuntimeError):
    """The mail collaborator reported that a message was not accepted."""
