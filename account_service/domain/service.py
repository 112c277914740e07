"""Account service orchestrating the credential lifecycle.

Registration creates an active account with a hashed password and an
initial, unused reset token. Requesting a reset mails out a link carrying the
account's current reset token. Applying a reset swaps the password hash and
rotates the token in one conditional update, which invalidates every link sent
before it. Login and bearer-token authentication never reveal why they fail.
"""

from __future__ import annotations

import logging
from typing import Protocol

import jwt

from .account import Account
from .contracts import IssuedToken, NewAccount, RegisterAccountInput
from .errors import (
    EmailTaken,
    InvalidCredentials,
    InvalidEmail,
    InvalidNames,
    InvalidPassword,
    MailDeliveryError,
    ResetTokenNotFound,
    Unauthorized,
    UserNotFound,
)
from .validation import is_valid_email, is_valid_name, is_valid_password, normalize_email
from ..config import get_settings
from ..mail import Mailer
from ..metrics import record_event
from ..repository import AccountRecord
from ..security.passwords import hash_password, verify_password
from ..security.tokens import decode_access_token, generate_reset_token, issue_access_token

logger = logging.getLogger(__name__)

RESET_MAIL_SUBJECT = "Reset your password"
RESET_MAIL_TEMPLATE = "forgot-password"


class CredentialStore(Protocol):
    """Persistence operations the service depends on."""

    def find_by_email(self, email: str) -> AccountRecord | None: ...

    def find_by_reset_token(self, reset_guid: str) -> AccountRecord | None: ...

    def get_account(self, account_id: str) -> AccountRecord | None: ...

    def create_account(self, payload: NewAccount) -> AccountRecord | None: ...

    def update_credentials(
        self,
        account_id: str,
        *,
        expected_reset_guid: str,
        password_hash: str,
        reset_guid: str,
    ) -> bool: ...


class AccountService:
    """Account workflows backed by Postgres storage and an outbound mailer."""

    def __init__(self, repository: CredentialStore, mailer: Mailer) -> None:
        """Store dependencies used to orchestrate persistence, hashing and mail."""
        self._repository = repository
        self._mailer = mailer

    def register(self, payload: RegisterAccountInput) -> Account:
        """Create an account and return its sanitized view.

        Checks run in a fixed order (names, email, password, uniqueness) and
        the first failure is raised.
        """
        first_name = str(payload.first_name).strip()
        last_name = str(payload.last_name).strip()
        email = normalize_email(str(payload.email))

        if not is_valid_name(first_name) or not is_valid_name(last_name):
            raise InvalidNames()
        if not is_valid_email(email):
            raise InvalidEmail()
        if not is_valid_password(payload.password):
            raise InvalidPassword()
        if self._repository.find_by_email(email) is not None:
            raise EmailTaken()

        record = self._repository.create_account(
            NewAccount(
                first_name=first_name,
                last_name=last_name,
                email=email,
                password_hash=hash_password(payload.password),
                reset_guid=generate_reset_token(),
            )
        )
        if record is None:
            # Another request registered the same email between check and insert.
            raise EmailTaken()

        logger.info("registered account %s", record.account_id)
        record_event("registered")
        return record.sanitized()

    def login(self, email: str, password: str) -> IssuedToken:
        """Verify credentials and issue a bearer token.

        Unknown emails and wrong passwords raise the same ``InvalidCredentials``.
        """
        record = self._repository.find_by_email(normalize_email(str(email)))
        if record is None or not verify_password(password, record.password_hash):
            logger.info("login rejected")
            record_event("login_failed")
            raise InvalidCredentials()

        token, expires_in = issue_access_token(record.sanitized())
        record_event("login_succeeded")
        return IssuedToken(token=token, expires_in=expires_in)

    def request_password_reset(self, email: str) -> None:
        """Mail the account's current reset link to its owner."""
        record = self._repository.find_by_email(normalize_email(str(email)))
        if record is None:
            raise UserNotFound()

        settings = get_settings()
        action = f"{settings.reset_url_base.rstrip('/')}/{record.reset_guid}"
        delivered = self._mailer.send_mail(
            record.email, RESET_MAIL_SUBJECT, RESET_MAIL_TEMPLATE, {"ACTION": action}
        )
        if not delivered:
            raise MailDeliveryError(f"reset mail for account {record.account_id} was not accepted")

        logger.info("password reset requested for account %s", record.account_id)
        record_event("reset_requested")

    def reset_password(self, reset_token: str, password: str) -> None:
        """Replace the password of the account owning ``reset_token``.

        The token is rotated in the same write, so it cannot be used twice.
        """
        record = self._repository.find_by_reset_token(str(reset_token))
        if record is None:
            raise ResetTokenNotFound()
        if not is_valid_password(password):
            raise InvalidPassword()

        updated = self._repository.update_credentials(
            record.account_id,
            expected_reset_guid=record.reset_guid,
            password_hash=hash_password(password),
            reset_guid=generate_reset_token(),
        )
        if not updated:
            # The token was consumed (or the account deleted) after the lookup.
            raise ResetTokenNotFound()

        logger.info("password reset completed for account %s", record.account_id)
        record_event("password_reset")

    def authenticate(self, token: str) -> Account:
        """Resolve a bearer token to the account's current sanitized record."""
        try:
            claims = decode_access_token(token)
        except jwt.PyJWTError as exc:
            logger.debug("bearer token rejected: %s", exc)
            raise Unauthorized() from exc

        record = self._repository.get_account(str(claims["sub"]))
        if record is None:
            raise Unauthorized()
        return record.sanitized()
