"""Database repository for account credential data."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from psycopg.rows import tuple_row
from psycopg_pool import ConnectionPool

from .domain.account import Account
from .domain.contracts import NewAccount

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).with_name("schema.sql")

_COLUMNS = "id, first_name, last_name, email, password_hash, reset_guid, deleted, created_at"


@dataclass(slots=True)
class AccountRecord:
    """Row projection of ``users``, including credential columns."""

    account_id: str
    first_name: str
    last_name: str
    email: str
    password_hash: str
    reset_guid: str
    deleted: bool
    created_at: datetime

    def sanitized(self) -> Account:
        """Return the public view, stripped of the password hash and reset token."""
        return Account(
            account_id=self.account_id,
            first_name=self.first_name,
            last_name=self.last_name,
            email=self.email,
            created_at=self.created_at,
            deleted=self.deleted,
        )


class AccountRepository:
    """Postgres-backed credential store.

    Every lookup excludes soft-deleted rows. A lookup that matches nothing
    returns ``None``; driver errors propagate to the caller.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """Store the connection pool used for all database interactions."""
        self._pool = pool

    def ensure_schema(self) -> None:
        """Create the ``users`` table and its indexes when they are missing."""
        ddl = SCHEMA_PATH.read_text(encoding="utf-8")
        with self._pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(ddl)
            conn.commit()
        logger.info("account schema ensured")

    def find_by_email(self, email: str) -> AccountRecord | None:
        """Return the non-deleted account registered under ``email``."""
        if "\x00" in email:
            # Postgres text cannot hold NUL, so no stored email can match.
            return None
        return self._fetch_one(
            f"SELECT {_COLUMNS} FROM users WHERE lower(email) = lower(%s) AND NOT deleted",
            (email,),
        )

    def find_by_reset_token(self, reset_guid: str) -> AccountRecord | None:
        """Return the non-deleted account whose current reset token is ``reset_guid``."""
        key = _parse_uuid(reset_guid)
        if key is None:
            return None
        return self._fetch_one(
            f"SELECT {_COLUMNS} FROM users WHERE reset_guid = %s AND NOT deleted",
            (key,),
        )

    def get_account(self, account_id: str) -> AccountRecord | None:
        """Fetch a non-deleted account by identifier or return ``None``."""
        key = _parse_uuid(account_id)
        if key is None:
            return None
        return self._fetch_one(
            f"SELECT {_COLUMNS} FROM users WHERE id = %s AND NOT deleted",
            (key,),
        )

    def create_account(self, payload: NewAccount) -> AccountRecord | None:
        """Insert a new account and return it.

        Returns ``None`` when a non-deleted account already owns the email;
        the partial unique index decides which of two racing inserts wins.
        """
        account_id = str(uuid.uuid4())
        now = datetime.now(timezone.utc)
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(
                    f"""
                    INSERT INTO users (id, first_name, last_name, email, password_hash, reset_guid,
                                       deleted, created_at, updated_at)
                    VALUES (%s, %s, %s, %s, %s, %s, false, %s, %s)
                    ON CONFLICT (lower(email)) WHERE NOT deleted DO NOTHING
                    RETURNING {_COLUMNS}
                    """,
                    (
                        account_id,
                        payload.first_name,
                        payload.last_name,
                        payload.email,
                        payload.password_hash,
                        payload.reset_guid,
                        now,
                        now,
                    ),
                )
                row = cur.fetchone()
            conn.commit()
        if not row:
            return None
        return self._map_record(row)

    def update_credentials(
        self,
        account_id: str,
        *,
        expected_reset_guid: str,
        password_hash: str,
        reset_guid: str,
    ) -> bool:
        """Replace the password hash and reset token of a non-deleted account.

        The row is only touched while its reset token still equals
        ``expected_reset_guid``, so a token can be consumed at most once even
        under concurrent requests. Returns ``False`` when nothing was updated.
        """
        with self._pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE users
                    SET password_hash = %s, reset_guid = %s, updated_at = NOW()
                    WHERE id = %s AND reset_guid = %s AND NOT deleted
                    """,
                    (password_hash, reset_guid, account_id, expected_reset_guid),
                )
                updated = cur.rowcount == 1
            conn.commit()
        return updated

    def _fetch_one(self, query: str, params: tuple) -> AccountRecord | None:
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(query, params)
                row = cur.fetchone()
        if not row:
            return None
        return self._map_record(row)

    def _map_record(self, row: tuple) -> AccountRecord:
        """Convert a raw database tuple into an ``AccountRecord``."""
        return AccountRecord(
            account_id=str(row[0]),
            first_name=row[1],
            last_name=row[2],
            email=row[3],
            password_hash=row[4],
            reset_guid=str(row[5]),
            deleted=row[6],
            created_at=row[7],
        )


def _parse_uuid(value: str) -> uuid.UUID | None:
    # The id and reset_guid columns are uuid typed; bind a parsed UUID so the
    # server never has to interpret loosely formatted text.
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None
