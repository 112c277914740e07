from __future__ import annotations

import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone

import psycopg
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from account_service.api import routes
from account_service.domain.contracts import NewAccount
from account_service.domain.service import AccountService
from account_service.repository import AccountRecord, AccountRepository


class FakeRepository:
    """In-memory repository mimicking the Postgres-backed behaviours."""

    def __init__(self) -> None:
        self.accounts: dict[str, AccountRecord] = {}

    def _active(self):
        return [record for record in self.accounts.values() if not record.deleted]

    def find_by_email(self, email: str):
        return next(
            (record for record in self._active() if record.email.lower() == email.lower()),
            None,
        )

    def find_by_reset_token(self, reset_guid: str):
        return next((record for record in self._active() if record.reset_guid == reset_guid), None)

    def get_account(self, account_id: str):
        record = self.accounts.get(account_id)
        if record is None or record.deleted:
            return None
        return record

    def create_account(self, payload: NewAccount):
        if self.find_by_email(payload.email) is not None:
            return None
        record = AccountRecord(
            account_id=str(uuid.uuid4()),
            first_name=payload.first_name,
            last_name=payload.last_name,
            email=payload.email,
            password_hash=payload.password_hash,
            reset_guid=payload.reset_guid,
            deleted=False,
            created_at=datetime.now(timezone.utc),
        )
        self.accounts[record.account_id] = record
        return record

    def update_credentials(
        self,
        account_id: str,
        *,
        expected_reset_guid: str,
        password_hash: str,
        reset_guid: str,
    ) -> bool:
        record = self.get_account(account_id)
        if record is None or record.reset_guid != expected_reset_guid:
            return False
        record.password_hash = password_hash
        record.reset_guid = reset_guid
        return True


@dataclass
class SentMail:
    recipient: str
    subject: str
    template: str
    variables: dict


@dataclass
class FakeMailer:
    """Records outgoing mail instead of delivering it."""

    accept: bool = True
    outbox: list[SentMail] = field(default_factory=list)

    def send_mail(self, recipient, subject, template, variables) -> bool:
        self.outbox.append(SentMail(recipient, subject, template, dict(variables)))
        return self.accept


@pytest.fixture
def repository() -> FakeRepository:
    return FakeRepository()


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def service(repository, mailer) -> AccountService:
    return AccountService(repository, mailer)


@pytest.fixture
def api_client(service):
    """Provide a FastAPI test client with isolated state."""
    app = FastAPI()
    app.include_router(routes.router)
    app.state.account_service = service

    with TestClient(app) as client:
        yield client


class FakeCursor:
    """Cursor double that records statements and replays queued rows."""

    def __init__(self, pool: "FakePool") -> None:
        self._pool = pool
        self.rowcount = 0

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def execute(self, query, params=()):
        for value in params:
            # psycopg refuses to dump such text before anything reaches the server.
            if isinstance(value, str) and "\x00" in value:
                raise psycopg.DataError("PostgreSQL text fields cannot contain NUL (0x00) bytes")
        self._pool.executed.append((query, tuple(params)))
        self.rowcount = self._pool.rowcount

    def fetchone(self):
        return self._pool.rows.pop(0) if self._pool.rows else None


class FakeConnection:
    def __init__(self, pool: "FakePool") -> None:
        self._pool = pool

    def cursor(self, row_factory=None):
        return FakeCursor(self._pool)

    def commit(self) -> None:
        self._pool.commits += 1


class FakePool:
    """Stand-in for ``psycopg_pool.ConnectionPool`` without a server."""

    def __init__(self) -> None:
        self.executed: list[tuple[str, tuple]] = []
        self.rows: list[tuple] = []
        self.rowcount = 0
        self.commits = 0

    @contextmanager
    def connection(self):
        yield FakeConnection(self)


@pytest.fixture
def pool() -> FakePool:
    return FakePool()


@pytest.fixture
def pool_backed_client(pool, mailer):
    """Test client whose service talks to the real repository over ``FakePool``."""
    app = FastAPI()
    app.include_router(routes.router)
    app.state.account_service = AccountService(AccountRepository(pool), mailer)

    with TestClient(app) as client:
        yield client
