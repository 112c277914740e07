"""Domain-level request contracts shared by multiple layers."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class RegisterAccountInput:
    """Raw registration fields as supplied by the caller."""

    first_name: str
    last_name: str
    email: str
    password: str


@dataclass(slots=True)
class NewAccount:
    """Validated, hashed values ready to be inserted into the credential store."""

    first_name: str
    last_name: str
    email: str
    password_hash: str
    reset_guid: str


@dataclass(slots=True)
class IssuedToken:
    """Bearer token handed back after a successful login."""

    token: str
    expires_in: int
