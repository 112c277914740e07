from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True)
class Account:
    """Sanitized view of a registered user; carries no credential material."""

    account_id: str
    first_name: str
    last_name: str
    email: str
    created_at: datetime
    deleted: bool = False
