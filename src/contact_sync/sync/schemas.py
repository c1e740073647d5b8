"""Pydantic schemas for the remote users service and sync results.

Defines:
- RemoteAddress / RemoteUser: Typed decode of the inbound user JSON. Field
  types are strict so a wrong JSON type fails validation instead of being
  coerced; ``model_fields_set`` tells an absent key from an explicit null.
- RemoteResponse: Status code and raw body of one HTTP exchange
- SyncOperation / SyncStatus / SyncOutcome: Result of one pull or push
- TriggerResult: Outcomes of one lifecycle trigger batch
"""

from __future__ import annotations

import re
from datetime import date
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, StrictFloat, StrictInt, StrictStr, field_validator


_DATE_RE = re.compile(r"(\d{1,4})-(\d{1,2})-(\d{1,2})", re.ASCII)


def parse_iso_date(value: str) -> date:
    """Parse ``YYYY-M-D`` (zero padding optional, trailing time ignored)."""
    text = value.strip().split("T", 1)[0]
    match = _DATE_RE.fullmatch(text)
    if match is None:
        raise ValueError(f"invalid date string: {value!r}")
    year, month, day = (int(p) for p in match.groups())
    return date(year, month, day)


# ── Remote user payloads ────────────────────────────────────────────────────


class RemoteAddress(BaseModel):
    """Nested ``address`` object of a remote user."""

    street: StrictStr | None = Field(default=None, alias="address")
    city: StrictStr | None = None
    state: StrictStr | None = None
    postal_code: StrictStr | StrictInt | StrictFloat | None = Field(default=None, alias="postalCode")
    country: StrictStr | None = None


class RemoteUser(BaseModel):
    """Inbound remote user, as returned by ``GET /users/{id}``.

    Only the keys the sync maps are declared; anything else is ignored.
    """

    id: StrictInt | StrictStr | None = None
    email: StrictStr | None = None
    phone: StrictStr | None = None
    birth_date: date | None = Field(default=None, alias="birthDate")
    address: RemoteAddress | None = None

    @field_validator("birth_date", mode="before")
    @classmethod
    def _parse_birth_date(cls, value: Any) -> date | None:
        if value is None:
            return None
        if not isinstance(value, str):
            raise ValueError("birthDate must be a date string")
        return parse_iso_date(value)


class RemoteResponse(BaseModel):
    """Status code and raw body of a remote call."""

    status_code: int
    body: str = ""

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code <= 299


# ── Sync results ────────────────────────────────────────────────────────────


class SyncOperation(str, Enum):
    PULL = "pull"
    PUSH = "push"


class SyncStatus(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    PUSHED = "pushed"
    FAILED = "failed"


class SyncOutcome(BaseModel):
    """What a single pull or push did. Failures are reported, never raised."""

    operation: SyncOperation
    status: SyncStatus
    external_id: str | None = None
    contact_id: str | None = None
    error_kind: str | None = None
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return self.status != SyncStatus.FAILED


class TriggerResult(BaseModel):
    """Outcomes of the sync calls fired by one trigger batch, in input order."""

    outcomes: list[SyncOutcome] = Field(default_factory=list)
    skipped: int = 0

    @property
    def fired(self) -> int:
        return len(self.outcomes)
