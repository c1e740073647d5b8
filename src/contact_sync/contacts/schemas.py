"""Pydantic schemas for local contacts.

Defines:
- ContactFields: Shared contact-detail fields (all optional)
- ContactCreate: Insert payload
- ContactPatch: Merge-patch payload -- only explicitly set fields are written
- ContactRead: Persisted contact including identity and timestamps
- MailingAddress: Read-side grouping of the structured mailing address
- ContactChange: Old/new pair describing one persisted update
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class MailingAddress(BaseModel):
    """Structured mailing address of a contact."""

    street: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None


class ContactFields(BaseModel):
    """Contact-detail fields shared by create and patch payloads."""

    external_id: str | None = None
    email: str | None = None
    phone: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    birth_date: date | None = None
    mailing_street: str | None = None
    mailing_city: str | None = None
    mailing_state: str | None = None
    mailing_postal_code: str | None = None
    mailing_country: str | None = None


class ContactCreate(ContactFields):
    """Schema for inserting a new contact."""


class ContactPatch(ContactFields):
    """Merge-patch for an existing contact.

    Only fields explicitly set (including explicit ``None``) are written;
    omitted fields keep their stored value.
    """

    last_synced_at: datetime | None = None

    def changes(self) -> dict[str, Any]:
        """Return the explicitly set fields as a column/value dict."""
        return self.model_dump(exclude_unset=True)


class ContactRead(ContactFields):
    """Schema for reading a contact (includes all persisted fields)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    last_synced_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def mailing_address(self) -> MailingAddress:
        return MailingAddress(
            street=self.mailing_street,
            city=self.mailing_city,
            state=self.mailing_state,
            postal_code=self.mailing_postal_code,
            country=self.mailing_country,
        )


class ContactChange(BaseModel):
    """A persisted update, as seen by the after-update trigger."""

    old: ContactRead
    new: ContactRead
