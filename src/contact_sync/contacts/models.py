"""Contact persistence model -- the local side of the remote user sync.

ContactModel stores contact details, the structured mailing address, the
external identifier joining the row to a remote user, and the timestamp of
the last successful push.

external_id is indexed but not unique at the database level: uniqueness of
non-null values is maintained by the pull reconciliation (find-then-branch)
and checked on lookup, where more than one match is reported as an error.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime

from sqlalchemy import Date, DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from src.contact_sync.core.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class ContactModel(Base):
    """A local contact record, optionally linked to a remote user."""

    __tablename__ = "contacts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    external_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)

    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    first_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    birth_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    mailing_street: Mapped[str | None] = mapped_column(String(300), nullable=True)
    mailing_city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    mailing_state: Mapped[str | None] = mapped_column(String(100), nullable=True)
    mailing_postal_code: Mapped[str | None] = mapped_column(String(32), nullable=True)
    mailing_country: Mapped[str | None] = mapped_column(String(100), nullable=True)

    last_synced_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        onupdate=func.now(),
        nullable=True,
    )
