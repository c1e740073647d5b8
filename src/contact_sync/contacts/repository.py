"""Contact repository -- async CRUD against the local contacts table.

Provides ContactRepository with the session_factory callable pattern. Handles
serialization between the Pydantic contact schemas and ContactModel.

Lookup by external id returns zero-or-one contact; a second match is an
AmbiguousContactError rather than a silent pick. Updates are merge-patches:
only fields explicitly set on the ContactPatch are written.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.contact_sync.contacts.models import ContactModel
from src.contact_sync.contacts.schemas import ContactCreate, ContactPatch, ContactRead
from src.contact_sync.sync.errors import AmbiguousContactError

logger = structlog.get_logger(__name__)


def _model_to_contact(model: ContactModel) -> ContactRead:
    """Convert ContactModel to ContactRead schema."""
    return ContactRead.model_validate(model)


class ContactRepository:
    """Async CRUD operations for local contacts.

    Each method opens its own session and commits its own transaction.

    Args:
        session_factory: Callable returning an AsyncSession usable as an
            async context manager (e.g. an ``async_sessionmaker``).
    """

    def __init__(self, session_factory: Callable[[], AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_contact(self, contact_id: str) -> ContactRead | None:
        """Get a contact by local id, or None."""
        async with self._session_factory() as session:
            model = await session.get(ContactModel, contact_id)
            if model is None:
                return None
            return _model_to_contact(model)

    async def list_by_external_id(self, external_id: str) -> list[ContactRead]:
        """List every contact carrying the given external id."""
        async with self._session_factory() as session:
            stmt = (
                select(ContactModel)
                .where(ContactModel.external_id == external_id)
                .order_by(ContactModel.created_at, ContactModel.id)
            )
            result = await session.execute(stmt)
            return [_model_to_contact(m) for m in result.scalars().all()]

    async def find_by_external_id(self, external_id: str) -> ContactRead | None:
        """Find the single contact mapped to an external id.

        Returns:
            ContactRead if exactly one contact matches, None if none does.

        Raises:
            AmbiguousContactError: If more than one contact matches.
        """
        matches = await self.list_by_external_id(external_id)
        if len(matches) > 1:
            logger.warning(
                "contacts.external_id_ambiguous",
                external_id=external_id,
                count=len(matches),
            )
            raise AmbiguousContactError(external_id, len(matches))
        return matches[0] if matches else None

    async def insert(self, data: ContactCreate) -> str:
        """Insert a new contact and return its assigned local id."""
        async with self._session_factory() as session:
            model = ContactModel(**data.model_dump())
            session.add(model)
            await session.commit()
            logger.info(
                "contacts.inserted",
                contact_id=model.id,
                external_id=model.external_id,
            )
            return model.id

    async def update(self, contact_id: str, patch: ContactPatch) -> ContactRead | None:
        """Apply a merge-patch to an existing contact.

        Only fields explicitly set on ``patch`` are written; everything else
        keeps its stored value.

        Returns:
            Updated ContactRead, or None if the contact does not exist.
        """
        async with self._session_factory() as session:
            model = await session.get(ContactModel, contact_id)
            if model is None:
                return None

            changes = patch.changes()
            for key, value in changes.items():
                setattr(model, key, value)

            model.updated_at = datetime.now(timezone.utc)
            await session.commit()
            await session.refresh(model)
            logger.info(
                "contacts.updated",
                contact_id=contact_id,
                fields=sorted(changes),
            )
            return _model_to_contact(model)
