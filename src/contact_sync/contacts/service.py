"""Contact lifecycle service -- local writes with the sync triggers wired in.

Application code creates and edits contacts through ContactService so the
trigger rules see every insert and update:

- create_contacts: before_insert -> insert each -> after_insert (batch)
- update_contact: read old -> merge-patch -> after_update with (old, new)

Writes made by ContactSyncEngine go to the repository directly and do not
pass through here, so a pull never re-fires the insert trigger.
"""

from __future__ import annotations

import structlog

from src.contact_sync.contacts.repository import ContactRepository
from src.contact_sync.contacts.schemas import (
    ContactChange,
    ContactCreate,
    ContactPatch,
    ContactRead,
)
from src.contact_sync.sync.errors import ContactNotFoundError
from src.contact_sync.sync.triggers import ContactSyncTriggers

logger = structlog.get_logger(__name__)


class ContactService:
    """Creates and updates contacts, running the lifecycle triggers.

    Args:
        repository: ContactRepository for local persistence.
        triggers: ContactSyncTriggers fired around each write.
    """

    def __init__(self, repository: ContactRepository, triggers: ContactSyncTriggers) -> None:
        self._repo = repository
        self._triggers = triggers

    async def create_contacts(self, contacts: list[ContactCreate]) -> list[ContactRead]:
        """Insert a batch of contacts and fire the after-insert trigger.

        Returns:
            The contacts as persisted before any pull ran, in input order.
        """
        prepared = self._triggers.before_insert(contacts)

        created: list[ContactRead] = []
        for data in prepared:
            contact_id = await self._repo.insert(data)
            contact = await self._repo.get_contact(contact_id)
            if contact is not None:
                created.append(contact)

        await self._triggers.after_insert(created)
        return created

    async def create_contact(self, contact: ContactCreate) -> ContactRead:
        """Insert one contact; see create_contacts."""
        created = await self.create_contacts([contact])
        return created[0]

    async def update_contact(self, contact_id: str, patch: ContactPatch) -> ContactRead:
        """Apply a merge-patch and fire the after-update trigger.

        Returns:
            The contact as persisted by this update (before any push stamp).

        Raises:
            ContactNotFoundError: If ``contact_id`` does not exist.
        """
        old = await self._repo.get_contact(contact_id)
        if old is None:
            raise ContactNotFoundError(contact_id)

        new = await self._repo.update(contact_id, patch)
        if new is None:
            raise ContactNotFoundError(contact_id)

        await self._triggers.after_update([ContactChange(old=old, new=new)])
        return new
