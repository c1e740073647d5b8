"""Contact sync engine -- pull remote users into contacts, push contacts out.

Composes RemoteUserClient, the field mappers and ContactRepository into the
two end-to-end flows:

- pull_user(external_id): fetch the remote user, then upsert the contact
  (find by external id, update when found, insert otherwise).
- push_user(contact_id): send the contact's payload, then stamp
  last_synced_at on a 2xx answer.

Both are fire-and-forget from the caller's point of view: every failure is
logged and returned as a failed SyncOutcome, nothing is raised.

The pull upsert is a read-then-write. Pulls for the same external id are
serialized by a per-key asyncio.Lock inside this engine; two processes
pulling the same id can still both insert.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import structlog

from src.contact_sync.contacts.repository import ContactRepository
from src.contact_sync.contacts.schemas import ContactCreate, ContactPatch
from src.contact_sync.sync.client import RemoteUserClient
from src.contact_sync.sync.errors import (
    ParseError,
    PreconditionError,
    RemoteStatusError,
    SyncError,
)
from src.contact_sync.sync.field_mapping import build_push_payload, parse_remote_user
from src.contact_sync.sync.schemas import SyncOperation, SyncOutcome, SyncStatus

logger = structlog.get_logger(__name__)

# Longest slice of a remote body copied into a log entry
_LOG_BODY_LIMIT = 500


class ContactSyncEngine:
    """Runs single-record pulls and pushes between the remote service and
    the local contact store.

    Args:
        client: RemoteUserClient for the two remote calls.
        repository: ContactRepository for local reads and writes.
    """

    def __init__(self, client: RemoteUserClient, repository: ContactRepository) -> None:
        self._client = client
        self._repo = repository
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    async def pull_user(self, external_id: str) -> SyncOutcome:
        """Fetch remote user ``external_id`` and upsert the matching contact.

        Steps:
        1. GET the remote user; any status other than 200 aborts.
        2. Parse the body; a parse failure or missing id aborts.
        3. Look up the contact by the parsed external id: update it when
           found, insert a new contact otherwise.

        Aborts write nothing locally. Errors are logged, never raised.

        Returns:
            SyncOutcome with status CREATED, UPDATED or FAILED.
        """
        log = logger.bind(operation=SyncOperation.PULL.value, external_id=external_id)
        try:
            async with self._key_lock(external_id):
                return await self._pull(external_id, log)
        except Exception as exc:
            return self._contain(log, SyncOperation.PULL, exc, external_id=external_id)

    async def push_user(self, contact_id: str) -> SyncOutcome:
        """Send contact ``contact_id`` to the remote service.

        Steps:
        1. Load the contact; an unknown id is a precondition failure.
        2. Build the push payload and POST it.
        3. On 2xx, set last_synced_at and nothing else on the contact.

        Errors are logged, never raised.

        Returns:
            SyncOutcome with status PUSHED or FAILED.
        """
        log = logger.bind(operation=SyncOperation.PUSH.value, contact_id=contact_id)
        try:
            return await self._push(contact_id, log)
        except Exception as exc:
            return self._contain(log, SyncOperation.PUSH, exc, contact_id=contact_id)

    # ── Flows ──────────────────────────────────────────────────────────────

    async def _pull(self, external_id: str, log: structlog.stdlib.BoundLogger) -> SyncOutcome:
        response = await self._client.fetch_user(external_id)
        if response.status_code != 200:
            raise RemoteStatusError(response.status_code, response.body)

        patch = parse_remote_user(response.body)
        if patch.external_id is None:
            raise ParseError("Remote user body has no id")

        existing = await self._repo.find_by_external_id(patch.external_id)
        if existing is not None:
            updated = await self._repo.update(existing.id, patch)
            if updated is None:
                raise PreconditionError(f"Contact {existing.id} disappeared during pull")
            log.info("sync.pull_updated", contact_id=existing.id)
            return SyncOutcome(
                operation=SyncOperation.PULL,
                status=SyncStatus.UPDATED,
                external_id=patch.external_id,
                contact_id=existing.id,
            )

        contact_id = await self._repo.insert(ContactCreate(**patch.changes()))
        log.info("sync.pull_created", contact_id=contact_id)
        return SyncOutcome(
            operation=SyncOperation.PULL,
            status=SyncStatus.CREATED,
            external_id=patch.external_id,
            contact_id=contact_id,
        )

    async def _push(self, contact_id: str, log: structlog.stdlib.BoundLogger) -> SyncOutcome:
        contact = await self._repo.get_contact(contact_id)
        if contact is None:
            raise PreconditionError(f"Contact {contact_id} not found")

        payload = build_push_payload(contact)
        response = await self._client.create_or_update_user(payload)
        if not response.is_success:
            raise RemoteStatusError(response.status_code, response.body)

        stamped = await self._repo.update(
            contact.id,
            ContactPatch(last_synced_at=datetime.now(timezone.utc)),
        )
        if stamped is None:
            raise PreconditionError(f"Contact {contact.id} disappeared during push")
        log.info("sync.push_succeeded", status_code=response.status_code)
        return SyncOutcome(
            operation=SyncOperation.PUSH,
            status=SyncStatus.PUSHED,
            external_id=contact.external_id,
            contact_id=contact.id,
        )

    # ── Helpers ────────────────────────────────────────────────────────────

    def _contain(
        self,
        log: structlog.stdlib.BoundLogger,
        operation: SyncOperation,
        exc: Exception,
        external_id: str | None = None,
        contact_id: str | None = None,
    ) -> SyncOutcome:
        """Log a failed pull/push and turn it into a FAILED outcome."""
        event = f"sync.{operation.value}_failed"
        if isinstance(exc, RemoteStatusError):
            error_kind = exc.kind
            log.warning(
                event,
                error_kind=error_kind,
                status_code=exc.status_code,
                body=exc.body[:_LOG_BODY_LIMIT],
            )
        elif isinstance(exc, PreconditionError):
            error_kind = exc.kind
            log.error(event, error_kind=error_kind, detail=str(exc))
        elif isinstance(exc, SyncError):
            error_kind = exc.kind
            log.warning(event, error_kind=error_kind, detail=str(exc))
        else:
            error_kind = "unexpected"
            log.error(event, error_kind=error_kind, detail=str(exc), exc_info=True)

        return SyncOutcome(
            operation=operation,
            status=SyncStatus.FAILED,
            external_id=external_id,
            contact_id=contact_id,
            error_kind=error_kind,
            detail=str(exc),
        )

    @asynccontextmanager
    async def _key_lock(self, key: str) -> AsyncIterator[None]:
        """Serialize callers sharing ``key``; the lock is dropped once unused."""
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[key] -= 1
            if self._lock_users[key] == 0:
                del self._lock_users[key]
                del self._locks[key]
