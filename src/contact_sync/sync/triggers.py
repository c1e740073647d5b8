"""Contact lifecycle trigger rules deciding when a pull or push fires.

The rules key off the external id value:
- before insert: a contact without external id gets a random id in
  [0, PULL_THRESHOLD], stringified.
- after insert: contacts whose external id is an integer <= PULL_THRESHOLD
  are pulled from the remote service.
- after update: a contact whose external id crosses PULL_THRESHOLD upwards
  (old unset, unparseable or <= threshold; new integer > threshold) is
  pushed. Updates that stay above the threshold do not push again.

Batches are passed in explicitly and processed in input order, one awaited
sync call per qualifying record, without deduplication. Sync failures are
contained by the engine and only show up in the returned TriggerResult.

Exports:
    ContactSyncTriggers: Batch handlers wired to a ContactSyncEngine.
    assign_external_id / should_pull / should_push: Decision helpers.
"""

from __future__ import annotations

import random
import re

import structlog

from src.contact_sync.contacts.schemas import ContactChange, ContactCreate, ContactRead
from src.contact_sync.sync.engine import ContactSyncEngine
from src.contact_sync.sync.schemas import TriggerResult

logger = structlog.get_logger(__name__)

PULL_THRESHOLD = 100

_INTEGER_RE = re.compile(r"-?[0-9]+")


def parse_external_id(value: str | None) -> int | None:
    """Integer value of an external id, or None when unset or not an integer.

    Only an optional minus sign followed by ASCII digits counts; whitespace,
    ``+`` and ``_`` separators are rejected so the id pulled is the id stored.
    """
    if value is None or _INTEGER_RE.fullmatch(value) is None:
        return None
    return int(value)


def assign_external_id(contact: ContactCreate, rng: random.Random | None = None) -> ContactCreate:
    """Give a contact without external id a random one in [0, PULL_THRESHOLD]."""
    if contact.external_id:
        return contact
    draw = (rng or random).randint(0, PULL_THRESHOLD)
    return contact.model_copy(update={"external_id": str(draw)})


def should_pull(external_id: str | None) -> bool:
    """True when the external id is an integer at or below the threshold."""
    value = parse_external_id(external_id)
    return value is not None and value <= PULL_THRESHOLD


def should_push(old_external_id: str | None, new_external_id: str | None) -> bool:
    """True only when the external id crosses the threshold upwards."""
    new_value = parse_external_id(new_external_id)
    if new_value is None or new_value <= PULL_THRESHOLD:
        return False
    old_value = parse_external_id(old_external_id)
    return old_value is None or old_value <= PULL_THRESHOLD


class ContactSyncTriggers:
    """Lifecycle handlers invoked around contact inserts and updates.

    Args:
        engine: ContactSyncEngine that performs the pulls and pushes.
        rng: Random source for external id assignment (seeded in tests).
    """

    def __init__(self, engine: ContactSyncEngine, rng: random.Random | None = None) -> None:
        self._engine = engine
        self._rng = rng or random.Random()

    def before_insert(self, contacts: list[ContactCreate]) -> list[ContactCreate]:
        """Return the batch with missing external ids filled in."""
        return [assign_external_id(c, self._rng) for c in contacts]

    async def after_insert(self, contacts: list[ContactRead]) -> TriggerResult:
        """Pull every newly inserted contact whose external id qualifies."""
        result = TriggerResult()

        for contact in contacts:
            if not should_pull(contact.external_id):
                result.skipped += 1
                continue
            outcome = await self._engine.pull_user(contact.external_id)
            result.outcomes.append(outcome)

        logger.info(
            "triggers.after_insert_complete",
            contacts=len(contacts),
            pulls=result.fired,
            skipped=result.skipped,
        )
        return result

    async def after_update(self, changes: list[ContactChange]) -> TriggerResult:
        """Push every updated contact whose external id crossed the threshold."""
        result = TriggerResult()

        for change in changes:
            if not should_push(change.old.external_id, change.new.external_id):
                result.skipped += 1
                continue
            outcome = await self._engine.push_user(change.new.id)
            result.outcomes.append(outcome)

        logger.info(
            "triggers.after_update_complete",
            contacts=len(changes),
            pushes=result.fired,
            skipped=result.skipped,
        )
        return result
