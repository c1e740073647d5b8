"""Error kinds raised inside the sync flows.

Every SyncError carries a short ``kind`` that is logged as ``error_kind``
when the orchestrator contains the failure at its boundary.
"""

from __future__ import annotations


class SyncError(Exception):
    """Base class for failures of a single pull or push."""

    kind = "sync"


class TransportError(SyncError):
    """The HTTP call itself failed (connect, timeout, protocol)."""

    kind = "transport"


class RemoteStatusError(SyncError):
    """The remote service answered with an unexpected status code."""

    kind = "remote_status"

    def __init__(self, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"Remote service returned {status_code}: {body}")


class ParseError(SyncError):
    """A remote body could not be decoded into contact fields."""

    kind = "parse"


class PreconditionError(SyncError):
    """A local identity did not resolve to exactly one contact."""

    kind = "precondition"


class AmbiguousContactError(PreconditionError):
    """More than one contact carries the same external id."""

    def __init__(self, external_id: str, count: int) -> None:
        self.external_id = external_id
        self.count = count
        super().__init__(f"{count} contacts share external_id {external_id!r}")


class ContactNotFoundError(LookupError):
    """A contact id passed to the lifecycle service does not exist."""

    def __init__(self, contact_id: str) -> None:
        self.contact_id = contact_id
        super().__init__(f"Contact {contact_id} not found")
