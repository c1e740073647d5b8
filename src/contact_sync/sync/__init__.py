"""Remote user sync -- field mapping, HTTP client, engine and trigger rules.

Provides:
- RemoteUserClient: GET /users/{id} and POST /users/add against the remote service
- parse_remote_user / build_push_payload: Translation between remote and local shapes
- ContactSyncEngine: pull_user / push_user flows with contained failures
- ContactSyncTriggers: Lifecycle rules deciding when a pull or push fires

Exports resolve lazily so ``src.contact_sync.sync.errors`` can be imported by
the contacts package without loading the engine.
"""

from __future__ import annotations


def __getattr__(name: str):  # noqa: N807
    if name == "RemoteUserClient":
        from src.contact_sync.sync.client import RemoteUserClient
        return RemoteUserClient
    if name == "ContactSyncEngine":
        from src.contact_sync.sync.engine import ContactSyncEngine
        return ContactSyncEngine
    if name == "ContactSyncTriggers":
        from src.contact_sync.sync.triggers import ContactSyncTriggers
        return ContactSyncTriggers
    if name in ("build_push_payload", "parse_remote_user"):
        from src.contact_sync.sync import field_mapping
        return getattr(field_mapping, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "ContactSyncEngine",
    "ContactSyncTriggers",
    "RemoteUserClient",
    "build_push_payload",
    "parse_remote_user",
]
