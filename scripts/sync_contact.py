#!/usr/bin/env python3
"""CLI script to run a single contact pull or push by hand.

Usage:
    python scripts/sync_contact.py pull 42
    python scripts/sync_contact.py push 3f1c2a9e-7d4b-4c1e-9a55-2b0f6c8d1e77

Connects to the database using DATABASE_URL from environment or .env file and
to the remote users service at REMOTE_API_BASE_URL. Prints the sync outcome;
exits non-zero when the pull/push failed.
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

# Ensure project root is on sys.path so we can import src.contact_sync
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from dotenv import load_dotenv  # noqa: E402

# Load .env from project root
load_dotenv(os.path.join(os.path.dirname(__file__), "..", ".env"))


async def run(operation: str, identifier: str) -> bool:
    """Run one pull or push and print its outcome. Returns True on success."""
    from src.contact_sync.contacts.repository import ContactRepository
    from src.contact_sync.core.database import close_db, init_db, session_factory
    from src.contact_sync.core.log_config import configure_structlog
    from src.contact_sync.sync.client import RemoteUserClient
    from src.contact_sync.sync.engine import ContactSyncEngine

    configure_structlog()
    await init_db()

    engine = ContactSyncEngine(
        client=RemoteUserClient(),
        repository=ContactRepository(session_factory()),
    )
    try:
        if operation == "pull":
            outcome = await engine.pull_user(identifier)
        else:
            outcome = await engine.push_user(identifier)
    finally:
        await close_db()

    print(f"{outcome.operation.value}: {outcome.status.value}")
    print(f"  External ID: {outcome.external_id or '-'}")
    print(f"  Contact ID:  {outcome.contact_id or '-'}")
    if not outcome.ok:
        print(f"  Error:       {outcome.error_kind}: {outcome.detail}")
    return outcome.ok


def main() -> None:
    parser = argparse.ArgumentParser(description="Pull or push a single contact")
    parser.add_argument("operation", choices=("pull", "push"), help="Sync direction")
    parser.add_argument("identifier", help="External id for pull, local contact id for push")
    args = parser.parse_args()

    ok = asyncio.run(run(args.operation, args.identifier))
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
