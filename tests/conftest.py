"""Shared fixtures for contact sync tests.

Provides:
- In-memory SQLite database (aiosqlite) with the contacts table created
- ContactRepository bound to that database
- FakeRemote: httpx.MockTransport handler standing in for the users service
- RemoteUserClient, ContactSyncEngine, ContactSyncTriggers and ContactService
  wired to the fakes above
"""

from __future__ import annotations

import json
import random
from collections.abc import AsyncGenerator
from typing import Any

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from src.contact_sync.contacts.repository import ContactRepository
from src.contact_sync.contacts.service import ContactService
from src.contact_sync.core.database import init_db, session_factory
from src.contact_sync.sync.client import RemoteUserClient
from src.contact_sync.sync.engine import ContactSyncEngine
from src.contact_sync.sync.triggers import ContactSyncTriggers

REMOTE_BASE_URL = "https://remote.test"


class FakeRemote:
    """In-process stand-in for the remote users service.

    Serves ``GET /users/{id}`` from ``users`` and answers ``POST /users/add``
    with ``post_status``. Every request is recorded in ``requests``.
    """

    def __init__(self) -> None:
        self.users: dict[str, dict[str, Any]] = {}
        self.fetch_status: int | None = None
        self.fetch_body: str | None = None
        self.post_status = 201
        self.fail_with: Exception | None = None
        self.requests: list[httpx.Request] = []

    def add_user(self, user: dict[str, Any]) -> None:
        self.users[str(user["id"])] = user

    @property
    def gets(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "GET"]

    @property
    def posts(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "POST"]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            raise self.fail_with

        path = request.url.path
        if request.method == "POST" and path == "/users/add":
            sent = json.loads(request.content)
            return httpx.Response(self.post_status, json={"id": 209, **sent})

        if request.method == "GET" and path.startswith("/users/"):
            if self.fetch_status is not None:
                return httpx.Response(self.fetch_status, text=self.fetch_body or "server error")
            user_id = path.rsplit("/", 1)[1]
            if self.fetch_body is not None:
                return httpx.Response(200, text=self.fetch_body)
            user = self.users.get(user_id)
            if user is None:
                return httpx.Response(404, json={"message": f"User with id '{user_id}' not found"})
            return httpx.Response(200, json=user)

        return httpx.Response(404, json={"message": "not found"})


@pytest_asyncio.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine with all tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def repository(db_engine) -> ContactRepository:
    return ContactRepository(session_factory(db_engine))


@pytest.fixture
def fake_remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture
def remote_client(fake_remote) -> RemoteUserClient:
    return RemoteUserClient(
        base_url=REMOTE_BASE_URL,
        timeout=5.0,
        transport=httpx.MockTransport(fake_remote.handler),
    )


@pytest.fixture
def sync_engine(remote_client, repository) -> ContactSyncEngine:
    return ContactSyncEngine(client=remote_client, repository=repository)


@pytest.fixture
def triggers(sync_engine) -> ContactSyncTriggers:
    return ContactSyncTriggers(sync_engine, rng=random.Random(7))


@pytest.fixture
def contact_service(repository, triggers) -> ContactService:
    return ContactService(repository=repository, triggers=triggers)
