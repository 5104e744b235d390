"""Shared test fixtures."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from stayops.backend import Backend
from stayops.events import EventBus
from tests.fixtures.fake_supabase import USER_ID, FakeClient, profile_row, property_row


@pytest.fixture
def now() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


@pytest.fixture
def client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def backend(client: FakeClient) -> Backend:
    return Backend(client)


@pytest.fixture
def event_bus() -> EventBus:
    """Create a fresh event bus for each test."""
    return EventBus()


@pytest.fixture
def prop(client: FakeClient) -> dict:
    row = property_row()
    client.seed("properties", row)
    return row


@pytest.fixture
def as_role(client: FakeClient):
    """Seed the signed-in user's profile with the given role."""
    def _seed(role: str | None, **overrides) -> dict:
        row = profile_row(role=role, **overrides)
        client.tables["profiles"] = [r for r in client.tables.get("profiles", []) if r["id"] != USER_ID]
        client.seed("profiles", row)
        return row
    return _seed
