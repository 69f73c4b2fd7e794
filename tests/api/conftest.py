from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient

from questboard.api.main import app
from questboard.api.routers import principals as principals_router
from questboard.api.routers import quests as quests_router
from questboard.domain.usecase.quests import QuestLifecycle
from questboard.infra.memory import InMemoryEscrowVault


@pytest.fixture()
def wired(monkeypatch, registry, ledger, vault, events) -> dict[str, Any]:
    """Point both routers at fresh in-memory state for each test."""
    lifecycle = QuestLifecycle(registry=registry, vault=vault, publisher=events)
    monkeypatch.setattr(quests_router, "lifecycle", lifecycle)
    monkeypatch.setattr(principals_router, "lifecycle", lifecycle)
    monkeypatch.setattr(principals_router, "ledger", ledger)
    return {"lifecycle": lifecycle, "ledger": ledger, "events": events}


@pytest.fixture()
def client(wired) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def failing_client(monkeypatch, registry, events, failing_transfer) -> TestClient:
    lifecycle = QuestLifecycle(
        registry=registry,
        vault=InMemoryEscrowVault(failing_transfer),
        publisher=events,
    )
    monkeypatch.setattr(quests_router, "lifecycle", lifecycle)
    return TestClient(app)
