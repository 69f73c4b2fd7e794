from __future__ import annotations

import os
import tempfile

# Settings are read when the API package is imported; pin the in-memory
# backend and keep log files out of the working tree.
os.environ.setdefault("QUESTBOARD_STORAGE", "memory")
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "questboard-test-logs"))

import pytest

from questboard.domain.usecase.quests import QuestLifecycle
from questboard.infra.memory import (
    InMemoryEscrowVault,
    InMemoryEventLog,
    InMemoryLedger,
    InMemoryQuestRegistry,
)


class FailingTransfer:
    """Value transfer that refuses every payout until told otherwise."""

    def __init__(self) -> None:
        self.fail = True
        self.calls: list[tuple[str, int]] = []
        self.delivered: dict[str, int] = {}

    async def transfer(self, recipient: str, amount: int) -> None:
        self.calls.append((recipient, amount))
        if self.fail:
            raise ConnectionError("payout rail unavailable")
        self.delivered[recipient] = self.delivered.get(recipient, 0) + amount


@pytest.fixture()
def registry() -> InMemoryQuestRegistry:
    return InMemoryQuestRegistry()


@pytest.fixture()
def ledger() -> InMemoryLedger:
    return InMemoryLedger()


@pytest.fixture()
def vault(ledger: InMemoryLedger) -> InMemoryEscrowVault:
    return InMemoryEscrowVault(ledger)


@pytest.fixture()
def events() -> InMemoryEventLog:
    return InMemoryEventLog()


@pytest.fixture()
def lifecycle(
    registry: InMemoryQuestRegistry,
    vault: InMemoryEscrowVault,
    events: InMemoryEventLog,
) -> QuestLifecycle:
    return QuestLifecycle(registry=registry, vault=vault, publisher=events)


@pytest.fixture()
def failing_transfer() -> FailingTransfer:
    return FailingTransfer()
