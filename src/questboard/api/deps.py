"""Shared dependency providers for FastAPI routers."""

from __future__ import annotations

from typing import Optional

from fastapi import Header, HTTPException, status

from questboard.domain.usecase.quests import QuestLifecycle
from questboard.infra.memory import (
    InMemoryEscrowVault,
    InMemoryEventLog,
    InMemoryLedger,
    InMemoryQuestRegistry,
)
from questboard.infra.settings import load_settings

settings = load_settings()

ledger = InMemoryLedger()
events = InMemoryEventLog()

if settings.storage == "mongo":
    from questboard.infra.db import get_db
    from questboard.infra.mongo.escrow_vault import MongoEscrowVault
    from questboard.infra.mongo.quests_registry import MongoQuestRegistry

    _db = get_db(settings)
    registry = MongoQuestRegistry(_db)
    vault = MongoEscrowVault(_db, ledger)
else:
    registry = InMemoryQuestRegistry()
    vault = InMemoryEscrowVault(ledger)

lifecycle = QuestLifecycle(registry=registry, vault=vault, publisher=events)


async def require_principal(
    x_principal: Optional[str] = Header(default=None, alias="X-Principal"),
) -> str:
    """Caller identity as asserted by the host; authentication happens upstream."""
    if x_principal is None or not x_principal.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing caller principal",
        )
    return x_principal.strip()


async def ensure_storage() -> None:
    """Check Mongo is reachable and create indexes when running against it."""
    if settings.storage != "mongo":
        return
    from questboard.infra.db import ping

    if not await ping():
        raise RuntimeError(f"MongoDB unreachable at {settings.mongodb_uri}")
    await registry.ensure_indexes()  # type: ignore[union-attr]
    await vault.ensure_indexes()  # type: ignore[union-attr]
