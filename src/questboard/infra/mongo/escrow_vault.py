from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict

from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase

from questboard.domain.usecase.ports import TransferFailed, ValueTransfer


class MongoEscrowVault:
    """Escrow holdings, one document per quest in the ``escrow`` collection.

    ``hold`` and ``release`` are buffered like the registry writes and applied
    when the transaction commits, holds first. A release claims the holding
    with a conditional update before paying out and puts it back if the
    payout fails, so a quest is paid at most once across processes.
    """

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        transfer: ValueTransfer,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self.col: AsyncIOMotorCollection = db["escrow"]
        self._transfer = transfer
        self._active = False
        self._pending: Dict[int, Dict[str, Any]] = {}
        self._releases: Dict[int, tuple[str, int]] = {}
        self._log = logger or logging.getLogger(__name__)

    async def ensure_indexes(self) -> None:
        await self.col.create_index("quest_id", unique=True, name="uq_escrow_quest")

    async def hold(self, quest_id: int, amount: int) -> None:
        if amount <= 0:
            raise ValueError(f"Escrow amount must be positive, got {amount}")
        self._pending[quest_id] = {
            "quest_id": quest_id,
            "amount": amount,
            "held_at": datetime.now(timezone.utc).replace(tzinfo=None),
            "released_to": None,
        }
        if not self._active:
            await self._flush()

    async def release(self, quest_id: int, recipient: str) -> int:
        amount = await self.balance(quest_id)
        if amount <= 0:
            raise TransferFailed(f"No reward held for quest {quest_id}")

        self._releases[quest_id] = (recipient, amount)
        if not self._active:
            await self._flush()
        return amount

    async def balance(self, quest_id: int) -> int:
        if quest_id in self._releases:
            return 0
        if quest_id in self._pending:
            return int(self._pending[quest_id]["amount"])
        doc = await self.col.find_one({"quest_id": quest_id})
        return int(doc["amount"]) if doc else 0

    async def total(self) -> int:
        held = sum(int(doc["amount"]) for doc in self._pending.values())
        async for doc in self.col.find({"amount": {"$gt": 0}}):
            if doc["quest_id"] not in self._releases:
                held += int(doc["amount"])
        return held

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        self._active = True
        try:
            yield
        except BaseException:
            self._pending = {}
            self._releases = {}
            raise
        finally:
            self._active = False
        await self._flush()

    async def _flush(self) -> None:
        pending, self._pending = self._pending, {}
        releases, self._releases = self._releases, {}
        for doc in pending.values():
            await self.col.insert_one(dict(doc))
        for quest_id, (recipient, amount) in releases.items():
            await self._pay(quest_id, recipient, amount)

    async def _pay(self, quest_id: int, recipient: str, amount: int) -> None:
        claimed = await self.col.update_one(
            {"quest_id": quest_id, "amount": amount},
            {"$set": {"amount": 0, "released_to": recipient}},
        )
        if claimed.modified_count == 0:
            raise TransferFailed(f"Reward for quest {quest_id} is already released")

        try:
            await self._transfer.transfer(recipient, amount)
        except Exception as exc:
            await self.col.update_one(
                {"quest_id": quest_id, "amount": 0, "released_to": recipient},
                {"$set": {"amount": amount, "released_to": None}},
            )
            raise TransferFailed(f"Reward transfer failed: {exc}") from exc

        self._log.info(
            "Escrow released",
            extra={"quest_id": quest_id, "recipient": recipient, "amount": amount},
        )
