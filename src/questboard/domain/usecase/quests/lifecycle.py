from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

from questboard.domain.models.EventModel import QuestEvent
from questboard.domain.models.QuestModel import Quest
from questboard.domain.usecase.ports import (
    EscrowVault,
    EventPublisher,
    QuestError,
    QuestRegistry,
    TransferFailed,
)
from questboard.domain.usecase.quests.complete_quest import CompleteQuest
from questboard.domain.usecase.quests.create_quest import CreateQuest
from questboard.domain.usecase.quests.get_quest import GetActiveQuests, GetQuest
from questboard.domain.usecase.quests.take_quest import TakeQuest
from questboard.domain.usecase.quests.verify_quest import VerifyQuest

E = TypeVar("E", bound=QuestEvent)
T = TypeVar("T")


class QuestLifecycle:
    """Serializes quest commands against one registry and one vault.

    Every command runs under a single lock inside the vault and registry
    transactions, so a failed command leaves no trace and racing commands
    resolve in commit order. The registry commits first and the vault last,
    which makes the payout the final effect; if the vault commit fails the
    registry writes are compensated. The event for a command is published
    after its mutations are committed.
    """

    def __init__(
        self,
        *,
        registry: QuestRegistry,
        vault: EscrowVault,
        publisher: EventPublisher,
        logger: logging.Logger | None = None,
    ) -> None:
        self._registry = registry
        self._vault = vault
        self._publisher = publisher
        self._lock = asyncio.Lock()
        self._log = logger or logging.getLogger(__name__)

    # ------- Commands -------

    async def create_quest(
        self,
        creator: str,
        *,
        description: str,
        reward: int,
        supplied_value: int,
    ) -> Quest:
        usecase = CreateQuest(registry=self._registry, vault=self._vault)
        event = await self._run(
            "create",
            creator,
            lambda: usecase.execute(
                creator=creator,
                description=description,
                reward=reward,
                supplied_value=supplied_value,
            ),
        )
        return event.quest

    async def take_quest(self, taker: str, quest_id: int | str) -> Quest:
        usecase = TakeQuest(registry=self._registry)
        event = await self._run(
            "take", taker, lambda: usecase.execute(quest_id, taker=taker)
        )
        return event.quest

    async def complete_quest(self, taker: str) -> Quest:
        usecase = CompleteQuest(registry=self._registry)
        event = await self._run("complete", taker, lambda: usecase.execute(taker=taker))
        return event.quest

    async def verify_complete(self, creator: str) -> Quest:
        usecase = VerifyQuest(registry=self._registry, vault=self._vault)
        event = await self._run(
            "verify", creator, lambda: usecase.execute(creator=creator)
        )
        return event.quest

    # ------- Queries -------

    async def get_quest(self, quest_id: int | str) -> Quest:
        usecase = GetQuest(registry=self._registry)
        return await self._read(lambda: usecase.execute(quest_id))

    async def active_quests(self, principal: str) -> tuple[Optional[int], Optional[int]]:
        usecase = GetActiveQuests(registry=self._registry)
        return await self._read(lambda: usecase.execute(principal))

    async def escrow_balance(self, quest_id: int) -> int:
        return await self._read(lambda: self._vault.balance(quest_id))

    # ---------- Helpers ----------

    async def _run(
        self, operation: str, principal: str, action: Callable[[], Awaitable[E]]
    ) -> E:
        async with self._lock:
            try:
                event = await self._commit(action)
            except TransferFailed as exc:
                self._log.error(
                    "Quest %s aborted: reward transfer failed",
                    operation,
                    exc_info=exc,
                    extra={"principal": principal, "code": exc.code},
                )
                raise
            except QuestError as exc:
                self._log.warning(
                    "Quest %s rejected: %s",
                    operation,
                    exc.code,
                    extra={"principal": principal, "code": exc.code},
                )
                raise

            self._log.info(
                "Quest %s committed",
                operation,
                extra={"quest_id": event.quest_id, "principal": principal},
            )
            await self._publisher.publish(event)
            return event

    async def _commit(self, action: Callable[[], Awaitable[E]]) -> E:
        registry_committed = False
        try:
            async with self._vault.transaction():
                async with self._registry.transaction():
                    event = await action()
                registry_committed = True
        except Exception:
            if registry_committed:
                await self._registry.compensate()
            raise
        return event

    async def _read(self, action: Callable[[], Awaitable[T]]) -> T:
        async with self._lock:
            return await action()
