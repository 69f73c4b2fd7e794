from __future__ import annotations

from dataclasses import dataclass

from questboard.domain.models.EventModel import QuestCreated
from questboard.domain.usecase._shared import ensure_quest, parse_principal
from questboard.domain.usecase.ports import (
    CreatorBusy,
    EmptyDescription,
    EscrowVault,
    QuestRegistry,
    RewardMismatch,
    ZeroReward,
)


@dataclass(slots=True)
class CreateQuest:
    registry: QuestRegistry
    vault: EscrowVault

    async def execute(
        self,
        *,
        creator: str,
        description: str,
        reward: int,
        supplied_value: int,
    ) -> QuestCreated:
        creator = parse_principal(creator)

        if supplied_value != reward:
            raise RewardMismatch()
        if reward <= 0:
            raise ZeroReward()
        if not description:
            raise EmptyDescription()
        if await self.registry.creators_quest(creator) is not None:
            raise CreatorBusy()

        quest_id = await self.registry.insert(creator, description, reward)
        await self.vault.hold(quest_id, reward)

        quest = await ensure_quest(self.registry, quest_id)
        quest.validate_quest()
        return QuestCreated(quest_id=quest_id, quest=quest.snapshot(), creator=creator)
