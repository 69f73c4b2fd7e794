from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from questboard.domain.models.QuestModel import Quest
from questboard.domain.usecase._shared import ensure_quest, parse_principal
from questboard.domain.usecase.ports import QuestRegistry


@dataclass(slots=True)
class GetQuest:
    registry: QuestRegistry

    async def execute(self, quest_id: int | str) -> Quest:
        return await ensure_quest(self.registry, quest_id)


@dataclass(slots=True)
class GetActiveQuests:
    """Look up the quest a principal is creating and the one it is taking."""

    registry: QuestRegistry

    async def execute(self, principal: str) -> tuple[Optional[int], Optional[int]]:
        principal = parse_principal(principal)
        creating = await self.registry.creators_quest(principal)
        taking = await self.registry.takers_quest(principal)
        return creating, taking
