from __future__ import annotations

from dataclasses import dataclass

from questboard.domain.models.EventModel import QuestCompleted
from questboard.domain.models.QuestModel import QuestStatus
from questboard.domain.usecase._shared import ensure_quest, parse_principal
from questboard.domain.usecase.ports import (
    AlreadyCompleted,
    NoActiveQuest,
    QuestRegistry,
)


@dataclass(slots=True)
class CompleteQuest:
    registry: QuestRegistry

    async def execute(self, *, taker: str) -> QuestCompleted:
        taker = parse_principal(taker)

        quest_id = await self.registry.takers_quest(taker)
        if quest_id is None:
            raise NoActiveQuest()
        quest = await ensure_quest(self.registry, quest_id)
        if quest.status is not QuestStatus.TAKEN:
            raise AlreadyCompleted()

        quest.set_completed(taker)
        await self.registry.set_state(
            quest_id, QuestStatus.COMPLETED, at=quest.completed_at
        )
        await self.registry.set_completer(quest_id, taker)
        # the creator stays busy until verification
        await self.registry.set_taker_index(taker, None)
        return QuestCompleted(quest_id=quest_id, quest=quest.snapshot(), completer=taker)
