from __future__ import annotations

from dataclasses import dataclass

from questboard.domain.models.EventModel import QuestTaken
from questboard.domain.models.QuestModel import QuestStatus
from questboard.domain.usecase._shared import (
    ensure_quest,
    parse_principal,
    parse_quest_id,
)
from questboard.domain.usecase.ports import (
    QuestNotOpen,
    QuestRegistry,
    SelfTake,
    TakerBusy,
)


@dataclass(slots=True)
class TakeQuest:
    registry: QuestRegistry

    async def execute(self, quest_id: int | str, *, taker: str) -> QuestTaken:
        taker = parse_principal(taker)
        quest = await ensure_quest(self.registry, parse_quest_id(quest_id))

        if await self.registry.takers_quest(taker) is not None:
            raise TakerBusy()
        if await self.registry.creator_of(quest.quest_id) == taker:
            raise SelfTake()
        if not quest.is_open:
            raise QuestNotOpen()

        quest.set_taken(taker)
        await self.registry.set_taker_index(taker, quest.quest_id)
        await self.registry.set_taker(quest.quest_id, taker)
        await self.registry.set_state(
            quest.quest_id, QuestStatus.TAKEN, at=quest.taken_at
        )
        return QuestTaken(quest_id=quest.quest_id, quest=quest.snapshot(), taker=taker)
