from __future__ import annotations

from dataclasses import dataclass

from questboard.domain.models.EventModel import QuestVerified
from questboard.domain.models.QuestModel import QuestStatus
from questboard.domain.usecase._shared import ensure_quest, parse_principal
from questboard.domain.usecase.ports import (
    EscrowVault,
    NoActiveQuest,
    NoCompleter,
    QuestNotCompleted,
    QuestRegistry,
)


@dataclass(slots=True)
class VerifyQuest:
    """Release the escrowed reward to the completer and close the quest.

    The payout is the last external effect; nothing in the registry moves
    unless it succeeds.
    """

    registry: QuestRegistry
    vault: EscrowVault

    async def execute(self, *, creator: str) -> QuestVerified:
        creator = parse_principal(creator)

        quest_id = await self.registry.creators_quest(creator)
        if quest_id is None:
            raise NoActiveQuest()
        quest = await ensure_quest(self.registry, quest_id)
        if quest.status is not QuestStatus.COMPLETED:
            raise QuestNotCompleted()
        if quest.completer is None:
            raise NoCompleter()

        await self.vault.release(quest_id, quest.completer)

        quest.set_verified()
        await self.registry.set_state(
            quest_id, QuestStatus.VERIFIED, at=quest.verified_at
        )
        await self.registry.set_creator_index(creator, None)
        return QuestVerified(
            quest_id=quest_id,
            quest=quest.snapshot(),
            verifier=creator,
            completer=quest.completer,
        )
