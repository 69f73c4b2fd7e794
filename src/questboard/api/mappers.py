from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from questboard.api.schemas import Quest as APIQuest
from questboard.api.schemas import QuestStatus as APIQuestStatus
from questboard.domain.models.QuestModel import Quest as DQuest


def _utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Return a timezone-aware UTC datetime or None."""
    if dt is None:
        return None
    if dt.tzinfo is None or dt.tzinfo.utcoffset(dt) is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def quest_to_api(quest: DQuest) -> APIQuest:
    return APIQuest(
        quest_id=quest.quest_id,
        creator=quest.creator,
        description=quest.description,
        reward=quest.reward,
        status=APIQuestStatus(quest.status.value),
        taker=quest.taker,
        completer=quest.completer,
        created_at=_utc(quest.created_at),
        taken_at=_utc(quest.taken_at),
        completed_at=_utc(quest.completed_at),
        verified_at=_utc(quest.verified_at),
    )
