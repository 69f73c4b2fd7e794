from __future__ import annotations

from questboard.domain.models.QuestModel import Quest
from questboard.domain.usecase.ports import QuestNotFound, QuestRegistry


def parse_quest_id(raw: int | str) -> int:
    """Return a quest id as an int; anything unparsable cannot name a quest."""

    if isinstance(raw, bool):
        raise QuestNotFound(f"Quest ID does not exist: {raw}")
    if isinstance(raw, int):
        return raw
    try:
        return int(str(raw).strip())
    except ValueError as err:
        raise QuestNotFound(f"Quest ID does not exist: {raw}") from err


def parse_principal(raw: str) -> str:
    principal = str(raw).strip() if raw is not None else ""
    if not principal:
        raise ValueError("Caller principal is required")
    return principal


async def ensure_quest(registry: QuestRegistry, quest_id: int | str) -> Quest:
    """Fetch a live quest; missing records and zero-reward slots are both absent."""

    quest = await registry.get(parse_quest_id(quest_id))
    if quest is None or quest.reward <= 0:
        raise QuestNotFound()
    return quest
