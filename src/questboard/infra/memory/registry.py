from __future__ import annotations

import copy
from contextlib import asynccontextmanager
from dataclasses import replace
from datetime import datetime, timezone
from typing import AsyncIterator, Dict, Optional, Tuple

from questboard.domain.models.QuestModel import Quest, QuestStatus


class InMemoryQuestRegistry:
    """Quest records plus the creator, taker and id lookups.

    Pure storage: callers check preconditions. Mutations made inside
    ``transaction()`` are undone if the block raises, and ``compensate()``
    undoes the last committed one.
    """

    def __init__(self) -> None:
        self._quests: Dict[int, Quest] = {}
        self._creator_index: Dict[str, int] = {}
        self._taker_index: Dict[str, int] = {}
        self._creator_of: Dict[int, str] = {}
        self._last_id = 0
        self._undo: Optional[Tuple] = None

    async def insert(self, creator: str, description: str, reward: int) -> int:
        self._last_id += 1
        quest_id = self._last_id
        self._quests[quest_id] = Quest(
            quest_id=quest_id,
            creator=creator,
            description=description,
            reward=reward,
        )
        self._creator_of[quest_id] = creator
        self._creator_index[creator] = quest_id
        return quest_id

    async def get(self, quest_id: int) -> Optional[Quest]:
        quest = self._quests.get(quest_id)
        return replace(quest) if quest is not None else None

    async def creators_quest(self, creator: str) -> Optional[int]:
        return self._creator_index.get(creator)

    async def takers_quest(self, taker: str) -> Optional[int]:
        return self._taker_index.get(taker)

    async def creator_of(self, quest_id: int) -> Optional[str]:
        return self._creator_of.get(quest_id)

    async def set_state(
        self, quest_id: int, status: QuestStatus, at: Optional[datetime] = None
    ) -> None:
        quest = self._require(quest_id)
        quest.status = status
        if status.stamp:
            setattr(quest, status.stamp, at or datetime.now(timezone.utc))

    async def set_taker(self, quest_id: int, taker: str) -> None:
        self._require(quest_id).taker = taker

    async def set_completer(self, quest_id: int, completer: str) -> None:
        self._require(quest_id).completer = completer

    async def set_creator_index(self, creator: str, quest_id: Optional[int]) -> None:
        _set_slot(self._creator_index, creator, quest_id)

    async def set_taker_index(self, taker: str, quest_id: Optional[int]) -> None:
        _set_slot(self._taker_index, taker, quest_id)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        self._undo = None
        saved = (
            copy.deepcopy(self._quests),
            dict(self._creator_index),
            dict(self._taker_index),
            dict(self._creator_of),
            self._last_id,
        )
        try:
            yield
        except BaseException:
            self._restore(saved)
            raise
        self._undo = saved

    async def compensate(self) -> None:
        if self._undo is not None:
            self._restore(self._undo)
            self._undo = None

    def __len__(self) -> int:
        return len(self._quests)

    def _restore(self, saved: Tuple) -> None:
        (
            self._quests,
            self._creator_index,
            self._taker_index,
            self._creator_of,
            self._last_id,
        ) = saved

    def _require(self, quest_id: int) -> Quest:
        quest = self._quests.get(quest_id)
        if quest is None:
            raise KeyError(f"quest {quest_id} not found")
        return quest


def _set_slot(index: Dict[str, int], key: str, quest_id: Optional[int]) -> None:
    if quest_id is None:
        index.pop(key, None)
    else:
        index[key] = quest_id
