from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple, Type

from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from questboard.domain.models.QuestModel import Quest, QuestStatus
from questboard.domain.usecase.ports import (
    AlreadyCompleted,
    CreatorBusy,
    NoActiveQuest,
    QuestError,
    QuestNotFound,
    QuestNotOpen,
    TakerBusy,
)
from questboard.infra.db import next_sequence
from questboard.infra.serialization import from_bson, to_bson

# error a caller would have seen had it run after the writer that beat it
_LOST_RACE: Dict[str, Type[QuestError]] = {
    QuestStatus.TAKEN.value: QuestNotOpen,
    QuestStatus.COMPLETED.value: AlreadyCompleted,
    QuestStatus.VERIFIED.value: NoActiveQuest,
}

Document = Dict[str, Any]
# quest ids inserted, and (quest_id, fields written, fields before) per update
Commit = Tuple[List[int], List[Tuple[int, Document, Document]]]


class MongoQuestRegistry:
    """Quest registry stored in one ``quests`` collection.

    The creator and taker index slots are flags on the quest document
    (``creator_active``/``taker_active``) guarded by partial unique indexes,
    so every command touches exactly one document. Inside ``transaction()``
    writes are buffered, reads see them, and the flush is one conditional
    write per quest. The fields a flush overwrote are remembered so that
    ``compensate()`` can put them back.
    """

    COUNTER = "QUEST"

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db
        self.col: AsyncIOMotorCollection = db["quests"]
        self._active = False
        self._inserts: Dict[int, Document] = {}
        self._updates: Dict[int, Document] = {}
        self._expected: Dict[int, str] = {}
        self._before: Dict[int, Document] = {}
        self._committed: Commit = ([], [])

    @classmethod
    async def create(cls, db: AsyncIOMotorDatabase) -> "MongoQuestRegistry":
        self = cls(db)
        await self.ensure_indexes()
        return self

    async def ensure_indexes(self) -> None:
        await self.col.create_index("quest_id", unique=True, name="uq_quests_id")
        await self.col.create_index(
            "creator",
            unique=True,
            name="uq_quests_active_creator",
            partialFilterExpression={"creator_active": True},
        )
        await self.col.create_index(
            "taker",
            unique=True,
            name="uq_quests_active_taker",
            partialFilterExpression={"taker_active": True},
        )

    # ─── reads ────────────────────────────────────────────────────────────────

    async def get(self, quest_id: int) -> Optional[Quest]:
        doc = await self._load(quest_id)
        return from_bson(Quest, doc) if doc else None

    async def creators_quest(self, creator: str) -> Optional[int]:
        return await self._active_slot("creator", creator)

    async def takers_quest(self, taker: str) -> Optional[int]:
        return await self._active_slot("taker", taker)

    async def creator_of(self, quest_id: int) -> Optional[str]:
        doc = await self._load(quest_id)
        return doc["creator"] if doc else None

    # ─── writes ───────────────────────────────────────────────────────────────

    async def insert(self, creator: str, description: str, reward: int) -> int:
        quest_id = await next_sequence(self._db, self.COUNTER)
        doc = to_bson(
            Quest(
                quest_id=quest_id,
                creator=creator,
                description=description,
                reward=reward,
            )
        )
        doc.update(creator_active=True, taker_active=False)
        self._inserts[quest_id] = doc
        await self._flush_if_idle()
        return quest_id

    async def set_state(
        self, quest_id: int, status: QuestStatus, at: Optional[datetime] = None
    ) -> None:
        previous = status.previous
        if previous is not None and quest_id not in self._inserts:
            self._expected.setdefault(quest_id, previous.value)
        fields: Document = {"status": status.value}
        if status.stamp:
            fields[status.stamp] = to_bson(at or datetime.now(timezone.utc))
        await self._stage(quest_id, fields)

    async def set_taker(self, quest_id: int, taker: str) -> None:
        await self._stage(quest_id, {"taker": taker})

    async def set_completer(self, quest_id: int, completer: str) -> None:
        await self._stage(quest_id, {"completer": completer})

    async def set_creator_index(self, creator: str, quest_id: Optional[int]) -> None:
        if quest_id is not None:
            await self._stage(quest_id, {"creator_active": True})
            return
        current = await self.creators_quest(creator)
        if current is not None:
            await self._stage(current, {"creator_active": False})

    async def set_taker_index(self, taker: str, quest_id: Optional[int]) -> None:
        if quest_id is not None:
            await self._stage(quest_id, {"taker": taker, "taker_active": True})
            return
        current = await self.takers_quest(taker)
        if current is not None:
            await self._stage(current, {"taker_active": False})

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        self._active = True
        self._committed = ([], [])
        try:
            yield
        except BaseException:
            self._discard()
            raise
        finally:
            self._active = False
        await self._flush()

    async def compensate(self) -> None:
        inserted, updated = self._committed
        self._committed = ([], [])
        for quest_id in inserted:
            await self.col.delete_one({"quest_id": quest_id})
        for quest_id, fields, before in updated:
            filt: Document = {"quest_id": quest_id}
            if "status" in fields:
                filt["status"] = fields["status"]
            restore = {key: before.get(key) for key in fields}
            await self.col.update_one(filt, {"$set": restore})

    # ─── helpers ──────────────────────────────────────────────────────────────

    async def _load(self, quest_id: int) -> Optional[Document]:
        if quest_id in self._inserts:
            doc = dict(self._inserts[quest_id])
        else:
            found = await self.col.find_one({"quest_id": quest_id})
            if found is None:
                return None
            doc = dict(found)
        doc.update(self._updates.get(quest_id, {}))
        return doc

    async def _active_slot(self, role: str, principal: str) -> Optional[int]:
        flag = f"{role}_active"
        for quest_id in [*self._inserts, *self._updates]:
            doc = await self._load(quest_id)
            if doc and doc.get(role) == principal and doc.get(flag):
                return quest_id

        found = await self.col.find_one({role: principal, flag: True})
        if found is None:
            return None
        doc = await self._load(found["quest_id"])
        if doc and doc.get(role) == principal and doc.get(flag):
            return doc["quest_id"]
        return None

    async def _stage(self, quest_id: int, fields: Document) -> None:
        if quest_id in self._inserts:
            self._inserts[quest_id].update(fields)
        else:
            if quest_id not in self._before:
                found = await self.col.find_one({"quest_id": quest_id})
                self._before[quest_id] = found or {}
            self._updates.setdefault(quest_id, {}).update(fields)
        await self._flush_if_idle()

    async def _flush_if_idle(self) -> None:
        if not self._active:
            await self._flush()

    async def _flush(self) -> None:
        inserts, updates, expected = self._inserts, self._updates, self._expected
        before = self._before
        self._discard()

        for doc in inserts.values():
            try:
                await self.col.insert_one(dict(doc))
            except DuplicateKeyError as exc:
                raise CreatorBusy() from exc

        for quest_id, fields in updates.items():
            filt: Document = {"quest_id": quest_id}
            if quest_id in expected:
                filt["status"] = expected[quest_id]
            try:
                res = await self.col.update_one(filt, {"$set": fields})
            except DuplicateKeyError as exc:
                raise TakerBusy() from exc
            if res.matched_count == 0:
                raise _LOST_RACE.get(fields.get("status", ""), QuestNotFound)()

        self._committed = (
            list(inserts),
            [
                (quest_id, fields, before.get(quest_id, {}))
                for quest_id, fields in updates.items()
            ],
        )

    def _discard(self) -> None:
        self._inserts = {}
        self._updates = {}
        self._expected = {}
        self._before = {}
