# questboard/infra/db.py
from __future__ import annotations

import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ReturnDocument

from questboard.infra.settings import Settings, load_settings

_client: Optional[AsyncIOMotorClient] = None
log = logging.getLogger(__name__)


def get_client(settings: Optional[Settings] = None) -> AsyncIOMotorClient:
    """Return a cached AsyncIOMotorClient (lazy init)."""
    global _client
    if _client is None:
        settings = settings or load_settings()
        _client = AsyncIOMotorClient(
            settings.mongodb_uri,
            appname=settings.mongo_appname,
            serverSelectionTimeoutMS=settings.mongo_server_selection_timeout_ms,
            socketTimeoutMS=5000,
            connectTimeoutMS=5000,
            uuidRepresentation="standard",
        )
    return _client


def get_db(settings: Optional[Settings] = None) -> AsyncIOMotorDatabase:
    settings = settings or load_settings()
    return get_client(settings)[settings.db_name]


async def ping() -> bool:
    try:
        await get_client().admin.command("ping")
        return True
    except Exception as e:
        log.warning("Mongo ping failed: %s", e)
        return False


async def next_sequence(db: AsyncIOMotorDatabase, name: str) -> int:
    """
    Advance and return the named counter.
    Counters live in a 'counters' collection keyed by name and start at 1.
    """
    doc = await db["counters"].find_one_and_update(
        {"_id": name},
        {"$inc": {"seq": 1}},
        upsert=True,
        return_document=ReturnDocument.AFTER,
    )
    assert doc is not None
    seq_value = doc.get("seq", 0)
    if not isinstance(seq_value, int):
        raise TypeError(f"Counter for {name} returned non-int value: {seq_value!r}")
    return seq_value


async def close_client() -> None:
    """Close the cached client (useful for app shutdown / tests)."""
    global _client
    if _client is not None:
        _client.close()
        _client = None
