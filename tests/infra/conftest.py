# tests/infra/conftest.py
from __future__ import annotations

import copy
import types
from typing import Any, Dict, List, Optional, Tuple

import pytest
from pymongo.errors import DuplicateKeyError


def _matches(doc: Dict[str, Any], filt: Dict[str, Any]) -> bool:
    for key, expected in filt.items():
        value = doc.get(key)
        if isinstance(expected, dict):
            if "$in" in expected and value not in expected["$in"]:
                return False
            if "$gt" in expected and not (value is not None and value > expected["$gt"]):
                return False
        elif value != expected:
            return False
    return True


class _FakeCursor:
    def __init__(self, docs: List[Dict[str, Any]]):
        self._docs = docs

    def __aiter__(self):
        self._iter = iter(self._docs)
        return self

    async def __anext__(self):
        try:
            return next(self._iter)
        except StopIteration:
            raise StopAsyncIteration


class FakeCollection:
    """Just enough of a motor collection for the repository tests."""

    def __init__(self) -> None:
        self.docs: List[Dict[str, Any]] = []
        # (field, partial flag) pairs enforced like unique indexes
        self.unique: List[Tuple[str, Optional[str]]] = []
        self.indexes: List[Dict[str, Any]] = []
        self.writes: List[Tuple[str, Any]] = []
        self._next_oid = 1

    async def create_index(self, key, **kwargs):
        self.indexes.append({"key": key, **kwargs})
        partial = kwargs.get("partialFilterExpression")
        flag = next(iter(partial)) if partial else None
        if kwargs.get("unique"):
            self.unique.append((key, flag))
        return kwargs.get("name", key)

    async def find_one(self, filt):
        for doc in self.docs:
            if _matches(doc, filt):
                return copy.deepcopy(doc)
        return None

    def find(self, filt):
        return _FakeCursor([copy.deepcopy(d) for d in self.docs if _matches(d, filt)])

    async def insert_one(self, doc):
        doc = copy.deepcopy(doc)
        doc.setdefault("_id", self._next_oid)
        self._next_oid += 1
        self._check_unique(doc, skip=None)
        self.docs.append(doc)
        self.writes.append(("insert", doc))
        return types.SimpleNamespace(inserted_id=doc["_id"])

    async def update_one(self, filt, update):
        for doc in self.docs:
            if _matches(doc, filt):
                candidate = {**doc, **update["$set"]}
                self._check_unique(candidate, skip=doc)
                changed = candidate != doc
                doc.update(update["$set"])
                self.writes.append(("update", filt, update))
                return types.SimpleNamespace(matched_count=1, modified_count=int(changed))
        return types.SimpleNamespace(matched_count=0, modified_count=0)

    async def delete_one(self, filt):
        for doc in self.docs:
            if _matches(doc, filt):
                self.docs.remove(doc)
                self.writes.append(("delete", filt))
                return types.SimpleNamespace(deleted_count=1)
        return types.SimpleNamespace(deleted_count=0)

    async def find_one_and_update(self, filt, update, upsert=False, return_document=None):
        for doc in self.docs:
            if _matches(doc, filt):
                break
        else:
            doc = {**filt}
            self.docs.append(doc)
        for key, inc in update.get("$inc", {}).items():
            doc[key] = doc.get(key, 0) + inc
        return copy.deepcopy(doc)

    def _check_unique(self, candidate, skip):
        for key, flag in self.unique:
            if flag is not None and not candidate.get(flag):
                continue
            for other in self.docs:
                if other is skip or (flag is not None and not other.get(flag)):
                    continue
                if other.get(key) == candidate.get(key):
                    raise DuplicateKeyError(f"E11000 duplicate key: {key}", 11000)


class FakeDB:
    def __init__(self) -> None:
        self.collections: Dict[str, FakeCollection] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        return self.collections.setdefault(name, FakeCollection())


@pytest.fixture()
def fake_db() -> FakeDB:
    return FakeDB()
