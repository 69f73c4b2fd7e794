from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict

from questboard.domain.models.QuestModel import Quest


class QuestEventKind(str, Enum):
    CREATED = "QuestCreated"
    TAKEN = "QuestTaken"
    COMPLETED = "QuestCompleted"
    VERIFIED = "QuestVerified"


@dataclass(frozen=True)
class QuestEvent:
    quest_id: int
    quest: Quest
    emitted_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc), compare=False
    )

    kind = QuestEventKind.CREATED

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "event": self.kind.value,
            "quest_id": self.quest_id,
            "quest": self.quest.to_dict(),
        }
        payload.update(self._parties())
        return payload

    def _parties(self) -> Dict[str, Any]:
        return {}


@dataclass(frozen=True)
class QuestCreated(QuestEvent):
    creator: str = ""

    kind = QuestEventKind.CREATED

    def _parties(self) -> Dict[str, Any]:
        return {"creator": self.creator}


@dataclass(frozen=True)
class QuestTaken(QuestEvent):
    taker: str = ""

    kind = QuestEventKind.TAKEN

    def _parties(self) -> Dict[str, Any]:
        return {"taker": self.taker}


@dataclass(frozen=True)
class QuestCompleted(QuestEvent):
    completer: str = ""

    kind = QuestEventKind.COMPLETED

    def _parties(self) -> Dict[str, Any]:
        return {"completer": self.completer}


@dataclass(frozen=True)
class QuestVerified(QuestEvent):
    verifier: str = ""
    completer: str = ""

    kind = QuestEventKind.VERIFIED

    def _parties(self) -> Dict[str, Any]:
        return {"verifier": self.verifier, "completer": self.completer}
