from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class QuestStatus(Enum):
    OPEN = "OPEN"
    TAKEN = "TAKEN"
    COMPLETED = "COMPLETED"
    VERIFIED = "VERIFIED"

    @property
    def previous(self) -> Optional["QuestStatus"]:
        """The only status a quest may move into this one from."""
        return _PREVIOUS.get(self)

    @property
    def stamp(self) -> Optional[str]:
        """Name of the timestamp field set when a quest enters this status."""
        return _STAMPS.get(self)


_PREVIOUS: Dict[QuestStatus, QuestStatus] = {
    QuestStatus.TAKEN: QuestStatus.OPEN,
    QuestStatus.COMPLETED: QuestStatus.TAKEN,
    QuestStatus.VERIFIED: QuestStatus.COMPLETED,
}

_STAMPS: Dict[QuestStatus, str] = {
    QuestStatus.TAKEN: "taken_at",
    QuestStatus.COMPLETED: "completed_at",
    QuestStatus.VERIFIED: "verified_at",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Quest:
    # Identity / owner
    quest_id: int
    creator: str

    # Metadata
    description: str
    reward: int

    # Lifecycle
    status: QuestStatus = QuestStatus.OPEN
    taker: Optional[str] = None
    completer: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)
    taken_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    verified_at: Optional[datetime] = None

    # ------- Status Helpers -------
    def set_taken(self, taker: str) -> None:
        self._advance(QuestStatus.TAKEN)
        self.taker = taker

    def set_completed(self, completer: str) -> None:
        self._advance(QuestStatus.COMPLETED)
        self.completer = completer

    def set_verified(self) -> None:
        self._advance(QuestStatus.VERIFIED)

    def _advance(self, target: QuestStatus) -> None:
        if target.previous is not self.status:
            raise ValueError(
                f"Quest {self.quest_id} cannot move from {self.status.value} to {target.value}"
            )
        self.status = target
        setattr(self, target.stamp, _utcnow())

    # ------- Property Helpers -------

    @property
    def is_open(self) -> bool:
        return self.status is QuestStatus.OPEN

    @property
    def is_escrowed(self) -> bool:
        return self.status is not QuestStatus.VERIFIED

    # ---------- Helpers ----------

    def validate_quest(self) -> None:
        if self.reward <= 0:
            raise ValueError("Reward should be greater than 0")
        if not self.description:
            raise ValueError("Description should not be empty")
        if self.completer is not None and self.completer == self.creator:
            raise ValueError("Creator cannot complete their own quest")
        has_completer = self.completer is not None
        completed = self.status in (QuestStatus.COMPLETED, QuestStatus.VERIFIED)
        if has_completer != completed:
            raise ValueError(
                f"Quest {self.quest_id} in {self.status.value} has inconsistent completer"
            )

    def snapshot(self) -> Quest:
        """Detached copy for events and API responses."""
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data
