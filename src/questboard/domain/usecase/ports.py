from __future__ import annotations

from datetime import datetime
from typing import AsyncContextManager, Optional, Protocol

from questboard.domain.models.EventModel import QuestEvent
from questboard.domain.models.QuestModel import Quest, QuestStatus

# ─── errors ────────────────────────────────────────────────────────────────────


class QuestError(Exception):
    """Base for every caller-visible lifecycle failure.

    Raising one of these means the operation changed nothing.
    """

    code = "QuestError"
    default_message = "Quest operation failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class RewardMismatch(QuestError):
    code = "RewardMismatch"
    default_message = "Reward should be paid"


class ZeroReward(QuestError):
    code = "ZeroReward"
    default_message = "Reward should be greater than 0"


class EmptyDescription(QuestError):
    code = "EmptyDescription"
    default_message = "Description should not be empty"


class CreatorBusy(QuestError):
    code = "CreatorBusy"
    default_message = "You already have a quest"


class QuestNotFound(QuestError):
    code = "QuestNotFound"
    default_message = "Quest does not exist"


class TakerBusy(QuestError):
    code = "TakerBusy"
    default_message = "You already have a quest"


class SelfTake(QuestError):
    code = "SelfTake"
    default_message = "You can't take your own quest"


class QuestNotOpen(QuestError):
    code = "QuestNotOpen"
    default_message = "Quest is not open"


class NoActiveQuest(QuestError):
    code = "NoActiveQuest"
    default_message = "You don't have a quest"


class AlreadyCompleted(QuestError):
    code = "AlreadyCompleted"
    default_message = "Quest is already completed"


class QuestNotCompleted(QuestError):
    code = "QuestNotCompleted"
    default_message = "Quest is not completed"


class NoCompleter(QuestError):
    code = "NoCompleter"
    default_message = "Quest has no completer"


class TransferFailed(QuestError):
    code = "TransferFailed"
    default_message = "Reward transfer failed"


# ─── ports ─────────────────────────────────────────────────────────────────────


class QuestRegistry(Protocol):
    async def insert(self, creator: str, description: str, reward: int) -> int: ...

    async def get(self, quest_id: int) -> Optional[Quest]: ...

    async def creators_quest(self, creator: str) -> Optional[int]: ...

    async def takers_quest(self, taker: str) -> Optional[int]: ...

    async def creator_of(self, quest_id: int) -> Optional[str]: ...

    async def set_state(
        self, quest_id: int, status: QuestStatus, at: Optional[datetime] = None
    ) -> None: ...

    async def set_taker(self, quest_id: int, taker: str) -> None: ...

    async def set_completer(self, quest_id: int, completer: str) -> None: ...

    async def set_creator_index(self, creator: str, quest_id: Optional[int]) -> None: ...

    async def set_taker_index(self, taker: str, quest_id: Optional[int]) -> None: ...

    def transaction(self) -> AsyncContextManager[None]: ...

    async def compensate(self) -> None:
        """Undo the writes of the most recently committed transaction."""


class ValueTransfer(Protocol):
    async def transfer(self, recipient: str, amount: int) -> None: ...


class EscrowVault(Protocol):
    async def hold(self, quest_id: int, amount: int) -> None: ...

    async def release(self, quest_id: int, recipient: str) -> int: ...

    async def balance(self, quest_id: int) -> int: ...

    async def total(self) -> int: ...

    def transaction(self) -> AsyncContextManager[None]:
        """Stage holds and releases; payouts happen when the block commits."""


class EventPublisher(Protocol):
    async def publish(self, event: QuestEvent) -> None: ...
