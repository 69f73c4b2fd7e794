from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel

# --- Shared Types ---


class QuestStatus(str, Enum):
    OPEN = "OPEN"
    TAKEN = "TAKEN"
    COMPLETED = "COMPLETED"
    VERIFIED = "VERIFIED"


# --- Quests ---


class QuestCreate(BaseModel):
    description: str
    reward: int
    supplied_value: int


class Quest(BaseModel):
    quest_id: int
    creator: str
    description: str
    reward: int
    status: QuestStatus
    taker: Optional[str] = None
    completer: Optional[str] = None
    created_at: Optional[datetime] = None
    taken_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    verified_at: Optional[datetime] = None


# --- Principals & escrow ---


class PrincipalStatus(BaseModel):
    principal: str
    creating: Optional[int] = None
    taking: Optional[int] = None
    balance: int = 0


class EscrowBalance(BaseModel):
    quest_id: int
    balance: int


class ErrorBody(BaseModel):
    detail: str
    code: str
