from __future__ import annotations

from http import HTTPStatus
from typing import Dict, Type

from fastapi import Request
from fastapi.responses import JSONResponse

from questboard.domain.usecase.ports import (
    AlreadyCompleted,
    CreatorBusy,
    EmptyDescription,
    NoActiveQuest,
    NoCompleter,
    QuestError,
    QuestNotCompleted,
    QuestNotFound,
    QuestNotOpen,
    RewardMismatch,
    SelfTake,
    TakerBusy,
    TransferFailed,
    ZeroReward,
)

QUEST_ERROR_STATUS: Dict[Type[QuestError], HTTPStatus] = {
    RewardMismatch: HTTPStatus.BAD_REQUEST,
    ZeroReward: HTTPStatus.BAD_REQUEST,
    EmptyDescription: HTTPStatus.BAD_REQUEST,
    QuestNotFound: HTTPStatus.NOT_FOUND,
    CreatorBusy: HTTPStatus.CONFLICT,
    TakerBusy: HTTPStatus.CONFLICT,
    SelfTake: HTTPStatus.CONFLICT,
    QuestNotOpen: HTTPStatus.CONFLICT,
    NoActiveQuest: HTTPStatus.CONFLICT,
    AlreadyCompleted: HTTPStatus.CONFLICT,
    QuestNotCompleted: HTTPStatus.CONFLICT,
    NoCompleter: HTTPStatus.CONFLICT,
    TransferFailed: HTTPStatus.BAD_GATEWAY,
}


async def quest_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render lifecycle failures as ``{"detail", "code"}`` with a fitting status."""
    assert isinstance(exc, QuestError)
    status = QUEST_ERROR_STATUS.get(type(exc), HTTPStatus.BAD_REQUEST)
    return JSONResponse(
        status_code=status,
        content={"detail": exc.message, "code": exc.code},
    )
