"""REST endpoints for the quest lifecycle: post, take, complete, verify."""

from fastapi import APIRouter, Depends, HTTPException

import questboard.api.deps as deps
from questboard.api.mappers import quest_to_api
from questboard.api.schemas import ErrorBody, EscrowBalance, Quest, QuestCreate

router = APIRouter(prefix="/v1", tags=["Quests"])

lifecycle = deps.lifecycle

_ERRORS = {
    400: {"model": ErrorBody},
    404: {"model": ErrorBody},
    409: {"model": ErrorBody},
}


@router.post("/quests", response_model=Quest, status_code=201, responses=_ERRORS)
async def create_quest(
    body: QuestCreate, principal: str = Depends(deps.require_principal)
) -> Quest:
    """Post a quest funded by the value supplied with the request."""
    try:
        quest = await lifecycle.create_quest(
            principal,
            description=body.description,
            reward=body.reward,
            supplied_value=body.supplied_value,
        )
    except ValueError as err:
        raise HTTPException(status_code=400, detail=str(err)) from err
    return quest_to_api(quest)


@router.get("/quests/{quest_id}", response_model=Quest, responses=_ERRORS)
async def get_quest(quest_id: str) -> Quest:
    """Fetch a quest by its identifier."""
    quest = await lifecycle.get_quest(quest_id)
    return quest_to_api(quest)


@router.get(
    "/quests/{quest_id}/escrow", response_model=EscrowBalance, responses=_ERRORS
)
async def get_escrow(quest_id: str) -> EscrowBalance:
    """Report how much of the quest's reward is still held."""
    quest = await lifecycle.get_quest(quest_id)
    balance = await lifecycle.escrow_balance(quest.quest_id)
    return EscrowBalance(quest_id=quest.quest_id, balance=balance)


# --- Lifecycle commands ---
@router.post("/quests/{quest_id}:take", response_model=Quest, responses=_ERRORS)
async def take_quest(
    quest_id: str, principal: str = Depends(deps.require_principal)
) -> Quest:
    """Claim an open quest for the caller."""
    try:
        quest = await lifecycle.take_quest(principal, quest_id)
    except ValueError as err:
        raise HTTPException(status_code=400, detail=str(err)) from err
    return quest_to_api(quest)


@router.post("/quests:complete", response_model=Quest, responses=_ERRORS)
async def complete_quest(principal: str = Depends(deps.require_principal)) -> Quest:
    """Report the caller's taken quest as done."""
    try:
        quest = await lifecycle.complete_quest(principal)
    except ValueError as err:
        raise HTTPException(status_code=400, detail=str(err)) from err
    return quest_to_api(quest)


@router.post(
    "/quests:verify",
    response_model=Quest,
    responses={**_ERRORS, 502: {"model": ErrorBody}},
)
async def verify_complete(principal: str = Depends(deps.require_principal)) -> Quest:
    """Confirm completion of the caller's quest and pay the completer."""
    try:
        quest = await lifecycle.verify_complete(principal)
    except ValueError as err:
        raise HTTPException(status_code=400, detail=str(err)) from err
    return quest_to_api(quest)
