from fastapi import APIRouter, HTTPException

import questboard.api.deps as deps
from questboard.api.schemas import PrincipalStatus

router = APIRouter(prefix="/v1/principals", tags=["Principals"])

lifecycle = deps.lifecycle
ledger = deps.ledger


@router.get("/{principal}", response_model=PrincipalStatus)
async def get_principal(principal: str) -> PrincipalStatus:
    """Show which quests a principal is busy with and its payout balance."""
    try:
        creating, taking = await lifecycle.active_quests(principal)
    except ValueError as err:
        raise HTTPException(status_code=400, detail=str(err)) from err
    return PrincipalStatus(
        principal=principal,
        creating=creating,
        taking=taking,
        balance=ledger.balance_of(principal),
    )
