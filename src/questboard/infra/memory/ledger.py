from __future__ import annotations

from collections import defaultdict
from typing import DefaultDict, Dict


class InMemoryLedger:
    """Principal balances receiving escrow payouts."""

    def __init__(self, balances: Dict[str, int] | None = None) -> None:
        self._balances: DefaultDict[str, int] = defaultdict(int, balances or {})

    async def transfer(self, recipient: str, amount: int) -> None:
        if amount <= 0:
            raise ValueError(f"Transfer amount must be positive, got {amount}")
        self._balances[recipient] += amount

    def balance_of(self, principal: str) -> int:
        return self._balances.get(principal, 0)
