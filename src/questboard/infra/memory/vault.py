from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List, Tuple

from questboard.domain.usecase.ports import TransferFailed, ValueTransfer


class InMemoryEscrowVault:
    """Escrow holdings keyed by quest id.

    Inside ``transaction()`` a release zeroes the holding at once but the
    transfer waits for the block to commit, so nothing is paid for a command
    that later fails.
    """

    def __init__(
        self, transfer: ValueTransfer, *, logger: logging.Logger | None = None
    ) -> None:
        self._transfer = transfer
        self._holdings: Dict[int, int] = {}
        self._active = False
        self._releases: List[Tuple[int, str, int]] = []
        self._log = logger or logging.getLogger(__name__)

    async def hold(self, quest_id: int, amount: int) -> None:
        if amount <= 0:
            raise ValueError(f"Escrow amount must be positive, got {amount}")
        if self._holdings.get(quest_id):
            raise ValueError(f"Escrow for quest {quest_id} already held")
        self._holdings[quest_id] = amount

    async def release(self, quest_id: int, recipient: str) -> int:
        amount = self._holdings.get(quest_id, 0)
        if amount <= 0:
            raise TransferFailed(f"No reward held for quest {quest_id}")

        self._holdings[quest_id] = 0
        if self._active:
            self._releases.append((quest_id, recipient, amount))
        else:
            await self._pay(quest_id, recipient, amount)
        return amount

    async def balance(self, quest_id: int) -> int:
        return self._holdings.get(quest_id, 0)

    async def total(self) -> int:
        return sum(self._holdings.values())

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        saved = dict(self._holdings)
        self._active = True
        try:
            yield
        except BaseException:
            self._holdings = saved
            self._releases = []
            raise
        finally:
            self._active = False

        releases, self._releases = self._releases, []
        for quest_id, recipient, amount in releases:
            await self._pay(quest_id, recipient, amount)

    async def _pay(self, quest_id: int, recipient: str, amount: int) -> None:
        try:
            await self._transfer.transfer(recipient, amount)
        except Exception as exc:
            self._holdings[quest_id] = amount
            raise TransferFailed(f"Reward transfer failed: {exc}") from exc

        self._log.info(
            "Escrow released",
            extra={"quest_id": quest_id, "recipient": recipient, "amount": amount},
        )
