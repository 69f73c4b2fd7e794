from __future__ import annotations

import pytest

from questboard.domain.usecase.ports import TransferFailed
from questboard.infra.memory import InMemoryLedger
from questboard.infra.mongo.escrow_vault import MongoEscrowVault

pytestmark = pytest.mark.asyncio


async def test_hold_and_release(fake_db):
    ledger = InMemoryLedger()
    vault = MongoEscrowVault(fake_db, ledger)

    await vault.hold(1, 1000)
    await vault.hold(2, 7)
    assert await vault.total() == 1007

    assert await vault.release(1, "bob") == 1000
    assert ledger.balance_of("bob") == 1000
    assert await vault.balance(1) == 0
    doc = fake_db["escrow"].docs[0]
    assert doc["released_to"] == "bob"


async def test_release_is_claimed_once(fake_db):
    ledger = InMemoryLedger()
    vault = MongoEscrowVault(fake_db, ledger)
    await vault.hold(1, 10)
    await vault.release(1, "bob")

    with pytest.raises(TransferFailed):
        await vault.release(1, "bob")
    assert ledger.balance_of("bob") == 10


async def test_failed_transfer_restores_holding(fake_db, failing_transfer):
    vault = MongoEscrowVault(fake_db, failing_transfer)
    await vault.hold(1, 10)

    with pytest.raises(TransferFailed):
        await vault.release(1, "bob")

    assert await vault.balance(1) == 10
    assert fake_db["escrow"].docs[0]["released_to"] is None


async def test_hold_inside_transaction_is_buffered(fake_db):
    vault = MongoEscrowVault(fake_db, InMemoryLedger())

    with pytest.raises(RuntimeError):
        async with vault.transaction():
            await vault.hold(1, 10)
            assert await vault.balance(1) == 10
            raise RuntimeError("boom")

    assert fake_db["escrow"].docs == []

    async with vault.transaction():
        await vault.hold(1, 10)
    assert await vault.balance(1) == 10


async def test_release_inside_transaction_pays_on_commit(fake_db):
    ledger = InMemoryLedger()
    vault = MongoEscrowVault(fake_db, ledger)
    await vault.hold(1, 10)

    with pytest.raises(RuntimeError):
        async with vault.transaction():
            assert await vault.release(1, "bob") == 10
            assert await vault.balance(1) == 0
            raise RuntimeError("boom")

    assert ledger.balance_of("bob") == 0
    assert fake_db["escrow"].docs[0]["amount"] == 10

    async with vault.transaction():
        await vault.release(1, "bob")
        assert ledger.balance_of("bob") == 0
    assert ledger.balance_of("bob") == 10
    assert await vault.total() == 0
