from __future__ import annotations

from uuid import uuid4

import pytest

from coin_collect.accounts.types import Account, AccountStatus, CoinType, Promocode
from coin_collect.economy.rewards.service import RewardLedger
from coin_collect.session.manager import SessionManager
from tests.fakes import FakeLocalCache, FakeRemoteStore

DEVICE_ID = "DEVICE-1"


async def _ledger(account: Account | None = None, token: str | None = None) -> tuple[RewardLedger, SessionManager]:
    manager = SessionManager(
        device_id=DEVICE_ID,
        remote=FakeRemoteStore(),
        local_cache=FakeLocalCache(account=account, token=token),
    )
    await manager.load_initial_state()
    return RewardLedger(manager), manager


@pytest.mark.asyncio
async def test_guest_collects_one_coin_per_event() -> None:
    ledger, manager = await _ledger()

    coins = await ledger.collect_coin(CoinType.BRONZE)

    assert len(coins) == 1
    assert manager.account.coins == coins
    assert ledger.collected_coins_count == 1


@pytest.mark.asyncio
async def test_guest_with_promocodes_still_collects_one_coin() -> None:
    account = Account(id=DEVICE_ID, promocodes=(Promocode(id=uuid4(), multiplier=3, is_used=True),))
    ledger, _ = await _ledger(account)

    coins = await ledger.collect_coin(CoinType.GOLD)

    assert len(coins) == 1


@pytest.mark.asyncio
async def test_signed_in_uses_best_promocode_multiplier() -> None:
    account = Account(
        id=DEVICE_ID,
        promocodes=(
            Promocode(id=uuid4(), multiplier=2, is_used=True),
            Promocode(id=uuid4(), multiplier=3, is_used=True),
        ),
        status=AccountStatus.SIGNED_IN,
        auth_token="token-1",
    )
    ledger, manager = await _ledger(account, token="token-1")

    coins = await ledger.collect_coin(CoinType.SILVER)

    assert len(coins) == 3
    assert all(coin.type is CoinType.SILVER for coin in coins)
    assert ledger.collected_coins_count == 3
    assert manager.collected_coins_count.last_value == 3


@pytest.mark.asyncio
async def test_signed_in_without_promocodes_collects_one_coin() -> None:
    account = Account(id=DEVICE_ID, status=AccountStatus.SIGNED_IN, auth_token="token-1")
    ledger, _ = await _ledger(account, token="token-1")

    coins = await ledger.collect_coin(CoinType.GOLD)

    assert len(coins) == 1


@pytest.mark.asyncio
async def test_coins_accumulate_across_events() -> None:
    ledger, manager = await _ledger()

    await ledger.collect_coin(CoinType.BRONZE)
    await ledger.collect_coin(CoinType.GOLD)

    assert [coin.type for coin in manager.account.coins] == [CoinType.BRONZE, CoinType.GOLD]
    assert await ledger.get_coins() == manager.account.coins


@pytest.mark.asyncio
async def test_collect_without_account_is_a_no_op() -> None:
    manager = SessionManager(device_id=DEVICE_ID, remote=FakeRemoteStore(), local_cache=FakeLocalCache())
    ledger = RewardLedger(manager)

    assert await ledger.collect_coin(CoinType.GOLD) == ()
    assert ledger.collected_coins_count is None
