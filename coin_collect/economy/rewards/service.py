from __future__ import annotations

import structlog

from coin_collect.accounts.types import Coin, CoinType
from coin_collect.economy.rewards.rules import build_coins, resolve_multiplier
from coin_collect.session.manager import SessionManager

logger = structlog.get_logger(__name__)


class RewardLedger:
    def __init__(self, session: SessionManager) -> None:
        self._session = session

    @property
    def collected_coins_count(self) -> int | None:
        account = self._session.account
        return len(account.coins) if account is not None else None

    async def get_coins(self) -> tuple[Coin, ...]:
        return await self._session.get_coins()

    async def collect_coin(self, coin_type: CoinType) -> tuple[Coin, ...]:
        """Append the coins earned by one collection event.

        Signed-in players get as many coins as their best redeemed promocode
        multiplier; guests always get one.
        """
        account = self._session.account
        if account is None:
            return ()

        multiplier = resolve_multiplier(account.promocodes, is_guest=self._session.is_guest)
        coins = build_coins(coin_type, multiplier=multiplier)
        await self._session.add_coins(coins)
        logger.info(
            "coins_collected",
            account_id=account.id,
            coin_type=coin_type.value,
            multiplier=multiplier,
        )
        return coins
