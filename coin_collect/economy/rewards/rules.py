from __future__ import annotations

from collections.abc import Iterable

from coin_collect.accounts.types import Coin, CoinType, Promocode

BASE_MULTIPLIER = 1


def resolve_multiplier(promocodes: Iterable[Promocode], *, is_guest: bool) -> int:
    if is_guest:
        return BASE_MULTIPLIER
    return max((promocode.multiplier for promocode in promocodes), default=BASE_MULTIPLIER)


def build_coins(coin_type: CoinType, *, multiplier: int) -> tuple[Coin, ...]:
    if multiplier < 1:
        raise ValueError("multiplier must be positive")
    return tuple(Coin.collected(coin_type) for _ in range(multiplier))
