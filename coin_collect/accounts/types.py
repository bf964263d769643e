from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from uuid import UUID, uuid4


class AccountStatus(str, Enum):
    GUEST = "guest"
    SIGNED_IN = "signedIn"


class CoinType(str, Enum):
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"


class CoinState(str, Enum):
    COLLECTED = "collected"


@dataclass(frozen=True, slots=True)
class Coin:
    id: UUID
    type: CoinType
    state: CoinState = CoinState.COLLECTED

    @classmethod
    def collected(cls, coin_type: CoinType) -> Coin:
        return cls(id=uuid4(), type=coin_type, state=CoinState.COLLECTED)


@dataclass(frozen=True, slots=True)
class Promocode:
    id: UUID
    multiplier: int
    is_used: bool = False

    def __post_init__(self) -> None:
        if self.multiplier < 1:
            raise ValueError("promocode multiplier must be positive")

    def mark_used(self) -> Promocode:
        return replace(self, is_used=True)


@dataclass(frozen=True, slots=True)
class Account:
    """Immutable snapshot of a player account.

    Every change goes through ``dataclasses.replace`` so readers only ever
    see complete values. ``status`` is ``GUEST`` exactly when ``auth_token``
    is ``None``.
    """

    id: str
    email: str | None = None
    nickname: str | None = None
    coins: tuple[Coin, ...] = field(default_factory=tuple)
    promocodes: tuple[Promocode, ...] = field(default_factory=tuple)
    status: AccountStatus = AccountStatus.GUEST
    auth_token: str | None = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("account id must not be empty")
        if (self.status is AccountStatus.GUEST) != (self.auth_token is None):
            raise ValueError("guest accounts carry no auth token, signed-in accounts require one")
        promocode_ids = [promocode.id for promocode in self.promocodes]
        if len(promocode_ids) != len(set(promocode_ids)):
            raise ValueError("promocodes must be unique by id")

    @classmethod
    def fresh_guest(cls, account_id: str) -> Account:
        return cls(id=account_id)

    @property
    def is_signed_in(self) -> bool:
        return self.status is AccountStatus.SIGNED_IN

    def has_promocode(self, promocode_id: UUID) -> bool:
        return any(promocode.id == promocode_id for promocode in self.promocodes)
