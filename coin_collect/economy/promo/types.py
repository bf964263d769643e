from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, slots=True)
class PromoRedeemResult:
    promocode_id: UUID
    multiplier: int
    credited: bool


@dataclass(frozen=True, slots=True)
class PromoReconcileResult:
    credited: tuple[UUID, ...] = ()
    dropped: tuple[UUID, ...] = ()
