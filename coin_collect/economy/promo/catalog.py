from __future__ import annotations

from uuid import UUID

from coin_collect.accounts.types import Promocode
from coin_collect.remote.store import RemoteAccountStore
from coin_collect.session.manager import SessionManager


class PromocodesService:
    def __init__(self, *, remote: RemoteAccountStore, session: SessionManager) -> None:
        self._remote = remote
        self._session = session

    async def get_all_promocodes(self) -> list[Promocode]:
        return await self._remote.get_promocodes()

    async def get_user_promocodes(self) -> tuple[Promocode, ...]:
        account = self._session.account
        return account.promocodes if account is not None else ()

    async def get_promocode(self, promocode_id: UUID) -> Promocode:
        return await self._remote.get_promocode(promocode_id)

    async def get_promocode_consumer(self, promocode_id: UUID) -> str | None:
        return await self._remote.get_promocode_consumer(promocode_id)

    async def use_promocode(self, promocode_id: UUID) -> None:
        await self._remote.mark_promocode_used(promocode_id, used_by=self._session.device_id)
