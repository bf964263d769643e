from __future__ import annotations

from uuid import UUID

import structlog

from coin_collect.economy.promo.catalog import PromocodesService
from coin_collect.economy.promo.types import PromoReconcileResult
from coin_collect.remote.errors import RemoteValueNotFoundError, RemoteValueUndecodableError
from coin_collect.services.local_cache import LocalSecureCache
from coin_collect.session.manager import SessionManager

logger = structlog.get_logger(__name__)


class PromocodeReconciler:
    """Finishes redemptions that were marked used but never credited.

    A pending promocode is credited only when the catalog records this device
    as its consumer; anything else is dropped.
    """

    def __init__(
        self,
        *,
        catalog: PromocodesService,
        session: SessionManager,
        local_cache: LocalSecureCache,
    ) -> None:
        self._catalog = catalog
        self._session = session
        self._local_cache = local_cache

    async def reconcile(self) -> PromoReconcileResult:
        if self._session.account is None:
            return PromoReconcileResult()

        credited = []
        dropped = []
        for promocode_id in await self._local_cache.list_pending_redemptions():
            account = self._session.account
            if account is not None and account.has_promocode(promocode_id):
                dropped.append(promocode_id)
                await self._local_cache.remove_pending_redemption(promocode_id)
                continue

            try:
                promocode = await self._catalog.get_promocode(promocode_id)
            except (RemoteValueNotFoundError, RemoteValueUndecodableError):
                promocode = None

            consumed_here = (
                promocode is not None
                and promocode.is_used
                and await self._consumed_here(promocode_id)
            )
            if consumed_here:
                await self._session.add_promocode(promocode.mark_used())
                credited.append(promocode_id)
            else:
                dropped.append(promocode_id)
            await self._local_cache.remove_pending_redemption(promocode_id)

        if credited or dropped:
            logger.info(
                "promocode_reconcile_finished",
                account_id=self._session.device_id,
                credited=[str(promocode_id) for promocode_id in credited],
                dropped=[str(promocode_id) for promocode_id in dropped],
            )
        return PromoReconcileResult(credited=tuple(credited), dropped=tuple(dropped))

    async def _consumed_here(self, promocode_id: UUID) -> bool:
        return await self._catalog.get_promocode_consumer(promocode_id) == self._session.device_id
