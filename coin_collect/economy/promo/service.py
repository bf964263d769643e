from __future__ import annotations

import asyncio
import re
from uuid import UUID

import structlog

from coin_collect.economy.promo.catalog import PromocodesService
from coin_collect.economy.promo.errors import (
    PromoAlreadyRedeemedError,
    PromoAlreadyUsedError,
    PromoInvalidFormatError,
)
from coin_collect.economy.promo.types import PromoRedeemResult
from coin_collect.services.local_cache import LocalSecureCache
from coin_collect.session.manager import SessionManager

logger = structlog.get_logger(__name__)

_PROMOCODE_PATTERN = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)


def parse_promocode_id(raw_code: str) -> UUID:
    value = raw_code.strip()
    if not value or _PROMOCODE_PATTERN.fullmatch(value) is None:
        raise PromoInvalidFormatError
    return UUID(value)


class PromocodeRedemptionService:
    def __init__(
        self,
        *,
        catalog: PromocodesService,
        session: SessionManager,
        local_cache: LocalSecureCache,
        submit_delay_seconds: float = 0.0,
    ) -> None:
        self._catalog = catalog
        self._session = session
        self._local_cache = local_cache
        self._submit_delay_seconds = submit_delay_seconds

    async def submit(self, raw_code: str) -> PromoRedeemResult:
        """Validate, consume and credit one promocode.

        Marking the promocode as used is global and irreversible. The id is
        kept as a pending redemption in the local cache until the account has
        been credited, so an interrupted redemption can be finished by
        ``PromocodeReconciler`` on the next launch.
        """
        if self._submit_delay_seconds > 0:
            await asyncio.sleep(self._submit_delay_seconds)

        promocode_id = parse_promocode_id(raw_code)

        user_promocodes = await self._catalog.get_user_promocodes()
        if any(promocode.id == promocode_id for promocode in user_promocodes):
            raise PromoAlreadyRedeemedError

        promocode = await self._catalog.get_promocode(promocode_id)
        if promocode.is_used:
            raise PromoAlreadyUsedError

        await self._local_cache.add_pending_redemption(promocode_id)
        await self._catalog.use_promocode(promocode_id)

        # The catalog copy still says unused; credit the account with the used state.
        credited = await self._session.add_promocode(promocode.mark_used())
        await self._local_cache.remove_pending_redemption(promocode_id)

        logger.info(
            "promocode_redeemed",
            account_id=self._session.device_id,
            promocode_id=str(promocode_id),
            multiplier=promocode.multiplier,
            credited=credited,
        )
        return PromoRedeemResult(
            promocode_id=promocode_id,
            multiplier=promocode.multiplier,
            credited=credited,
        )
