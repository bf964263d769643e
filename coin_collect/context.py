from __future__ import annotations

from dataclasses import dataclass

import structlog
from redis.exceptions import RedisError
from sqlalchemy.ext.asyncio import AsyncEngine

from coin_collect.auth.identity import IdentityProvider
from coin_collect.auth.service import AuthenticationService
from coin_collect.core.config import Settings, get_settings
from coin_collect.core.device import resolve_device_id
from coin_collect.core.logging import configure_logging
from coin_collect.db.session import create_local_cache_engine, create_schema, create_session_factory
from coin_collect.economy.promo.catalog import PromocodesService
from coin_collect.economy.promo.reconciliation import PromocodeReconciler
from coin_collect.economy.promo.service import PromocodeRedemptionService
from coin_collect.economy.rewards.service import RewardLedger
from coin_collect.remote.errors import RemoteStoreError
from coin_collect.remote.redis_client import close_redis, init_redis
from coin_collect.remote.store import RedisAccountStore
from coin_collect.services.local_cache import SignedLocalCache
from coin_collect.session.manager import SessionManager

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class AppContext:
    settings: Settings
    remote: RedisAccountStore
    local_cache: SignedLocalCache
    session: SessionManager
    rewards: RewardLedger
    promocodes: PromocodesService
    redemption: PromocodeRedemptionService
    reconciler: PromocodeReconciler
    auth: AuthenticationService
    local_cache_engine: AsyncEngine

    async def close(self) -> None:
        await close_redis()
        await self.local_cache_engine.dispose()


async def build_context(
    identity_provider: IdentityProvider,
    settings: Settings | None = None,
) -> AppContext:
    """Wire every collaborator and load the device account."""
    settings = settings or get_settings()
    configure_logging(settings.log_level, app_env=settings.app_env)

    remote = RedisAccountStore(await init_redis(settings.redis_url))

    engine = create_local_cache_engine(settings.local_cache_url)
    await create_schema(engine)
    local_cache = SignedLocalCache(
        create_session_factory(engine),
        secret=settings.local_cache_secret,
    )

    session = SessionManager(
        device_id=resolve_device_id(settings),
        remote=remote,
        local_cache=local_cache,
        photo_quality=settings.photo_jpeg_quality,
    )
    catalog = PromocodesService(remote=remote, session=session)
    context = AppContext(
        settings=settings,
        remote=remote,
        local_cache=local_cache,
        session=session,
        rewards=RewardLedger(session),
        promocodes=catalog,
        redemption=PromocodeRedemptionService(
            catalog=catalog,
            session=session,
            local_cache=local_cache,
            submit_delay_seconds=settings.promo_submit_delay_seconds,
        ),
        reconciler=PromocodeReconciler(catalog=catalog, session=session, local_cache=local_cache),
        auth=AuthenticationService(session=session, identity_provider=identity_provider),
        local_cache_engine=engine,
    )

    await session.load_initial_state()
    try:
        await context.reconciler.reconcile()
    except (RemoteStoreError, RedisError) as exc:
        # Pending redemptions stay queued for the next launch.
        logger.warning("promocode_reconcile_failed", account_id=session.device_id, error=str(exc))
    await context.auth.authentication_app_launch()

    logger.info("app_context_ready", account_id=session.device_id, state=session.state.value)
    return context
