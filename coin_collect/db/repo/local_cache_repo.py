from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from coin_collect.db.models.local_cache_entries import LocalCacheEntry


class LocalCacheRepo:
    @staticmethod
    async def get(session: AsyncSession, key: str) -> LocalCacheEntry | None:
        return await session.get(LocalCacheEntry, key)

    @staticmethod
    async def upsert(
        session: AsyncSession,
        *,
        key: str,
        payload: str,
        signature: str,
        now_utc: datetime,
    ) -> LocalCacheEntry:
        entry = await session.get(LocalCacheEntry, key)
        if entry is None:
            entry = LocalCacheEntry(key=key, payload=payload, signature=signature, updated_at=now_utc)
            session.add(entry)
        else:
            entry.payload = payload
            entry.signature = signature
            entry.updated_at = now_utc
        await session.flush()
        return entry

    @staticmethod
    async def delete(session: AsyncSession, key: str) -> int:
        result = await session.execute(delete(LocalCacheEntry).where(LocalCacheEntry.key == key))
        return result.rowcount or 0

    @staticmethod
    async def list_by_prefix(session: AsyncSession, prefix: str) -> list[LocalCacheEntry]:
        stmt = (
            select(LocalCacheEntry)
            .where(LocalCacheEntry.key.startswith(prefix, autoescape=True))
            .order_by(LocalCacheEntry.updated_at, LocalCacheEntry.key)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())
