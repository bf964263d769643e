from __future__ import annotations

import hashlib
import hmac
import json
from datetime import datetime, timezone
from typing import Protocol
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from coin_collect.accounts.documents import decode_account, encode_account
from coin_collect.accounts.types import Account
from coin_collect.db.repo.local_cache_repo import LocalCacheRepo

logger = structlog.get_logger(__name__)

ACCOUNT_KEY = "account"
AUTH_TOKEN_KEY = "auth_token"
PENDING_REDEMPTION_PREFIX = "pending_redemption:"


class LocalSecureCache(Protocol):
    async def get_account(self) -> Account | None: ...

    async def store_account(self, account: Account) -> None: ...

    async def delete_account(self) -> None: ...

    async def get_token(self) -> str | None: ...

    async def store_token(self, token: str) -> None: ...

    async def delete_token(self) -> None: ...

    async def add_pending_redemption(self, promocode_id: UUID) -> None: ...

    async def remove_pending_redemption(self, promocode_id: UUID) -> None: ...

    async def list_pending_redemptions(self) -> list[UUID]: ...


def sign_payload(*, key: str, payload: str, secret: str) -> str:
    digest = hmac.new(
        secret.encode("utf-8"),
        f"{key}\n{payload}".encode("utf-8"),
        hashlib.sha256,
    )
    return digest.hexdigest()


class SignedLocalCache:
    """Device-local store for the account snapshot and auth token.

    Entries are HMAC-signed; an entry whose signature does not match is
    reported as absent.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], *, secret: str) -> None:
        self._session_factory = session_factory
        self._secret = secret

    async def _read(self, key: str) -> str | None:
        async with self._session_factory() as session:
            entry = await LocalCacheRepo.get(session, key)
        if entry is None:
            return None
        expected = sign_payload(key=key, payload=entry.payload, secret=self._secret)
        if not hmac.compare_digest(expected, entry.signature):
            logger.warning("local_cache_tampered", key=key)
            return None
        return entry.payload

    async def _write(self, key: str, payload: str) -> None:
        async with self._session_factory.begin() as session:
            await LocalCacheRepo.upsert(
                session,
                key=key,
                payload=payload,
                signature=sign_payload(key=key, payload=payload, secret=self._secret),
                now_utc=datetime.now(timezone.utc),
            )

    async def _delete(self, key: str) -> None:
        async with self._session_factory.begin() as session:
            await LocalCacheRepo.delete(session, key)

    async def get_account(self) -> Account | None:
        return decode_account(await self._read(ACCOUNT_KEY))

    async def store_account(self, account: Account) -> None:
        await self._write(ACCOUNT_KEY, encode_account(account))

    async def delete_account(self) -> None:
        await self._delete(ACCOUNT_KEY)

    async def get_token(self) -> str | None:
        raw = await self._read(AUTH_TOKEN_KEY)
        if raw is None:
            return None
        return json.loads(raw)

    async def store_token(self, token: str) -> None:
        await self._write(AUTH_TOKEN_KEY, json.dumps(token))

    async def delete_token(self) -> None:
        await self._delete(AUTH_TOKEN_KEY)

    async def add_pending_redemption(self, promocode_id: UUID) -> None:
        await self._write(f"{PENDING_REDEMPTION_PREFIX}{promocode_id}", json.dumps(str(promocode_id)))

    async def remove_pending_redemption(self, promocode_id: UUID) -> None:
        await self._delete(f"{PENDING_REDEMPTION_PREFIX}{promocode_id}")

    async def list_pending_redemptions(self) -> list[UUID]:
        async with self._session_factory() as session:
            entries = await LocalCacheRepo.list_by_prefix(session, PENDING_REDEMPTION_PREFIX)

        pending: list[UUID] = []
        for entry in entries:
            expected = sign_payload(key=entry.key, payload=entry.payload, secret=self._secret)
            if not hmac.compare_digest(expected, entry.signature):
                logger.warning("local_cache_tampered", key=entry.key)
                continue
            pending.append(UUID(json.loads(entry.payload)))
        return pending
