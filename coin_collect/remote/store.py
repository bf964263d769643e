from __future__ import annotations

import json
from collections.abc import AsyncIterator
from typing import Protocol
from uuid import UUID

import redis.asyncio as redis
import structlog
from pydantic import ValidationError

from coin_collect.accounts.documents import decode_account, encode_account, promocode_from_document
from coin_collect.accounts.types import Account, Coin, Promocode
from coin_collect.remote import keys
from coin_collect.remote.errors import (
    PhotoTooLargeError,
    RemoteValueNotFoundError,
    RemoteValueUndecodableError,
)

logger = structlog.get_logger(__name__)

USED_BY_FIELD = "usedBy"


class RemoteAccountStore(Protocol):
    async def store_account(self, account: Account) -> None: ...

    async def get_account(self, account_id: str) -> Account | None: ...

    def observe_account(self, account_id: str) -> AsyncIterator[Account | None]: ...

    async def get_all_accounts(self) -> list[Account]: ...

    async def is_nickname_unique(self, nickname: str) -> bool: ...

    async def delete_account(self, account_id: str) -> bool: ...

    async def store_photo(self, account_id: str, photo: bytes) -> bool: ...

    async def get_photo(self, account_id: str) -> bytes: ...

    async def delete_photo(self, account_id: str) -> bool: ...

    async def get_coins(self, account_id: str) -> tuple[Coin, ...]: ...

    async def get_promocodes(self) -> list[Promocode]: ...

    async def get_promocode(self, promocode_id: UUID) -> Promocode: ...

    async def get_promocode_consumer(self, promocode_id: UUID) -> str | None: ...

    async def mark_promocode_used(self, promocode_id: UUID, *, used_by: str) -> None: ...

    async def store_promocode(self, promocode: Promocode) -> None: ...

    async def ping(self) -> bool: ...


def _decode_hash(raw: dict[bytes | str, bytes | str]) -> dict[str, str]:
    decoded: dict[str, str] = {}
    for field_name, value in raw.items():
        if isinstance(field_name, bytes):
            field_name = field_name.decode()
        if isinstance(value, bytes):
            value = value.decode()
        decoded[field_name] = value
    return decoded


class RedisAccountStore:
    """Remote account store kept in Redis.

    Account documents are JSON strings under ``users/{id}`` and every write is
    echoed on the pub/sub channel of the same name. Promocodes are hashes so
    that marking one as used is a single-field write.
    """

    def __init__(self, client: redis.Redis) -> None:
        self._redis = client

    async def store_account(self, account: Account) -> None:
        payload = encode_account(account)
        await self._redis.set(keys.user_key(account.id), payload)
        await self._redis.publish(keys.user_channel(account.id), payload)
        logger.debug("remote_account_stored", account_id=account.id)

    async def get_account(self, account_id: str) -> Account | None:
        """Fetch one account document.

        Raises ``RemoteValueNotFoundError`` when no document exists. A
        document that exists but cannot be decoded comes back as ``None``.
        """
        raw = await self._redis.get(keys.user_key(account_id))
        if raw is None:
            raise RemoteValueNotFoundError(keys.user_key(account_id))
        return decode_account(raw)

    async def _get_account_or_none(self, account_id: str) -> Account | None:
        return decode_account(await self._redis.get(keys.user_key(account_id)))

    async def observe_account(self, account_id: str) -> AsyncIterator[Account | None]:
        channel = keys.user_channel(account_id)
        pubsub = self._redis.pubsub()
        await pubsub.subscribe(channel)
        logger.info("remote_account_observe_started", account_id=account_id)
        try:
            yield await self._get_account_or_none(account_id)
            async for message in pubsub.listen():
                if message.get("type") != "message":
                    continue
                yield decode_account(message.get("data"))
        finally:
            await pubsub.unsubscribe(channel)
            await pubsub.aclose()
            logger.info("remote_account_observe_stopped", account_id=account_id)

    async def get_all_accounts(self) -> list[Account]:
        account_keys = [key async for key in self._redis.scan_iter(match=keys.users_pattern())]
        if not account_keys:
            return []
        raw_documents = await self._redis.mget(account_keys)
        accounts: list[Account] = []
        for raw in raw_documents:
            account = decode_account(raw)
            if account is not None:
                accounts.append(account)
        return accounts

    async def is_nickname_unique(self, nickname: str) -> bool:
        accounts = await self.get_all_accounts()
        return not any(account.nickname == nickname for account in accounts)

    async def delete_account(self, account_id: str) -> bool:
        await self._redis.delete(keys.user_key(account_id))
        await self._redis.publish(keys.user_channel(account_id), "null")
        logger.info("remote_account_deleted", account_id=account_id)
        return True

    async def store_photo(self, account_id: str, photo: bytes) -> bool:
        if len(photo) > keys.MAX_PHOTO_SIZE_BYTES:
            raise PhotoTooLargeError(f"photo is {len(photo)} bytes")
        logger.info("photo_upload_started", account_id=account_id, size=len(photo))
        await self._redis.set(keys.user_photo_key(account_id), photo)
        logger.info("photo_uploaded", account_id=account_id)
        return True

    async def get_photo(self, account_id: str) -> bytes:
        photo = await self._redis.get(keys.user_photo_key(account_id))
        if photo is None:
            raise RemoteValueNotFoundError(keys.user_photo_key(account_id))
        if len(photo) > keys.MAX_PHOTO_SIZE_BYTES:
            raise PhotoTooLargeError(f"photo is {len(photo)} bytes")
        return bytes(photo)

    async def delete_photo(self, account_id: str) -> bool:
        deleted = await self._redis.delete(keys.user_photo_key(account_id))
        if not deleted:
            raise RemoteValueNotFoundError(keys.user_photo_key(account_id))
        return True

    async def get_coins(self, account_id: str) -> tuple[Coin, ...]:
        account = await self._get_account_or_none(account_id)
        if account is None:
            return ()
        return account.coins

    async def get_promocodes(self) -> list[Promocode]:
        promocodes: list[Promocode] = []
        async for key in self._redis.scan_iter(match=keys.promocodes_pattern()):
            raw = await self._redis.hgetall(key)
            if not raw:
                continue
            try:
                promocodes.append(promocode_from_document(_decode_hash(raw)))
            except ValidationError as exc:
                logger.warning("promocode_document_undecodable", key=str(key), error=str(exc))
        return promocodes

    async def get_promocode(self, promocode_id: UUID) -> Promocode:
        key = keys.promocode_key(str(promocode_id))
        raw = await self._redis.hgetall(key)
        if not raw:
            raise RemoteValueNotFoundError(key)
        try:
            return promocode_from_document(_decode_hash(raw))
        except ValidationError as exc:
            logger.warning("promocode_document_undecodable", key=key, error=str(exc))
            raise RemoteValueUndecodableError(key) from exc

    async def get_promocode_consumer(self, promocode_id: UUID) -> str | None:
        """Return the account id recorded when the promocode was marked used."""
        raw = await self._redis.hget(keys.promocode_key(str(promocode_id)), USED_BY_FIELD)
        if raw is None:
            return None
        return raw.decode() if isinstance(raw, bytes) else raw

    async def mark_promocode_used(self, promocode_id: UUID, *, used_by: str) -> None:
        # Both fields land in one HSET so the consumer is never missing from a used code.
        await self._redis.hset(
            keys.promocode_key(str(promocode_id)),
            mapping={"isUsed": json.dumps(True), USED_BY_FIELD: used_by},
        )

    async def store_promocode(self, promocode: Promocode) -> None:
        await self._redis.hset(
            keys.promocode_key(str(promocode.id)),
            mapping={
                "id": str(promocode.id),
                "multiplier": str(promocode.multiplier),
                "isUsed": json.dumps(promocode.is_used),
            },
        )

    async def ping(self) -> bool:
        return bool(await self._redis.ping())
