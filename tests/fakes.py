from __future__ import annotations

import asyncio
import fnmatch
from collections.abc import AsyncIterator
from uuid import UUID

from coin_collect.accounts.types import Account, Coin, Promocode
from coin_collect.auth.identity import CredentialState
from coin_collect.remote.errors import RemoteValueNotFoundError


class FakeRemoteStore:
    def __init__(
        self,
        *,
        accounts: dict[str, Account] | None = None,
        promocodes: list[Promocode] | None = None,
    ) -> None:
        self.accounts: dict[str, Account] = dict(accounts or {})
        self.photos: dict[str, bytes] = {}
        self.promocodes: dict[UUID, Promocode] = {promocode.id: promocode for promocode in promocodes or []}
        self.consumers: dict[UUID, str] = {}
        self.calls: list[str] = []
        self.stored: list[Account] = []
        self.errors: dict[str, Exception] = {}
        self.store_photo_result = True
        self.observed_updates: list[Account | None] = []

    def _record(self, name: str) -> None:
        self.calls.append(name)
        error = self.errors.get(name)
        if error is not None:
            raise error

    async def store_account(self, account: Account) -> None:
        self._record("store_account")
        self.accounts[account.id] = account
        self.stored.append(account)

    async def get_account(self, account_id: str) -> Account | None:
        self._record("get_account")
        if account_id not in self.accounts:
            raise RemoteValueNotFoundError(account_id)
        return self.accounts[account_id]

    async def observe_account(self, account_id: str) -> AsyncIterator[Account | None]:
        self._record("observe_account")
        yield self.accounts.get(account_id)
        for update in self.observed_updates:
            yield update

    async def get_all_accounts(self) -> list[Account]:
        self._record("get_all_accounts")
        return list(self.accounts.values())

    async def is_nickname_unique(self, nickname: str) -> bool:
        self._record("is_nickname_unique")
        return not any(account.nickname == nickname for account in self.accounts.values())

    async def delete_account(self, account_id: str) -> bool:
        self._record("delete_account")
        self.accounts.pop(account_id, None)
        return True

    async def store_photo(self, account_id: str, photo: bytes) -> bool:
        self._record("store_photo")
        if self.store_photo_result:
            self.photos[account_id] = photo
        return self.store_photo_result

    async def get_photo(self, account_id: str) -> bytes:
        self._record("get_photo")
        if account_id not in self.photos:
            raise RemoteValueNotFoundError(account_id)
        return self.photos[account_id]

    async def delete_photo(self, account_id: str) -> bool:
        self._record("delete_photo")
        if account_id not in self.photos:
            raise RemoteValueNotFoundError(account_id)
        del self.photos[account_id]
        return True

    async def get_coins(self, account_id: str) -> tuple[Coin, ...]:
        self._record("get_coins")
        account = self.accounts.get(account_id)
        return account.coins if account is not None else ()

    async def get_promocodes(self) -> list[Promocode]:
        self._record("get_promocodes")
        return list(self.promocodes.values())

    async def get_promocode(self, promocode_id: UUID) -> Promocode:
        self._record("get_promocode")
        if promocode_id not in self.promocodes:
            raise RemoteValueNotFoundError(str(promocode_id))
        return self.promocodes[promocode_id]

    async def get_promocode_consumer(self, promocode_id: UUID) -> str | None:
        self._record("get_promocode_consumer")
        return self.consumers.get(promocode_id)

    async def mark_promocode_used(self, promocode_id: UUID, *, used_by: str) -> None:
        self._record("mark_promocode_used")
        self.promocodes[promocode_id] = self.promocodes[promocode_id].mark_used()
        self.consumers[promocode_id] = used_by

    async def store_promocode(self, promocode: Promocode) -> None:
        self._record("store_promocode")
        self.promocodes[promocode.id] = promocode

    async def ping(self) -> bool:
        self._record("ping")
        return True


class FakeLocalCache:
    def __init__(self, *, account: Account | None = None, token: str | None = None) -> None:
        self.account = account
        self.token = token
        self.pending: list[UUID] = []
        self.calls: list[str] = []

    async def get_account(self) -> Account | None:
        self.calls.append("get_account")
        return self.account

    async def store_account(self, account: Account) -> None:
        self.calls.append("store_account")
        self.account = account

    async def delete_account(self) -> None:
        self.calls.append("delete_account")
        self.account = None

    async def get_token(self) -> str | None:
        self.calls.append("get_token")
        return self.token

    async def store_token(self, token: str) -> None:
        self.calls.append("store_token")
        self.token = token

    async def delete_token(self) -> None:
        self.calls.append("delete_token")
        self.token = None

    async def add_pending_redemption(self, promocode_id: UUID) -> None:
        self.calls.append("add_pending_redemption")
        if promocode_id not in self.pending:
            self.pending.append(promocode_id)

    async def remove_pending_redemption(self, promocode_id: UUID) -> None:
        self.calls.append("remove_pending_redemption")
        if promocode_id in self.pending:
            self.pending.remove(promocode_id)

    async def list_pending_redemptions(self) -> list[UUID]:
        self.calls.append("list_pending_redemptions")
        return list(self.pending)


class FakeIdentityProvider:
    def __init__(self, state: CredentialState = CredentialState.AUTHORIZED) -> None:
        self.state = state
        self.checked: list[str] = []

    async def get_credential_state(self, user_identifier: str) -> CredentialState:
        self.checked.append(user_identifier)
        return self.state


class FakePubSub:
    def __init__(self, redis: FakeRedis) -> None:
        self._redis = redis
        self.channels: set[str] = set()
        self.messages: asyncio.Queue[dict[str, object]] = asyncio.Queue()
        self.closed = False

    async def subscribe(self, *channels: str) -> None:
        for channel in channels:
            self.channels.add(channel)
            self._redis.subscribers.append(self)
            await self.messages.put({"type": "subscribe", "channel": channel.encode(), "data": 1})

    async def unsubscribe(self, *channels: str) -> None:
        for channel in channels:
            self.channels.discard(channel)
        if self in self._redis.subscribers:
            self._redis.subscribers.remove(self)

    async def listen(self) -> AsyncIterator[dict[str, object]]:
        while True:
            yield await self.messages.get()

    async def aclose(self) -> None:
        self.closed = True


class FakeRedis:
    """In-memory stand-in for the subset of ``redis.asyncio.Redis`` the store uses."""

    def __init__(self) -> None:
        self.values: dict[str, bytes] = {}
        self.hashes: dict[str, dict[bytes, bytes]] = {}
        self.published: list[tuple[str, bytes]] = []
        self.subscribers: list[FakePubSub] = []
        self.pubsubs: list[FakePubSub] = []

    @staticmethod
    def _encode(value: str | bytes) -> bytes:
        return value.encode() if isinstance(value, str) else bytes(value)

    async def get(self, key: str) -> bytes | None:
        return self.values.get(key)

    async def set(self, key: str, value: str | bytes) -> bool:
        self.values[key] = self._encode(value)
        return True

    async def mget(self, keys: list[str | bytes]) -> list[bytes | None]:
        return [self.values.get(key.decode() if isinstance(key, bytes) else key) for key in keys]

    async def delete(self, *keys: str) -> int:
        deleted = 0
        for key in keys:
            if self.values.pop(key, None) is not None or self.hashes.pop(key, None) is not None:
                deleted += 1
        return deleted

    async def publish(self, channel: str, message: str | bytes) -> int:
        payload = self._encode(message)
        self.published.append((channel, payload))
        receivers = [pubsub for pubsub in self.subscribers if channel in pubsub.channels]
        for pubsub in receivers:
            await pubsub.messages.put({"type": "message", "channel": channel.encode(), "data": payload})
        return len(receivers)

    async def scan_iter(self, match: str | None = None) -> AsyncIterator[bytes]:
        for key in sorted([*self.values, *self.hashes]):
            if match is None or fnmatch.fnmatchcase(key, match):
                yield key.encode()

    async def hget(self, key: str, field_name: str) -> bytes | None:
        return self.hashes.get(key, {}).get(field_name.encode())

    async def hgetall(self, key: str | bytes) -> dict[bytes, bytes]:
        name = key.decode() if isinstance(key, bytes) else key
        return dict(self.hashes.get(name, {}))

    async def hset(
        self,
        name: str,
        key: str | None = None,
        value: str | bytes | None = None,
        mapping: dict[str, str | bytes] | None = None,
    ) -> int:
        fields = self.hashes.setdefault(name, {})
        items = dict(mapping or {})
        if key is not None:
            items[key] = value
        added = 0
        for field_name, field_value in items.items():
            encoded = self._encode(field_name)
            added += encoded not in fields
            fields[encoded] = self._encode(field_value)
        return added

    def pubsub(self) -> FakePubSub:
        pubsub = FakePubSub(self)
        self.pubsubs.append(pubsub)
        return pubsub

    async def ping(self) -> bool:
        return True
