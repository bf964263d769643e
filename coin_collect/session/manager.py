from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Iterable
from contextlib import aclosing
from dataclasses import replace

import structlog
from redis.exceptions import RedisError

from coin_collect.accounts.types import Account, AccountStatus, Coin, Promocode
from coin_collect.remote.errors import RemoteStoreError, RemoteValueNotFoundError
from coin_collect.remote.store import RemoteAccountStore
from coin_collect.services.local_cache import LocalSecureCache
from coin_collect.session.errors import (
    AccountHasNoPhotoError,
    IncorrectSignUpError,
    NicknameNotUniqueError,
    PhotoUploadFailedError,
    SessionError,
)
from coin_collect.session.events import Channel
from coin_collect.session.photos import DEFAULT_JPEG_QUALITY, prepare_photo_for_upload
from coin_collect.session.types import AuthenticationStatus, PendingCredential, SessionState, UserInfo

logger = structlog.get_logger(__name__)


class SessionManager:
    """Owns the current account of this device.

    The in-memory account is the value every reader sees. Each mutation
    builds a new ``Account``, swaps it in, stores it in the local cache and
    then pushes it to the remote store.
    """

    def __init__(
        self,
        *,
        device_id: str,
        remote: RemoteAccountStore,
        local_cache: LocalSecureCache,
        photo_quality: int = DEFAULT_JPEG_QUALITY,
    ) -> None:
        self._device_id = device_id
        self._remote = remote
        self._local_cache = local_cache
        self._photo_quality = photo_quality

        self._account: Account | None = None
        self._auth_token: str | None = None
        self._pending: PendingCredential | None = None
        self._cached_photo: bytes | None = None

        self.account_changes: Channel[Account | None] = Channel("account_changes")
        self.photo_updates: Channel[bool] = Channel("photo_updates")
        self.collected_coins_count: Channel[int] = Channel(
            "collected_coins_count",
            replay_last=True,
            initial=0,
        )

    @property
    def device_id(self) -> str:
        return self._device_id

    @property
    def account(self) -> Account | None:
        return self._account

    @property
    def auth_token(self) -> str | None:
        return self._auth_token

    @property
    def cached_photo(self) -> bytes | None:
        return self._cached_photo

    @property
    def is_guest(self) -> bool:
        status = self._account.status if self._account is not None else AccountStatus.GUEST
        return not (self._auth_token is not None and status is not AccountStatus.GUEST)

    @property
    def state(self) -> SessionState:
        if self._pending is not None:
            return SessionState.PENDING_SIGN_IN
        if not self.is_guest:
            return SessionState.SIGNED_IN
        return SessionState.GUEST

    async def load_initial_state(self) -> Account:
        self._auth_token = await self._local_cache.get_token()

        stored = await self._local_cache.get_account()
        if stored is not None and stored.id == self._device_id:
            logger.info("session_loaded_from_local_cache", account_id=stored.id)
            self._set_current(stored)
            return stored

        try:
            remote_account = await self._remote.get_account(self._device_id)
        except RemoteValueNotFoundError:
            remote_account = None
        except (RemoteStoreError, RedisError) as exc:
            # Remote is unreachable; start locally and let the next mutation sync it.
            logger.warning("session_remote_fetch_failed", account_id=self._device_id, error=str(exc))
            return await self._update(Account.fresh_guest(self._device_id), with_remote_update=False)

        if remote_account is not None:
            logger.info("session_loaded_from_remote", account_id=remote_account.id)
            return await self._update(remote_account, with_remote_update=False)

        logger.info("session_created_fresh_guest", account_id=self._device_id)
        return await self._update(Account.fresh_guest(self._device_id))

    async def sign_in(self, auth_token: str, email: str | None = None) -> AuthenticationStatus:
        if self._account is None:
            raise IncorrectSignUpError("no account is loaded")

        await self._local_cache.store_token(auth_token)
        self._auth_token = auth_token
        self._pending = PendingCredential(auth_token=auth_token, email=email)
        logger.info("sign_in_started", account_id=self._account.id)

        try:
            remote_account = await self._remote.get_account(self._device_id)
        except RemoteValueNotFoundError:
            remote_account = None
        except Exception:
            await self._discard_pending_credential()
            raise

        if remote_account is not None and remote_account.nickname:
            await self._complete_sign_in(nickname=self._account.nickname or remote_account.nickname)
            logger.info("sign_in_finished", account_id=self._device_id)
            return AuthenticationStatus.SIGNED_IN

        logger.info("sign_in_redirect_to_sign_up", account_id=self._device_id)
        return AuthenticationStatus.REDIRECT_TO_SIGN_UP

    async def sign_up(self, nickname: str, photo: bytes | None = None) -> bool:
        auth_token = self._pending.auth_token if self._pending is not None else self._auth_token
        if auth_token is None or self._account is None:
            raise IncorrectSignUpError("sign up requires an authenticated credential")

        logger.info("sign_up_started", account_id=self._account.id)
        try:
            if not await self._remote.is_nickname_unique(nickname):
                logger.info("sign_up_nickname_not_unique", account_id=self._account.id)
                raise NicknameNotUniqueError(nickname)

            if photo is not None:
                try:
                    uploaded = await self.update_photo(photo)
                except Exception as exc:
                    logger.warning("sign_up_photo_upload_failed", error=str(exc))
                    raise PhotoUploadFailedError from exc
                if not uploaded:
                    raise PhotoUploadFailedError
        except Exception:
            await self._discard_pending_credential()
            raise

        if self._pending is None:
            self._pending = PendingCredential(auth_token=auth_token, email=self._account.email)
        await self._complete_sign_in(nickname=nickname)
        logger.info("sign_up_finished", account_id=self._device_id, with_photo=photo is not None)
        return True

    async def sign_out(self) -> None:
        await self.update_status(AccountStatus.GUEST)
        await self._local_cache.delete_token()
        self._auth_token = None
        self._pending = None
        self._cached_photo = None
        logger.info("signed_out", account_id=self._device_id)

    async def delete_account(self) -> bool:
        account = self._account
        if account is None:
            raise SessionError("no account is loaded")

        try:
            await self._remote.delete_photo(account.id)
        except RemoteValueNotFoundError:
            logger.info("account_delete_without_photo", account_id=account.id)
        await self._remote.delete_account(account.id)

        await self._local_cache.delete_token()
        await self._local_cache.delete_account()
        self._auth_token = None
        self._pending = None
        self._cached_photo = None
        self._set_current(Account.fresh_guest(self._device_id))
        logger.info("account_deleted", account_id=account.id)
        return True

    async def update_photo(self, photo: bytes) -> bool:
        account = self._account
        if account is None:
            raise PhotoUploadFailedError("no account is loaded")

        photo_to_upload = await asyncio.to_thread(
            prepare_photo_for_upload,
            photo,
            quality=self._photo_quality,
        )
        uploaded = await self._remote.store_photo(account.id, photo_to_upload)
        if uploaded:
            self._cached_photo = photo_to_upload
            self.photo_updates.publish(True)
        return uploaded

    async def get_photo(self, *, ignore_cache: bool = False) -> bytes:
        if not ignore_cache and self._cached_photo is not None:
            return self._cached_photo

        if self._account is None or self._auth_token is None:
            raise AccountHasNoPhotoError

        photo = await self._remote.get_photo(self._account.id)
        self._cached_photo = photo
        return photo

    async def get_user_info(self, *, ignore_cached_photo: bool = False) -> UserInfo:
        if self.is_guest:
            return UserInfo(nickname=None, photo=None)

        nickname = self._account.nickname if self._account is not None else None
        try:
            photo = await self.get_photo(ignore_cache=ignore_cached_photo)
        except (SessionError, RemoteStoreError, RedisError) as exc:
            logger.info("user_info_without_photo", account_id=self._device_id, error=str(exc))
            return UserInfo(nickname=nickname, photo=None)
        return UserInfo(nickname=nickname, photo=photo)

    async def get_coins(self) -> tuple[Coin, ...]:
        if self._account is None:
            return ()
        return await self._remote.get_coins(self._account.id)

    async def observe_account(self) -> AsyncIterator[Account | None]:
        if self._account is None:
            yield None
            return

        async with aclosing(self._remote.observe_account(self._account.id)) as updates:
            async for account in updates:
                yield account

    async def add_coin(self, coin: Coin) -> Account | None:
        return await self.add_coins((coin,))

    async def add_coins(self, coins: Iterable[Coin]) -> Account | None:
        account = self._account
        if account is None:
            return None
        return await self._update(replace(account, coins=account.coins + tuple(coins)))

    async def add_promocode(self, promocode: Promocode) -> bool:
        account = self._account
        if account is None or account.has_promocode(promocode.id):
            return False
        await self._update(replace(account, promocodes=account.promocodes + (promocode,)))
        return True

    async def update_email(self, email: str) -> Account | None:
        return await self.update_profile(email=email)

    async def update_nickname(self, nickname: str) -> Account | None:
        return await self.update_profile(nickname=nickname)

    async def update_profile(
        self,
        *,
        email: str | None = None,
        nickname: str | None = None,
    ) -> Account | None:
        """Change profile fields; ``None`` leaves a field as it is."""
        account = self._account
        if account is None:
            return None
        return await self._update(
            replace(
                account,
                email=email if email is not None else account.email,
                nickname=nickname if nickname is not None else account.nickname,
            )
        )

    async def update_auth_token(self, auth_token: str | None) -> Account | None:
        account = self._account
        if account is None:
            return None
        status = AccountStatus.GUEST if auth_token is None else AccountStatus.SIGNED_IN
        return await self._update(replace(account, auth_token=auth_token, status=status))

    async def update_status(self, status: AccountStatus) -> Account | None:
        account = self._account
        if account is None:
            return None
        if status is AccountStatus.GUEST:
            return await self._update(replace(account, status=status, auth_token=None))

        auth_token = account.auth_token or self._auth_token
        if auth_token is None:
            raise IncorrectSignUpError("signed-in status requires an auth token")
        return await self._update(replace(account, status=status, auth_token=auth_token))

    async def _complete_sign_in(self, *, nickname: str | None) -> None:
        pending = self._pending
        account = self._account
        if pending is None or account is None:
            raise IncorrectSignUpError("no pending credential")

        # Cleared first so a failed push cannot leave a committed account pending.
        self._pending = None
        await self._update(
            replace(
                account,
                email=pending.email if pending.email is not None else account.email,
                nickname=nickname,
                status=AccountStatus.SIGNED_IN,
                auth_token=pending.auth_token,
            )
        )

    async def _discard_pending_credential(self) -> None:
        self._pending = None
        account = self._account
        if account is not None and account.is_signed_in:
            # Fall back to the credential of the committed sign-in.
            if account.auth_token is not None and self._auth_token != account.auth_token:
                self._auth_token = account.auth_token
                await self._local_cache.store_token(account.auth_token)
            return
        self._auth_token = None
        await self._local_cache.delete_token()

    def _set_current(self, account: Account | None) -> None:
        self._account = account
        self.account_changes.publish(account)

        coins_count = len(account.coins) if account is not None else 0
        if self.collected_coins_count.last_value != coins_count:
            self.collected_coins_count.publish(coins_count)

    async def _update(self, account: Account, *, with_remote_update: bool = True) -> Account:
        self._set_current(account)
        await self._local_cache.store_account(account)
        if with_remote_update:
            await self._remote.store_account(account)
        return account
