from __future__ import annotations

import structlog

from coin_collect.auth.errors import NoCredentialsError
from coin_collect.auth.identity import CredentialState, IdentityCredential, IdentityProvider
from coin_collect.session.manager import SessionManager
from coin_collect.session.types import AuthenticationStatus

logger = structlog.get_logger(__name__)


class AuthenticationService:
    def __init__(self, *, session: SessionManager, identity_provider: IdentityProvider) -> None:
        self._session = session
        self._identity_provider = identity_provider

    async def authentication_app_launch(self) -> CredentialState | None:
        """Sign out when the identity provider revoked the cached credential."""
        auth_token = self._session.auth_token
        if auth_token is None:
            return None

        state = await self._identity_provider.get_credential_state(auth_token)
        if state is CredentialState.REVOKED:
            logger.info("credential_revoked", account_id=self._session.device_id)
            await self._session.sign_out()
        return state

    async def authenticate(self, credential: IdentityCredential | None) -> AuthenticationStatus:
        if credential is None or not credential.user_identifier:
            raise NoCredentialsError
        return await self._session.sign_in(credential.user_identifier, credential.email)

    async def authenticate_session(self, nickname: str, profile_image: bytes | None = None) -> bool:
        return await self._session.sign_up(nickname, profile_image)
