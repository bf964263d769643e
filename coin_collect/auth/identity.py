from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol


class CredentialState(str, Enum):
    AUTHORIZED = "AUTHORIZED"
    REVOKED = "REVOKED"
    NOT_FOUND = "NOT_FOUND"
    TRANSFERRED = "TRANSFERRED"


@dataclass(frozen=True, slots=True)
class IdentityCredential:
    """Opaque result of a successful external sign-in."""

    user_identifier: str
    email: str | None = None


class IdentityProvider(Protocol):
    async def get_credential_state(self, user_identifier: str) -> CredentialState: ...
