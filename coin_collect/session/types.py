from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SessionState(str, Enum):
    GUEST = "GUEST"
    PENDING_SIGN_IN = "PENDING_SIGN_IN"
    SIGNED_IN = "SIGNED_IN"


class AuthenticationStatus(str, Enum):
    SIGNED_IN = "SIGNED_IN"
    REDIRECT_TO_SIGN_UP = "REDIRECT_TO_SIGN_UP"


@dataclass(frozen=True, slots=True)
class UserInfo:
    nickname: str | None
    photo: bytes | None


@dataclass(frozen=True, slots=True)
class PendingCredential:
    auth_token: str
    email: str | None
