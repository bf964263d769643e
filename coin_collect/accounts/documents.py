from __future__ import annotations

import json
from typing import Any
from uuid import UUID

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from coin_collect.accounts.types import Account, AccountStatus, Coin, CoinState, CoinType, Promocode

logger = structlog.get_logger(__name__)


class _Document(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class CoinDocument(_Document):
    id: UUID
    type: CoinType
    state: CoinState = CoinState.COLLECTED


class PromocodeDocument(_Document):
    id: UUID
    multiplier: int = Field(ge=1)
    is_used: bool = Field(default=False, alias="isUsed")


class AccountDocument(_Document):
    id: str = Field(min_length=1)
    email: str | None = None
    nickname: str | None = None
    coins: list[CoinDocument] = Field(default_factory=list)
    promocodes: list[PromocodeDocument] = Field(default_factory=list)
    status: AccountStatus = AccountStatus.GUEST
    auth_token: str | None = Field(default=None, alias="authToken")


def coin_to_document(coin: Coin) -> dict[str, Any]:
    return {"id": str(coin.id).upper(), "type": coin.type.value, "state": coin.state.value}


def promocode_to_document(promocode: Promocode) -> dict[str, Any]:
    return {
        "id": str(promocode.id).upper(),
        "multiplier": promocode.multiplier,
        "isUsed": promocode.is_used,
    }


def account_to_document(account: Account) -> dict[str, Any]:
    return {
        "id": account.id,
        "email": account.email,
        "nickname": account.nickname,
        "coins": [coin_to_document(coin) for coin in account.coins],
        "promocodes": [promocode_to_document(promocode) for promocode in account.promocodes],
        "status": account.status.value,
        "authToken": account.auth_token,
    }


def promocode_from_document(payload: dict[str, Any]) -> Promocode:
    document = PromocodeDocument.model_validate(payload)
    return Promocode(id=document.id, multiplier=document.multiplier, is_used=document.is_used)


def account_from_document(payload: dict[str, Any]) -> Account:
    document = AccountDocument.model_validate(payload)
    return Account(
        id=document.id,
        email=document.email,
        nickname=document.nickname,
        coins=tuple(Coin(id=coin.id, type=coin.type, state=coin.state) for coin in document.coins),
        promocodes=tuple(
            Promocode(id=promocode.id, multiplier=promocode.multiplier, is_used=promocode.is_used)
            for promocode in document.promocodes
        ),
        status=document.status,
        auth_token=document.auth_token,
    )


def account_from_document_or_none(payload: object) -> Account | None:
    if not isinstance(payload, dict):
        return None
    try:
        return account_from_document(payload)
    except (ValidationError, ValueError) as exc:
        logger.warning("account_document_undecodable", account_id=payload.get("id"), error=str(exc))
        return None


def encode_account(account: Account) -> str:
    return json.dumps(account_to_document(account), separators=(",", ":"))


def decode_account(raw: str | bytes | None) -> Account | None:
    if raw is None:
        return None
    try:
        payload = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.warning("account_document_invalid_json")
        return None
    return account_from_document_or_none(payload)
