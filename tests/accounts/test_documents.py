from __future__ import annotations

import json
from uuid import UUID

from coin_collect.accounts.documents import (
    account_from_document,
    account_to_document,
    decode_account,
    encode_account,
    promocode_from_document,
)
from coin_collect.accounts.types import Account, AccountStatus, Coin, CoinState, CoinType, Promocode

COIN_ID = UUID("0b8c7a8e-2f1d-4c39-9b5e-3c1f6f4a7d21")
PROMOCODE_ID = UUID("5d2e9a40-7c11-4b6f-8e0a-9f3b2c1d4e5f")


def _signed_in_account() -> Account:
    return Account(
        id="DEVICE-1",
        email="player@example.com",
        nickname="alice",
        coins=(Coin(id=COIN_ID, type=CoinType.SILVER),),
        promocodes=(Promocode(id=PROMOCODE_ID, multiplier=3, is_used=True),),
        status=AccountStatus.SIGNED_IN,
        auth_token="001234.abcdef.0001",
    )


def test_account_to_document_uses_wire_field_names() -> None:
    document = account_to_document(_signed_in_account())

    assert document == {
        "id": "DEVICE-1",
        "email": "player@example.com",
        "nickname": "alice",
        "coins": [{"id": str(COIN_ID).upper(), "type": "silver", "state": "collected"}],
        "promocodes": [{"id": str(PROMOCODE_ID).upper(), "multiplier": 3, "isUsed": True}],
        "status": "signedIn",
        "authToken": "001234.abcdef.0001",
    }


def test_account_from_document_with_missing_optional_fields() -> None:
    account = account_from_document({"id": "DEVICE-2"})

    assert account == Account.fresh_guest("DEVICE-2")


def test_account_from_document_parses_nested_records() -> None:
    account = account_from_document(
        {
            "id": "DEVICE-3",
            "coins": [{"id": str(COIN_ID), "type": "gold", "state": "collected"}],
            "promocodes": [{"id": str(PROMOCODE_ID), "multiplier": 2, "isUsed": False}],
            "status": "guest",
        }
    )

    assert account.coins == (Coin(id=COIN_ID, type=CoinType.GOLD, state=CoinState.COLLECTED),)
    assert account.promocodes == (Promocode(id=PROMOCODE_ID, multiplier=2, is_used=False),)


def test_encode_then_decode_reproduces_account() -> None:
    account = _signed_in_account()

    assert decode_account(encode_account(account)) == account


def test_decode_account_returns_none_for_garbage() -> None:
    assert decode_account(None) is None
    assert decode_account("not json") is None
    assert decode_account("null") is None
    assert decode_account(json.dumps({"id": "DEVICE-1", "coins": [{"id": "x"}]})) is None


def test_decode_account_returns_none_for_broken_invariant() -> None:
    raw = json.dumps({"id": "DEVICE-1", "status": "signedIn"})

    assert decode_account(raw) is None


def test_promocode_from_hash_fields() -> None:
    promocode = promocode_from_document(
        {"id": str(PROMOCODE_ID), "multiplier": "4", "isUsed": "true"}
    )

    assert promocode == Promocode(id=PROMOCODE_ID, multiplier=4, is_used=True)
