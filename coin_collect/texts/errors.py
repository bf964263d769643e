from __future__ import annotations

from coin_collect.auth.errors import NoCredentialsError
from coin_collect.economy.promo.errors import (
    PromoAlreadyRedeemedError,
    PromoAlreadyUsedError,
    PromoInvalidFormatError,
)
from coin_collect.session.errors import (
    AccountHasNoPhotoError,
    NicknameNotUniqueError,
    PhotoUploadFailedError,
)
from coin_collect.texts.en import TEXTS_EN

_ERROR_TEXT_KEYS: tuple[tuple[type[Exception], str], ...] = (
    (PromoInvalidFormatError, "msg.promo.error.invalid_format"),
    (PromoAlreadyRedeemedError, "msg.promo.error.already_redeemed"),
    (PromoAlreadyUsedError, "msg.promo.error.already_used"),
    (AccountHasNoPhotoError, "msg.session.error.no_photo"),
    (PhotoUploadFailedError, "msg.session.error.photo_upload"),
    (NicknameNotUniqueError, "msg.session.error.nickname_taken"),
    (NoCredentialsError, "msg.system.error"),
)


def user_error_text(error: BaseException) -> str:
    for error_type, text_key in _ERROR_TEXT_KEYS:
        if isinstance(error, error_type):
            return TEXTS_EN[text_key]
    return TEXTS_EN["msg.system.error"]
