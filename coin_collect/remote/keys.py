from __future__ import annotations

USERS = "users"
USER_PROFILE_IMAGES = "userProfileImages"
PROMOCODES = "promocodes"

MAX_PHOTO_SIZE_BYTES = 10 * 1024 * 1024


def user_key(account_id: str) -> str:
    return f"{USERS}/{account_id}"


def user_channel(account_id: str) -> str:
    return f"{USERS}/{account_id}"


def user_photo_key(account_id: str) -> str:
    return f"{USER_PROFILE_IMAGES}/{account_id}.jpg"


def promocode_key(promocode_id: str) -> str:
    return f"{PROMOCODES}/{promocode_id.lower()}"


def users_pattern() -> str:
    return f"{USERS}/*"


def promocodes_pattern() -> str:
    return f"{PROMOCODES}/*"
