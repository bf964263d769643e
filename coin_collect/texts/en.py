TEXTS_EN: dict[str, str] = {
    "msg.system.error": "Something went wrong. Please try again.",
    "msg.promo.error.invalid_format": "Promocode format is invalid, please check and try again.",
    "msg.promo.error.already_redeemed": "You've already used this promocode 🙂",
    "msg.promo.error.already_used": "Promocode was already used by someone else 😢",
    "msg.session.error.no_photo": "You do not have a photo. Please try again.",
    "msg.session.error.photo_upload": "Upload of photo failed, please try again.",
    "msg.session.error.nickname_taken": "This nickname is already taken, please try another one.",
}
