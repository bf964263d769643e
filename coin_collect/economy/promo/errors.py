class PromoError(Exception):
    pass


class PromoInvalidFormatError(PromoError):
    pass


class PromoAlreadyRedeemedError(PromoError):
    pass


class PromoAlreadyUsedError(PromoError):
    pass
