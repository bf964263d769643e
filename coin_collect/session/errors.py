class SessionError(Exception):
    pass


class IncorrectSignUpError(SessionError):
    pass


class NicknameNotUniqueError(SessionError):
    pass


class PhotoUploadFailedError(SessionError):
    pass


class AccountHasNoPhotoError(SessionError):
    pass
