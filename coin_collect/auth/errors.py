class AuthenticationError(Exception):
    pass


class NoCredentialsError(AuthenticationError):
    pass
