class RemoteStoreError(Exception):
    pass


class RemoteValueNotFoundError(RemoteStoreError):
    pass


class PhotoTooLargeError(RemoteStoreError):
    pass


class RemoteValueUndecodableError(RemoteStoreError):
    pass
