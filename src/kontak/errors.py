"""Exception types shared across layers."""


class KontakError(Exception):
    """Base class for failures raised by kontak adapters."""


class ContactFormatError(ValueError):
    """Import payload could not be decoded into contacts."""


class StoreError(KontakError):
    """The contact store rejected or failed a request."""


class StorageError(KontakError):
    """The backup storage rejected or failed a request."""


class OperationBusy(KontakError):
    """The same operation is already running for this user."""

    def __init__(self, operation: str) -> None:
        super().__init__(f"Operation already in progress: {operation}")
        self.operation = operation


class PhoneTaken(StoreError):
    """The store's uniqueness constraint rejected a phone already in use."""

    def __init__(self, phone: str) -> None:
        super().__init__(f"Phone already in use: {phone}")
        self.phone = phone
