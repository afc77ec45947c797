class DomainError(Exception):
    """Base class for recoverable finance-tracker errors."""


class InvalidAmount(DomainError, ValueError):
    """Raw amount input is not a usable magnitude for the entry kind."""


class StorageReadFailure(DomainError):
    """Previously saved data could not be retrieved from the store."""


class StorageWriteFailure(DomainError):
    """The updated list could not be durably written to the store."""
