"""Project error hierarchy."""


class PrefStoreError(Exception):
    """Base error."""


class InvalidStoreNameError(PrefStoreError, ValueError):
    """Raised when a store name cannot be mapped to durable storage safely."""


class CommitFailedError(PrefStoreError):
    """Raised when a staged write did not reach durable storage."""


class CorruptStoreError(PrefStoreError):
    """Raised when existing store contents cannot be decoded."""


class BackendUnavailableError(PrefStoreError):
    """Raised when a storage backend cannot be constructed."""
