from __future__ import annotations


class PasteStoreError(Exception):
    """Base class for paste store errors."""


class StorageUnavailable(PasteStoreError):
    """Raised when the backing database cannot be opened or initialized."""


class StorageWriteFailed(PasteStoreError):
    """Raised when a write transaction cannot be prepared, executed or committed."""


class IdSpaceExhausted(StorageWriteFailed):
    """Raised when every candidate id collided with an existing paste."""


class StorageReadFailed(PasteStoreError):
    """Raised on a driver failure while reading. Not raised for missing pastes."""


class LockTimeout(PasteStoreError):
    """Raised when the database lock was not acquired within the wait budget."""


class StoreClosedError(PasteStoreError, RuntimeError):
    """Raised when an operation is attempted on a closed store."""


class InvalidPasteParameters(PasteStoreError, ValueError):
    """Raised when a caller passes invalid paste data or query bounds."""
