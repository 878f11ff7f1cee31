"""Errors raised by storage backends."""


class StorageError(Exception):
    """Raised when a storage operation fails."""


class DuplicateEmailError(StorageError):
    """Raised when a write violates the unique email constraint."""


class DuplicateAccountError(StorageError):
    """Raised when an account already owns a profile (unique ``user_id``)."""
