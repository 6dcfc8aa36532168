# app/errors.py
"""
Exception types shared across the library catalog.

Expected conditions (bad form input, unknown ids, ownership mismatches)
are reported as ordinary return values by the catalog store. Only
genuinely exceptional situations, such as the blob store failing to
read or write, are raised as exceptions.
"""


class LibraryError(Exception):
    """Root exception for the library catalog."""


class StorageError(LibraryError):
    """Raised when the blob store cannot read, write or remove a key."""

    def __init__(self, message: str, key: str = "") -> None:
        super().__init__(message)
        self.key = key
