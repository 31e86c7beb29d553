"""Exceptions raised by pocketbook."""


class PocketbookError(Exception):
    """Base error for the package."""


class StorageError(PocketbookError):
    """The key-value store could not be read or written."""

    def __init__(self, message: str, key: str = ""):
        super().__init__(message)
        self.key = key


class ConfigError(PocketbookError):
    """Invalid configuration file or environment override."""
