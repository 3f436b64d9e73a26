"""Exceptions raised by the memory bank storage and service layers."""


class MemoryBankError(Exception):
    """Base exception for memory bank operations."""


class ValidationError(MemoryBankError):
    """Raised when a request is malformed.  No I/O has been performed."""


class DocumentNotFoundError(MemoryBankError):
    """Raised when a requested document does not exist in the store."""


class StorageIOError(MemoryBankError):
    """Raised when a directory or file operation fails at the OS boundary."""
