"""
Storage Services Package

Provides the abstract storage interface and the JSON file implementation
used for whole-collection persistence of accounts.
"""

from ledger.services.storage.interface import (
    AccountStorageInterface,
    FormatError,
    NotFoundError,
    StorageError,
)
from ledger.services.storage.json_file import (
    FORMAT_VERSION,
    JsonFileAccountStorage,
    LedgerSnapshot,
)

__all__ = [
    # Interfaces
    "AccountStorageInterface",
    # Exceptions
    "FormatError",
    "NotFoundError",
    "StorageError",
    # JSON file implementation
    "FORMAT_VERSION",
    "JsonFileAccountStorage",
    "LedgerSnapshot",
]
