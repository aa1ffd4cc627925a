"""
Abstract Storage Interface

DESIGN DECISION: The account manager only talks to this interface.
This allows us to:
1. Swap the JSON file for another format later
2. Use in-memory fakes in tests
3. Keep session logic decoupled from file handling

Persistence is whole-collection: every save writes all accounts, every
load returns all accounts. There is no per-account read or write.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Union

from ledger.models.account import Account


PathLike = Union[str, Path]


class AccountStorageInterface(ABC):
    """
    Abstract interface for account collection storage.

    Implementations raise StorageError (or a subclass) on failure and
    never return partial results.
    """

    @abstractmethod
    def serialize(self, accounts: list[Account]) -> bytes:
        """
        Encode the full account collection.

        The encoding must carry password digests and complete transaction
        histories so a later deserialize() restores session-capable state.

        Raises:
            FormatError: If an account cannot be encoded
        """
        pass

    @abstractmethod
    def deserialize(self, data: bytes) -> list[Account]:
        """
        Decode a collection produced by serialize().

        Raises:
            FormatError: If the data is malformed or from an
                incompatible format version
        """
        pass

    @abstractmethod
    def save_accounts(self, accounts: list[Account], destination: PathLike) -> None:
        """
        Write the collection to destination, replacing any existing content.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def load_accounts(self, source: PathLike) -> list[Account]:
        """
        Read a collection previously written by save_accounts().

        Raises:
            NotFoundError: If source does not exist
            FormatError: If the content cannot be decoded
            StorageError: On any other read failure
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Storage location does not exist."""
    pass


class FormatError(StorageError):
    """Stored data is malformed or incompatible."""
    pass
