"""
JSON File Storage

Stores the account collection as a single UTF-8 JSON document:

    {
      "format_version": 1,
      "saved_at": "...",
      "accounts": [ {Account}, ... ]
    }

DESIGN DECISIONS:
- Decimals are written as strings, so balances and amounts load back
  exactly.
- Password digests are written verbatim and never re-derived on load.
- Writes go to a sibling ".tmp" file first and are then renamed over
  the destination, so a failed save never truncates an existing ledger.
"""

import contextlib
import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError
from pydantic_core import PydanticSerializationError

from ledger.models.account import Account
from ledger.services.storage.interface import (
    AccountStorageInterface,
    FormatError,
    NotFoundError,
    PathLike,
    StorageError,
)


FORMAT_VERSION = 1


class LedgerSnapshot(BaseModel):
    """On-disk envelope for a saved account collection."""

    format_version: int = FORMAT_VERSION
    saved_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    accounts: list[Account] = Field(default_factory=list)


class JsonFileAccountStorage(AccountStorageInterface):
    """Whole-collection persistence to a JSON file."""

    def __init__(self, indent: Optional[int] = 2):
        self._indent = indent

    def serialize(
        self,
        accounts: list[Account],
        saved_at: Optional[datetime] = None,
    ) -> bytes:
        snapshot = LedgerSnapshot(accounts=list(accounts))
        if saved_at is not None:
            snapshot.saved_at = saved_at
        try:
            return snapshot.model_dump_json(indent=self._indent).encode("utf-8")
        except (PydanticSerializationError, UnicodeEncodeError) as e:
            raise FormatError(f"Accounts cannot be encoded as JSON: {e}") from e

    def deserialize(self, data: bytes) -> list[Account]:
        try:
            raw = json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise FormatError(f"Ledger data is not valid JSON: {e}") from e

        if not isinstance(raw, dict):
            raise FormatError("Ledger data must be a JSON object")

        version = raw.get("format_version")
        if version != FORMAT_VERSION:
            raise FormatError(
                f"Unsupported ledger format version {version!r} "
                f"(expected {FORMAT_VERSION})"
            )

        try:
            snapshot = LedgerSnapshot.model_validate(raw)
        except ValidationError as e:
            raise FormatError(
                f"Ledger data does not match the account schema: "
                f"{e.error_count()} error(s), first: {e.errors()[0]['msg']}"
            ) from e

        seen: set[str] = set()
        for account in snapshot.accounts:
            if account.user_name in seen:
                raise FormatError(f"Duplicate user name in ledger: {account.user_name}")
            seen.add(account.user_name)

        return snapshot.accounts

    def save_accounts(self, accounts: list[Account], destination: PathLike) -> None:
        path = Path(destination)
        data = self.serialize(accounts)
        tmp_path: Optional[Path] = None

        try:
            tmp_path = path.with_name(path.name + ".tmp")
            with open(tmp_path, "wb") as f:
                f.write(data)
            os.replace(tmp_path, path)
        except (OSError, ValueError) as e:
            if tmp_path is not None:
                with contextlib.suppress(OSError, ValueError):
                    tmp_path.unlink()
            raise StorageError(f"Could not write ledger to {destination!r}: {e}") from e

    def load_accounts(self, source: PathLike) -> list[Account]:
        path = Path(source)
        try:
            with open(path, "rb") as f:
                data = f.read()
        except FileNotFoundError as e:
            raise NotFoundError(f"Ledger file not found: {path}") from e
        except (OSError, ValueError) as e:
            raise StorageError(f"Could not read ledger from {source!r}: {e}") from e

        return self.deserialize(data)
