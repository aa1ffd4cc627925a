"""
Operation Results

Every public ledger operation returns an OperationResult instead of
raising. A result is exactly one of:
- success: a human-readable message plus an optional payload
- failure: a FailureReason plus a human-readable message

DESIGN DECISION: Callers branch on `result.success` (or `bool(result)`)
and on `result.failure` when they need to react to a specific reason.
Nothing is returned through side channels.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class FailureReason(str, Enum):
    """Why an operation was refused."""
    # Validation
    INVALID_AMOUNT = "invalid_amount"
    NEGATIVE_AMOUNT = "negative_amount"
    INSUFFICIENT_FUNDS = "insufficient_funds"

    # Authentication
    DUPLICATE_USER = "duplicate_user"
    UNKNOWN_USER = "unknown_user"
    INVALID_PASSWORD = "invalid_password"

    # State
    NOT_LOGGED_IN = "not_logged_in"
    NOTHING_TO_SAVE = "nothing_to_save"

    # Persistence
    NOT_FOUND = "not_found"
    STORAGE_ERROR = "storage_error"
    FORMAT_ERROR = "format_error"


class OperationResult(BaseModel):
    """Outcome of a single ledger operation."""
    model_config = ConfigDict(frozen=True)

    success: bool
    message: str = ""
    failure: Optional[FailureReason] = None
    payload: dict[str, Any] = Field(
        default_factory=dict,
        description="Operation-specific data (e.g. new balance)"
    )

    @model_validator(mode='after')
    def validate_outcome(self) -> 'OperationResult':
        """A result is either a success or carries a failure reason."""
        if self.success and self.failure is not None:
            raise ValueError("Successful result cannot carry a failure reason")
        if not self.success and self.failure is None:
            raise ValueError("Failed result must carry a failure reason")
        return self

    @classmethod
    def ok(cls, message: str, **payload: Any) -> 'OperationResult':
        return cls(success=True, message=message, payload=payload)

    @classmethod
    def fail(cls, failure: FailureReason, message: str) -> 'OperationResult':
        return cls(success=False, failure=failure, message=message)

    def __bool__(self) -> bool:
        return self.success
