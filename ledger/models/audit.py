"""
Audit Models for the Account Ledger

Every manager operation produces one audit event, whether it succeeded
or was refused. Events are written to the structured log and kept in a
short in-memory buffer for inspection.

DESIGN DECISION: Audit events never carry passwords or digests.
Only user names, amounts, balances and outcomes.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Accounts and sessions
    ACCOUNT_CREATED = "account_created"
    ACCOUNT_CREATION_REJECTED = "account_creation_rejected"
    LOGGED_ON = "logged_on"
    LOG_ON_FAILED = "log_on_failed"
    LOGGED_OUT = "logged_out"

    # Money movement
    TRANSACTION_RECORDED = "transaction_recorded"
    TRANSACTION_REJECTED = "transaction_rejected"

    # Persistence
    ACCOUNTS_SAVED = "accounts_saved"
    ACCOUNTS_LOADED = "accounts_loaded"
    STORAGE_FAILED = "storage_failed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """A single audit event."""

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    user_name: Optional[str] = Field(
        default=None,
        description="Account the event relates to, if any"
    )
    description: str = Field(
        ...,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "user_name": self.user_name,
            "description": self.description,
            "details": self.details,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.account_created("alice")
        event = AuditEventBuilder.transaction_recorded("alice", "deposit", amount, balance)
    """

    @staticmethod
    def account_created(user_name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_CREATED,
            user_name=user_name,
            description=f"Account created: {user_name}",
        )

    @staticmethod
    def account_creation_rejected(user_name: str, reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_CREATION_REJECTED,
            severity=AuditSeverity.WARNING,
            user_name=user_name,
            description=f"Account creation rejected for {user_name}",
            details={"reason": reason},
        )

    @staticmethod
    def logged_on(user_name: str, previous_log_on: datetime) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGGED_ON,
            user_name=user_name,
            description=f"User {user_name} logged on",
            details={"previous_log_on": previous_log_on.isoformat()},
        )

    @staticmethod
    def log_on_failed(user_name: str, reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOG_ON_FAILED,
            severity=AuditSeverity.WARNING,
            user_name=user_name,
            description=f"Log on failed for {user_name}",
            details={"reason": reason},
        )

    @staticmethod
    def logged_out(user_name: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGGED_OUT,
            user_name=user_name,
            description=(
                f"User {user_name} logged out" if user_name else "Log out with no active session"
            ),
        )

    @staticmethod
    def transaction_recorded(
        user_name: str,
        verb: str,
        amount: Decimal,
        balance: Decimal,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_RECORDED,
            user_name=user_name,
            description=f"{verb.capitalize()} of {amount} for {user_name}",
            details={
                "verb": verb,
                "amount": str(amount),
                "balance": str(balance),
            },
        )

    @staticmethod
    def transaction_rejected(
        user_name: Optional[str],
        verb: str,
        reason: str,
        message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_REJECTED,
            severity=AuditSeverity.WARNING,
            user_name=user_name,
            description=f"{verb.capitalize()} rejected: {reason}",
            details={
                "verb": verb,
                "reason": reason,
                "message": message,
            },
        )

    @staticmethod
    def accounts_saved(path: str, account_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNTS_SAVED,
            description=f"Saved {account_count} account(s) to {path}",
            details={"path": path, "account_count": account_count},
        )

    @staticmethod
    def accounts_loaded(path: str, account_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNTS_LOADED,
            description=f"Loaded {account_count} account(s) from {path}",
            details={"path": path, "account_count": account_count},
        )

    @staticmethod
    def storage_failed(operation: str, path: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_FAILED,
            severity=AuditSeverity.ERROR,
            description=f"Storage {operation} failed for {path}",
            details={
                "operation": operation,
                "path": path,
                "error_message": error_message,
            },
        )
