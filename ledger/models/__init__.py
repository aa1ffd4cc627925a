"""
Data Models Package

This package contains all Pydantic models used by the ledger.
Accounts and transactions are persisted exactly as modelled here.
"""

from ledger.models.result import (
    FailureReason,
    OperationResult,
)
from ledger.models.account import (
    Account,
    Transaction,
    TransactionVerb,
    WithdrawalPolicy,
)
from ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Result models
    "FailureReason",
    "OperationResult",
    # Account models
    "Account",
    "Transaction",
    "TransactionVerb",
    "WithdrawalPolicy",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
