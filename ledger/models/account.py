"""
Account and Transaction Models

An Account owns one user's balance and transaction history. It is also
the unit of persistence: the storage layer writes Account models as-is,
so every field here round-trips through a save/load cycle.

INVARIANTS:
1. balance == sum of the deltas of all successful transactions
2. transactions are append-only and never reordered
3. password_hash is a digest; plaintext never reaches this model

DESIGN DECISION: Amounts are Decimal, not float. Values survive
serialization exactly and balance arithmetic never drifts.
"""

from datetime import datetime, timezone
from decimal import Decimal, Inexact, InvalidOperation, localcontext
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ledger.models.result import FailureReason, OperationResult
from ledger.services.auth import PasswordVerifier


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_amount(value: Any) -> Optional[Decimal]:
    """
    Coerce a caller-supplied amount to Decimal.

    Floats go through str() so 0.1 becomes Decimal("0.1").
    Returns None for anything that is not a finite number.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, float):
        value = str(value)
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        return None
    if not amount.is_finite():
        return None
    return amount


def exact_add(balance: Decimal, delta: Decimal) -> Optional[Decimal]:
    """
    Add delta to balance, or return None if the result would be rounded.

    Inexact also covers Overflow, so huge exponents are refused too.
    """
    with localcontext() as ctx:
        ctx.traps[Inexact] = True
        try:
            return balance + delta
        except Inexact:
            return None


# =============================================================================
# ENUMS
# =============================================================================

class TransactionVerb(str, Enum):
    """Kinds of balance-affecting operation."""
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"


class WithdrawalPolicy(str, Enum):
    """
    How withdrawals larger than the balance are treated.

    REJECT_OVERDRAFT: refuse, record a failed transaction.
    ALLOW_OVERDRAFT: permit, balance may go negative.
    """
    REJECT_OVERDRAFT = "reject_overdraft"
    ALLOW_OVERDRAFT = "allow_overdraft"


# =============================================================================
# TRANSACTION
# =============================================================================

class Transaction(BaseModel):
    """
    One immutable entry in an account's history.

    Failed entries (e.g. insufficient funds) are kept too; their
    resulting_balance equals the balance before the attempt.
    """
    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=utcnow)
    verb: TransactionVerb
    value: Decimal = Field(
        ...,
        ge=0,
        description="Magnitude of the operation"
    )
    success: bool = True
    message: str = Field(
        default="",
        description="Failure reason; empty for successful entries"
    )
    resulting_balance: Decimal = Field(
        ...,
        description="Balance after this entry was applied"
    )

    @property
    def delta(self) -> Decimal:
        """Signed effect of this entry on the balance."""
        if not self.success:
            return Decimal("0")
        if self.verb == TransactionVerb.DEPOSIT:
            return self.value
        return self.value.copy_negate()

    def __str__(self) -> str:
        text = (
            f"{self.timestamp:%Y-%m-%d %H:%M:%S} -- {self.verb.value} "
            f"(${self.value}) : {'OK' if self.success else 'FAILED'}"
        )
        if self.message:
            text += f" : {self.message}"
        return f"{text} : balance ${self.resulting_balance}"


# =============================================================================
# ACCOUNT
# =============================================================================

class Account(BaseModel):
    """
    A user's account.

    Build new accounts with Account.create(); direct construction is for
    restoring persisted state and never re-hashes the password.
    """

    user_name: str = Field(
        ...,
        frozen=True,
        description="Unique, case-sensitive account name"
    )
    password_hash: str = Field(
        ...,
        pattern=r"^[0-9a-fA-F]{64}$",
        repr=False,
        description="SHA-256 hex digest of the password"
    )
    balance: Decimal = Field(default=Decimal("0"))
    last_log_on: datetime = Field(default_factory=utcnow)
    transactions: list[Transaction] = Field(default_factory=list)

    @model_validator(mode='after')
    def validate_balance_matches_history(self) -> 'Account':
        """The balance must be explained by the recorded history."""
        expected = sum((t.delta for t in self.transactions), Decimal("0"))
        if expected != self.balance:
            raise ValueError(
                f"Balance {self.balance} for {self.user_name!r} does not "
                f"match transaction history (expected {expected})"
            )
        return self

    @classmethod
    def create(cls, user_name: str, password: str) -> 'Account':
        """Open a new, empty account."""
        return cls(
            user_name=user_name,
            password_hash=PasswordVerifier.hash(password),
        )

    # -------------------------------------------------------------------------
    # Authentication
    # -------------------------------------------------------------------------

    def check_password(self, password: str) -> bool:
        return PasswordVerifier.verify(password, self.password_hash)

    def update_last_log_on(self) -> None:
        self.last_log_on = utcnow()

    # -------------------------------------------------------------------------
    # Balance operations
    # -------------------------------------------------------------------------

    def deposit(self, amount: Any) -> OperationResult:
        """
        Add funds.

        Negative or non-numeric amounts are refused without touching the
        balance or the history.
        """
        value = to_amount(amount)
        if value is None:
            return OperationResult.fail(
                FailureReason.INVALID_AMOUNT,
                f"Deposit amount ({amount}) is not a valid number.",
            )
        if value < 0:
            return OperationResult.fail(
                FailureReason.NEGATIVE_AMOUNT,
                f"Deposit amount ({value}) must be positive.",
            )

        new_balance = exact_add(self.balance, value)
        if new_balance is None:
            return OperationResult.fail(
                FailureReason.INVALID_AMOUNT,
                f"Deposit amount ({value}) cannot be added exactly to the balance.",
            )

        self.balance = new_balance
        self._record(TransactionVerb.DEPOSIT, value)
        return OperationResult.ok(
            f"Deposited {value}. (Current balance ${self.balance})",
            amount=value,
            balance=self.balance,
        )

    def withdraw(
        self,
        amount: Any,
        policy: WithdrawalPolicy = WithdrawalPolicy.REJECT_OVERDRAFT,
    ) -> OperationResult:
        """
        Remove funds according to the withdrawal policy.

        Under REJECT_OVERDRAFT an oversized withdrawal is refused and a
        FAILED entry is appended to the history. Under ALLOW_OVERDRAFT it
        goes through and the balance turns negative.
        """
        value = to_amount(amount)
        if value is None:
            return OperationResult.fail(
                FailureReason.INVALID_AMOUNT,
                f"Withdrawal amount ({amount}) is not a valid number.",
            )
        if value < 0:
            return OperationResult.fail(
                FailureReason.NEGATIVE_AMOUNT,
                f"Withdrawal amount ({value}) must be positive.",
            )

        if policy == WithdrawalPolicy.REJECT_OVERDRAFT and value > self.balance:
            self._record(
                TransactionVerb.WITHDRAWAL,
                value,
                success=False,
                message="insufficient funds",
            )
            return OperationResult.fail(
                FailureReason.INSUFFICIENT_FUNDS,
                f"Insufficient funds to withdraw {value}. "
                f"(Current balance ${self.balance})",
            )

        new_balance = exact_add(self.balance, value.copy_negate())
        if new_balance is None:
            return OperationResult.fail(
                FailureReason.INVALID_AMOUNT,
                f"Withdrawal amount ({value}) cannot be subtracted exactly from the balance.",
            )

        self.balance = new_balance
        self._record(TransactionVerb.WITHDRAWAL, value)
        return OperationResult.ok(
            f"Withdrew {value}. (Current balance ${self.balance})",
            amount=value,
            balance=self.balance,
        )

    # -------------------------------------------------------------------------
    # History
    # -------------------------------------------------------------------------

    @property
    def transaction_history(self) -> list[str]:
        """Human-readable history, oldest first."""
        return [str(t) for t in self.transactions]

    def _record(
        self,
        verb: TransactionVerb,
        value: Decimal,
        success: bool = True,
        message: str = "",
    ) -> Transaction:
        transaction = Transaction(
            verb=verb,
            value=value,
            success=success,
            message=message,
            resulting_balance=self.balance,
        )
        self.transactions.append(transaction)
        return transaction
