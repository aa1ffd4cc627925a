"""
Account Manager

This module owns the account collection and the single active session.
It is the only entry point callers (shells, bots, tests) need:

1. Accounts: create_account, log_on, log_out
2. Money: deposit, withdraw (require a session)
3. Persistence: save, load (whole collection)

DESIGN DECISION: The manager enforces the boundaries:
- At most one session, and it always points into the collection
- No operation raises; every outcome is an OperationResult
- Storage errors are caught here and nowhere else
- Every operation is audited

The session is plain instance state. Two managers never share a session.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from ledger.audit import AuditLogger, configure_logging
from ledger.config import LedgerSettings, get_settings
from ledger.models.account import Account, TransactionVerb, WithdrawalPolicy
from ledger.models.result import FailureReason, OperationResult
from ledger.services.storage import (
    AccountStorageInterface,
    FormatError,
    JsonFileAccountStorage,
    NotFoundError,
    StorageError,
)
from ledger.services.storage.interface import PathLike


class AccountManager:
    """
    Manages accounts and the current session.

    Not thread-safe: hosts that share one manager between threads must
    serialize calls themselves.
    """

    def __init__(
        self,
        storage: Optional[AccountStorageInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
        withdrawal_policy: WithdrawalPolicy = WithdrawalPolicy.REJECT_OVERDRAFT,
    ):
        self._accounts: dict[str, Account] = {}
        self._current: Optional[Account] = None
        self._storage = storage or JsonFileAccountStorage()
        self._audit_logger = audit_logger or AuditLogger()
        self._withdrawal_policy = withdrawal_policy

    @classmethod
    def from_settings(
        cls,
        settings: Optional[LedgerSettings] = None,
        storage: Optional[AccountStorageInterface] = None,
    ) -> 'AccountManager':
        """
        Build a manager from LedgerSettings (environment / .env by default).

        Also configures logging at the configured level and format.
        """
        settings = settings or get_settings()
        configure_logging(settings.log_level_number, settings.log_json)
        return cls(
            storage=storage,
            audit_logger=AuditLogger(buffer_size=settings.audit_buffer_size),
            withdrawal_policy=settings.withdrawal_policy,
        )

    # =========================================================================
    # READ ACCESSORS
    # =========================================================================

    @property
    def withdrawal_policy(self) -> WithdrawalPolicy:
        return self._withdrawal_policy

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit_logger

    @property
    def is_logged_on(self) -> bool:
        return self._current is not None

    @property
    def current_user_name(self) -> str:
        return self._current.user_name if self._current else ""

    @property
    def current_balance(self) -> Decimal:
        return self._current.balance if self._current else Decimal("0")

    @property
    def current_transaction_history(self) -> list[str]:
        return self._current.transaction_history if self._current else []

    @property
    def current_last_log_on(self) -> Optional[datetime]:
        return self._current.last_log_on if self._current else None

    @property
    def accounts(self) -> list[Account]:
        """
        Copies of all accounts in creation (or load) order.

        Changing a copy never reaches the collection; use the manager's
        operations for that.
        """
        return [account.model_copy(deep=True) for account in self._accounts.values()]

    @property
    def account_names(self) -> list[str]:
        return list(self._accounts)

    def has_account(self, user_name: str) -> bool:
        return user_name in self._accounts

    def __len__(self) -> int:
        return len(self._accounts)

    # =========================================================================
    # ACCOUNTS AND SESSION
    # =========================================================================

    def create_account(self, user_name: str, password: str) -> OperationResult:
        """
        Create an account and log it on.

        Fails if the user name is taken (exact, case-sensitive match).
        Passwords need not be unique.
        """
        if user_name in self._accounts:
            result = OperationResult.fail(
                FailureReason.DUPLICATE_USER,
                f"Username {user_name} already exists.",
            )
            self._audit_logger.log_account_creation_rejected(user_name, result.message)
            return result

        account = Account.create(user_name, password)
        self._accounts[user_name] = account
        self._current = account

        self._audit_logger.log_account_created(user_name)
        return OperationResult.ok(f"Account created: {user_name}")

    def log_on(self, user_name: str, password: str) -> OperationResult:
        """
        Authenticate and make the account the current session.

        On success the payload carries the previous log-on time, captured
        before it is refreshed. A failed attempt leaves any existing
        session untouched.
        """
        account = self._accounts.get(user_name)
        if account is None:
            result = OperationResult.fail(
                FailureReason.UNKNOWN_USER,
                f"Username {user_name} not recognized. Create new account.",
            )
            self._audit_logger.log_log_on_failed(user_name, result.failure.value)
            return result

        if not account.check_password(password):
            result = OperationResult.fail(
                FailureReason.INVALID_PASSWORD,
                "Invalid password.",
            )
            self._audit_logger.log_log_on_failed(user_name, result.failure.value)
            return result

        previous_log_on = account.last_log_on
        self._current = account
        account.update_last_log_on()

        self._audit_logger.log_logged_on(user_name, previous_log_on)
        return OperationResult.ok(
            f"User {user_name} logged on. "
            f"Last log on at {previous_log_on:%Y-%m-%d %H:%M:%S}.",
            previous_log_on=previous_log_on,
        )

    def log_out(self) -> None:
        """End the current session, if any. Accounts are kept."""
        user_name = self._current.user_name if self._current else None
        self._current = None
        self._audit_logger.log_logged_out(user_name)

    # =========================================================================
    # MONEY
    # =========================================================================

    def deposit(self, amount: Any) -> OperationResult:
        """Deposit into the current account."""
        if self._current is None:
            return self._not_logged_in(TransactionVerb.DEPOSIT)

        result = self._current.deposit(amount)
        self._audit_money(TransactionVerb.DEPOSIT, result)
        return result

    def withdraw(self, amount: Any) -> OperationResult:
        """Withdraw from the current account under the configured policy."""
        if self._current is None:
            return self._not_logged_in(TransactionVerb.WITHDRAWAL)

        result = self._current.withdraw(amount, self._withdrawal_policy)
        self._audit_money(TransactionVerb.WITHDRAWAL, result)
        return result

    def _not_logged_in(self, verb: TransactionVerb) -> OperationResult:
        result = OperationResult.fail(FailureReason.NOT_LOGGED_IN, "Not logged in.")
        self._audit_logger.log_transaction_rejected(
            None, verb.value, result.failure.value, result.message
        )
        return result

    def _audit_money(self, verb: TransactionVerb, result: OperationResult) -> None:
        user_name = self._current.user_name
        if result.success:
            self._audit_logger.log_transaction(
                user_name,
                verb.value,
                result.payload["amount"],
                result.payload["balance"],
            )
        else:
            self._audit_logger.log_transaction_rejected(
                user_name, verb.value, result.failure.value, result.message
            )

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    def save(self, destination: PathLike) -> OperationResult:
        """
        Write every account to destination, overwriting it.

        In-memory state is never changed by a save, successful or not.
        """
        if not self._accounts:
            return OperationResult.fail(
                FailureReason.NOTHING_TO_SAVE,
                "Nothing to save: no accounts exist.",
            )

        path = str(destination)
        try:
            self._storage.save_accounts(list(self._accounts.values()), destination)
        except StorageError as e:
            self._audit_logger.log_storage_failed("save", path, str(e))
            return OperationResult.fail(
                FailureReason.STORAGE_ERROR,
                f"Save failed: {e}",
            )

        count = len(self._accounts)
        self._audit_logger.log_accounts_saved(path, count)
        return OperationResult.ok(
            f"Saved {count} account(s) to {path}.",
            account_count=count,
        )

    def load(self, source: PathLike) -> OperationResult:
        """
        Replace all accounts with those stored at source.

        The current session is cleared. Nothing is merged: accounts that
        exist only in memory are discarded. On failure the collection and
        session are left exactly as they were.
        """
        path = str(source)
        try:
            accounts = self._storage.load_accounts(source)
        except NotFoundError as e:
            return self._load_failed(FailureReason.NOT_FOUND, path, e)
        except FormatError as e:
            return self._load_failed(FailureReason.FORMAT_ERROR, path, e)
        except StorageError as e:
            return self._load_failed(FailureReason.STORAGE_ERROR, path, e)

        self._accounts = {account.user_name: account for account in accounts}
        self._current = None

        count = len(self._accounts)
        self._audit_logger.log_accounts_loaded(path, count)
        return OperationResult.ok(
            f"Loaded {count} account(s) from {path}.",
            account_count=count,
        )

    def _load_failed(
        self,
        failure: FailureReason,
        path: str,
        error: StorageError,
    ) -> OperationResult:
        self._audit_logger.log_storage_failed("load", path, str(error))
        return OperationResult.fail(failure, f"Load failed: {error}")
