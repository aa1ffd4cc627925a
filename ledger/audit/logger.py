"""
Audit Logger

Every account manager operation is logged, successful or not.
This provides:
1. Traceability of who moved money and when
2. Debugging information when saves or loads fail
3. A short in-memory trail hosts can show to users

The audit logger:
- Is synchronous, like the rest of the ledger
- Writes structured events through structlog
- Keeps the most recent events in a bounded buffer
"""

import logging
from collections import deque
from datetime import datetime
from decimal import Decimal
from typing import Optional

import structlog

from ledger.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


_SHARED_PROCESSORS = [
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.UnicodeDecoder(),
]


def _configure_structlog(json_output: bool) -> None:
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[*_SHARED_PROCESSORS, renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def configure_logging(level: int = logging.INFO, json_output: bool = True) -> None:
    """
    Route ledger logs to stderr at the given level.

    JSON output is meant for files and log shippers; console output for
    interactive use. Hosts that manage stdlib logging themselves only
    need the structlog half, which is applied at import.
    """
    logging.basicConfig(format="%(message)s", level=level)
    logging.getLogger("ledger").setLevel(level)
    _configure_structlog(json_output)


# Configure structlog for local logging
_configure_structlog(json_output=True)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An in-memory ring buffer (for inspection by the host)
    """

    def __init__(self, buffer_size: int = 100):
        """
        Initialize audit logger.

        Args:
            buffer_size: Number of recent events to retain in memory.
                         Zero disables the buffer.
        """
        self._events: deque[AuditEvent] = deque(maxlen=buffer_size)
        self._logger = structlog.get_logger("ledger.audit")

    @property
    def recent_events(self) -> list[AuditEvent]:
        """Buffered events, oldest first."""
        return list(self._events)

    def events_for(self, user_name: str) -> list[AuditEvent]:
        return [e for e in self._events if e.user_name == user_name]

    def log(self, event: AuditEvent) -> None:
        """Log an audit event."""
        self._events.append(event)
        log_dict = event.to_log_dict()

        if event.severity == AuditSeverity.ERROR:
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

    def log_account_created(self, user_name: str) -> None:
        self.log(AuditEventBuilder.account_created(user_name))

    def log_account_creation_rejected(self, user_name: str, reason: str) -> None:
        self.log(AuditEventBuilder.account_creation_rejected(user_name, reason))

    def log_logged_on(self, user_name: str, previous_log_on: datetime) -> None:
        self.log(AuditEventBuilder.logged_on(user_name, previous_log_on))

    def log_log_on_failed(self, user_name: str, reason: str) -> None:
        self.log(AuditEventBuilder.log_on_failed(user_name, reason))

    def log_logged_out(self, user_name: Optional[str]) -> None:
        self.log(AuditEventBuilder.logged_out(user_name))

    def log_transaction(
        self,
        user_name: str,
        verb: str,
        amount: Decimal,
        balance: Decimal,
    ) -> None:
        """Log a successful deposit or withdrawal."""
        self.log(AuditEventBuilder.transaction_recorded(user_name, verb, amount, balance))

    def log_transaction_rejected(
        self,
        user_name: Optional[str],
        verb: str,
        reason: str,
        message: str,
    ) -> None:
        """Log a refused deposit or withdrawal."""
        self.log(AuditEventBuilder.transaction_rejected(user_name, verb, reason, message))

    def log_accounts_saved(self, path: str, account_count: int) -> None:
        self.log(AuditEventBuilder.accounts_saved(path, account_count))

    def log_accounts_loaded(self, path: str, account_count: int) -> None:
        self.log(AuditEventBuilder.accounts_loaded(path, account_count))

    def log_storage_failed(self, operation: str, path: str, error_message: str) -> None:
        self.log(AuditEventBuilder.storage_failed(operation, path, error_message))
