"""
Configuration Management for the Account Ledger

Uses pydantic-settings for type-safe configuration from environment
variables (prefix LEDGER_) and an optional .env file.

DESIGN DECISION: The ledger core never reads configuration itself.
Settings are applied by whoever builds the AccountManager, usually via
AccountManager.from_settings().
"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ledger.models.account import WithdrawalPolicy


class LedgerSettings(BaseSettings):
    """
    Main ledger settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    withdrawal_policy: WithdrawalPolicy = Field(
        default=WithdrawalPolicy.REJECT_OVERDRAFT,
        description="How withdrawals larger than the balance are handled"
    )
    data_file: Path = Field(
        default=Path("ledger.json"),
        description="Default file for saving and loading accounts"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Minimum level for ledger log output"
    )
    log_json: bool = Field(
        default=True,
        description="Render logs as JSON (False for human-readable console output)"
    )
    audit_buffer_size: int = Field(
        default=100,
        ge=0,
        le=10000,
        description="How many recent audit events to keep in memory"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Only accept standard logging level names."""
        level = v.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def log_level_number(self) -> int:
        """Get the numeric logging level."""
        return logging.getLevelNamesMapping()[self.log_level]


@lru_cache()
def get_settings() -> LedgerSettings:
    """
    Get ledger settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return LedgerSettings()
