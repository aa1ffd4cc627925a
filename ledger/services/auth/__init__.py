"""Password hashing and verification."""

from ledger.services.auth.password import (
    PasswordVerifier,
    hash_password,
    verify_password,
)

__all__ = [
    "PasswordVerifier",
    "hash_password",
    "verify_password",
]
