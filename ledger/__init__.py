"""
Account Ledger - Source Package

A small single-user-at-a-time ledger: password-protected accounts,
deposits and withdrawals against a running balance, and whole-collection
persistence to a file.

DESIGN PRINCIPLES:
1. One active session, owned by one AccountManager
2. Rejected operations never move money
3. History is append-only
4. Only password digests are ever stored
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Account Ledger Team"
