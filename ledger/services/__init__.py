"""
Services package.

Subpackages are imported directly (ledger.services.auth,
ledger.services.storage); the account model depends on auth while
storage depends on the account model.
"""
