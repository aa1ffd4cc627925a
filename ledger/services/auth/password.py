"""
Password Digests

Passwords are reduced to a SHA-256 digest the moment they enter the
system. The plaintext is never stored, logged, or persisted.

Digests are rendered as 64 lowercase hex characters. Verification
recomputes the digest and compares case-insensitively, so digests
written in upper case by other tools still match.
"""

import hashlib
import hmac


DIGEST_LENGTH = 64


def hash_password(plaintext: str) -> str:
    """
    Return the lowercase hex SHA-256 digest of the UTF-8 password bytes.

    Lone surrogates are encoded as-is (surrogatepass), so every Python
    string hashes and distinct strings keep distinct digests.
    """
    return hashlib.sha256(plaintext.encode("utf-8", "surrogatepass")).hexdigest()


def verify_password(plaintext: str, stored_digest: str) -> bool:
    """
    Check a plaintext password against a stored digest.
    
    Any string is accepted, including the empty string. A malformed
    stored digest simply fails to match.
    """
    candidate = hash_password(plaintext)
    return hmac.compare_digest(
        candidate.encode("ascii"),
        stored_digest.lower().encode("utf-8", "surrogatepass"),
    )


class PasswordVerifier:
    """Injectable wrapper around the module-level hash functions."""
    
    @staticmethod
    def hash(plaintext: str) -> str:
        return hash_password(plaintext)
    
    @staticmethod
    def verify(plaintext: str, stored_digest: str) -> bool:
        return verify_password(plaintext, stored_digest)
