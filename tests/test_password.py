"""Tests for password hashing and verification."""

import hashlib

import pytest

from ledger.services.auth import PasswordVerifier, hash_password, verify_password


class TestHashPassword:
    """Tests for hash_password."""

    def test_known_digest(self):
        """Test against a well-known SHA-256 value."""
        assert hash_password("abc") == (
            "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
        )

    def test_empty_string(self):
        """Test the empty password hashes to the SHA-256 of no bytes."""
        assert hash_password("") == hashlib.sha256(b"").hexdigest()

    def test_fixed_width_lowercase_hex(self):
        """Test digests are 64 lowercase hex characters."""
        digest = hash_password("Correct Horse Battery Staple")
        assert len(digest) == 64
        assert digest == digest.lower()
        int(digest, 16)

    def test_utf8_encoding(self):
        """Test non-ASCII passwords hash their UTF-8 bytes."""
        assert hash_password("pässwörd") == hashlib.sha256("pässwörd".encode("utf-8")).hexdigest()

    def test_deterministic(self):
        assert hash_password("pw1") == hash_password("pw1")

    def test_lone_surrogates_hash(self):
        """Test passwords that are not valid UTF-8 text still hash, distinctly."""
        high = hash_password("\ud800")
        low = hash_password("\udc00")
        assert len(high) == 64
        assert high != low
        assert verify_password("\ud800", high) is True
        assert verify_password("\ud800", low) is False


class TestVerifyPassword:
    """Tests for verify_password."""

    def test_matching_password(self):
        assert verify_password("pw1", hash_password("pw1")) is True

    def test_wrong_password(self):
        assert verify_password("pw2", hash_password("pw1")) is False

    def test_case_insensitive_digest_comparison(self):
        """Test upper-case stored digests still verify."""
        assert verify_password("pw1", hash_password("pw1").upper()) is True

    def test_password_itself_is_case_sensitive(self):
        """Test only the digest comparison ignores case, not the password."""
        assert verify_password("PW1", hash_password("pw1")) is False

    @pytest.mark.parametrize("stored", ["", "zz", "é" * 64])
    def test_malformed_digest_never_matches(self, stored):
        """Test garbage digests fail cleanly instead of raising."""
        assert verify_password("pw1", stored) is False


class TestPasswordVerifier:
    """Tests for the injectable wrapper."""

    def test_round_trip(self):
        digest = PasswordVerifier.hash("secret")
        assert PasswordVerifier.verify("secret", digest) is True
        assert PasswordVerifier.verify("Secret", digest) is False


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
