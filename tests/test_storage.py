"""Tests for JSON file persistence of the account collection."""

import json
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from ledger.models.account import Account, WithdrawalPolicy
from ledger.services.storage import (
    FORMAT_VERSION,
    FormatError,
    JsonFileAccountStorage,
    NotFoundError,
    StorageError,
)


@pytest.fixture
def storage():
    return JsonFileAccountStorage()


@pytest.fixture
def accounts():
    alice = Account.create("alice", "pw1")
    alice.deposit(100)
    alice.withdraw(150)
    alice.withdraw("20.75")

    bob = Account.create("bob", "hunter2")
    bob.deposit(0.1)
    bob.withdraw(5, WithdrawalPolicy.ALLOW_OVERDRAFT)

    carol = Account.create("Carol", "")
    return [alice, bob, carol]


class TestSerialization:
    """Tests for serialize/deserialize."""

    def test_round_trip_preserves_every_field(self, storage, accounts):
        """Test names, digests, balances, timestamps and histories survive."""
        restored = storage.deserialize(storage.serialize(accounts))

        assert [a.user_name for a in restored] == ["alice", "bob", "Carol"]
        for original, loaded in zip(accounts, restored):
            assert loaded.password_hash == original.password_hash
            assert loaded.balance == original.balance
            assert loaded.last_log_on == original.last_log_on
            assert loaded.transactions == original.transactions
            assert loaded.transaction_history == original.transaction_history

    def test_passwords_verify_after_round_trip(self, storage, accounts):
        """Test digests are restored verbatim, not re-hashed."""
        alice, bob, carol = storage.deserialize(storage.serialize(accounts))
        assert alice.check_password("pw1") is True
        assert bob.check_password("hunter2") is True
        assert carol.check_password("") is True
        assert alice.check_password("hunter2") is False

    def test_negative_balance_round_trip(self, storage, accounts):
        """Test overdrawn balances are kept exactly."""
        restored = storage.deserialize(storage.serialize(accounts))
        assert restored[1].balance == Decimal("-4.9")

    def test_plaintext_never_serialized(self, storage, accounts):
        """Test only digests cross the persistence boundary."""
        data = storage.serialize(accounts).decode("utf-8")
        assert "hunter2" not in data

    def test_serialize_is_deterministic(self, storage, accounts):
        """Test identical collections produce identical bytes."""
        saved_at = datetime(2024, 1, 1, tzinfo=timezone.utc)
        first = storage.serialize(accounts, saved_at=saved_at)
        second = storage.serialize(accounts, saved_at=saved_at)
        assert first == second

    def test_envelope_shape(self, storage, accounts):
        """Test the document carries a version and the account list."""
        document = json.loads(storage.serialize(accounts))
        assert document["format_version"] == FORMAT_VERSION
        assert len(document["accounts"]) == 3
        assert document["accounts"][0]["balance"] == "79.25"
        assert document["accounts"][0]["password_hash"] == accounts[0].password_hash

    def test_empty_collection(self, storage):
        assert storage.deserialize(storage.serialize([])) == []

    def test_unencodable_user_name(self, storage):
        """Test names that cannot be written as UTF-8 raise FormatError."""
        with pytest.raises(FormatError, match="cannot be encoded"):
            storage.serialize([Account.create("b\ud800", "pw")])


class TestMalformedInput:
    """Tests for deserialize error handling."""

    def test_not_json(self, storage):
        with pytest.raises(FormatError, match="not valid JSON"):
            storage.deserialize(b"\x00\x01 definitely not json")

    def test_not_an_object(self, storage):
        with pytest.raises(FormatError, match="must be a JSON object"):
            storage.deserialize(b"[1, 2, 3]")

    def test_missing_version(self, storage):
        with pytest.raises(FormatError, match="Unsupported ledger format version"):
            storage.deserialize(b'{"accounts": []}')

    def test_future_version(self, storage, accounts):
        """Test documents from an incompatible version are refused."""
        document = json.loads(storage.serialize(accounts))
        document["format_version"] = FORMAT_VERSION + 1
        with pytest.raises(FormatError, match="Unsupported ledger format version"):
            storage.deserialize(json.dumps(document).encode("utf-8"))

    def test_schema_mismatch(self, storage):
        """Test structurally wrong accounts are reported as format errors."""
        data = json.dumps({
            "format_version": FORMAT_VERSION,
            "accounts": [{"user_name": "alice"}],
        }).encode("utf-8")
        with pytest.raises(FormatError, match="account schema"):
            storage.deserialize(data)

    def test_tampered_balance(self, storage, accounts):
        """Test a balance that disagrees with its history is refused."""
        document = json.loads(storage.serialize(accounts))
        document["accounts"][0]["balance"] = "1000000"
        with pytest.raises(FormatError):
            storage.deserialize(json.dumps(document).encode("utf-8"))

    def test_duplicate_user_names(self, storage):
        """Test a collection may not contain the same name twice."""
        twins = [Account.create("alice", "a"), Account.create("alice", "b")]
        with pytest.raises(FormatError, match="Duplicate user name"):
            storage.deserialize(storage.serialize(twins))


class TestFileIO:
    """Tests for save_accounts/load_accounts."""

    def test_save_then_load(self, storage, accounts, tmp_path):
        path = tmp_path / "ledger.json"
        storage.save_accounts(accounts, path)
        restored = storage.load_accounts(path)
        assert [a.user_name for a in restored] == ["alice", "bob", "Carol"]
        assert restored[0].balance == accounts[0].balance

    def test_accepts_string_paths(self, storage, accounts, tmp_path):
        path = str(tmp_path / "ledger.json")
        storage.save_accounts(accounts, path)
        assert len(storage.load_accounts(path)) == 3

    def test_save_overwrites(self, storage, accounts, tmp_path):
        """Test a second save fully replaces the first."""
        path = tmp_path / "ledger.json"
        storage.save_accounts(accounts, path)
        storage.save_accounts(accounts[:1], path)
        assert [a.user_name for a in storage.load_accounts(path)] == ["alice"]

    def test_save_leaves_no_temp_file(self, storage, accounts, tmp_path):
        path = tmp_path / "ledger.json"
        storage.save_accounts(accounts, path)
        assert sorted(p.name for p in tmp_path.iterdir()) == ["ledger.json"]

    def test_save_to_missing_directory(self, storage, accounts, tmp_path):
        """Test write failures surface as StorageError."""
        path = tmp_path / "missing" / "ledger.json"
        with pytest.raises(StorageError, match="Could not write"):
            storage.save_accounts(accounts, path)
        assert not (tmp_path / "missing").exists()

    def test_failed_save_keeps_existing_file(self, storage, accounts, tmp_path):
        """Test a failed save does not truncate the previous ledger."""
        path = tmp_path / "ledger.json"
        storage.save_accounts(accounts, path)
        before = path.read_bytes()
        (tmp_path / "ledger.json.tmp").mkdir()
        with pytest.raises(StorageError):
            storage.save_accounts(accounts[:1], path)
        assert path.read_bytes() == before

    def test_load_missing_file(self, storage, tmp_path):
        with pytest.raises(NotFoundError, match="not found"):
            storage.load_accounts(tmp_path / "nope.json")

    def test_load_directory(self, storage, tmp_path):
        """Test unreadable sources are storage errors, not crashes."""
        with pytest.raises(StorageError):
            storage.load_accounts(tmp_path)

    def test_load_malformed_file(self, storage, tmp_path):
        path = tmp_path / "ledger.json"
        path.write_text("{ broken", encoding="utf-8")
        with pytest.raises(FormatError):
            storage.load_accounts(path)

    @pytest.mark.parametrize("name", ["", "a\x00b"])
    def test_unusable_save_path(self, storage, accounts, tmp_path, name):
        """Test invalid path strings are storage errors, not crashes."""
        destination = str(tmp_path / name) if name else name
        with pytest.raises(StorageError, match="Could not write"):
            storage.save_accounts(accounts, destination)
        assert list(tmp_path.iterdir()) == []

    def test_unusable_load_path(self, storage, tmp_path):
        with pytest.raises(StorageError, match="Could not read") as exc_info:
            storage.load_accounts(tmp_path / "a\x00b")
        assert not isinstance(exc_info.value, NotFoundError)

    def test_unencodable_save_leaves_no_file(self, storage, tmp_path):
        path = tmp_path / "ledger.json"
        with pytest.raises(FormatError):
            storage.save_accounts([Account.create("b\ud800", "pw")], path)
        assert list(tmp_path.iterdir()) == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
