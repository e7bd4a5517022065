"""Tests for session encryption and persistence."""
import pytest

from account_console.auth.crypto import SessionCrypto
from account_console.auth.manager import SessionManager
from account_console.gateway import SessionContext


@pytest.fixture
def manager(tmp_path):
    return SessionManager(
        session_path=tmp_path / "session.enc",
        crypto=SessionCrypto(key_path=tmp_path / "test.key"),
    )


class TestSessionCrypto:
    def test_encrypt_decrypt_roundtrip(self, tmp_path):
        crypto = SessionCrypto(key_path=tmp_path / "test.key")
        data = {"user_id": "user-1", "access_token": "tok_abc"}
        encrypted = crypto.encrypt(data)
        assert b"tok_abc" not in encrypted
        assert crypto.decrypt(encrypted) == data

    def test_key_created_on_first_use(self, tmp_path):
        key_path = tmp_path / "test.key"
        assert not key_path.exists()
        SessionCrypto(key_path=key_path).encrypt({"test": True})
        assert key_path.exists()

    def test_key_reused_across_instances(self, tmp_path):
        key_path = tmp_path / "test.key"
        encrypted = SessionCrypto(key_path=key_path).encrypt({"value": 42})
        assert SessionCrypto(key_path=key_path).decrypt(encrypted) == {"value": 42}

    def test_tampered_data_raises(self, tmp_path):
        crypto = SessionCrypto(key_path=tmp_path / "test.key")
        encrypted = crypto.encrypt({"secret": "data"})
        tampered = encrypted[:-5] + b"XXXXX"
        with pytest.raises(Exception):
            crypto.decrypt(tampered)


class TestSessionManager:
    def test_save_and_load(self, tmp_path, manager):
        session = SessionContext(user_id="user-1", access_token="tok_abc", email="ada@example.com")
        manager.save(session)

        fresh = SessionManager(
            session_path=tmp_path / "session.enc",
            crypto=SessionCrypto(key_path=tmp_path / "test.key"),
        )
        assert fresh.load() == session

    def test_load_without_file_raises(self, manager):
        assert not manager.exists()
        with pytest.raises(FileNotFoundError):
            manager.load()

    def test_clear_removes_file(self, manager):
        manager.save(SessionContext(user_id="user-1"))
        assert manager.exists()
        manager.clear()
        assert not manager.exists()
        with pytest.raises(FileNotFoundError):
            manager.load()

    def test_token_encrypted_on_disk(self, tmp_path, manager):
        manager.save(SessionContext(user_id="user-1", access_token="tok_secret", email="ada@example.com"))
        raw = (tmp_path / "session.enc").read_bytes().decode("utf-8", errors="ignore")
        assert "tok_secret" not in raw
        assert "ada@example.com" not in raw

    def test_redacted_summary(self, manager):
        manager.save(SessionContext(user_id="user-1", access_token="tok_abc", email="ada@example.com"))
        summary = manager.get_redacted_summary()
        assert summary == {"user_id": "user-1", "email": "a***@example.com", "has_token": True}
