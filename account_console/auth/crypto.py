"""Fernet encryption for the persisted session."""
import json
import logging
from pathlib import Path

from cryptography.fernet import Fernet

logger = logging.getLogger(__name__)

DEFAULT_KEY_PATH = Path.home() / ".config" / "account-console" / "session.key"


class SessionCrypto:
    """Encrypts dicts to bytes with a key kept next to the session file."""

    def __init__(self, key_path: Path | None = None):
        self._key_path = key_path or DEFAULT_KEY_PATH
        self._fernet: Fernet | None = None

    def _get_fernet(self) -> Fernet:
        if self._fernet is None:
            if self._key_path.exists():
                key = self._key_path.read_bytes()
            else:
                key = Fernet.generate_key()
                self._key_path.parent.mkdir(parents=True, exist_ok=True)
                self._key_path.write_bytes(key)
                self._key_path.chmod(0o600)
                logger.info("Generated session key at %s", self._key_path)
            self._fernet = Fernet(key)
        return self._fernet

    def encrypt(self, data: dict) -> bytes:
        return self._get_fernet().encrypt(json.dumps(data).encode("utf-8"))

    def decrypt(self, token: bytes) -> dict:
        """Raises cryptography.fernet.InvalidToken if the data was tampered with."""
        return json.loads(self._get_fernet().decrypt(token))
