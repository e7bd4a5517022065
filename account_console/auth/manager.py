"""Session manager — persist, load, and clear the signed-in session."""
import logging
from pathlib import Path

from ..gateway.base import SessionContext
from ..output_sanitizer import redact_email
from .crypto import SessionCrypto

logger = logging.getLogger(__name__)

# Default session storage location
DEFAULT_SESSION_PATH = Path.home() / ".config" / "account-console" / "session.enc"


class SessionManager:
    """Keeps the session context encrypted at rest."""

    def __init__(self, session_path: Path | None = None, crypto: SessionCrypto | None = None):
        self._path = session_path or DEFAULT_SESSION_PATH
        self._crypto = crypto or SessionCrypto()
        self._cached: SessionContext | None = None

    def exists(self) -> bool:
        return self._path.exists()

    def save(self, session: SessionContext) -> None:
        """Encrypt and save the session to disk."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_bytes(self._crypto.encrypt(session.to_dict()))
        self._cached = session
        logger.info("Session saved to %s", self._path)

    def load(self) -> SessionContext:
        if self._cached:
            return self._cached
        if not self._path.exists():
            raise FileNotFoundError("No saved session. Set ACCOUNT_USER_ID to sign in.")
        data = self._crypto.decrypt(self._path.read_bytes())
        self._cached = SessionContext(**data)
        return self._cached

    def clear(self) -> None:
        """Forget the session on logout."""
        self._cached = None
        if self._path.exists():
            self._path.unlink()
            logger.info("Session removed from %s", self._path)

    def get_redacted_summary(self) -> dict:
        session = self.load()
        return {
            "user_id": session.user_id,
            "email": redact_email(session.email) if session.email else None,
            "has_token": bool(session.access_token),
        }
