"""Encrypted persistence for the signed-in session."""
from .crypto import SessionCrypto
from .manager import SessionManager

__all__ = ["SessionCrypto", "SessionManager"]
