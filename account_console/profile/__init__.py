"""Client profile snapshot, payment methods, and the store that owns them."""
from .schema import PaymentMethod, Profile, ProfileDraft
from .store import ProfileStore

__all__ = ["PaymentMethod", "Profile", "ProfileDraft", "ProfileStore"]
