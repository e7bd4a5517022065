"""Pydantic models for the client profile and its payment methods."""
import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


class PaymentMethod(BaseModel):
    """Saved card reference. Only brand, last 4 and expiry are ever held."""
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    brand: str
    last4: str
    exp_month: int
    exp_year: int
    is_default: bool = False

    @field_validator("id", "last4", mode="before")
    @classmethod
    def _coerce_str(cls, value: Any) -> Any:
        if isinstance(value, (int, float)):
            return str(value)
        return value

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


class Profile(BaseModel):
    """Server-confirmed profile snapshot. Frozen; replaced only by the store."""
    model_config = ConfigDict(frozen=True)

    id: str
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    bio: str = ""
    photo_url: str | None = None
    payment_methods: tuple[PaymentMethod, ...] = ()

    @property
    def display_name(self) -> str:
        return compose_name(self.first_name, self.last_name)

    @property
    def default_payment_method(self) -> PaymentMethod | None:
        for method in self.payment_methods:
            if method.is_default:
                return method
        return None


class ProfileDraft(BaseModel):
    """Editable copy of the profile fields while an edit session is open."""

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    bio: str = ""

    @classmethod
    def from_profile(cls, profile: Profile) -> "ProfileDraft":
        return cls(
            first_name=profile.first_name,
            last_name=profile.last_name,
            email=profile.email,
            phone=profile.phone,
            bio=profile.bio,
        )


EDITABLE_FIELDS = tuple(ProfileDraft.model_fields)


def split_name(name: str) -> tuple[str, str]:
    """Split a display name on the first whitespace boundary.

    "Ada King Lovelace" -> ("Ada", "King Lovelace"); "Ada" -> ("Ada", "").
    """
    parts = name.split()
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])


def compose_name(first_name: str, last_name: str) -> str:
    """Trimmed, single-space join of first and last name."""
    return " ".join(part for part in (first_name.strip(), last_name.strip()) if part)


def _as_str(value: Any, fallback: str = "") -> str:
    if value is None:
        return fallback
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    return fallback


def _payment_methods_from_raw(raw: Any) -> tuple[PaymentMethod, ...]:
    if not isinstance(raw, list):
        return ()
    methods: list[PaymentMethod] = []
    seen: set[str] = set()
    for entry in raw:
        try:
            method = PaymentMethod.model_validate(entry)
        except ValidationError:
            logger.warning("Dropping malformed payment method from profile record")
            continue
        if method.id in seen:
            logger.warning("Dropping duplicate payment method %s", method.id)
            continue
        if method.is_default and any(m.is_default for m in methods):
            logger.warning("Clearing extra default flag on payment method %s", method.id)
            method = method.model_copy(update={"is_default": False})
        seen.add(method.id)
        methods.append(method)
    return tuple(methods)


def profile_from_record(record: dict) -> Profile:
    """Normalize a raw server record into a Profile.

    The record carries a single ``name`` which is split into first/last name.
    Missing or null values are tolerated: a missing name falls back to the
    e-mail local part, then to "User".
    """
    email = _as_str(record.get("email"))
    name = _as_str(record.get("name"))
    if not name.strip():
        name = email.split("@")[0] if email else ""
    if not name.strip():
        name = "User"
    first_name, last_name = split_name(name)

    photo = record.get("photo") or record.get("photoUrl") or None

    return Profile(
        id=_as_str(record.get("id")),
        first_name=first_name,
        last_name=last_name,
        email=email,
        phone=_as_str(record.get("phone")),
        bio=_as_str(record.get("bio")),
        photo_url=_as_str(photo) or None,
        payment_methods=_payment_methods_from_raw(record.get("paymentMethods")),
    )


def changes_to_wire(changes: dict) -> dict:
    """Translate profile field changes into the API's partial-update shape."""
    wire: dict = {}
    if "first_name" in changes or "last_name" in changes:
        wire["name"] = compose_name(changes.get("first_name", ""), changes.get("last_name", ""))
    for field in ("email", "phone", "bio"):
        if field in changes:
            wire[field] = changes[field]
    if "photo_url" in changes:
        wire["photo"] = changes["photo_url"]
    if "payment_methods" in changes:
        wire["paymentMethods"] = [m.to_wire() for m in changes["payment_methods"]]
    return wire
