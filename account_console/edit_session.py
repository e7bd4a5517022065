"""Edit session — VIEWING -> EDITING -> SAVING over a draft of the profile."""
import logging
from enum import Enum
from typing import Any

from .errors import AccountError, InvalidTransition, UnknownField
from .notifications import NotificationSink, failure, success
from .profile.schema import EDITABLE_FIELDS, ProfileDraft
from .profile.store import ProfileStore

logger = logging.getLogger(__name__)


class EditMode(str, Enum):
    VIEWING = "VIEWING"
    EDITING = "EDITING"
    SAVING = "SAVING"


class EditSessionController:
    """Owns the draft while the user edits personal information.

    The store is never touched until save() is confirmed by the gateway.
    A failed save returns to EDITING with the draft intact.
    """

    def __init__(self, store: ProfileStore, sink: NotificationSink):
        self._store = store
        self._sink = sink
        self._mode = EditMode.VIEWING
        self._draft: ProfileDraft | None = None

    @property
    def mode(self) -> EditMode:
        return self._mode

    @property
    def draft(self) -> ProfileDraft | None:
        return self._draft

    def _require(self, *modes: EditMode) -> None:
        if self._mode not in modes:
            allowed = "/".join(m.value for m in modes)
            raise InvalidTransition(f"Expected {allowed}, edit session is {self._mode.value}")

    def begin_edit(self) -> ProfileDraft:
        self._require(EditMode.VIEWING)
        self._draft = ProfileDraft.from_profile(self._store.snapshot)
        self._mode = EditMode.EDITING
        return self._draft

    def update_field(self, name: str, value: Any) -> None:
        self._require(EditMode.EDITING)
        if name not in EDITABLE_FIELDS:
            raise UnknownField(f"'{name}' is not an editable profile field")
        setattr(self._draft, name, "" if value is None else str(value))

    def cancel(self) -> None:
        self._require(EditMode.EDITING)
        self._draft = None
        self._mode = EditMode.VIEWING

    def discard(self) -> None:
        """Drop the draft when the user navigates away. Ignored while saving."""
        if self._mode is EditMode.SAVING:
            return
        self._draft = None
        self._mode = EditMode.VIEWING

    async def save(self) -> bool:
        """Commit the draft. Returns True on success, False on failure or re-entry."""
        if self._mode is EditMode.SAVING:
            logger.debug("save() ignored: already saving")
            return False
        self._require(EditMode.EDITING)

        self._mode = EditMode.SAVING
        draft = self._draft
        try:
            await self._store.commit(draft.model_dump())
        except AccountError as e:
            logger.warning("Profile save failed: %s", type(e).__name__, exc_info=e)
            self._mode = EditMode.EDITING
            self._sink.push(failure("Update failed", "Could not save changes. Please try again."))
            return False
        except Exception:
            self._mode = EditMode.EDITING
            raise

        self._draft = None
        self._mode = EditMode.VIEWING
        self._sink.push(success("Profile updated", "Your changes have been saved successfully."))
        return True
