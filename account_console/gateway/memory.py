"""In-process gateway used for demo mode and tests."""
import base64
import copy
import logging
from typing import Any, Optional

from ..errors import NotAuthenticated
from .base import Gateway, PhotoFile, SessionContext

logger = logging.getLogger(__name__)


class MemoryGateway(Gateway):
    """Keeps profile records in memory, keyed by user id.

    Uploaded photos are returned inline as base64 ``data:`` URLs.
    """

    def __init__(self, records: Optional[dict[str, dict[str, Any]]] = None):
        self._records: dict[str, dict[str, Any]] = copy.deepcopy(records or {})
        self.calls: list[str] = []

    def _record(self, session: SessionContext) -> dict[str, Any]:
        record = self._records.get(session.user_id)
        if record is None:
            raise NotAuthenticated(f"No profile for user {session.user_id}", status=401)
        return record

    async def get_profile(self, session: SessionContext) -> dict[str, Any]:
        self.calls.append("get_profile")
        return copy.deepcopy(self._record(session))

    async def update_profile(self, session: SessionContext, partial: dict[str, Any]) -> dict[str, Any]:
        self.calls.append("update_profile")
        record = self._record(session)
        record.update(copy.deepcopy(partial))
        logger.debug("Updated %s for %s", sorted(partial), session.user_id)
        return copy.deepcopy(record)

    async def upload_photo(self, session: SessionContext, file: PhotoFile, owner_id: str) -> str:
        self.calls.append("upload_photo")
        self._record(session)
        encoded = base64.b64encode(file.data).decode("ascii")
        return f"data:{file.mime_type};base64,{encoded}"

    async def logout(self, session: SessionContext) -> None:
        self.calls.append("logout")
