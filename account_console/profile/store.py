"""Profile store — the server-confirmed profile snapshot and its subscribers."""
import logging
from typing import Any, Callable

from ..errors import ProfileNotLoaded
from ..gateway.base import Gateway, SessionContext
from .schema import Profile, changes_to_wire, profile_from_record

logger = logging.getLogger(__name__)

Subscriber = Callable[[Profile | None], None]


class ProfileStore:
    """Holds the authoritative profile. Written only by load() and commit()."""

    def __init__(self, gateway: Gateway, session: SessionContext):
        self._gateway = gateway
        self._session = session
        self._snapshot: Profile | None = None
        self._subscribers: list[Subscriber] = []

    @property
    def session(self) -> SessionContext:
        return self._session

    @property
    def loaded(self) -> bool:
        return self._snapshot is not None

    @property
    def snapshot(self) -> Profile:
        """Current profile. Frozen; callers cannot mutate it."""
        if self._snapshot is None:
            raise ProfileNotLoaded("Profile has not been loaded")
        return self._snapshot

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback for snapshot changes. Returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _publish(self) -> None:
        for callback in list(self._subscribers):
            callback(self._snapshot)

    async def load(self) -> Profile:
        """Fetch and normalize the profile. Gateway errors propagate."""
        record = await self._gateway.get_profile(self._session)
        self._snapshot = profile_from_record(record)
        logger.info("Profile %s loaded", self._snapshot.id)
        self._publish()
        return self._snapshot

    async def commit(self, changes: dict[str, Any]) -> Profile:
        """Persist ``changes`` and, once confirmed, merge exactly those fields.

        The merge is applied to the snapshot current at confirmation time so
        concurrent commits of other fields are preserved. On failure the
        gateway error propagates and the snapshot is untouched.
        """
        current = self.snapshot
        changes = dict(changes)
        if "first_name" in changes or "last_name" in changes:
            changes.setdefault("first_name", current.first_name)
            changes.setdefault("last_name", current.last_name)
        if "payment_methods" in changes:
            changes["payment_methods"] = tuple(changes["payment_methods"])

        await self._gateway.update_profile(self._session, changes_to_wire(changes))

        self._snapshot = self.snapshot.model_copy(update=changes)
        logger.info("Committed %s for profile %s", ", ".join(sorted(changes)), self._snapshot.id)
        self._publish()
        return self._snapshot

    def clear(self) -> None:
        self._snapshot = None
        self._publish()
