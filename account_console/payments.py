"""Payment method manager — add, remove and set-default with a single default."""
import asyncio
import logging

from .errors import AccountError
from .notifications import Notification, NotificationSink, failure, success
from .profile.schema import PaymentMethod
from .profile.store import ProfileStore

logger = logging.getLogger(__name__)


class PaymentMethodManager:
    """Each operation is its own commit of the full collection.

    The new collection is built from the current snapshot, sent to the
    gateway, and applied only after confirmation. Operations are serialized
    so a later one always builds on the result of the earlier one.
    """

    def __init__(self, store: ProfileStore, sink: NotificationSink):
        self._store = store
        self._sink = sink
        self._lock = asyncio.Lock()

    @property
    def methods(self) -> tuple[PaymentMethod, ...]:
        return self._store.snapshot.payment_methods

    async def _commit(
        self,
        methods: list[PaymentMethod],
        done: Notification,
        failed: Notification,
    ) -> bool:
        try:
            await self._store.commit({"payment_methods": methods})
        except AccountError as e:
            logger.warning("Payment method update failed: %s", type(e).__name__, exc_info=e)
            self._sink.push(failed)
            return False
        self._sink.push(done)
        return True

    async def add(self, method: PaymentMethod) -> bool:
        failed = failure("Failed to add card", "Could not add payment method. Please try again.")
        async with self._lock:
            current = self.methods
            if any(m.id == method.id for m in current):
                logger.warning("Payment method %s already on profile", method.id)
                self._sink.push(failed)
                return False
            if method.is_default:
                current = tuple(m.model_copy(update={"is_default": False}) for m in current)
            return await self._commit(
                [*current, method],
                success("Card added", "Your payment method has been added successfully."),
                failed,
            )

    async def set_default(self, method_id: str) -> bool:
        method_id = str(method_id)
        failed = failure("Update failed", "Could not update default payment method.")
        async with self._lock:
            current = self.methods
            if not any(m.id == method_id for m in current):
                logger.warning("Cannot set default: no payment method %s", method_id)
                self._sink.push(failed)
                return False
            updated = [m.model_copy(update={"is_default": m.id == method_id}) for m in current]
            return await self._commit(
                updated,
                success("Default card updated", "Your default payment method has been changed."),
                failed,
            )

    async def remove(self, method_id: str) -> bool:
        """Remove a method. Removing the default leaves no default."""
        method_id = str(method_id)
        failed = failure("Removal failed", "Could not remove payment method. Please try again.")
        async with self._lock:
            current = self.methods
            if not any(m.id == method_id for m in current):
                logger.warning("Cannot remove: no payment method %s", method_id)
                self._sink.push(failed)
                return False
            return await self._commit(
                [m for m in current if m.id != method_id],
                success("Card removed", "Your payment method has been removed."),
                failed,
            )
