"""Account console — wires the store and controllers for one signed-in session."""
import logging

from .edit_session import EditSessionController
from .errors import AccountError
from .gateway.base import Gateway, PhotoFile, SessionContext
from .notifications import MemoryNotificationSink, NotificationSink, failure
from .payments import PaymentMethodManager
from .profile.store import ProfileStore
from .upload import PhotoUploadController

logger = logging.getLogger(__name__)


class AccountConsole:
    """Everything the account page needs, bound to a single session."""

    def __init__(
        self,
        gateway: Gateway,
        session: SessionContext,
        sink: NotificationSink | None = None,
    ):
        self.gateway = gateway
        self.session = session
        self.sink = sink or MemoryNotificationSink()
        self.store = ProfileStore(gateway, session)
        self.editor = EditSessionController(self.store, self.sink)
        self.payments = PaymentMethodManager(self.store, self.sink)
        self.photos = PhotoUploadController(gateway, self.store, self.sink)

    async def load(self):
        return await self.store.load()

    async def upload_photo(self, file: PhotoFile) -> str | None:
        return await self.photos.select_and_upload(file, self.store.snapshot.id)

    async def logout(self) -> bool:
        """End the remote session and drop local state. False if the gateway refused."""
        try:
            await self.gateway.logout(self.session)
        except AccountError as e:
            logger.warning("Logout failed: %s", type(e).__name__, exc_info=e)
            self.sink.push(failure("Logout failed", "Please try again."))
            return False
        self.editor.discard()
        self.store.clear()
        logger.info("Signed out %s", self.session.user_id)
        return True
