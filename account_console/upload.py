"""Profile photo upload — local validation, upload, then commit of photo_url."""
import logging

from .errors import AccountError, FileTooLarge, InvalidFileType, PhotoRejected
from .gateway.base import Gateway, PhotoFile
from .notifications import NotificationSink, failure, success
from .profile.store import ProfileStore

logger = logging.getLogger(__name__)

MAX_PHOTO_BYTES = 5 * 1024 * 1024


def validate_photo(file: PhotoFile) -> None:
    """Raise PhotoRejected if the file must not be sent to the gateway."""
    if not file.mime_type.startswith("image/"):
        raise InvalidFileType(f"{file.filename}: {file.mime_type} is not an image")
    if file.size > MAX_PHOTO_BYTES:
        raise FileTooLarge(f"{file.filename}: {file.size} bytes exceeds {MAX_PHOTO_BYTES}")


class PhotoUploadController:
    """Uploads one photo at a time. A call made while in flight is ignored."""

    def __init__(self, gateway: Gateway, store: ProfileStore, sink: NotificationSink):
        self._gateway = gateway
        self._store = store
        self._sink = sink
        self._in_flight = False
        self.last_error: AccountError | None = None

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    async def select_and_upload(self, file: PhotoFile, owner_id: str) -> str | None:
        """Validate, upload and commit. Returns the new photo URL, or None."""
        if self._in_flight:
            logger.debug("Upload ignored: another upload is in flight")
            return None

        self.last_error = None
        try:
            validate_photo(file)
        except InvalidFileType as e:
            self._reject(e, "Invalid file type", "Please select an image file.")
            return None
        except FileTooLarge as e:
            self._reject(e, "File too large", "Please select an image smaller than 5MB.")
            return None

        self._in_flight = True
        try:
            url = await self._gateway.upload_photo(self._store.session, file, owner_id)
            await self._store.commit({"photo_url": url})
        except AccountError as e:
            self._reject(e, "Upload failed", "Could not upload photo. Please try again.")
            return None
        finally:
            self._in_flight = False

        self._sink.push(success("Photo updated", "Your profile picture has been updated successfully."))
        return url

    def _reject(self, error: AccountError, title: str, description: str) -> None:
        self.last_error = error
        if isinstance(error, PhotoRejected):
            logger.info("Photo rejected: %s", error)
        else:
            logger.warning("Photo upload failed: %s", type(error).__name__, exc_info=error)
        self._sink.push(failure(title, description))
