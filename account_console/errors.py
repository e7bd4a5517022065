"""Error taxonomy for the account console.

Remote failures derive from GatewayError, local photo rejections from
PhotoRejected. Controllers catch AccountError at their boundary; the
class name is logged for operators and never shown to the user.
"""


class AccountError(Exception):
    """Base class for all account console errors."""


class InvalidTransition(AccountError):
    """An edit-session operation was called from the wrong mode."""


class UnknownField(AccountError):
    """update_field() was given a field the draft does not have."""


class ProfileNotLoaded(AccountError):
    """An operation needs the profile snapshot before load() ran."""


# --- Remote errors ---

class GatewayError(AccountError):
    """A request to the remote API failed."""

    def __init__(self, message: str = "Request failed", status: int | None = None):
        super().__init__(message)
        self.message = message
        self.status = status


class NotAuthenticated(GatewayError):
    pass


class NetworkFailure(GatewayError):
    pass


class ValidationFailure(GatewayError):
    """Server rejected one or more field values."""


class Conflict(GatewayError):
    """Concurrent modification by another session. Handled as a generic failure."""


class UploadFailure(GatewayError):
    pass


# --- Local photo validation ---

class PhotoRejected(AccountError):
    """Photo failed local validation; the gateway was not contacted."""


class InvalidFileType(PhotoRejected):
    pass


class FileTooLarge(PhotoRejected):
    pass
