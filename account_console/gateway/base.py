"""Abstract base class for the remote account API."""
import mimetypes
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional


@dataclass(frozen=True)
class SessionContext:
    """Authenticated user passed explicitly into every gateway call."""
    user_id: str
    access_token: Optional[str] = None
    email: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "access_token": self.access_token,
            "email": self.email,
        }


@dataclass(frozen=True)
class PhotoFile:
    """An image selected for upload."""
    filename: str
    mime_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_path(cls, path: Path | str) -> "PhotoFile":
        path = Path(path)
        mime_type, _ = mimetypes.guess_type(path.name)
        return cls(
            filename=path.name,
            mime_type=mime_type or "application/octet-stream",
            data=path.read_bytes(),
        )


class Gateway(ABC):
    """Request/response boundary to the account API.

    Implementations raise the GatewayError subclasses from
    ``account_console.errors``; nothing else should escape.
    """

    @abstractmethod
    async def get_profile(self, session: SessionContext) -> dict[str, Any]:
        """Fetch the raw profile record for the session's user."""
        ...

    @abstractmethod
    async def update_profile(self, session: SessionContext, partial: dict[str, Any]) -> dict[str, Any]:
        """Persist a partial update. Returns the server's record or an ack."""
        ...

    @abstractmethod
    async def upload_photo(self, session: SessionContext, file: PhotoFile, owner_id: str) -> str:
        """Store an image and return its public URL."""
        ...

    @abstractmethod
    async def logout(self, session: SessionContext) -> None:
        """End the remote session."""
        ...

    async def aclose(self) -> None:
        """Release any held connections."""
        return None
