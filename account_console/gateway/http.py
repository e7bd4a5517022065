"""JSON-over-HTTP gateway for the account API."""
import logging
import os
from typing import Any

import httpx

from ..errors import (
    Conflict,
    GatewayError,
    NetworkFailure,
    NotAuthenticated,
    UploadFailure,
    ValidationFailure,
)
from .base import Gateway, PhotoFile, SessionContext

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "http://localhost:5000/api"
DEFAULT_TIMEOUT = 15.0

PROFILE_PATH = "/client/me"
PHOTO_PATH = "/client/me/photo"
LOGOUT_PATH = "/auth/logout"

_STATUS_ERRORS: dict[int, type[GatewayError]] = {
    400: ValidationFailure,
    401: NotAuthenticated,
    403: NotAuthenticated,
    409: Conflict,
    422: ValidationFailure,
}


def get_gateway(base_url: str | None = None, timeout: float | None = None) -> "HttpGateway":
    """Factory function to create an HTTP gateway from the environment."""
    url = base_url or os.environ.get("ACCOUNT_API_BASE", "")
    if not url:
        raise ValueError("ACCOUNT_API_BASE not set")
    if timeout is None:
        timeout = float(os.environ.get("ACCOUNT_API_TIMEOUT", DEFAULT_TIMEOUT))
    return HttpGateway(base_url=url, timeout=timeout)


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return "Request failed"
    if isinstance(payload, dict) and payload.get("error"):
        return str(payload["error"])
    return "Request failed"


class HttpGateway(Gateway):
    """Gateway backed by httpx.AsyncClient with a configurable timeout."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
        )

    def _headers(self, session: SessionContext) -> dict[str, str]:
        headers = {"x-user-id": session.user_id}
        if session.access_token:
            headers["Authorization"] = f"Bearer {session.access_token}"
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        session: SessionContext,
        fallback: type[GatewayError] = NetworkFailure,
        **kwargs: Any,
    ) -> Any:
        try:
            response = await self._client.request(method, path, headers=self._headers(session), **kwargs)
        except httpx.TimeoutException as e:
            raise NetworkFailure(f"{method} {path} timed out") from e
        except httpx.HTTPError as e:
            raise NetworkFailure(f"{method} {path} failed: {type(e).__name__}") from e

        if response.is_success:
            if not response.content:
                return {}
            if "application/json" in response.headers.get("content-type", ""):
                try:
                    return response.json()
                except ValueError as e:
                    raise fallback(f"{method} {path} returned malformed JSON", status=response.status_code) from e
            return response.text

        error_cls = _STATUS_ERRORS.get(response.status_code, fallback)
        logger.debug("%s %s -> %s", method, path, response.status_code)
        raise error_cls(_error_message(response), status=response.status_code)

    async def get_profile(self, session: SessionContext) -> dict[str, Any]:
        payload = await self._request("GET", PROFILE_PATH, session)
        if isinstance(payload, dict) and isinstance(payload.get("profile"), dict):
            return payload["profile"]
        if not isinstance(payload, dict):
            raise NetworkFailure("Profile response was not a JSON object")
        return payload

    async def update_profile(self, session: SessionContext, partial: dict[str, Any]) -> dict[str, Any]:
        payload = await self._request("PATCH", PROFILE_PATH, session, json=partial)
        if isinstance(payload, dict):
            return payload.get("profile", payload)
        return {}

    async def upload_photo(self, session: SessionContext, file: PhotoFile, owner_id: str) -> str:
        payload = await self._request(
            "POST",
            PHOTO_PATH,
            session,
            fallback=UploadFailure,
            data={"ownerId": owner_id},
            files={"photo": (file.filename, file.data, file.mime_type)},
        )
        url = payload.get("url") if isinstance(payload, dict) else None
        if not url:
            raise UploadFailure("Upload response did not include a URL")
        return str(url)

    async def logout(self, session: SessionContext) -> None:
        await self._request("POST", LOGOUT_PATH, session)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpGateway":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()
