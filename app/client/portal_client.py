"""HTTP client for the portal's login and profile endpoints."""

from typing import Any

import httpx
import structlog

from app.config import settings
from app.core.exceptions import StorageUnavailableException

logger = structlog.get_logger(__name__)


class LoginOutcome(dict):
    """Login endpoint payload: success, user, error, access_token."""

    @property
    def success(self) -> bool:
        return bool(self.get("success"))

    @property
    def user(self) -> dict[str, Any] | None:
        return self.get("user")

    @property
    def error(self) -> str | None:
        return self.get("error")


class PortalClient:
    """Async client used by the login forms and by session restore."""

    def __init__(
        self,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
        locale: str | None = None,
    ):
        self.locale = locale or settings.default_locale
        headers = {"Accept-Language": self.locale}
        self._client = httpx.AsyncClient(
            base_url=(base_url or settings.portal_base_url).rstrip("/") + settings.api_v1_prefix,
            transport=transport,
            timeout=timeout,
            headers=headers,
        )

    async def __aenter__(self) -> "PortalClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _login(self, payload: dict[str, Any]) -> LoginOutcome:
        try:
            response = await self._client.post("/auth/login", json=payload)
            body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("login_request_failed", error=str(e))
            return LoginOutcome(success=False, error=str(e) or "Authentication failed.")
        return LoginOutcome(body)

    async def authenticate_user(self, identifier: str) -> LoginOutcome:
        """Log in through the attendee form (no password)."""
        return await self._login({"identifier": identifier, "is_admin": False})

    async def authenticate_admin(self, identifier: str, password: str) -> LoginOutcome:
        """Log in through the administrator form."""
        return await self._login(
            {"identifier": identifier, "password": password, "is_admin": True}
        )

    async def get_user_profile(self, user_id: str) -> dict[str, Any] | None:
        """
        Fetch the profile behind a session marker.

        Returns:
            Profile dict, or None when the account no longer exists

        Raises:
            StorageUnavailableException: On transport errors or server failures
        """
        try:
            response = await self._client.get(f"/users/{user_id}")
        except httpx.HTTPError as e:
            raise StorageUnavailableException() from e

        if response.status_code in (404, 422):
            return None
        if response.is_error:
            raise StorageUnavailableException()
        return response.json()
