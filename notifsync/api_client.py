"""
HTTP client for the notification endpoints.

Thin async wrapper around the hotel backend's user notification API.
Translates transport failures into typed exceptions and hands response
bodies to the normalization functions so callers only ever see canonical
shapes.
"""

import logging
from typing import Any, Callable, Optional

import httpx

from notifsync import __version__
from notifsync.models import Notification
from notifsync.normalize import (
    extract_error_message,
    extract_preferences,
    extract_unread_count,
    normalize_notification_list,
)
from notifsync.session import is_valid_token

logger = logging.getLogger(__name__)


# ============================================================================
# Constants
# ============================================================================

DEFAULT_TIMEOUT = 30.0  # seconds
USER_AGENT = f"notifsync/{__version__}"

NOTIFICATIONS_PATH = "/notifications"


# ============================================================================
# Exceptions
# ============================================================================


class ApiError(Exception):
    """Base exception for API errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

    @property
    def message(self) -> str:
        return str(self)


class ConnectionError(ApiError):
    """Raised when the server cannot be reached or the request times out."""

    pass


class AuthenticationError(ApiError):
    """Raised when the server rejects the session token."""

    pass


# ============================================================================
# NotificationApiClient Class
# ============================================================================


class NotificationApiClient:
    """
    HTTP client for the notification API.

    Attributes:
        api_url: Base URL of the REST API (server URL plus API prefix)
    """

    def __init__(
        self,
        api_url: str,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the API client.

        Args:
            api_url: Base URL of the REST API, e.g. http://hotel.local/api
            token_provider: Callable returning the current bearer token
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)

        Raises:
            ValueError: If api_url is empty
        """
        if not api_url:
            raise ValueError("api_url is required")

        self._api_url = api_url.rstrip("/")
        self._token_provider = token_provider

        self._client = httpx.AsyncClient(
            base_url=self._api_url,
            headers={
                "User-Agent": USER_AGENT,
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    @property
    def api_url(self) -> str:
        return self._api_url

    def _auth_headers(self) -> dict[str, str]:
        token = self._token_provider() if self._token_provider else None
        if is_valid_token(token):
            return {"Authorization": f"Bearer {token}"}
        return {}

    async def _request(
        self,
        method: str,
        path: str,
        action: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """
        Send a request and check its status.

        Args:
            method: HTTP method
            path: Path relative to the API base URL
            action: Short description used in error messages

        Raises:
            AuthenticationError: On 401
            ApiError: On any other non-2xx status
            ConnectionError: If the server cannot be reached
        """
        try:
            response = await self._client.request(
                method, path, headers=self._auth_headers(), **kwargs
            )
        except httpx.ConnectError as e:
            raise ConnectionError(f"Failed to connect to server: {e}")
        except httpx.TimeoutException as e:
            raise ConnectionError(f"Connection timed out: {e}")
        except httpx.HTTPError as e:
            raise ConnectionError(f"Request failed: {e}")

        if 200 <= response.status_code < 300:
            return response

        detail = extract_error_message(self._json(response))
        if response.status_code == 401:
            raise AuthenticationError(
                detail or "Session expired or invalid", status_code=401
            )
        raise ApiError(
            detail or f"{action} failed with status {response.status_code}",
            status_code=response.status_code,
        )

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        """Decode a JSON body, returning None for empty or invalid bodies."""
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            logger.debug(f"Non-JSON response body from {response.request.url}")
            return None

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def fetch_list(
        self, params: Optional[dict[str, Any]] = None
    ) -> list[Notification]:
        """
        Fetch the current user's notifications.

        Args:
            params: Query parameters (limit, page, isRead, type...)

        Returns:
            Notifications in server order

        Raises:
            ApiError: If the request fails
        """
        response = await self._request(
            "GET",
            f"{NOTIFICATIONS_PATH}/my",
            "Fetch notifications",
            params=params or None,
        )
        return normalize_notification_list(self._json(response))

    async def fetch_unread_count(self) -> int:
        """
        Fetch the server-side unread count.

        Raises:
            ApiError: If the request fails
        """
        response = await self._request(
            "GET", f"{NOTIFICATIONS_PATH}/unread-count", "Fetch unread count"
        )
        return extract_unread_count(self._json(response))

    async def fetch_preferences(self) -> dict[str, Any]:
        """
        Fetch the current user's preference map.

        Raises:
            ApiError: If the request fails
        """
        response = await self._request(
            "GET", f"{NOTIFICATIONS_PATH}/my/preferences", "Fetch preferences"
        )
        return extract_preferences(self._json(response))

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    async def mark_read(self, notification_id: str) -> None:
        """
        Mark one notification as read.

        Raises:
            ApiError: If the request fails
        """
        await self._request(
            "PATCH",
            f"{NOTIFICATIONS_PATH}/{notification_id}/read",
            "Mark as read",
        )

    async def mark_all_read(self) -> None:
        """
        Mark every notification of the current user as read.

        Raises:
            ApiError: If the request fails
        """
        await self._request(
            "PATCH", f"{NOTIFICATIONS_PATH}/read-all", "Mark all as read"
        )

    async def remove(self, notification_id: str) -> None:
        """
        Delete one notification.

        Raises:
            ApiError: If the request fails
        """
        await self._request(
            "DELETE",
            f"{NOTIFICATIONS_PATH}/{notification_id}",
            "Delete notification",
        )

    async def update_preferences(self, preferences: dict[str, Any]) -> dict[str, Any]:
        """
        Replace the current user's preference map.

        Returns:
            The preference map echoed by the server (may be empty)

        Raises:
            ApiError: If the request fails
        """
        response = await self._request(
            "PUT",
            f"{NOTIFICATIONS_PATH}/my/preferences",
            "Update preferences",
            json=preferences,
        )
        return extract_preferences(self._json(response))

    # -------------------------------------------------------------------------
    # Cleanup
    # -------------------------------------------------------------------------

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "NotificationApiClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
