"""
Unit tests for the notification API client.

Tests endpoint paths and methods, bearer authentication, envelope
normalization and error mapping.
"""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from notifsync.api_client import (
    ApiError,
    AuthenticationError,
    ConnectionError,
    NotificationApiClient,
)


API_URL = "http://localhost:5000/api"


class RecordingTransport:
    """Builds an httpx.MockTransport that records every request."""

    def __init__(self, status_code=200, body=None, exc=None):
        self.requests = []
        self.status_code = status_code
        self.body = body
        self.exc = exc

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc(f"simulated {self.exc.__name__}", request=request)
        if self.body is None:
            return httpx.Response(self.status_code)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def make_client(recorder: RecordingTransport, token="tok-123") -> NotificationApiClient:
    return NotificationApiClient(
        API_URL,
        token_provider=lambda: token,
        transport=recorder.transport,
    )


class TestConstruction:
    """Tests for client construction."""

    def test_requires_api_url(self):
        with pytest.raises(ValueError):
            NotificationApiClient("")

    def test_strips_trailing_slash(self):
        client = NotificationApiClient(API_URL + "/")
        assert client.api_url == API_URL


class TestReads:
    """Tests for the read endpoints."""

    @pytest.mark.asyncio
    async def test_fetch_list(self, raw_notifications):
        recorder = RecordingTransport(body={"success": True, "data": {"notifications": raw_notifications}})
        client = make_client(recorder)

        result = await client.fetch_list({"limit": 20})
        await client.close()

        assert recorder.last.method == "GET"
        assert recorder.last.url.path == "/api/notifications/my"
        assert recorder.last.url.params["limit"] == "20"
        assert [n.id for n in result] == [
            "665a1f0c2b1e4a0012345601",
            "665a1f0c2b1e4a0012345602",
        ]

    @pytest.mark.asyncio
    async def test_fetch_list_without_params(self, raw_notifications):
        recorder = RecordingTransport(body=raw_notifications)
        client = make_client(recorder)

        result = await client.fetch_list()
        await client.close()

        assert recorder.last.url.query == b""
        assert len(result) == 2

    @pytest.mark.asyncio
    async def test_fetch_list_unknown_shape_is_empty(self):
        recorder = RecordingTransport(body={"success": True, "data": {"items": []}})
        client = make_client(recorder)

        assert await client.fetch_list() == []
        await client.close()

    @pytest.mark.asyncio
    async def test_fetch_unread_count(self):
        recorder = RecordingTransport(body={"success": True, "data": {"count": 5}})
        client = make_client(recorder)

        count = await client.fetch_unread_count()
        await client.close()

        assert count == 5
        assert recorder.last.url.path == "/api/notifications/unread-count"

    @pytest.mark.asyncio
    async def test_fetch_preferences(self):
        prefs = {"task_assigned": {"inApp": True, "email": False}}
        recorder = RecordingTransport(body={"success": True, "data": {"preferences": prefs}})
        client = make_client(recorder)

        result = await client.fetch_preferences()
        await client.close()

        assert result == prefs
        assert recorder.last.url.path == "/api/notifications/my/preferences"


class TestMutations:
    """Tests for the mutating endpoints."""

    @pytest.mark.asyncio
    async def test_mark_read(self):
        recorder = RecordingTransport(body={"success": True})
        client = make_client(recorder)

        await client.mark_read("abc")
        await client.close()

        assert recorder.last.method == "PATCH"
        assert recorder.last.url.path == "/api/notifications/abc/read"

    @pytest.mark.asyncio
    async def test_mark_all_read(self):
        recorder = RecordingTransport(body={"success": True})
        client = make_client(recorder)

        await client.mark_all_read()
        await client.close()

        assert recorder.last.method == "PATCH"
        assert recorder.last.url.path == "/api/notifications/read-all"

    @pytest.mark.asyncio
    async def test_remove_with_empty_body(self):
        recorder = RecordingTransport(status_code=204)
        client = make_client(recorder)

        await client.remove("abc")
        await client.close()

        assert recorder.last.method == "DELETE"
        assert recorder.last.url.path == "/api/notifications/abc"

    @pytest.mark.asyncio
    async def test_update_preferences_sends_bare_map(self):
        prefs = {"task_assigned": {"email": True}}
        recorder = RecordingTransport(body={"success": True, "data": {"preferences": prefs}})
        client = make_client(recorder)

        echoed = await client.update_preferences(prefs)
        await client.close()

        assert recorder.last.method == "PUT"
        assert recorder.last.url.path == "/api/notifications/my/preferences"
        assert json.loads(recorder.last.content) == prefs
        assert echoed == prefs

    @pytest.mark.asyncio
    async def test_update_preferences_without_echo(self):
        recorder = RecordingTransport(body={"success": True})
        client = make_client(recorder)

        echoed = await client.update_preferences({"a": {"sms": False}})
        await client.close()

        assert echoed == {}


class TestAuthentication:
    """Tests for the bearer header."""

    @pytest.mark.asyncio
    async def test_bearer_header_sent(self):
        recorder = RecordingTransport(body={"count": 0})
        client = make_client(recorder, token="tok-123")

        await client.fetch_unread_count()
        await client.close()

        assert recorder.last.headers["Authorization"] == "Bearer tok-123"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", [None, "", "undefined", "null"])
    async def test_no_header_for_invalid_token(self, token):
        recorder = RecordingTransport(body={"count": 0})
        client = make_client(recorder, token=token)

        await client.fetch_unread_count()
        await client.close()

        assert "Authorization" not in recorder.last.headers

    @pytest.mark.asyncio
    async def test_token_read_per_request(self):
        tokens = iter(["first", "second"])
        recorder = RecordingTransport(body={"count": 0})
        client = NotificationApiClient(
            API_URL, token_provider=lambda: next(tokens), transport=recorder.transport
        )

        await client.fetch_unread_count()
        await client.fetch_unread_count()
        await client.close()

        assert [r.headers["Authorization"] for r in recorder.requests] == [
            "Bearer first",
            "Bearer second",
        ]


class TestErrorMapping:
    """Tests for error translation."""

    @pytest.mark.asyncio
    async def test_401_raises_authentication_error(self):
        recorder = RecordingTransport(status_code=401, body={"message": "Token expired"})
        client = make_client(recorder)

        with pytest.raises(AuthenticationError) as exc_info:
            await client.fetch_list()
        await client.close()

        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "Token expired"

    @pytest.mark.asyncio
    async def test_error_body_message_is_used(self):
        recorder = RecordingTransport(
            status_code=404, body={"success": False, "message": "Notification not found"}
        )
        client = make_client(recorder)

        with pytest.raises(ApiError) as exc_info:
            await client.mark_read("missing")
        await client.close()

        assert exc_info.value.status_code == 404
        assert str(exc_info.value) == "Notification not found"

    @pytest.mark.asyncio
    async def test_error_without_body_uses_status(self):
        recorder = RecordingTransport(status_code=500)
        client = make_client(recorder)

        with pytest.raises(ApiError) as exc_info:
            await client.remove("abc")
        await client.close()

        assert "Delete notification failed with status 500" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_connect_error(self):
        recorder = RecordingTransport(exc=httpx.ConnectError)
        client = make_client(recorder)

        with pytest.raises(ConnectionError):
            await client.fetch_unread_count()
        await client.close()

    @pytest.mark.asyncio
    async def test_timeout(self):
        recorder = RecordingTransport(exc=httpx.ReadTimeout)
        client = make_client(recorder)

        with pytest.raises(ConnectionError) as exc_info:
            await client.fetch_preferences()
        await client.close()

        assert "timed out" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_connection_error_is_api_error(self):
        """Callers can handle every failure through ApiError."""
        api_client = NotificationApiClient(API_URL, token_provider=lambda: "tok")

        with patch.object(api_client, "_client") as mock_client:
            mock_client.request = AsyncMock(side_effect=httpx.ConnectError("Connection refused"))

            with pytest.raises(ApiError):
                await api_client.mark_all_read()

    @pytest.mark.asyncio
    async def test_non_json_error_body(self):
        api_client = NotificationApiClient(API_URL, token_provider=lambda: "tok")
        mock_response = MagicMock()
        mock_response.status_code = 502
        mock_response.content = b"<html>Bad Gateway</html>"
        mock_response.json.side_effect = ValueError("not json")

        with patch.object(api_client, "_client") as mock_client:
            mock_client.request = AsyncMock(return_value=mock_response)

            with pytest.raises(ApiError) as exc_info:
                await api_client.fetch_unread_count()

        assert exc_info.value.status_code == 502
        assert "Fetch unread count failed with status 502" in str(exc_info.value)


class TestContextManager:
    """Tests for async context manager support."""

    @pytest.mark.asyncio
    async def test_closes_on_exit(self):
        api_client = NotificationApiClient(API_URL)

        with patch.object(api_client, "_client") as mock_client:
            mock_client.aclose = AsyncMock()
            async with api_client as entered:
                assert entered is api_client

            mock_client.aclose.assert_awaited_once()
