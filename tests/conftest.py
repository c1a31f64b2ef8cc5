"""
Pytest configuration and fixtures for notifsync tests.

Provides temporary configuration files, a fixed clock, raw notification
payloads and mocked API clients.
"""

import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator
from unittest.mock import AsyncMock, MagicMock

import pytest
import yaml

from notifsync.api_client import NotificationApiClient
from notifsync.models import Notification
from notifsync.session import SessionGate
from notifsync.store import NotificationStore


FIXED_NOW = datetime(2024, 5, 1, 12, 30, 0, tzinfo=timezone.utc)


# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch) -> None:
    """
    Remove notifsync environment variables so tests are isolated.
    """
    for var in [
        "NOTIFSYNC_SERVER_URL",
        "NOTIFSYNC_LOG_LEVEL",
        "NOTIFSYNC_CONFIG_PATH",
        "NOTIFSYNC_TOKEN",
    ]:
        monkeypatch.delenv(var, raising=False)


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def temp_config_dir() -> Generator[Path, None, None]:
    """
    Create a temporary directory for configuration files.

    Yields:
        Path to temporary configuration directory
    """
    with tempfile.TemporaryDirectory(prefix="notifsync_test_") as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sync_config_values() -> dict:
    """Sample configuration values."""
    return {
        "server_url": "http://localhost:5000",
        "api_base_path": "/api",
        "unread_interval_seconds": 15,
        "list_interval_seconds": 45,
        "page_size": 10,
        "request_timeout_seconds": 5.0,
        "log_level": "DEBUG",
        "user_id": "u1",
        "user_role": "staff",
    }


@pytest.fixture
def sync_config_file(temp_config_dir: Path, sync_config_values: dict) -> Path:
    """Write the sample configuration to a YAML file."""
    config_path = temp_config_dir / "notifsync-config.yaml"
    with open(config_path, "w") as f:
        yaml.dump(sync_config_values, f)
    return config_path


# ============================================================================
# Session Fixtures
# ============================================================================


@pytest.fixture
def valid_token() -> str:
    return "eyJhbGciOiJIUzI1NiJ9.test.signature"


@pytest.fixture
def valid_gate(valid_token: str) -> SessionGate:
    return SessionGate(lambda: valid_token)


@pytest.fixture
def closed_gate() -> SessionGate:
    return SessionGate(lambda: None)


# ============================================================================
# Notification Fixtures
# ============================================================================


@pytest.fixture
def fixed_clock():
    """Clock that always returns FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def raw_notifications() -> list:
    """Wire payloads as sent by the backend (mixed id field names)."""
    return [
        {
            "_id": "665a1f0c2b1e4a0012345601",
            "title": "New task assigned",
            "message": "Clean room 204",
            "type": "task_assigned",
            "channel": "inApp",
            "priority": "high",
            "isRead": False,
            "readAt": None,
            "createdAt": "2024-05-01T09:00:00.000Z",
            "actionUrl": "/staff/tasks/42",
            "userId": "u1",
            "userType": "staff",
        },
        {
            "id": "665a1f0c2b1e4a0012345602",
            "title": "Shift scheduled",
            "message": "Tomorrow 08:00",
            "type": "shift_scheduled",
            "channel": "email",
            "priority": "low",
            "isRead": True,
            "readAt": "2024-04-30T18:00:00.000Z",
            "createdAt": "2024-04-30T17:00:00.000Z",
        },
    ]


@pytest.fixture
def make_notification():
    """Factory for Notification models."""

    def _make(notification_id: str = "n1", is_read: bool = False, **fields) -> Notification:
        data = {"id": notification_id, "title": f"Title {notification_id}", "isRead": is_read}
        data.update(fields)
        return Notification.model_validate(data)

    return _make


@pytest.fixture
def store(fixed_clock) -> NotificationStore:
    return NotificationStore(clock=fixed_clock)


# ============================================================================
# Mock API Client Fixtures
# ============================================================================


@pytest.fixture
def mock_api_client() -> MagicMock:
    """
    Create a mock NotificationApiClient.

    Returns:
        MagicMock with AsyncMock endpoints returning empty results
    """
    client = MagicMock(spec=NotificationApiClient)
    client.fetch_list = AsyncMock(return_value=[])
    client.fetch_unread_count = AsyncMock(return_value=0)
    client.fetch_preferences = AsyncMock(return_value={})
    client.mark_read = AsyncMock(return_value=None)
    client.mark_all_read = AsyncMock(return_value=None)
    client.remove = AsyncMock(return_value=None)
    client.update_preferences = AsyncMock(return_value={})
    client.close = AsyncMock(return_value=None)
    return client
