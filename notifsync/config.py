"""
Sync engine configuration module.

Manages the server URL, polling intervals, page size and logging level.
Configuration can be loaded from a YAML file or environment variables.
"""

import os
import re
from pathlib import Path
from typing import Optional

import yaml
from platformdirs import user_config_dir, user_data_dir


# ============================================================================
# Constants
# ============================================================================

APP_NAME = "notifsync"
APP_AUTHOR = "HotelOps"
CONFIG_FILENAME = "notifsync-config.yaml"

# Environment variable names
ENV_SERVER_URL = "NOTIFSYNC_SERVER_URL"
ENV_LOG_LEVEL = "NOTIFSYNC_LOG_LEVEL"
ENV_CONFIG_PATH = "NOTIFSYNC_CONFIG_PATH"

# Default values
DEFAULT_API_BASE_PATH = "/api"
DEFAULT_UNREAD_INTERVAL = 30  # seconds
DEFAULT_LIST_INTERVAL = 60  # seconds
DEFAULT_PAGE_SIZE = 20
DEFAULT_REQUEST_TIMEOUT = 30.0  # seconds
DEFAULT_LOG_LEVEL = "INFO"

# URL validation regex
URL_PATTERN = re.compile(
    r"^https?://"  # http:// or https://
    r"(?:(?:[A-Z0-9](?:[A-Z0-9-]{0,61}[A-Z0-9])?\.)+[A-Z]{2,6}\.?|"  # domain
    r"localhost|"  # localhost
    r"\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3})"  # ...or ip
    r"(?::\d+)?"  # optional port
    r"(?:/?|[/?]\S+)$",
    re.IGNORECASE,
)


# ============================================================================
# Exceptions
# ============================================================================


class ConfigError(Exception):
    """Base exception for configuration errors."""

    pass


class ConfigValidationError(ConfigError):
    """Raised when configuration validation fails."""

    pass


# ============================================================================
# Helper Functions
# ============================================================================


def get_default_config_dir() -> Path:
    """
    Get the default configuration directory for the current platform.

    Returns:
        Path to the platform-appropriate config directory
    """
    return Path(user_config_dir(APP_NAME, APP_AUTHOR))


def get_default_data_dir() -> Path:
    """
    Get the default data directory for the current platform.

    Holds the encrypted session token and its key.
    """
    return Path(user_data_dir(APP_NAME, APP_AUTHOR))


# ============================================================================
# SyncConfig Class
# ============================================================================


class SyncConfig:
    """
    Sync engine configuration manager.

    Configuration sources (in priority order):
    1. Environment variables
    2. Configuration file
    3. Default values

    Attributes:
        server_url: Hotel backend base URL
        api_base_path: Path prefix of the REST API (e.g. /api)
        unread_interval_seconds: Interval of the unread-count refresh
        list_interval_seconds: Interval of the full-list refresh
        page_size: Number of notifications requested by the list refresh
        request_timeout_seconds: HTTP request timeout
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        user_id: Current user id, used to filter notifications client-side
        user_role: Current user role (admin, manager, staff, guest)
    """

    def __init__(
        self,
        config_path: Optional[Path] = None,
        config_dir: Optional[Path] = None,
    ):
        """
        Initialize configuration.

        Args:
            config_path: Explicit path to config file (takes precedence)
            config_dir: Directory containing config file
        """
        if config_path:
            self._config_path = Path(config_path)
            self._config_dir = self._config_path.parent
        elif config_dir:
            self._config_dir = Path(config_dir)
            self._config_path = self._config_dir / CONFIG_FILENAME
        else:
            env_path = os.environ.get(ENV_CONFIG_PATH)
            if env_path:
                self._config_path = Path(env_path)
                self._config_dir = self._config_path.parent
            else:
                self._config_dir = get_default_config_dir()
                self._config_path = self._config_dir / CONFIG_FILENAME

        self._server_url: str = ""
        self._api_base_path: str = DEFAULT_API_BASE_PATH
        self._unread_interval_seconds: float = DEFAULT_UNREAD_INTERVAL
        self._list_interval_seconds: float = DEFAULT_LIST_INTERVAL
        self._page_size: int = DEFAULT_PAGE_SIZE
        self._request_timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT
        self._log_level: str = DEFAULT_LOG_LEVEL
        self._user_id: str = ""
        self._user_role: str = ""

        self._load()

    @property
    def config_path(self) -> Path:
        """Get the configuration file path."""
        return self._config_path

    # -------------------------------------------------------------------------
    # Configuration Properties
    # -------------------------------------------------------------------------

    @property
    def server_url(self) -> str:
        """Get the server URL."""
        return os.environ.get(ENV_SERVER_URL, self._server_url)

    @server_url.setter
    def server_url(self, value: str) -> None:
        self._server_url = value

    @property
    def api_base_path(self) -> str:
        return self._api_base_path

    @api_base_path.setter
    def api_base_path(self, value: str) -> None:
        self._api_base_path = value

    @property
    def unread_interval_seconds(self) -> float:
        return self._unread_interval_seconds

    @unread_interval_seconds.setter
    def unread_interval_seconds(self, value: float) -> None:
        self._unread_interval_seconds = value

    @property
    def list_interval_seconds(self) -> float:
        return self._list_interval_seconds

    @list_interval_seconds.setter
    def list_interval_seconds(self, value: float) -> None:
        self._list_interval_seconds = value

    @property
    def page_size(self) -> int:
        return self._page_size

    @page_size.setter
    def page_size(self, value: int) -> None:
        self._page_size = value

    @property
    def request_timeout_seconds(self) -> float:
        return self._request_timeout_seconds

    @request_timeout_seconds.setter
    def request_timeout_seconds(self, value: float) -> None:
        self._request_timeout_seconds = value

    @property
    def log_level(self) -> str:
        """Get the log level."""
        return os.environ.get(ENV_LOG_LEVEL, self._log_level)

    @log_level.setter
    def log_level(self, value: str) -> None:
        self._log_level = value

    @property
    def user_id(self) -> str:
        return self._user_id

    @user_id.setter
    def user_id(self, value: str) -> None:
        self._user_id = value

    @property
    def user_role(self) -> str:
        return self._user_role

    @user_role.setter
    def user_role(self, value: str) -> None:
        self._user_role = value

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def is_configured(self) -> bool:
        """Check if a server URL is configured."""
        return bool(self.server_url)

    @property
    def api_url(self) -> str:
        """Server URL joined with the API base path."""
        base = self.server_url.rstrip("/")
        path = self.api_base_path.strip("/")
        return f"{base}/{path}" if path else base

    # -------------------------------------------------------------------------
    # Configuration Management
    # -------------------------------------------------------------------------

    def _load(self) -> None:
        """Load configuration from file."""
        if not self._config_path.exists():
            return

        try:
            with open(self._config_path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse config file: {e}")

        self._server_url = data.get("server_url", "")
        self._api_base_path = data.get("api_base_path", DEFAULT_API_BASE_PATH)
        self._unread_interval_seconds = data.get(
            "unread_interval_seconds", DEFAULT_UNREAD_INTERVAL
        )
        self._list_interval_seconds = data.get(
            "list_interval_seconds", DEFAULT_LIST_INTERVAL
        )
        self._page_size = data.get("page_size", DEFAULT_PAGE_SIZE)
        self._request_timeout_seconds = data.get(
            "request_timeout_seconds", DEFAULT_REQUEST_TIMEOUT
        )
        self._log_level = data.get("log_level", DEFAULT_LOG_LEVEL)
        self._user_id = data.get("user_id", "")
        self._user_role = data.get("user_role", "")

    def to_dict(self) -> dict:
        """Return the effective configuration as a plain dictionary."""
        return {
            "server_url": self.server_url,
            "api_base_path": self.api_base_path,
            "unread_interval_seconds": self.unread_interval_seconds,
            "list_interval_seconds": self.list_interval_seconds,
            "page_size": self.page_size,
            "request_timeout_seconds": self.request_timeout_seconds,
            "log_level": self.log_level,
            "user_id": self.user_id,
            "user_role": self.user_role,
        }

    def save(self) -> None:
        """Save configuration to file."""
        self._config_dir.mkdir(parents=True, exist_ok=True)

        data = {
            "server_url": self._server_url,
            "api_base_path": self._api_base_path,
            "unread_interval_seconds": self._unread_interval_seconds,
            "list_interval_seconds": self._list_interval_seconds,
            "page_size": self._page_size,
            "request_timeout_seconds": self._request_timeout_seconds,
            "log_level": self._log_level,
            "user_id": self._user_id,
            "user_role": self._user_role,
        }

        with open(self._config_path, "w") as f:
            yaml.dump(data, f, default_flow_style=False)

    def validate(self) -> None:
        """
        Validate the current configuration.

        Raises:
            ConfigValidationError: If configuration is invalid
        """
        if self.server_url and not URL_PATTERN.match(self.server_url):
            raise ConfigValidationError(
                f"Invalid server_url format: {self.server_url}"
            )

        if self.unread_interval_seconds <= 0:
            raise ConfigValidationError(
                f"unread_interval_seconds must be positive, got: {self.unread_interval_seconds}"
            )

        if self.list_interval_seconds <= 0:
            raise ConfigValidationError(
                f"list_interval_seconds must be positive, got: {self.list_interval_seconds}"
            )

        if self.page_size <= 0:
            raise ConfigValidationError(
                f"page_size must be positive, got: {self.page_size}"
            )
