"""
notifsync - Client-side notification synchronization engine.

Keeps a local, observable cache of a user's notifications in step with the
hotel backend's notification API. The engine polls the server for the
unread count and the most recent notifications, applies read/delete
mutations optimistically, and surfaces transport failures as user notices.

Key modules:
- center: NotificationCenter facade (fetches, optimistic mutations, lifecycle)
- store: Reducer and observable snapshot store
- scheduler: Background refresh tasks
- api_client: HTTP client for the notification endpoints
- normalize: Response envelope normalization
- session: Session gate over the stored credential
- credential_store: Local encrypted token storage
- config: Configuration management
"""

import os
from importlib.metadata import PackageNotFoundError, version

FALLBACK_VERSION = "0.1.0"


def _get_version() -> str:
    """
    Get version with priority: NOTIFSYNC_VERSION env var > installed
    distribution metadata > fallback (running from an uninstalled checkout).
    """
    env_version = os.environ.get("NOTIFSYNC_VERSION")
    if env_version:
        return env_version

    try:
        return version("notifsync")
    except PackageNotFoundError:
        return FALLBACK_VERSION


__version__ = _get_version()
