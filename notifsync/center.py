"""
Notification center.

Owns one notification store and keeps it synchronized with the server:
initial load on mount, periodic background refresh, manual refresh, and
optimistic mutations (mark read, mark all read, delete, preference update).

Mutations are applied to the store first and then sent to the server. A
rejected request produces an error notice but is never rolled back; the
next scheduled refresh reconciles local and server state. This keeps the
UI responsive at the cost of a short divergence window after failures.

Every public operation is gated on the session: without a valid token it
returns immediately without touching the network or the store.
"""

import asyncio
import logging
from typing import Any, Callable, Optional, Union

from pydantic import ValidationError

from notifsync.api_client import ApiError, NotificationApiClient
from notifsync.config import SyncConfig
from notifsync.credential_store import TokenStore
from notifsync.models import Notification
from notifsync.notices import NoticeChannel
from notifsync.scheduler import (
    DEFAULT_LIST_INTERVAL,
    DEFAULT_UNREAD_INTERVAL,
    SyncScheduler,
)
from notifsync.session import SessionGate
from notifsync.store import (
    Action,
    AddNotification,
    ClearError,
    Listener,
    LoadFailure,
    LoadStart,
    LoadSuccess,
    MarkAllReadLocal,
    MarkReadLocal,
    NotificationState,
    NotificationStore,
    RemoveLocal,
    SetPreferences,
    SetUnreadCount,
)

logger = logging.getLogger("notifsync.sync")

DEFAULT_PAGE_SIZE = 20


class NotificationCenter:
    """
    Synchronization engine facade.

    Attributes:
        store: The owned notification store
        notices: Channel receiving user-visible notices
        scheduler: Background refresh scheduler
    """

    def __init__(
        self,
        api_client: NotificationApiClient,
        gate: SessionGate,
        store: Optional[NotificationStore] = None,
        notices: Optional[NoticeChannel] = None,
        unread_interval: float = DEFAULT_UNREAD_INTERVAL,
        list_interval: float = DEFAULT_LIST_INTERVAL,
        page_size: int = DEFAULT_PAGE_SIZE,
    ):
        """
        Initialize the center.

        Args:
            api_client: Client for the notification endpoints
            gate: Session gate consulted by every operation
            store: Store to own (a fresh one by default)
            notices: Notice channel (a fresh one by default)
            unread_interval: Seconds between unread-count refreshes
            list_interval: Seconds between full-list refreshes
            page_size: Number of notifications fetched by the list refresh
        """
        self._api_client = api_client
        self._gate = gate
        self.store = store or NotificationStore()
        self.notices = notices or NoticeChannel()
        self._page_size = page_size
        self.scheduler = SyncScheduler(
            gate=gate,
            refresh_unread=self.fetch_unread_count,
            refresh_list=self._refresh_recent,
            unread_interval=unread_interval,
            list_interval=list_interval,
        )
        self._alive = True
        self._generation = 0

    @classmethod
    def from_config(
        cls,
        config: SyncConfig,
        token_store: Optional[TokenStore] = None,
        **kwargs: Any,
    ) -> "NotificationCenter":
        """
        Build a center wired to the configured server and the local token.

        Args:
            config: Sync configuration
            token_store: Token source (default location when omitted)
            **kwargs: Extra arguments forwarded to the constructor
        """
        token_store = token_store or TokenStore()
        api_client = NotificationApiClient(
            api_url=config.api_url,
            token_provider=token_store.get_token,
            timeout=config.request_timeout_seconds,
        )
        return cls(
            api_client=api_client,
            gate=SessionGate(token_store.get_token),
            unread_interval=config.unread_interval_seconds,
            list_interval=config.list_interval_seconds,
            page_size=config.page_size,
            **kwargs,
        )

    # -------------------------------------------------------------------------
    # Store access
    # -------------------------------------------------------------------------

    @property
    def state(self) -> NotificationState:
        """Current store snapshot."""
        return self.store.state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Subscribe to store snapshots. Returns an unsubscribe callable."""
        return self.store.subscribe(listener)

    def _can_run(self) -> bool:
        """Session gate plus liveness: torn-down centers do nothing."""
        return self._alive and self._gate.has_valid_credential()

    def _is_current(self, generation: int) -> bool:
        return self._alive and generation == self._generation

    def _apply(self, action: Action, generation: Optional[int] = None) -> None:
        """Dispatch unless the center was torn down (or remounted) meanwhile."""
        if generation is None:
            generation = self._generation
        if not self._is_current(generation):
            logger.debug(f"Ignoring late {type(action).__name__} after teardown")
            return
        self.store.dispatch(action)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def mount(self) -> bool:
        """
        Load initial data and start background refresh.

        Returns:
            True if mounted, False if the session is invalid, the center
            was unmounted during the initial load, or background refresh
            could not be started
        """
        if not self._gate.has_valid_credential():
            logger.debug("No valid session, not mounting")
            return False

        self._alive = True
        generation = self._generation
        await asyncio.gather(
            self.fetch_notifications(),
            self.fetch_unread_count(),
            self.fetch_preferences(),
        )
        if not self._is_current(generation):
            logger.debug("Unmounted during initial load, background sync not started")
            return False

        if not (self.scheduler.is_running or self.scheduler.start()):
            return False
        return True

    async def unmount(self) -> None:
        """
        Stop background refresh and ignore any result still in flight.
        """
        await self.scheduler.stop()
        self._alive = False
        self._generation += 1
        await self.scheduler.drain()

    async def close(self) -> None:
        """Unmount and close the HTTP client."""
        await self.unmount()
        await self._api_client.close()

    async def __aenter__(self) -> "NotificationCenter":
        await self.mount()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # Fetches
    # -------------------------------------------------------------------------

    async def fetch_notifications(self, params: Optional[dict[str, Any]] = None) -> None:
        """
        Fetch the notification list and replace the cached one.

        Args:
            params: Query parameters forwarded to the list endpoint
        """
        if not self._can_run():
            return

        generation = self._generation
        self._apply(LoadStart(), generation)
        try:
            notifications = await self._api_client.fetch_list(params)
        except ApiError as e:
            logger.error(f"Fetch notifications error: {e}")
            if self._is_current(generation):
                self._apply(LoadFailure(str(e)), generation)
                self.notices.error(f"Failed to fetch notifications: {e}")
            return

        logger.debug(f"Fetched {len(notifications)} notifications")
        self._apply(LoadSuccess(tuple(notifications)), generation)

    async def _refresh_recent(self) -> None:
        await self.fetch_notifications({"limit": self._page_size})

    async def fetch_unread_count(self) -> None:
        """Fetch the server-side unread count. Failures are only logged."""
        if not self._can_run():
            return

        generation = self._generation
        try:
            count = await self._api_client.fetch_unread_count()
        except ApiError as e:
            logger.warning(f"Failed to fetch unread count: {e}")
            return

        self._apply(SetUnreadCount(count), generation)

    async def fetch_preferences(self) -> None:
        """Fetch the preference map."""
        if not self._can_run():
            return

        generation = self._generation
        try:
            preferences = await self._api_client.fetch_preferences()
        except ApiError as e:
            logger.error(f"Fetch preferences error: {e}")
            if self._is_current(generation):
                self._apply(LoadFailure(str(e)), generation)
                self.notices.error(f"Failed to fetch preferences: {e}")
            return

        self._apply(SetPreferences(preferences), generation)

    async def refresh(self) -> None:
        """Manual refresh of the list and unread count."""
        await asyncio.gather(self.fetch_notifications(), self.fetch_unread_count())

    # -------------------------------------------------------------------------
    # Optimistic mutations
    # -------------------------------------------------------------------------

    def _announce(self, generation: int, publish: Callable[[str], None], message: str) -> None:
        """Publish a notice unless the center was torn down meanwhile."""
        if self._is_current(generation):
            publish(message)

    async def mark_as_read(self, notification_id: str) -> None:
        """Mark one notification read locally, then on the server."""
        if not self._can_run():
            return

        generation = self._generation
        self._apply(MarkReadLocal(notification_id), generation)
        try:
            await self._api_client.mark_read(notification_id)
        except ApiError as e:
            self._announce(generation, self.notices.error, f"Failed to mark as read: {e}")

    async def mark_all_as_read(self) -> None:
        """Mark every notification read locally, then on the server."""
        if not self._can_run():
            return

        generation = self._generation
        self._apply(MarkAllReadLocal(), generation)
        try:
            await self._api_client.mark_all_read()
        except ApiError as e:
            self._announce(generation, self.notices.error, f"Failed to mark all as read: {e}")
            return
        self._announce(generation, self.notices.success, "All notifications marked as read")

    async def delete_notification(self, notification_id: str) -> None:
        """Remove one notification locally, then on the server."""
        if not self._can_run():
            return

        generation = self._generation
        self._apply(RemoveLocal(notification_id), generation)
        try:
            await self._api_client.remove(notification_id)
        except ApiError as e:
            self._announce(generation, self.notices.error, f"Failed to delete notification: {e}")
            return
        self._announce(generation, self.notices.success, "Notification deleted")

    async def update_preferences(self, preferences: dict[str, Any]) -> None:
        """
        Replace the preference map locally, then on the server.

        When the server echoes a non-empty map it replaces the local one.
        """
        if not self._can_run():
            return

        generation = self._generation
        self._apply(SetPreferences(preferences), generation)
        try:
            echoed = await self._api_client.update_preferences(preferences)
        except ApiError as e:
            self._apply(LoadFailure(str(e)), generation)
            self._announce(generation, self.notices.error, f"Failed to update preferences: {e}")
            return

        if echoed:
            self._apply(SetPreferences(echoed), generation)
        self._announce(generation, self.notices.success, "Preferences updated successfully")

    # -------------------------------------------------------------------------
    # Local operations
    # -------------------------------------------------------------------------

    def add_notification(
        self, notification: Union[Notification, dict[str, Any]]
    ) -> Optional[Notification]:
        """
        Insert a pushed notification at the top of the list.

        Args:
            notification: A Notification or its wire representation

        Returns:
            The inserted notification, or None if skipped
        """
        if not self._can_run():
            return None

        if not isinstance(notification, Notification):
            try:
                notification = Notification.model_validate(notification)
            except ValidationError as e:
                logger.warning(f"Ignoring malformed pushed notification: {e.error_count()} error(s)")
                return None

        self._apply(AddNotification(notification))
        self.notices.info(notification.title)
        return notification

    def clear_error(self) -> None:
        """Clear the store error."""
        if not self._can_run():
            return
        self._apply(ClearError())
