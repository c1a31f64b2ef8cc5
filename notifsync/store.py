"""
Notification store.

Holds the cached notifications, the unread count and the user's preference
map as one immutable snapshot. State only changes through dispatched
actions, each applied by the pure ``reduce`` function. Observers subscribe
to receive every new snapshot.

The unread count is fed by its own endpoint and is never recomputed from
the list; the two converge on the next refresh of each.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Union

from notifsync.models import Notification

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
Listener = Callable[["NotificationState"], None]


def utc_now() -> datetime:
    """Default store clock."""
    return datetime.now(timezone.utc)


# ============================================================================
# State
# ============================================================================


@dataclass(frozen=True)
class NotificationState:
    """
    Store snapshot.

    Attributes:
        notifications: Cached notifications in server order
        unread_count: Server-reported unread count, adjusted locally
        preferences: Preference map, None until first loaded
        loading: True while a list or preference request is outstanding
        error: Last fetch error message, if any
    """

    notifications: tuple[Notification, ...] = ()
    unread_count: int = 0
    preferences: Optional[dict[str, Any]] = None
    loading: bool = False
    error: Optional[str] = None

    def get(self, notification_id: str) -> Optional[Notification]:
        for notification in self.notifications:
            if notification.id == notification_id:
                return notification
        return None


# ============================================================================
# Actions
# ============================================================================


@dataclass(frozen=True)
class LoadStart:
    pass


@dataclass(frozen=True)
class LoadSuccess:
    notifications: tuple[Notification, ...]


@dataclass(frozen=True)
class LoadFailure:
    message: str


@dataclass(frozen=True)
class MarkReadLocal:
    notification_id: str


@dataclass(frozen=True)
class MarkAllReadLocal:
    pass


@dataclass(frozen=True)
class RemoveLocal:
    notification_id: str


@dataclass(frozen=True)
class AddNotification:
    notification: Notification


@dataclass(frozen=True)
class UpdateNotification:
    notification: Notification


@dataclass(frozen=True)
class SetUnreadCount:
    count: int


@dataclass(frozen=True)
class SetPreferences:
    preferences: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ClearError:
    pass


Action = Union[
    LoadStart,
    LoadSuccess,
    LoadFailure,
    MarkReadLocal,
    MarkAllReadLocal,
    RemoveLocal,
    AddNotification,
    UpdateNotification,
    SetUnreadCount,
    SetPreferences,
    ClearError,
]


# ============================================================================
# Reducer
# ============================================================================


def _mark_read(notification: Notification, now: datetime) -> Notification:
    return notification.model_copy(update={"is_read": True, "read_at": now})


def reduce(state: NotificationState, action: Action, now: datetime) -> NotificationState:
    """
    Apply one action to a snapshot.

    Args:
        state: Current snapshot
        action: Action to apply
        now: Timestamp used to stamp ``read_at``; nothing else reads time

    Returns:
        The next snapshot (``state`` itself for unknown actions)
    """
    if isinstance(action, LoadStart):
        return replace(state, loading=True, error=None)

    if isinstance(action, LoadSuccess):
        return replace(state, notifications=tuple(action.notifications), loading=False)

    if isinstance(action, LoadFailure):
        return replace(state, error=action.message, loading=False)

    if isinstance(action, MarkReadLocal):
        notifications = tuple(
            _mark_read(n, now) if n.id == action.notification_id else n
            for n in state.notifications
        )
        return replace(
            state,
            notifications=notifications,
            unread_count=max(0, state.unread_count - 1),
        )

    if isinstance(action, MarkAllReadLocal):
        notifications = tuple(_mark_read(n, now) for n in state.notifications)
        return replace(state, notifications=notifications, unread_count=0)

    if isinstance(action, RemoveLocal):
        # Decrements even when the removed notification was already read.
        notifications = tuple(
            n for n in state.notifications if n.id != action.notification_id
        )
        return replace(
            state,
            notifications=notifications,
            unread_count=max(0, state.unread_count - 1),
        )

    if isinstance(action, AddNotification):
        return replace(
            state,
            notifications=(action.notification,) + state.notifications,
            unread_count=state.unread_count + 1,
        )

    if isinstance(action, UpdateNotification):
        notifications = tuple(
            action.notification if n.id == action.notification.id else n
            for n in state.notifications
        )
        return replace(state, notifications=notifications)

    if isinstance(action, SetUnreadCount):
        return replace(state, unread_count=max(0, int(action.count)))

    if isinstance(action, SetPreferences):
        return replace(state, preferences=dict(action.preferences))

    if isinstance(action, ClearError):
        return replace(state, error=None)

    logger.warning(f"Ignoring unknown action: {type(action).__name__}")
    return state


# ============================================================================
# NotificationStore Class
# ============================================================================


class NotificationStore:
    """
    Observable owner of the current snapshot.

    Dispatch is synchronous: the reducer runs and every listener is called
    before ``dispatch`` returns. Listeners must not mutate the snapshot.

    Args:
        initial: Starting snapshot
        clock: Callable returning the current time, used to stamp reads
    """

    def __init__(
        self,
        initial: Optional[NotificationState] = None,
        clock: Clock = utc_now,
    ):
        self._state = initial or NotificationState()
        self._clock = clock
        self._listeners: list[Listener] = []

    @property
    def state(self) -> NotificationState:
        """Current snapshot."""
        return self._state

    def dispatch(self, action: Action) -> NotificationState:
        """
        Apply an action and notify listeners if the snapshot changed.

        Returns:
            The new snapshot
        """
        previous = self._state
        self._state = reduce(previous, action, self._clock())
        logger.debug(f"Dispatched {type(action).__name__}")

        if self._state != previous:
            self._notify()
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener for new snapshots.

        Returns:
            A callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception as e:
                logger.error(f"Store listener failed: {e}", exc_info=True)
