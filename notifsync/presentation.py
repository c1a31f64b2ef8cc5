"""
Presentation helpers shared by notification views.

Icons per notification type, badge labels, filter option lists, the
client-side filter applied before display, and preference toggling.
"""

from typing import Any, Iterable, Optional

from notifsync.models import Notification

DEFAULT_ICON = "🔔"

TYPE_ICONS = {
    # Admin notifications
    "admin_message": "📢",
    "system_alert": "⚠️",
    "emergency_alert": "🚨",
    "financial_alert": "💰",
    "security_alert": "🔒",
    # Staff notifications
    "task_assigned": "📋",
    "shift_scheduled": "📅",
    "manager_message": "💬",
    # Guest notifications
    "booking_confirmation": "✅",
    "payment_receipt": "💳",
    "checkin_reminder": "🏨",
}

BADGE_LIMIT = 99


def type_icon(notification_type: Optional[str]) -> str:
    """Icon for a notification type; unknown types get the bell."""
    return TYPE_ICONS.get(notification_type or "", DEFAULT_ICON)


def badge_label(unread_count: int) -> str:
    """Label for the unread badge, empty when nothing is unread."""
    if unread_count <= 0:
        return ""
    if unread_count > BADGE_LIMIT:
        return f"{BADGE_LIMIT}+"
    return str(unread_count)


def _unique(values: Iterable[Optional[str]]) -> list[str]:
    seen: list[str] = []
    for value in values:
        if value and value not in seen:
            seen.append(value)
    return seen


def type_options(notifications: Iterable[Notification]) -> list[str]:
    """Distinct types in first-seen order, for filter pickers."""
    return _unique(n.type for n in notifications)


def channel_options(notifications: Iterable[Notification]) -> list[str]:
    """Distinct channels in first-seen order, for filter pickers."""
    return _unique(n.channel for n in notifications)


def filter_notifications(
    notifications: Iterable[Notification],
    *,
    user_id: Optional[str] = None,
    user_role: Optional[str] = None,
    unread_only: bool = False,
    notification_type: Optional[str] = None,
    channel: Optional[str] = None,
) -> list[Notification]:
    """
    Select the notifications a view should display.

    Notifications that carry a ``user_id`` or ``user_type`` different from
    the current user are hidden even though the server should never send
    them. Notifications without those fields are always kept.

    Args:
        notifications: Cached notifications
        user_id: Current user id, if known
        user_role: Current user role, if known
        unread_only: Keep only unread notifications
        notification_type: Keep only this type ("all" or None for any)
        channel: Keep only this channel ("all" or None for any)
    """
    result = []
    for n in notifications:
        if n.user_id and user_id and str(n.user_id) != str(user_id):
            continue
        if n.user_type and user_role and n.user_type != user_role:
            continue
        if unread_only and n.is_read:
            continue
        if notification_type not in (None, "all") and n.type != notification_type:
            continue
        if channel not in (None, "all") and n.channel != channel:
            continue
        result.append(n)
    return result


def set_channel_preference(
    preferences: Optional[dict[str, Any]],
    notification_type: str,
    channel: str,
    enabled: bool,
) -> dict[str, Any]:
    """
    Return a copy of a preference map with one type/channel switch changed.

    Preference maps are keyed by notification type, each value mapping a
    channel name to an enabled flag.
    """
    updated = {key: dict(value) if isinstance(value, dict) else value
               for key, value in (preferences or {}).items()}
    channels = updated.get(notification_type)
    if not isinstance(channels, dict):
        channels = {}
    channels[channel] = enabled
    updated[notification_type] = channels
    return updated


def is_channel_enabled(
    preferences: Optional[dict[str, Any]],
    notification_type: str,
    channel: str,
) -> bool:
    """Check one type/channel switch; missing entries count as disabled."""
    channels = (preferences or {}).get(notification_type)
    return isinstance(channels, dict) and bool(channels.get(channel))
