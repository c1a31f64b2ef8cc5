"""
Response envelope normalization.

The notification endpoints have answered with several envelope shapes over
time. These functions unwrap every known shape into one canonical value and
fall back to an empty value for anything else. None of them raise on an
unexpected payload.
"""

import logging
from typing import Any, Callable, Optional

from pydantic import ValidationError

from notifsync.models import Notification

logger = logging.getLogger(__name__)


def _data_notifications(payload: Any) -> Optional[list]:
    data = payload.get("data") if isinstance(payload, dict) else None
    if isinstance(data, dict) and isinstance(data.get("notifications"), list):
        return data["notifications"]
    return None


def _top_level_notifications(payload: Any) -> Optional[list]:
    if isinstance(payload, dict) and isinstance(payload.get("notifications"), list):
        return payload["notifications"]
    return None


def _data_list(payload: Any) -> Optional[list]:
    if isinstance(payload, dict) and isinstance(payload.get("data"), list):
        return payload["data"]
    return None


def _bare_list(payload: Any) -> Optional[list]:
    return payload if isinstance(payload, list) else None


# Most deeply nested shape first.
LIST_SHAPES: tuple[Callable[[Any], Optional[list]], ...] = (
    _data_notifications,
    _top_level_notifications,
    _data_list,
    _bare_list,
)


def extract_notification_list(payload: Any) -> list:
    """
    Unwrap a list response into a flat list of raw notification objects.

    Recognized shapes, in order of preference:
        {"data": {"notifications": [...]}}
        {"notifications": [...]}
        {"data": [...]}
        [...]

    Returns:
        The unwrapped list, or an empty list if no shape matched
    """
    for shape in LIST_SHAPES:
        found = shape(payload)
        if found is not None:
            return list(found)

    logger.debug(f"Unrecognized notification list shape: {type(payload).__name__}")
    return []


def parse_notifications(items: list) -> list[Notification]:
    """
    Convert raw notification objects into Notification models.

    Entries that are not objects or fail validation (missing id, bad
    timestamps) are dropped with a warning; order is preserved.
    """
    notifications: list[Notification] = []
    for index, item in enumerate(items):
        if isinstance(item, Notification):
            notifications.append(item)
            continue
        if not isinstance(item, dict):
            logger.warning(f"Skipping non-object notification entry at index {index}")
            continue
        try:
            notifications.append(Notification.model_validate(item))
        except ValidationError as e:
            logger.warning(
                f"Skipping malformed notification at index {index}: "
                f"{e.error_count()} validation error(s)"
            )
    return notifications


def normalize_notification_list(payload: Any) -> list[Notification]:
    """Unwrap and parse a list response in one step."""
    return parse_notifications(extract_notification_list(payload))


def _as_count(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return max(0, value)
    if isinstance(value, float) and value.is_integer():
        return max(0, int(value))
    return None


def extract_unread_count(payload: Any) -> int:
    """
    Unwrap an unread-count response.

    Recognized shapes: {"data": {"count": n}}, {"count": n}, bare n.

    Returns:
        The count floored at 0, or 0 if no shape matched
    """
    if isinstance(payload, dict):
        data = payload.get("data")
        if isinstance(data, dict):
            count = _as_count(data.get("count"))
            if count is not None:
                return count
        count = _as_count(payload.get("count"))
        if count is not None:
            return count
        return 0

    count = _as_count(payload)
    return count if count is not None else 0


def extract_preferences(payload: Any) -> dict:
    """
    Unwrap a preferences response.

    The preferences document may be wrapped in a ``data`` envelope; the map
    itself lives under its ``preferences`` member.

    Returns:
        The preference map, or an empty dict if absent
    """
    body = payload
    if isinstance(payload, dict) and payload.get("data"):
        body = payload["data"]

    if isinstance(body, dict):
        preferences = body.get("preferences")
        if isinstance(preferences, dict):
            return dict(preferences)
    return {}


def extract_error_message(payload: Any) -> Optional[str]:
    """Pull a human-readable error message out of an error body."""
    if isinstance(payload, dict):
        for key in ("message", "detail", "error"):
            value = payload.get(key)
            if isinstance(value, str) and value:
                return value
    return None
