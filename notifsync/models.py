"""
Notification data model.

Notifications are created server-side only; the client receives them,
marks them read or deletes them. Incoming payloads use camelCase field
names and either ``id`` or ``_id`` as the identity key. Both are mapped
onto the single canonical ``id`` attribute at the boundary.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


# ============================================================================
# Enums
# ============================================================================


class NotificationPriority(str, Enum):
    """Ordered notification priority."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, NotificationPriority):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, NotificationPriority):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, NotificationPriority):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, NotificationPriority):
            return NotImplemented
        return self.rank >= other.rank


_PRIORITY_RANK = {
    NotificationPriority.LOW: 0,
    NotificationPriority.MEDIUM: 1,
    NotificationPriority.HIGH: 2,
    NotificationPriority.CRITICAL: 3,
}
_PRIORITY_VALUES = frozenset(p.value for p in NotificationPriority)


class NotificationChannel(str, Enum):
    """Known delivery channels. Payloads may carry others."""

    IN_APP = "inApp"
    EMAIL = "email"
    SMS = "sms"
    PUSH = "push"


# ============================================================================
# Notification
# ============================================================================


class Notification(BaseModel):
    """
    A cached notification.

    Instances are immutable; store transitions produce updated copies via
    ``model_copy``. Fields the model does not know are kept as extras.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

    id: str = Field(..., validation_alias=AliasChoices("id", "_id"))
    title: str = ""
    message: str = ""
    type: Optional[str] = None
    channel: Optional[str] = None
    priority: Optional[NotificationPriority] = None
    is_read: bool = Field(False, alias="isRead")
    read_at: Optional[datetime] = Field(None, alias="readAt")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    action_url: Optional[str] = Field(None, alias="actionUrl")
    user_id: Optional[str] = Field(None, alias="userId")
    user_type: Optional[str] = Field(None, alias="userType")

    @field_validator("id", "user_id", mode="before")
    @classmethod
    def coerce_identifier(cls, v: Any) -> Any:
        if v is None or isinstance(v, str):
            return v
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("id")
    @classmethod
    def id_must_not_be_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("notification id must not be empty")
        return v

    @field_validator("priority", mode="before")
    @classmethod
    def unknown_priority_is_none(cls, v: Any) -> Optional[str]:
        if isinstance(v, NotificationPriority):
            return v
        if isinstance(v, str) and v.lower() in _PRIORITY_VALUES:
            return v.lower()
        return None

    def to_wire(self) -> dict[str, Any]:
        """Serialize back to the camelCase wire representation."""
        return self.model_dump(by_alias=True, mode="json")
