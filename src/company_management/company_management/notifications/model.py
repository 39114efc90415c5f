from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from ..core.enums import EntityType, NotificationType


@dataclass(frozen=True)
class Notification:
    notification_id: int
    user_id: int
    message: str
    type: NotificationType
    is_read: bool
    created_at: datetime
    related_entity_type: Optional[EntityType] = None
    related_entity_id: Optional[int] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_public(self) -> Dict[str, Any]:
        return {
            "id": self.notification_id,
            "user_id": self.user_id,
            "message": self.message,
            "type": self.type.value,
            "is_read": self.is_read,
            "related_entity": (
                {"type": self.related_entity_type.value, "id": self.related_entity_id}
                if self.related_entity_type
                else None
            ),
            "metadata": self.metadata,
            "created_at": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class NotificationPage:
    items: list
    total: int
    unread: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.limit else 0
