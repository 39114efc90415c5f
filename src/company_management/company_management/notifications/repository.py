from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, Sequence

from ..core.enums import EntityType, NotificationType
from .model import Notification


class NotificationRepository(Protocol):
    def create(
        self,
        *,
        user_id: int,
        message: str,
        type: NotificationType,
        related_entity_type: Optional[EntityType],
        related_entity_id: Optional[int],
        metadata: Dict[str, Any],
    ) -> int:
        raise NotImplementedError

    def get_by_id(self, notification_id: int) -> Optional[Notification]:
        raise NotImplementedError

    def list_for_user(
        self,
        user_id: int,
        *,
        unread_only: bool = False,
        type: Optional[NotificationType] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> Sequence[Notification]:
        raise NotImplementedError

    def count_for_user(
        self,
        user_id: int,
        *,
        unread_only: bool = False,
        type: Optional[NotificationType] = None,
    ) -> int:
        raise NotImplementedError

    def mark_read(self, notification_id: int) -> bool:
        raise NotImplementedError

    def mark_all_read(self, user_id: int) -> int:
        raise NotImplementedError

    def delete(self, notification_id: int) -> bool:
        raise NotImplementedError

    def delete_read(self, user_id: int) -> int:
        raise NotImplementedError
