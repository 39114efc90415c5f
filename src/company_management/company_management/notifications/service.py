from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ..access.policy import Actor
from ..common.validators import parse_enum, require_max_length, require_non_empty
from ..core.constants import DEFAULT_PAGE_SIZE, MAX_MESSAGE_LENGTH, MAX_PAGE_SIZE
from ..core.enums import EntityType, NotificationType
from ..core.exceptions import AuthorizationError, NotFoundError
from .model import Notification, NotificationPage
from .repository import NotificationRepository

logger = logging.getLogger(__name__)


class NotificationService:
    """Per-user inbox. Only the recipient may read, acknowledge or delete an entry."""

    def __init__(self, notifications: NotificationRepository):
        self._notifications = notifications

    def notify(
        self,
        *,
        user_id: int,
        message: str,
        type: NotificationType,
        related_entity_type: Optional[EntityType] = None,
        related_entity_id: Optional[int] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> int:
        message = require_non_empty(message, "message")
        require_max_length(message, "message", MAX_MESSAGE_LENGTH)
        notification_id = self._notifications.create(
            user_id=int(user_id),
            message=message,
            type=type,
            related_entity_type=related_entity_type,
            related_entity_id=related_entity_id,
            metadata=dict(metadata or {}),
        )
        logger.debug("notification %s (%s) -> user %s", notification_id, type.value, user_id)
        return notification_id

    def list_for(
        self,
        actor: Actor,
        *,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
        unread_only: bool = False,
        type: Any = None,
    ) -> NotificationPage:
        page = max(int(page), 1)
        limit = min(max(int(limit), 1), MAX_PAGE_SIZE)
        kind = parse_enum(NotificationType, type, "type") if type else None
        items = self._notifications.list_for_user(
            actor.user_id, unread_only=unread_only, type=kind, offset=(page - 1) * limit, limit=limit
        )
        total = self._notifications.count_for_user(actor.user_id, unread_only=unread_only, type=kind)
        unread = self._notifications.count_for_user(actor.user_id, unread_only=True)
        return NotificationPage(items=list(items), total=total, unread=unread, page=page, limit=limit)

    def unread_count(self, actor: Actor) -> int:
        return self._notifications.count_for_user(actor.user_id, unread_only=True)

    def _owned(self, actor: Actor, notification_id: int) -> Notification:
        notification = self._notifications.get_by_id(int(notification_id))
        if not notification:
            raise NotFoundError("Notification not found")
        if notification.user_id != actor.user_id:
            raise AuthorizationError("You can only manage your own notifications")
        return notification

    def mark_read(self, actor: Actor, notification_id: int) -> Notification:
        notification = self._owned(actor, notification_id)
        if not notification.is_read:
            self._notifications.mark_read(notification.notification_id)
        return self._notifications.get_by_id(notification.notification_id) or notification

    def mark_all_read(self, actor: Actor) -> int:
        return self._notifications.mark_all_read(actor.user_id)

    def delete(self, actor: Actor, notification_id: int) -> None:
        notification = self._owned(actor, notification_id)
        self._notifications.delete(notification.notification_id)

    def clear_read(self, actor: Actor) -> int:
        return self._notifications.delete_read(actor.user_id)
