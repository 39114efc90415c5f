from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..core.enums import EntityType, NotificationType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json, where
from .model import Notification
from .repository import NotificationRepository

_COLUMNS = (
    "notification_id, user_id, message, type, is_read, related_entity_type, related_entity_id, metadata, created_at"
)


def _to_notification(row: Dict[str, Any]) -> Notification:
    return Notification(
        notification_id=int(row["notification_id"]),
        user_id=int(row["user_id"]),
        message=row["message"],
        type=NotificationType(row["type"]),
        is_read=bool(row["is_read"]),
        created_at=row["created_at"],
        related_entity_type=EntityType(row["related_entity_type"]) if row.get("related_entity_type") else None,
        related_entity_id=row.get("related_entity_id"),
        metadata=load_json(row.get("metadata")),
    )


def _filters(user_id: int, unread_only: bool, type: Optional[NotificationType]) -> Tuple[str, List[Any]]:
    conditions = ["user_id=%s"]
    params: List[Any] = [user_id]
    if unread_only:
        conditions.append("is_read=0")
    if type is not None:
        conditions.append("type=%s")
        params.append(type.value)
    return where(conditions), params


class MySQLNotificationRepository(NotificationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO notifications(user_id, message, type, is_read, related_entity_type, related_entity_id, metadata)
                VALUES(%s,%s,%s,0,%s,%s,%s)
                """,
                (
                    user_id,
                    message,
                    type.value,
                    related_entity_type.value if related_entity_type else None,
                    related_entity_id,
                    dump_json(metadata),
                ),
            )
            return int(cur.lastrowid)

    def get_by_id(self, notification_id: int) -> Optional[Notification]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM notifications WHERE notification_id=%s", (notification_id,))
            row = fetchone(cur)
            return _to_notification(row) if row else None

    def list_for_user(
        self,
        user_id: int,
        *,
        unread_only: bool = False,
        type: Optional[NotificationType] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> Sequence[Notification]:
        where_sql, params = _filters(user_id, unread_only, type)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM notifications {where_sql}
                ORDER BY created_at DESC, notification_id DESC
                LIMIT %s OFFSET %s
                """,
                (*params, int(limit), int(offset)),
            )
            return [_to_notification(r) for r in fetchall(cur)]

    def count_for_user(
        self,
        user_id: int,
        *,
        unread_only: bool = False,
        type: Optional[NotificationType] = None,
    ) -> int:
        where_sql, params = _filters(user_id, unread_only, type)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM notifications {where_sql}", params)
            row = fetchone(cur)
            return int(row["n"]) if row else 0

    def mark_read(self, notification_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE notifications SET is_read=1 WHERE notification_id=%s", (notification_id,))
            return cur.rowcount > 0

    def mark_all_read(self, user_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE notifications SET is_read=1 WHERE user_id=%s AND is_read=0", (user_id,))
            return int(cur.rowcount)

    def delete(self, notification_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM notifications WHERE notification_id=%s", (notification_id,))
            return cur.rowcount > 0

    def delete_read(self, user_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM notifications WHERE user_id=%s AND is_read=1", (user_id,))
            return int(cur.rowcount)
