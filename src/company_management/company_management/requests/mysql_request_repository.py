from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from ..access.policy import Scope
from ..core.enums import Department, RequestStatus, RequestType, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json, scope_clause, where
from .model import Request
from .repository import RequestRepository

_SELECT = """
SELECT r.request_id, r.type, r.description, r.status, r.created_by, r.department,
       r.approved_by, r.approved_at, r.rejection_reason, r.metadata, r.created_at,
       u.name AS creator_name, u.role AS creator_role
FROM requests r
JOIN users u ON u.user_id = r.created_by
"""


def _to_request(row: Dict[str, Any]) -> Request:
    return Request(
        request_id=int(row["request_id"]),
        type=RequestType(row["type"]),
        description=row["description"],
        status=RequestStatus(row["status"]),
        created_by=int(row["created_by"]),
        department=Department(row["department"]),
        created_at=row["created_at"],
        approved_by=row.get("approved_by"),
        approved_at=row.get("approved_at"),
        rejection_reason=row.get("rejection_reason"),
        metadata=load_json(row.get("metadata")),
        creator_name=row.get("creator_name"),
        creator_role=Role(row["creator_role"]) if row.get("creator_role") else None,
    )


class MySQLRequestRepository(RequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        type: RequestType,
        description: str,
        created_by: int,
        department: Department,
        metadata: Dict[str, Any],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO requests(type, description, status, created_by, department, metadata)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (type.value, description, RequestStatus.PENDING.value, created_by, department.value, dump_json(metadata)),
            )
            return int(cur.lastrowid)

    def get_by_id(self, request_id: int) -> Optional[Request]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE r.request_id=%s", (request_id,))
            row = fetchone(cur)
            return _to_request(row) if row else None

    def list_visible(
        self,
        scope: Scope,
        *,
        status: Optional[RequestStatus] = None,
        type: Optional[RequestType] = None,
    ) -> Sequence[Request]:
        clause, params = scope_clause(scope, owner_col="r.created_by", role_col="u.role", dept_col="r.department")
        conditions: List[str] = [clause]
        if status is not None:
            conditions.append("r.status=%s")
            params.append(status.value)
        if type is not None:
            conditions.append("r.type=%s")
            params.append(type.value)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " " + where(conditions) + " ORDER BY r.created_at DESC, r.request_id DESC", params)
            return [_to_request(r) for r in fetchall(cur)]

    def decide(
        self,
        request_id: int,
        *,
        status: RequestStatus,
        decided_by: int,
        decided_at: datetime,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE requests
                SET status=%s, approved_by=%s, approved_at=%s, rejection_reason=%s
                WHERE request_id=%s AND status=%s
                """,
                (status.value, decided_by, decided_at, rejection_reason, request_id, RequestStatus.PENDING.value),
            )
            return cur.rowcount > 0

    def count_approved_between(self, user_id: int, type: RequestType, start: datetime, end: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COUNT(*) AS n FROM requests
                WHERE created_by=%s AND type=%s AND status=%s AND approved_at >= %s AND approved_at < %s
                """,
                (user_id, type.value, RequestStatus.APPROVED.value, start, end),
            )
            row = fetchone(cur)
            return int(row["n"]) if row else 0
