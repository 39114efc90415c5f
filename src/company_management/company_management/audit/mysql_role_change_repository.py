from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..core.enums import Department, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, where
from .model import RoleChangeFilter, RoleChangeLog
from .repository import RoleChangeLogRepository

_COLUMNS = (
    "log_id, changed_user_id, old_role, new_role, changed_by, changed_at, reason, "
    "snapshot_name, snapshot_email, snapshot_department, ip_address, user_agent"
)


def _to_log(row: Dict[str, Any]) -> RoleChangeLog:
    return RoleChangeLog(
        log_id=int(row["log_id"]),
        changed_user_id=int(row["changed_user_id"]),
        old_role=Role(row["old_role"]),
        new_role=Role(row["new_role"]),
        changed_by=int(row["changed_by"]),
        changed_at=row["changed_at"],
        snapshot_name=row["snapshot_name"],
        snapshot_email=row["snapshot_email"],
        snapshot_department=Department(row["snapshot_department"]) if row.get("snapshot_department") else None,
        reason=row.get("reason"),
        ip_address=row.get("ip_address"),
        user_agent=row.get("user_agent"),
    )


def _filters(filters: RoleChangeFilter) -> Tuple[str, List[Any]]:
    conditions: List[str] = []
    params: List[Any] = []
    if filters.start_date:
        conditions.append("changed_at >= %s")
        params.append(datetime.combine(filters.start_date, datetime.min.time()))
    if filters.end_date:
        conditions.append("changed_at < %s")
        params.append(datetime.combine(filters.end_date + timedelta(days=1), datetime.min.time()))
    if filters.old_role:
        conditions.append("old_role=%s")
        params.append(filters.old_role.value)
    if filters.new_role:
        conditions.append("new_role=%s")
        params.append(filters.new_role.value)
    if filters.changed_user_id is not None:
        conditions.append("changed_user_id=%s")
        params.append(filters.changed_user_id)
    if filters.changed_by is not None:
        conditions.append("changed_by=%s")
        params.append(filters.changed_by)
    return where(conditions), params


class MySQLRoleChangeLogRepository(RoleChangeLogRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def append(
        self,
        *,
        changed_user_id: int,
        old_role: Role,
        new_role: Role,
        changed_by: int,
        changed_at: datetime,
        reason: Optional[str],
        snapshot_name: str,
        snapshot_email: str,
        snapshot_department: Optional[Department],
        ip_address: Optional[str],
        user_agent: Optional[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO role_change_logs(
                    changed_user_id, old_role, new_role, changed_by, changed_at, reason,
                    snapshot_name, snapshot_email, snapshot_department, ip_address, user_agent
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    changed_user_id,
                    old_role.value,
                    new_role.value,
                    changed_by,
                    changed_at,
                    reason,
                    snapshot_name,
                    snapshot_email,
                    snapshot_department.value if snapshot_department else None,
                    ip_address,
                    user_agent,
                ),
            )
            return int(cur.lastrowid)

    def list(self, filters: RoleChangeFilter, *, offset: int = 0, limit: int = 50) -> Sequence[RoleChangeLog]:
        where_sql, params = _filters(filters)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM role_change_logs {where_sql}
                ORDER BY changed_at DESC, log_id DESC
                LIMIT %s OFFSET %s
                """,
                (*params, int(limit), int(offset)),
            )
            return [_to_log(r) for r in fetchall(cur)]

    def count(self, filters: RoleChangeFilter) -> int:
        where_sql, params = _filters(filters)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM role_change_logs {where_sql}", params)
            row = fetchone(cur)
            return int(row["n"]) if row else 0

    def tally(self, filters: RoleChangeFilter) -> Dict[Tuple[Role, Role], int]:
        where_sql, params = _filters(filters)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT old_role, new_role, COUNT(*) AS n FROM role_change_logs {where_sql} GROUP BY old_role, new_role",
                params,
            )
            return {(Role(r["old_role"]), Role(r["new_role"])): int(r["n"]) for r in fetchall(cur)}
