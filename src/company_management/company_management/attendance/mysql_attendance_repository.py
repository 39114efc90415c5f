from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence

from ..access.policy import Scope
from ..core.enums import AttendanceStatus, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, duplicate_key_as_conflict, fetchall, fetchone, scope_clause, where
from .model import AttendanceRecord
from .repository import AttendanceRepository

_SELECT = """
SELECT a.attendance_id, a.user_id, a.work_date, a.login_time, a.logout_time,
       a.status, a.department, a.role, u.name AS user_name
FROM attendance a
LEFT JOIN users u ON u.user_id = a.user_id
"""


def _to_record(row: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(row["attendance_id"]),
        user_id=int(row["user_id"]),
        work_date=row["work_date"],
        login_time=row["login_time"],
        logout_time=row.get("logout_time"),
        status=AttendanceStatus(row["status"]),
        department=row["department"],
        role=Role(row["role"]),
        user_name=row.get("user_name"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE a.attendance_id=%s", (attendance_id,))
            row = fetchone(cur)
            return _to_record(row) if row else None

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE a.user_id=%s AND a.work_date=%s", (user_id, work_date))
            row = fetchone(cur)
            return _to_record(row) if row else None

    def create_for_login(
        self,
        *,
        user_id: int,
        work_date: date,
        login_time: datetime,
        status: AttendanceStatus,
        department: str,
        role: Role,
    ) -> int:
        with duplicate_key_as_conflict("Attendance already recorded for this day"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance(user_id, work_date, login_time, status, department, role)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    (user_id, work_date, login_time, status.value, department, role.value),
                )
                return int(cur.lastrowid)

    def set_logout(self, attendance_id: int, *, logout_time: datetime, status: AttendanceStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance SET logout_time=%s, status=%s
                WHERE attendance_id=%s AND logout_time IS NULL
                """,
                (logout_time, status.value, attendance_id),
            )
            return cur.rowcount > 0

    def list_visible(
        self,
        scope: Scope,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        limit: int = 200,
    ) -> Sequence[AttendanceRecord]:
        clause, params = scope_clause(scope, owner_col="a.user_id", role_col="a.role", dept_col="a.department")
        conditions: List[str] = [clause]
        if start:
            conditions.append("a.work_date >= %s")
            params.append(start)
        if end:
            conditions.append("a.work_date <= %s")
            params.append(end)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " " + where(conditions) + " ORDER BY a.work_date DESC, a.login_time DESC LIMIT %s",
                (*params, int(limit)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_for_user_between(self, user_id: int, start: date, end: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE a.user_id=%s AND a.work_date >= %s AND a.work_date < %s ORDER BY a.work_date",
                (user_id, start, end),
            )
            return [_to_record(r) for r in fetchall(cur)]
