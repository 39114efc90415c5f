from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from ..access.policy import Scope
from ..core.enums import Department, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, duplicate_key_as_conflict, fetchall, fetchone, scope_clause, where
from .model import Performance, PerformanceCounters, PerformanceDelta
from .repository import PerformanceRepository

_SELECT = """
SELECT p.performance_id, p.employee_id, p.month, p.year, p.department,
       p.tasks_completed, p.late_logins, p.approved_leaves,
       p.task_points, p.late_login_penalty, p.total_score,
       u.name AS employee_name, u.role AS employee_role
FROM performance p
JOIN users u ON u.user_id = p.employee_id
"""


def _to_performance(row: Dict[str, Any]) -> Performance:
    return Performance(
        performance_id=int(row["performance_id"]),
        employee_id=int(row["employee_id"]),
        month=int(row["month"]),
        year=int(row["year"]),
        department=Department(row["department"]),
        tasks_completed=int(row["tasks_completed"]),
        late_logins=int(row["late_logins"]),
        approved_leaves=int(row["approved_leaves"]),
        task_points=int(row["task_points"]),
        late_login_penalty=int(row["late_login_penalty"]),
        total_score=int(row["total_score"]),
        employee_name=row.get("employee_name"),
        employee_role=Role(row["employee_role"]) if row.get("employee_role") else None,
    )


class MySQLPerformanceRepository(PerformanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, employee_id: int, month: int, year: int) -> Optional[Performance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE p.employee_id=%s AND p.month=%s AND p.year=%s",
                (employee_id, month, year),
            )
            row = fetchone(cur)
            return _to_performance(row) if row else None

    def create(self, *, employee_id: int, month: int, year: int, department: Department) -> int:
        with duplicate_key_as_conflict("Performance record already exists for this period"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "INSERT INTO performance(employee_id, month, year, department) VALUES(%s,%s,%s,%s)",
                    (employee_id, month, year, department.value),
                )
                return int(cur.lastrowid)

    def apply_delta(self, performance_id: int, delta: PerformanceDelta) -> None:
        # MySQL evaluates single-table SET assignments left to right, so
        # total_score sees the already-incremented point columns.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE performance
                SET tasks_completed = tasks_completed + %s,
                    late_logins = late_logins + %s,
                    approved_leaves = approved_leaves + %s,
                    task_points = task_points + %s,
                    late_login_penalty = late_login_penalty + %s,
                    total_score = task_points + late_login_penalty
                WHERE performance_id=%s
                """,
                (
                    delta.tasks_completed,
                    delta.late_logins,
                    delta.approved_leaves,
                    delta.task_points,
                    delta.late_login_penalty,
                    performance_id,
                ),
            )

    def overwrite(self, performance_id: int, counters: PerformanceCounters) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE performance
                SET tasks_completed=%s, late_logins=%s, approved_leaves=%s,
                    task_points=%s, late_login_penalty=%s,
                    total_score = task_points + late_login_penalty
                WHERE performance_id=%s
                """,
                (
                    counters.tasks_completed,
                    counters.late_logins,
                    counters.approved_leaves,
                    counters.task_points,
                    counters.late_login_penalty,
                    performance_id,
                ),
            )

    def list_period(
        self,
        scope: Scope,
        *,
        month: int,
        year: int,
        department: Optional[Department] = None,
        limit: Optional[int] = None,
    ) -> Sequence[Performance]:
        clause, params = scope_clause(scope, owner_col="p.employee_id", role_col="u.role", dept_col="p.department")
        conditions: List[str] = [clause, "p.month=%s", "p.year=%s"]
        params = [*params, month, year]
        if department is not None:
            conditions.append("p.department=%s")
            params.append(department.value)
        sql = _SELECT + " " + where(conditions) + " ORDER BY p.total_score DESC, p.tasks_completed DESC, p.employee_id"
        if limit is not None:
            sql += " LIMIT %s"
            params.append(int(limit))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return [_to_performance(r) for r in fetchall(cur)]
