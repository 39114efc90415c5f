from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from ..access.policy import Scope
from ..core.enums import Department, Role, SalaryStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    as_decimal,
    db_cursor,
    duplicate_key_as_conflict,
    fetchall,
    fetchone,
    scope_clause,
    where,
)
from .model import Salary
from .repository import SalaryRepository

_SELECT = """
SELECT s.salary_id, s.user_id, s.month, s.year, s.basic_salary, s.allowances, s.deductions,
       s.net_salary, s.department, s.status, s.created_at,
       u.role AS user_role, u.name AS user_name
FROM salaries s
JOIN users u ON u.user_id = s.user_id
"""


def _to_salary(row: Dict[str, Any]) -> Salary:
    return Salary(
        salary_id=int(row["salary_id"]),
        user_id=int(row["user_id"]),
        month=int(row["month"]),
        year=int(row["year"]),
        basic_salary=as_decimal(row["basic_salary"]),
        allowances=as_decimal(row["allowances"]),
        deductions=as_decimal(row["deductions"]),
        net_salary=as_decimal(row["net_salary"]),
        department=Department(row["department"]) if row.get("department") else None,
        status=SalaryStatus(row["status"]),
        created_at=row.get("created_at"),
        user_role=Role(row["user_role"]) if row.get("user_role") else None,
        user_name=row.get("user_name"),
    )


class MySQLSalaryRepository(SalaryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, salary_id: int) -> Optional[Salary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE s.salary_id=%s", (salary_id,))
            row = fetchone(cur)
            return _to_salary(row) if row else None

    def list_visible(
        self, scope: Scope, *, month: Optional[int] = None, year: Optional[int] = None
    ) -> Sequence[Salary]:
        clause, params = scope_clause(scope, owner_col="s.user_id", role_col="u.role", dept_col="s.department")
        conditions: List[str] = [clause]
        if month is not None:
            conditions.append("s.month=%s")
            params.append(month)
        if year is not None:
            conditions.append("s.year=%s")
            params.append(year)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " " + where(conditions) + " ORDER BY s.year DESC, s.month DESC, s.salary_id DESC",
                params,
            )
            return [_to_salary(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        user_id: int,
        month: int,
        year: int,
        basic_salary: Decimal,
        allowances: Decimal,
        deductions: Decimal,
        net_salary: Decimal,
        department: Optional[Department],
        status: SalaryStatus,
    ) -> int:
        with duplicate_key_as_conflict("Salary record already exists for this user and period"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO salaries(
                        user_id, month, year, basic_salary, allowances, deductions, net_salary, department, status
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        user_id,
                        month,
                        year,
                        basic_salary,
                        allowances,
                        deductions,
                        net_salary,
                        department.value if department else None,
                        status.value,
                    ),
                )
                return int(cur.lastrowid)

    def update(
        self,
        salary_id: int,
        *,
        basic_salary: Decimal,
        allowances: Decimal,
        deductions: Decimal,
        net_salary: Decimal,
        status: SalaryStatus,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE salaries
                SET basic_salary=%s, allowances=%s, deductions=%s, net_salary=%s, status=%s
                WHERE salary_id=%s
                """,
                (basic_salary, allowances, deductions, net_salary, status.value, salary_id),
            )
            return cur.rowcount > 0

    def delete(self, salary_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM salaries WHERE salary_id=%s", (salary_id,))
            return cur.rowcount > 0
