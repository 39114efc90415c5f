from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence

from ..access.policy import Scope
from ..core.enums import Department, Role, TaskPriority, TaskStatus
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, duplicate_key_as_conflict, fetchall, fetchone, scope_clause, where
from .model import Task, TaskSubmission
from .repository import TaskRepository

_SELECT = """
SELECT t.task_id, t.title, t.description, t.assigned_to, t.assigned_by, t.department,
       t.status, t.priority, t.due_date, t.completed_at, t.created_at,
       u.role AS assignee_role, u.name AS assignee_name
FROM tasks t
JOIN users u ON u.user_id = t.assigned_to
"""


def _dept(value: Optional[str]) -> Optional[Department]:
    return Department(value) if value else None


def _to_task(row: Dict[str, Any]) -> Task:
    return Task(
        task_id=int(row["task_id"]),
        title=row["title"],
        description=row.get("description"),
        assigned_to=int(row["assigned_to"]),
        assigned_by=int(row["assigned_by"]),
        department=_dept(row.get("department")),
        status=TaskStatus(row["status"]),
        priority=TaskPriority(row["priority"]),
        due_date=row.get("due_date"),
        completed_at=row.get("completed_at"),
        created_at=row.get("created_at"),
        assignee_role=Role(row["assignee_role"]) if row.get("assignee_role") else None,
        assignee_name=row.get("assignee_name"),
    )


def _to_submission(row: Dict[str, Any]) -> TaskSubmission:
    return TaskSubmission(
        submission_id=int(row["submission_id"]),
        task_id=int(row["task_id"]),
        submitted_by=int(row["submitted_by"]),
        file_name=row["file_name"],
        file_type=row["file_type"],
        file_size=int(row["file_size"]),
        file_path=row["file_path"],
        department=_dept(row.get("department")),
        submitted_at=row["submitted_at"],
    )


class MySQLTaskRepository(TaskRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, task_id: int) -> Optional[Task]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE t.task_id=%s", (task_id,))
            row = fetchone(cur)
            return _to_task(row) if row else None

    def list_visible(self, scope: Scope, *, status: Optional[TaskStatus] = None) -> Sequence[Task]:
        clause, params = scope_clause(scope, owner_col="t.assigned_to", role_col="u.role", dept_col="t.department")
        conditions: List[str] = [clause]
        if status is not None:
            conditions.append("t.status=%s")
            params.append(status.value)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " " + where(conditions) + " ORDER BY t.created_at DESC, t.task_id DESC", params)
            return [_to_task(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        title: str,
        description: Optional[str],
        assigned_to: int,
        assigned_by: int,
        department: Optional[Department],
        priority: TaskPriority,
        due_date: Optional[date],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO tasks(title, description, assigned_to, assigned_by, department, status, priority, due_date)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    title,
                    description,
                    assigned_to,
                    assigned_by,
                    department.value if department else None,
                    TaskStatus.PENDING.value,
                    priority.value,
                    due_date,
                ),
            )
            return int(cur.lastrowid)

    def update(
        self,
        task_id: int,
        *,
        title: str,
        description: Optional[str],
        assigned_to: int,
        department: Optional[Department],
        status: TaskStatus,
        priority: TaskPriority,
        due_date: Optional[date],
        completed_at: Optional[datetime],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE tasks
                SET title=%s, description=%s, assigned_to=%s, department=%s,
                    status=%s, priority=%s, due_date=%s, completed_at=%s
                WHERE task_id=%s AND status<>%s
                """,
                (
                    title,
                    description,
                    assigned_to,
                    department.value if department else None,
                    status.value,
                    priority.value,
                    due_date,
                    completed_at,
                    task_id,
                    TaskStatus.COMPLETED.value,
                ),
            )
            return cur.rowcount > 0

    def delete(self, task_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM tasks WHERE task_id=%s", (task_id,))
            return cur.rowcount > 0

    def complete_with_submission(
        self,
        task_id: int,
        *,
        submitted_by: int,
        file_name: str,
        file_type: str,
        file_size: int,
        file_path: str,
        department: Optional[Department],
        completed_at: datetime,
    ) -> int:
        with duplicate_key_as_conflict("Task already has a submission"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "UPDATE tasks SET status=%s, completed_at=%s WHERE task_id=%s AND status<>%s",
                    (TaskStatus.COMPLETED.value, completed_at, task_id, TaskStatus.COMPLETED.value),
                )
                if cur.rowcount == 0:
                    # Raising inside db_cursor rolls the transaction back.
                    raise ConflictError("Task is already completed")
                cur.execute(
                    """
                    INSERT INTO task_submissions(
                        task_id, submitted_by, file_name, file_type, file_size, file_path, department, submitted_at
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        task_id,
                        submitted_by,
                        file_name,
                        file_type,
                        file_size,
                        file_path,
                        department.value if department else None,
                        completed_at,
                    ),
                )
                return int(cur.lastrowid)

    def get_submission(self, task_id: int) -> Optional[TaskSubmission]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT submission_id, task_id, submitted_by, file_name, file_type, file_size,
                       file_path, department, submitted_at
                FROM task_submissions WHERE task_id=%s
                """,
                (task_id,),
            )
            row = fetchone(cur)
            return _to_submission(row) if row else None

    def count_completed_between(self, user_id: int, start: datetime, end: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COUNT(*) AS n FROM tasks
                WHERE assigned_to=%s AND status=%s AND completed_at >= %s AND completed_at < %s
                """,
                (user_id, TaskStatus.COMPLETED.value, start, end),
            )
            row = fetchone(cur)
            return int(row["n"]) if row else 0
