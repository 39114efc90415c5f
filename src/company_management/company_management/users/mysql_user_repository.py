from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..access.policy import Scope
from ..core.enums import Department, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, duplicate_key_as_conflict, fetchall, fetchone, scope_clause
from .model import User
from .repository import UserRepository

_COLUMNS = "user_id, name, email, password_hash, role, department, is_active, created_at"


def _to_user(row: Dict[str, Any]) -> User:
    return User(
        user_id=int(row["user_id"]),
        name=row["name"],
        email=row["email"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        department=Department(row["department"]) if row.get("department") else None,
        is_active=bool(row.get("is_active", True)),
        created_at=row.get("created_at"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE user_id=%s", (user_id,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE email=%s", (email.lower(),))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def list_visible(self, scope: Scope) -> Sequence[User]:
        clause, params = scope_clause(scope, owner_col="user_id", role_col="role", dept_col="department")
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE {clause} ORDER BY created_at DESC, user_id DESC", params)
            return [_to_user(r) for r in fetchall(cur)]

    def create_user(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        role: Role,
        department: Optional[Department],
    ) -> int:
        with duplicate_key_as_conflict("Email is already registered"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO users(name, email, password_hash, role, department, is_active)
                    VALUES(%s,%s,%s,%s,%s,1)
                    """,
                    (name, email, password_hash, role.value, department.value if department else None),
                )
                return int(cur.lastrowid)

    def update_profile(
        self,
        user_id: int,
        *,
        name: str,
        email: str,
        department: Optional[Department],
        is_active: bool,
    ) -> bool:
        with duplicate_key_as_conflict("Email is already registered"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "UPDATE users SET name=%s, email=%s, department=%s, is_active=%s WHERE user_id=%s",
                    (name, email, department.value if department else None, 1 if is_active else 0, user_id),
                )
                return cur.rowcount > 0

    def update_role(self, user_id: int, *, role: Role, department: Optional[Department]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET role=%s, department=%s WHERE user_id=%s",
                (role.value, department.value if department else None, user_id),
            )
            return cur.rowcount > 0

    def delete_by_id(self, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM users WHERE user_id=%s", (user_id,))
            return cur.rowcount > 0
