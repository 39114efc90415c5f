from __future__ import annotations

import json
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

import mysql.connector
from mysql.connector import errorcode

from ..access.policy import Scope, ScopeKind
from ..core.enums import Role
from ..core.exceptions import ConflictError
from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


@contextmanager
def duplicate_key_as_conflict(message: str) -> Iterator[None]:
    """Turn a UNIQUE-key violation into ConflictError; other errors pass through.

    Wrap it around ``db_cursor`` so the transaction is already rolled back
    when the conflict surfaces.
    """

    try:
        yield
    except mysql.connector.IntegrityError as exc:
        if getattr(exc, "errno", None) == errorcode.ER_DUP_ENTRY:
            raise ConflictError(message) from exc
        raise


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def scope_clause(scope: Scope, *, owner_col: str, role_col: str, dept_col: str) -> Tuple[str, List[Any]]:
    """Render a visibility scope as ``(sql_fragment, params)`` for a WHERE clause.

    Mirrors ``Scope.matches`` exactly.
    """

    if scope.kind == ScopeKind.ALL:
        return "1=1", []
    if scope.kind == ScopeKind.NONE:
        return "1=0", []
    if scope.kind == ScopeKind.NOT_FOUNDER:
        return f"({role_col}<>%s OR {owner_col}=%s)", [Role.FOUNDER.value, scope.owner_id]
    if scope.kind == ScopeKind.DEPARTMENT:
        return (
            f"(({role_col}=%s AND {dept_col}=%s) OR {owner_col}=%s)",
            [Role.EMPLOYEE.value, scope.department.value if scope.department else None, scope.owner_id],
        )
    return f"{owner_col}=%s", [scope.owner_id]


def where(conditions: Sequence[str]) -> str:
    parts = [c for c in conditions if c]
    return ("WHERE " + " AND ".join(parts)) if parts else ""


def dump_json(value: Optional[dict]) -> Optional[str]:
    if value is None:
        return None
    return json.dumps(value, default=str)


def load_json(value: Any) -> Dict[str, Any]:
    if value is None or value == "":
        return {}
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        return json.loads(value)
    return dict(value)


def as_decimal(value: Any) -> Decimal:
    if value is None:
        return Decimal("0")
    return value if isinstance(value, Decimal) else Decimal(str(value))
