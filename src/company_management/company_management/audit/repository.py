from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional, Protocol, Sequence, Tuple

from ..core.enums import Department, Role
from .model import RoleChangeFilter, RoleChangeLog


class RoleChangeLogRepository(Protocol):
    """Append-only store: there is deliberately no update or delete."""

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
        raise NotImplementedError

    def list(self, filters: RoleChangeFilter, *, offset: int = 0, limit: int = 50) -> Sequence[RoleChangeLog]:
        raise NotImplementedError

    def count(self, filters: RoleChangeFilter) -> int:
        raise NotImplementedError

    def tally(self, filters: RoleChangeFilter) -> Dict[Tuple[Role, Role], int]:
        """Number of entries per ``(old_role, new_role)`` pair."""
        raise NotImplementedError
