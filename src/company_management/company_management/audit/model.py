from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Optional

from ..core.enums import Department, Role


@dataclass(frozen=True)
class RoleChangeLog:
    """Immutable audit entry for one role change."""

    log_id: int
    changed_user_id: int
    old_role: Role
    new_role: Role
    changed_by: int
    changed_at: datetime
    snapshot_name: str
    snapshot_email: str
    snapshot_department: Optional[Department] = None
    reason: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    def to_public(self) -> Dict[str, Any]:
        return {
            "id": self.log_id,
            "changed_user_id": self.changed_user_id,
            "old_role": self.old_role.value,
            "new_role": self.new_role.value,
            "changed_by": self.changed_by,
            "changed_at": self.changed_at.isoformat(),
            "reason": self.reason,
            "user_snapshot": {
                "name": self.snapshot_name,
                "email": self.snapshot_email,
                "department": self.snapshot_department.value if self.snapshot_department else None,
            },
            "audit_info": {"ip_address": self.ip_address, "user_agent": self.user_agent},
        }


@dataclass(frozen=True)
class RoleChangeFilter:
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    old_role: Optional[Role] = None
    new_role: Optional[Role] = None
    changed_user_id: Optional[int] = None
    changed_by: Optional[int] = None


@dataclass(frozen=True)
class RoleChangeStats:
    total_changes: int
    promotions: int
    by_new_role: Dict[str, int]
    by_old_role: Dict[str, int]
