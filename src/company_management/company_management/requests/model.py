from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from ..access.policy import Target
from ..core.enums import Department, RequestStatus, RequestType, Role


@dataclass(frozen=True)
class Request:
    """An employee's leave/expense/task request awaiting a decision."""

    request_id: int
    type: RequestType
    description: str
    status: RequestStatus
    created_by: int
    department: Department
    created_at: datetime
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    creator_name: Optional[str] = None
    creator_role: Optional[Role] = None

    @property
    def is_terminal(self) -> bool:
        return self.status != RequestStatus.PENDING

    def owner(self) -> Target:
        return Target(user_id=self.created_by, role=self.creator_role or Role.EMPLOYEE, department=self.department)

    def to_public(self) -> Dict[str, Any]:
        return {
            "id": self.request_id,
            "type": self.type.value,
            "description": self.description,
            "status": self.status.value,
            "created_by": {"id": self.created_by, "name": self.creator_name},
            "department": self.department.value,
            "approved_by": self.approved_by,
            "approved_at": self.approved_at.isoformat() if self.approved_at else None,
            "rejection_reason": self.rejection_reason,
            "metadata": self.metadata,
            "created_at": self.created_at.isoformat(),
        }
