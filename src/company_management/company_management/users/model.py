from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from ..access.policy import Actor, Target
from ..core.enums import Department, Role


@dataclass(frozen=True)
class User:
    """Domain entity: an account holder.

    Note: plain data only, no database access in here.
    """

    user_id: int
    name: str
    email: str
    password_hash: str
    role: Role
    department: Optional[Department]
    is_active: bool = True
    created_at: Optional[datetime] = None

    def as_actor(self) -> Actor:
        return Actor(user_id=self.user_id, role=self.role, department=self.department)

    def as_target(self) -> Target:
        return Target(user_id=self.user_id, role=self.role, department=self.department)

    def to_public(self) -> Dict[str, Any]:
        return {
            "id": self.user_id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "department": self.department.value if self.department else None,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
