from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from ..access.policy import Target
from ..core.enums import Department, Role, SalaryStatus


@dataclass(frozen=True)
class Salary:
    """Monthly salary slip of one user; one per (user, month, year)."""

    salary_id: int
    user_id: int
    month: int
    year: int
    basic_salary: Decimal
    allowances: Decimal
    deductions: Decimal
    net_salary: Decimal
    department: Optional[Department]
    status: SalaryStatus
    created_at: Optional[datetime] = None
    user_role: Optional[Role] = None
    user_name: Optional[str] = None

    def owner(self) -> Target:
        return Target(user_id=self.user_id, role=self.user_role, department=self.department)

    def to_public(self) -> Dict[str, Any]:
        return {
            "id": self.salary_id,
            "user": {"id": self.user_id, "name": self.user_name},
            "month": self.month,
            "year": self.year,
            "basic_salary": str(self.basic_salary),
            "allowances": str(self.allowances),
            "deductions": str(self.deductions),
            "net_salary": str(self.net_salary),
            "department": self.department.value if self.department else None,
            "status": self.status.value,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
