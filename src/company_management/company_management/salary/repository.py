from __future__ import annotations

from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..access.policy import Scope
from ..core.enums import Department, SalaryStatus
from .model import Salary


class SalaryRepository(Protocol):
    def get_by_id(self, salary_id: int) -> Optional[Salary]:
        raise NotImplementedError

    def list_visible(
        self, scope: Scope, *, month: Optional[int] = None, year: Optional[int] = None
    ) -> Sequence[Salary]:
        raise NotImplementedError

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
        """Raises ConflictError when the user already has a slip for that month."""
        raise NotImplementedError

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
        raise NotImplementedError

    def delete(self, salary_id: int) -> bool:
        raise NotImplementedError
