from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal


class SalaryCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def net_salary(self, *, basic: Decimal, allowances: Decimal, deductions: Decimal) -> Decimal:
        raise NotImplementedError
