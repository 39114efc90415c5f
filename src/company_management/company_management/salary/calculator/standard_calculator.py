from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from .base import SalaryCalculator

_CENTS = Decimal("0.01")


class StandardSalaryCalculator(SalaryCalculator):
    """Standard rule: basic + allowances - deductions, rounded to cents."""

    def net_salary(self, *, basic: Decimal, allowances: Decimal, deductions: Decimal) -> Decimal:
        return (basic + allowances - deductions).quantize(_CENTS, rounding=ROUND_HALF_UP)
