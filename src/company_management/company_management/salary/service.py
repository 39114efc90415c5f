from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Sequence

from ..access.policy import Actor, can_access_record, can_mutate, own_records, visibility_filter
from ..common.validators import parse_enum, parse_int
from ..core.enums import SalaryStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..users.repository import UserRepository
from .calculator.base import SalaryCalculator
from .model import Salary
from .repository import SalaryRepository

logger = logging.getLogger(__name__)

_AMOUNT_FIELDS = ("basic_salary", "allowances", "deductions")
_EDITABLE_FIELDS = set(_AMOUNT_FIELDS) | {"status"}


def _amount(value: Any, field_name: str, *, required: bool = False) -> Decimal:
    if value in (None, ""):
        if required:
            raise ValidationError(f"{field_name} is required", [field_name])
        return Decimal("0")
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(f"{field_name} must be a number", [field_name])
    if not amount.is_finite() or amount < 0:
        raise ValidationError(f"{field_name} must be a non-negative number", [field_name])
    return amount


class SalaryService:
    """Use cases: salary slips, managed only from strictly above the employee's level."""

    def __init__(self, salaries: SalaryRepository, users: UserRepository, calculator: SalaryCalculator):
        self._salaries = salaries
        self._users = users
        self._calculator = calculator

    def _get_or_404(self, salary_id: Any) -> Salary:
        try:
            sid = int(salary_id)
        except (TypeError, ValueError):
            raise ValidationError("salary id must be an integer", ["id"])
        salary = self._salaries.get_by_id(sid)
        if not salary:
            raise NotFoundError("Salary record not found")
        return salary

    @staticmethod
    def _period_filter(month: Any, year: Any):
        m = parse_int(month, "month", minimum=1, maximum=12) if month not in (None, "") else None
        y = parse_int(year, "year", minimum=2000, maximum=9999) if year not in (None, "") else None
        return m, y

    def list_visible(self, actor: Actor, *, month: Any = None, year: Any = None) -> Sequence[Salary]:
        m, y = self._period_filter(month, year)
        return self._salaries.list_visible(visibility_filter(actor), month=m, year=y)

    def list_mine(self, actor: Actor, *, month: Any = None, year: Any = None) -> Sequence[Salary]:
        m, y = self._period_filter(month, year)
        return self._salaries.list_visible(own_records(actor), month=m, year=y)

    def get(self, actor: Actor, salary_id: Any) -> Salary:
        salary = self._get_or_404(salary_id)
        if not can_access_record(actor, salary.owner()):
            raise AuthorizationError("You do not have permission to view this salary record")
        return salary

    def create(self, actor: Actor, data: Dict[str, Any]) -> Salary:
        try:
            user_id = int(data.get("user_id"))
        except (TypeError, ValueError):
            raise ValidationError("user_id is required", ["user_id"])
        month = parse_int(data.get("month"), "month", minimum=1, maximum=12)
        year = parse_int(data.get("year"), "year", minimum=2000, maximum=9999)
        basic = _amount(data.get("basic_salary"), "basic_salary", required=True)
        allowances = _amount(data.get("allowances"), "allowances")
        deductions = _amount(data.get("deductions"), "deductions")
        status = parse_enum(SalaryStatus, data.get("status") or SalaryStatus.PENDING.value, "status")

        user = self._users.get_by_id(user_id)
        if not user:
            raise ValidationError("user_id does not refer to an existing user", ["user_id"])
        if not can_mutate(actor, user.as_target()):
            raise AuthorizationError("You cannot manage this user's salary")

        salary_id = self._salaries.create(
            user_id=user.user_id,
            month=month,
            year=year,
            basic_salary=basic,
            allowances=allowances,
            deductions=deductions,
            net_salary=self._calculator.net_salary(basic=basic, allowances=allowances, deductions=deductions),
            department=user.department,
            status=status,
        )
        logger.info("salary %s created for user %s (%s/%s) by %s", salary_id, user.user_id, month, year, actor.user_id)
        return self._salaries.get_by_id(salary_id)

    def update(self, actor: Actor, salary_id: Any, changes: Dict[str, Any]) -> Salary:
        salary = self._get_or_404(salary_id)
        if not can_mutate(actor, salary.owner()):
            raise AuthorizationError("You cannot manage this user's salary")
        unknown = sorted(set(changes) - _EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(f"unknown fields: {', '.join(unknown)}", unknown)

        basic, allowances, deductions = salary.basic_salary, salary.allowances, salary.deductions
        if "basic_salary" in changes:
            basic = _amount(changes["basic_salary"], "basic_salary", required=True)
        if "allowances" in changes:
            allowances = _amount(changes["allowances"], "allowances")
        if "deductions" in changes:
            deductions = _amount(changes["deductions"], "deductions")
        status = parse_enum(SalaryStatus, changes["status"], "status") if "status" in changes else salary.status

        self._salaries.update(
            salary.salary_id,
            basic_salary=basic,
            allowances=allowances,
            deductions=deductions,
            net_salary=self._calculator.net_salary(basic=basic, allowances=allowances, deductions=deductions),
            status=status,
        )
        return self._salaries.get_by_id(salary.salary_id)

    def delete(self, actor: Actor, salary_id: Any) -> None:
        salary = self._get_or_404(salary_id)
        if not can_mutate(actor, salary.owner()):
            raise AuthorizationError("You cannot manage this user's salary")
        self._salaries.delete(salary.salary_id)
        logger.info("salary %s deleted by %s", salary.salary_id, actor.user_id)
