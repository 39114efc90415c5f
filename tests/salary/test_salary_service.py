from __future__ import annotations

from decimal import Decimal

import pytest

from src.company_management.company_management.core.enums import SalaryStatus
from src.company_management.company_management.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from src.company_management.company_management.salary.calculator.standard_calculator import StandardSalaryCalculator


def _slip(user, **overrides):
    data = {"user_id": user.user_id, "month": 3, "year": 2025, "basic_salary": "5000", "allowances": "750.50"}
    data.update(overrides)
    return data


def test_standard_calculator_rounds_to_cents():
    calc = StandardSalaryCalculator()
    net = calc.net_salary(basic=Decimal("1000.005"), allowances=Decimal("0"), deductions=Decimal("0"))
    assert net == Decimal("1000.01")


def test_net_is_computed_and_recomputed(world, cast):
    service = world.container.salary_service
    head = cast.tech_head.as_actor()

    salary = service.create(head, _slip(cast.tech_emp, deductions=250))
    assert salary.net_salary == Decimal("5500.50")
    assert salary.status == SalaryStatus.PENDING
    assert salary.department == cast.tech_emp.department

    updated = service.update(head, salary.salary_id, {"deductions": "500", "status": "paid"})
    assert updated.net_salary == Decimal("5250.50")
    assert updated.status == SalaryStatus.PAID


def test_one_slip_per_period(world, cast):
    service = world.container.salary_service
    service.create(cast.founder.as_actor(), _slip(cast.sales_emp))
    with pytest.raises(ConflictError):
        service.create(cast.cofounder.as_actor(), _slip(cast.sales_emp, basic_salary="6000"))
    service.create(cast.founder.as_actor(), _slip(cast.sales_emp, month=4))


def test_management_needs_strictly_higher_level(world, cast):
    service = world.container.salary_service

    with pytest.raises(AuthorizationError):
        service.create(cast.tech_head.as_actor(), _slip(cast.sales_emp))
    with pytest.raises(AuthorizationError):
        service.create(cast.tech_head.as_actor(), _slip(cast.sales_head))
    with pytest.raises(AuthorizationError):
        service.create(cast.cofounder.as_actor(), _slip(cast.founder))

    slip = service.create(cast.cofounder.as_actor(), _slip(cast.sales_head))
    with pytest.raises(AuthorizationError):
        service.delete(cast.sales_head.as_actor(), slip.salary_id)
    service.delete(cast.founder.as_actor(), slip.salary_id)
    with pytest.raises(NotFoundError):
        service.get(cast.founder.as_actor(), slip.salary_id)


def test_inputs_are_validated(world, cast):
    service = world.container.salary_service
    founder = cast.founder.as_actor()
    with pytest.raises(ValidationError):
        service.create(founder, _slip(cast.tech_emp, basic_salary=None))
    with pytest.raises(ValidationError):
        service.create(founder, _slip(cast.tech_emp, allowances="-1"))
    with pytest.raises(ValidationError):
        service.create(founder, _slip(cast.tech_emp, month=13))
    with pytest.raises(ValidationError):
        service.create(founder, _slip(cast.tech_emp, basic_salary="lots"))
    with pytest.raises(ValidationError):
        service.create(founder, {**_slip(cast.tech_emp), "user_id": 999})

    slip = service.create(founder, _slip(cast.tech_emp))
    with pytest.raises(ValidationError):
        service.update(founder, slip.salary_id, {"net_salary": "1"})


def test_reads_are_scoped(world, cast):
    service = world.container.salary_service
    founder = cast.founder.as_actor()
    tech = service.create(founder, _slip(cast.tech_emp))
    sales = service.create(founder, _slip(cast.sales_emp))
    head = service.create(founder, _slip(cast.tech_head))

    assert {s.salary_id for s in service.list_visible(cast.tech_head.as_actor())} == {tech.salary_id, head.salary_id}
    assert [s.salary_id for s in service.list_mine(cast.sales_emp.as_actor())] == [sales.salary_id]
    assert [s.salary_id for s in service.list_mine(cast.tech_head.as_actor())] == [head.salary_id]
    assert service.list_visible(founder, month=4) == []

    assert service.get(cast.tech_emp.as_actor(), tech.salary_id).user_name == cast.tech_emp.name
    with pytest.raises(AuthorizationError):
        service.get(cast.tech_emp.as_actor(), sales.salary_id)
