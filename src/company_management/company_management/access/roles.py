"""Role hierarchy and head-to-department binding.

Both lookups are total: they accept a ``Role`` or its raw string value and
never raise. Anything unrecognised sits at level 0 and is bound to no
department, so it loses every comparison made by ``access.policy``.
"""

from __future__ import annotations

from typing import Optional, Union

from ..core.enums import Department, Role

RoleLike = Union[Role, str, None]

_LEVELS = {
    Role.EMPLOYEE: 1,
    Role.TECHNICAL_HEAD: 2,
    Role.SALES_HEAD: 2,
    Role.FINANCE_HEAD: 2,
    Role.CO_FOUNDER: 3,
    Role.FOUNDER: 4,
}

_HEAD_DEPARTMENTS = {
    Role.TECHNICAL_HEAD: Department.TECHNICAL,
    Role.SALES_HEAD: Department.SALES,
    Role.FINANCE_HEAD: Department.FINANCE,
}

UNKNOWN_LEVEL = 0
EMPLOYEE_LEVEL = _LEVELS[Role.EMPLOYEE]


def as_role(role: RoleLike) -> Optional[Role]:
    if isinstance(role, Role):
        return role
    try:
        return Role(role)
    except ValueError:
        return None


def level(role: RoleLike) -> int:
    parsed = as_role(role)
    if parsed is None:
        return UNKNOWN_LEVEL
    return _LEVELS[parsed]


def department_of(role: RoleLike) -> Optional[Department]:
    """Department a head role administers; None for every other role."""
    parsed = as_role(role)
    if parsed is None:
        return None
    return _HEAD_DEPARTMENTS.get(parsed)


def is_department_head(role: RoleLike) -> bool:
    return department_of(role) is not None


def is_top_management(role: RoleLike) -> bool:
    return as_role(role) in (Role.FOUNDER, Role.CO_FOUNDER)
