"""Access-decision engine.

Every resource service asks this module, and only this module, whether an
actor may list, read, change or decide something. The functions are pure:
they look at the roles, departments and identities they are given and at
nothing else.

Rules, in short:

* ``visibility_filter`` - founder sees everything; co-founder everything
  except founder-owned records; a department head sees employee-owned records
  of their own department; an employee sees only their own records. Every
  scope except the unknown-role one also admits the actor's own records.
* ``can_mutate`` - strictly higher level, and a head additionally needs the
  target to be in their department.
* ``can_assign_role`` - ``can_mutate`` and the new role stays strictly below
  the actor's own level.
* ``can_decide_request`` - above employee, and a head only inside their
  department.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from ..core.enums import Department, Role
from ..core.exceptions import ValidationError
from .roles import EMPLOYEE_LEVEL, UNKNOWN_LEVEL, RoleLike, as_role, department_of, is_top_management, level


@dataclass(frozen=True)
class Actor:
    """The authenticated user on whose behalf an operation runs."""

    user_id: int
    role: RoleLike
    department: Optional[Department] = None


@dataclass(frozen=True)
class Target:
    """The owner of a record: the user, or the user a task/salary/... belongs to."""

    user_id: Optional[int]
    role: RoleLike
    department: Optional[Department] = None


class ScopeKind(str, Enum):
    ALL = "all"
    NOT_FOUNDER = "not_founder"
    DEPARTMENT = "department"
    SELF = "self"
    NONE = "none"


@dataclass(frozen=True)
class Scope:
    """Row-visibility predicate for list queries.

    ``matches`` evaluates it in Python; ``database.mysql_base.scope_clause``
    renders the same predicate as a SQL WHERE fragment.
    """

    kind: ScopeKind
    owner_id: Optional[int] = None
    department: Optional[Department] = None

    def matches(self, *, owner_id: Optional[int], role: RoleLike, department: Any) -> bool:
        if self.kind == ScopeKind.NONE:
            return False
        if self.kind == ScopeKind.ALL:
            return True
        if self.owner_id is not None and owner_id == self.owner_id:
            return True
        if self.kind == ScopeKind.NOT_FOUNDER:
            return as_role(role) != Role.FOUNDER
        if self.kind == ScopeKind.DEPARTMENT:
            return as_role(role) == Role.EMPLOYEE and _same_department(department, self.department)
        return False

    def admits(self, target: Target) -> bool:
        return self.matches(owner_id=target.user_id, role=target.role, department=target.department)

    def describe(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "owner_id": self.owner_id,
            "department": self.department.value if self.department else None,
        }


def _same_department(value: Any, expected: Optional[Department]) -> bool:
    if value is None or expected is None:
        return False
    return getattr(value, "value", value) == expected.value


def visibility_filter(actor: Actor) -> Scope:
    role = as_role(actor.role)
    if role == Role.FOUNDER:
        return Scope(ScopeKind.ALL)
    if role == Role.CO_FOUNDER:
        return Scope(ScopeKind.NOT_FOUNDER, owner_id=actor.user_id)
    bound = department_of(role)
    if bound is not None:
        return Scope(ScopeKind.DEPARTMENT, owner_id=actor.user_id, department=bound)
    if role == Role.EMPLOYEE:
        return Scope(ScopeKind.SELF, owner_id=actor.user_id)
    return Scope(ScopeKind.NONE)


def can_access_record(actor: Actor, target: Target) -> bool:
    return visibility_filter(actor).admits(target)


def can_mutate(actor: Actor, target: Target) -> bool:
    actor_level = level(actor.role)
    target_level = level(target.role)
    if actor_level == UNKNOWN_LEVEL or target_level == UNKNOWN_LEVEL:
        return False
    if actor_level <= target_level:
        return False
    bound = department_of(actor.role)
    if bound is not None:
        return _same_department(target.department, bound)
    return True


def can_assign_role(actor: Actor, target: Target, new_role: RoleLike) -> bool:
    new_level = level(new_role)
    if new_level == UNKNOWN_LEVEL:
        return False
    return can_mutate(actor, target) and new_level < level(actor.role)


def can_decide_request(actor: Actor, request_department: Optional[Department]) -> bool:
    if level(actor.role) <= EMPLOYEE_LEVEL:
        return False
    if is_top_management(actor.role):
        return True
    return _same_department(request_department, department_of(actor.role))


def resolve_department_for_role(
    role: Role,
    *,
    supplied: Optional[Department] = None,
    existing: Optional[Department] = None,
) -> Optional[Department]:
    """Department a user must carry once they hold ``role``.

    Head roles force their bound department, employees need one (supplied or
    already on record), founders and co-founders carry none.
    """

    bound = department_of(role)
    if bound is not None:
        if supplied is not None and supplied != bound:
            raise ValidationError(
                f"role {role.value} is bound to department {bound.value}", ["role", "department"]
            )
        return bound
    if role == Role.EMPLOYEE:
        department = supplied or existing
        if department is None:
            raise ValidationError("department is required for employees", ["department"])
        return department
    return None


def own_records(actor: Actor) -> Scope:
    """Scope of the "my ..." listings: the actor's own records, whatever their role."""
    return Scope(ScopeKind.SELF, owner_id=actor.user_id)
