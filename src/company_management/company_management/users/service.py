from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..access.policy import (
    Actor,
    Target,
    can_access_record,
    can_assign_role,
    can_mutate,
    resolve_department_for_role,
    visibility_filter,
)
from ..access.roles import department_of, is_top_management, level
from ..attendance.model import AttendanceRecord
from ..attendance.service import AttendanceService
from ..common.datetime_utils import Clock, now_local
from ..common.validators import (
    parse_enum,
    parse_optional_enum,
    require_email,
    require_max_length,
    require_min_length,
    require_non_empty,
)
from ..core.constants import MAX_REASON_LENGTH, MIN_PASSWORD_LENGTH
from ..core.enums import Department, Role
from ..core.exceptions import AuthenticationError, AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..hooks import PostCommitHooks
from .model import User
from .repository import UserRepository
from .tokens import TokenIssuer

logger = logging.getLogger(__name__)

_PROFILE_FIELDS = {"name", "email", "department", "is_active"}


@dataclass(frozen=True)
class LoginResult:
    user: User
    token: str
    attendance: Optional[AttendanceRecord]


def _clean_new_user(name: Any, email: Any, password: Any, role: Any, department: Any):
    name = require_non_empty(name, "name")
    require_max_length(name, "name", 100)
    email = require_email(email)
    require_min_length(password, "password", MIN_PASSWORD_LENGTH)
    role = parse_enum(Role, role, "role")
    supplied = parse_optional_enum(Department, department, "department")
    return name, email, password, role, resolve_department_for_role(role, supplied=supplied)


class AuthService:
    """Use cases: register, login, logout and bearer-token authentication."""

    def __init__(
        self,
        users: UserRepository,
        tokens: TokenIssuer,
        attendance: AttendanceService,
        hooks: PostCommitHooks,
        *,
        clock: Clock = now_local,
    ):
        self._users = users
        self._tokens = tokens
        self._attendance = attendance
        self._hooks = hooks
        self._clock = clock

    def register(self, *, name: Any, email: Any, password: Any, role: Any, department: Any = None) -> LoginResult:
        name, email, password, role, dept = _clean_new_user(name, email, password, role, department)
        if self._users.get_by_email(email):
            raise ConflictError("Email is already registered")

        user_id = self._users.create_user(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=role,
            department=dept,
        )
        user = self._users.get_by_id(user_id)
        logger.info("user %s registered as %s", user_id, role.value)
        return LoginResult(user=user, token=self._tokens.issue(user_id), attendance=None)

    def login(self, email: Any, password: Any, *, now: Optional[datetime] = None) -> LoginResult:
        if not email or not password:
            raise ValidationError("email and password are required", ["email", "password"])

        user = self._users.get_by_email(str(email).strip().lower())
        if not user or not user.is_active:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.password_hash, str(password))
        except ValueError:
            # Unknown hash method, e.g. a placeholder value in the column.
            ok = False
        if not ok:
            raise AuthenticationError("Invalid email or password")

        login_time = now or self._clock()
        opened = self._attendance.record_login(user, now=login_time)
        self._hooks.after_login(user, login_time=login_time, first_login_today=opened.created)
        return LoginResult(user=user, token=self._tokens.issue(user.user_id), attendance=opened.record)

    def logout(self, user: User, *, now: Optional[datetime] = None) -> Optional[AttendanceRecord]:
        return self._attendance.record_logout(user, now=now)

    def authenticate_token(self, token: Optional[str]) -> User:
        if not token:
            raise AuthenticationError("Not authenticated")
        user_id = self._tokens.verify(token)
        user = self._users.get_by_id(user_id)
        if not user:
            raise AuthenticationError("User no longer exists")
        if not user.is_active:
            raise AuthenticationError("Account is deactivated")
        return user


class UserService:
    """Use cases: manage users under the role hierarchy."""

    def __init__(self, users: UserRepository, hooks: PostCommitHooks):
        self._users = users
        self._hooks = hooks

    def _get_or_404(self, user_id: Any) -> User:
        try:
            uid = int(user_id)
        except (TypeError, ValueError):
            raise ValidationError("user id must be an integer", ["id"])
        user = self._users.get_by_id(uid)
        if not user:
            raise NotFoundError("User not found")
        return user

    def list_visible(self, actor: Actor) -> Sequence[User]:
        return self._users.list_visible(visibility_filter(actor))

    def get(self, actor: Actor, user_id: Any) -> User:
        user = self._get_or_404(user_id)
        if not can_access_record(actor, user.as_target()):
            raise AuthorizationError("You do not have permission to view this user")
        return user

    def create(
        self,
        actor: Actor,
        *,
        name: Any,
        email: Any,
        password: Any,
        role: Any,
        department: Any = None,
    ) -> User:
        name, email, password, role, dept = _clean_new_user(name, email, password, role, department)
        if not can_mutate(actor, Target(user_id=None, role=role, department=dept)):
            raise AuthorizationError(f"You cannot create a {role.value} user")
        if self._users.get_by_email(email):
            raise ConflictError("Email is already registered")

        user_id = self._users.create_user(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=role,
            department=dept,
        )
        logger.info("user %s (%s) created by %s", user_id, role.value, actor.user_id)
        return self._users.get_by_id(user_id)

    def update(self, actor: Actor, user_id: Any, changes: Dict[str, Any]) -> User:
        user = self._get_or_404(user_id)
        if not can_mutate(actor, user.as_target()):
            raise AuthorizationError("You do not have permission to modify this user")
        if "role" in changes:
            raise ValidationError("use the change-role operation to change a role", ["role"])
        unknown = sorted(set(changes) - _PROFILE_FIELDS)
        if unknown:
            raise ValidationError(f"unknown fields: {', '.join(unknown)}", unknown)

        name = user.name
        if "name" in changes:
            name = require_non_empty(changes["name"], "name")
            require_max_length(name, "name", 100)
        email = require_email(changes["email"]) if "email" in changes else user.email
        if email != user.email:
            other = self._users.get_by_email(email)
            if other and other.user_id != user.user_id:
                raise ConflictError("Email is already registered")

        department = user.department
        if "department" in changes:
            supplied = parse_optional_enum(Department, changes["department"], "department")
            department = resolve_department_for_role(user.role, supplied=supplied)
            bound = department_of(actor.role)
            if bound is not None and department != bound:
                raise AuthorizationError("You cannot move a user outside your department")

        is_active = user.is_active
        if "is_active" in changes:
            if not isinstance(changes["is_active"], bool):
                raise ValidationError("is_active must be a boolean", ["is_active"])
            is_active = changes["is_active"]

        self._users.update_profile(
            user.user_id, name=name, email=email, department=department, is_active=is_active
        )
        return self._users.get_by_id(user.user_id)

    def delete(self, actor: Actor, user_id: Any) -> None:
        user = self._get_or_404(user_id)
        if not can_mutate(actor, user.as_target()):
            raise AuthorizationError("You do not have permission to delete this user")
        self._users.delete_by_id(user.user_id)
        logger.info("user %s deleted by %s", user.user_id, actor.user_id)

    def change_role(
        self,
        actor: Actor,
        user_id: Any,
        *,
        new_role: Any,
        department: Any = None,
        reason: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> User:
        role = parse_enum(Role, new_role, "role")
        require_max_length(reason, "reason", MAX_REASON_LENGTH)
        user = self._get_or_404(user_id)
        if user.role == role:
            raise ValidationError(f"user already has role {role.value}", ["role"])
        if not can_assign_role(actor, user.as_target(), role):
            raise AuthorizationError(f"You cannot assign the {role.value} role to this user")

        supplied = parse_optional_enum(Department, department, "department")
        new_department = resolve_department_for_role(role, supplied=supplied, existing=user.department)
        bound = department_of(actor.role)
        if bound is not None and new_department != bound:
            raise AuthorizationError("You cannot move a user outside your department")

        self._users.update_role(user.user_id, role=role, department=new_department)
        logger.info("user %s role %s -> %s by %s", user.user_id, user.role.value, role.value, actor.user_id)
        self._hooks.after_role_change(
            user,
            role,
            changed_by=actor.user_id,
            reason=reason,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        return self._users.get_by_id(user.user_id)

    def eligible_for_role_change(self, actor: Actor) -> Sequence[User]:
        """Users whose role ``actor`` could change: visible and strictly below them."""
        if not is_top_management(actor.role):
            raise AuthorizationError("Only founders and co-founders can manage roles")
        actor_level = level(actor.role)
        return [
            u
            for u in self._users.list_visible(visibility_filter(actor))
            if u.user_id != actor.user_id and level(u.role) < actor_level
        ]
