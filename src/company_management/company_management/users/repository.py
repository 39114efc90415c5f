from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..access.policy import Scope
from ..core.enums import Department, Role
from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Services depend on this interface, never on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def list_visible(self, scope: Scope) -> Sequence[User]:
        raise NotImplementedError

    def create_user(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        role: Role,
        department: Optional[Department],
    ) -> int:
        """Insert a user; raises ConflictError when the email is taken."""
        raise NotImplementedError

    def update_profile(
        self,
        user_id: int,
        *,
        name: str,
        email: str,
        department: Optional[Department],
        is_active: bool,
    ) -> bool:
        raise NotImplementedError

    def update_role(self, user_id: int, *, role: Role, department: Optional[Department]) -> bool:
        raise NotImplementedError

    def delete_by_id(self, user_id: int) -> bool:
        raise NotImplementedError
