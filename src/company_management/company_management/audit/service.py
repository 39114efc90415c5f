from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime
from typing import Any, Optional, Sequence, Tuple

from ..access.policy import Actor
from ..access.roles import level
from ..common.datetime_utils import Clock, now_local, parse_iso_date
from ..common.validators import parse_optional_enum, require_max_length
from ..core.constants import DEFAULT_AUDIT_PAGE_SIZE, MAX_PAGE_SIZE, MAX_REASON_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError
from ..users.model import User
from .model import RoleChangeFilter, RoleChangeLog, RoleChangeStats
from .repository import RoleChangeLogRepository

logger = logging.getLogger(__name__)

_AUDIT_READERS = (Role.FOUNDER, Role.CO_FOUNDER)


class AuditService:
    """Role-change audit trail: append on change, read for management."""

    def __init__(self, logs: RoleChangeLogRepository, *, clock: Clock = now_local):
        self._logs = logs
        self._clock = clock

    def log_role_change(
        self,
        *,
        user: User,
        new_role: Role,
        changed_by: int,
        reason: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        changed_at: Optional[datetime] = None,
    ) -> Optional[int]:
        """Append one entry for ``user`` moving to ``new_role``.

        ``user`` is the pre-change state; its name, email and department are
        the snapshot. Returns None, writing nothing, when the role is unchanged.
        """

        if user.role == new_role:
            logger.info("role change for user %s skipped: role unchanged (%s)", user.user_id, new_role.value)
            return None

        log_id = self._logs.append(
            changed_user_id=user.user_id,
            old_role=user.role,
            new_role=new_role,
            changed_by=int(changed_by),
            changed_at=changed_at or self._clock(),
            reason=require_max_length(reason, "reason", MAX_REASON_LENGTH),
            snapshot_name=user.name,
            snapshot_email=user.email,
            snapshot_department=user.department,
            ip_address=ip_address,
            user_agent=user_agent[:MAX_REASON_LENGTH] if user_agent else None,
        )
        logger.info(
            "role change logged: user=%s %s -> %s by %s",
            user.user_id, user.role.value, new_role.value, changed_by,
        )
        return log_id

    @staticmethod
    def _require_reader(actor: Actor) -> None:
        if actor.role not in _AUDIT_READERS:
            raise AuthorizationError("Only founders and co-founders can view role change logs")

    @staticmethod
    def _page(page: Any, limit: Any) -> Tuple[int, int]:
        try:
            page_n = max(int(page), 1)
            limit_n = min(max(int(limit), 1), MAX_PAGE_SIZE)
        except (TypeError, ValueError):
            raise ValidationError("page and limit must be integers", ["page", "limit"])
        return page_n, limit_n

    @staticmethod
    def build_filter(
        *,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        old_role: Any = None,
        new_role: Any = None,
    ) -> RoleChangeFilter:
        try:
            start = parse_iso_date(start_date) if start_date else None
            end = parse_iso_date(end_date) if end_date else None
        except ValueError:
            raise ValidationError("dates must use YYYY-MM-DD", ["start_date", "end_date"])
        if start and end and start > end:
            raise ValidationError("start_date must not be after end_date", ["start_date", "end_date"])
        return RoleChangeFilter(
            start_date=start,
            end_date=end,
            old_role=parse_optional_enum(Role, old_role, "old_role"),
            new_role=parse_optional_enum(Role, new_role, "new_role"),
        )

    def _paged(self, filters: RoleChangeFilter, page: Any, limit: Any) -> Tuple[Sequence[RoleChangeLog], int, int, int]:
        page_n, limit_n = self._page(page, limit)
        items = self._logs.list(filters, offset=(page_n - 1) * limit_n, limit=limit_n)
        return items, self._logs.count(filters), page_n, limit_n

    def list_all(self, actor: Actor, filters: RoleChangeFilter, *, page: Any = 1, limit: Any = DEFAULT_AUDIT_PAGE_SIZE):
        self._require_reader(actor)
        return self._paged(filters, page, limit)

    def user_history(self, actor: Actor, user_id: int, *, page: Any = 1, limit: Any = DEFAULT_AUDIT_PAGE_SIZE):
        if int(user_id) != actor.user_id:
            self._require_reader(actor)
        return self._paged(RoleChangeFilter(changed_user_id=int(user_id)), page, limit)

    def my_history(self, actor: Actor, *, page: Any = 1, limit: Any = DEFAULT_AUDIT_PAGE_SIZE):
        return self._paged(RoleChangeFilter(changed_user_id=actor.user_id), page, limit)

    def changes_by_admin(self, actor: Actor, admin_id: int, *, page: Any = 1, limit: Any = DEFAULT_AUDIT_PAGE_SIZE):
        if actor.role != Role.FOUNDER:
            raise AuthorizationError("Only the founder can review changes made by an administrator")
        return self._paged(RoleChangeFilter(changed_by=int(admin_id)), page, limit)

    def stats(self, actor: Actor, filters: Optional[RoleChangeFilter] = None) -> RoleChangeStats:
        self._require_reader(actor)
        tally = self._logs.tally(filters or RoleChangeFilter())
        by_new: Counter = Counter()
        by_old: Counter = Counter()
        promotions = 0
        for (old_role, new_role), n in tally.items():
            by_old[old_role.value] += n
            by_new[new_role.value] += n
            if level(new_role) > level(old_role):
                promotions += n
        return RoleChangeStats(
            total_changes=sum(tally.values()),
            promotions=promotions,
            by_new_role=dict(by_new),
            by_old_role=dict(by_old),
        )
