from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, List, Optional, Sequence, Tuple

from ..access.policy import Actor, can_access_record, visibility_filter
from ..access.roles import department_of, is_top_management
from ..common.datetime_utils import month_bounds
from ..common.validators import parse_enum, parse_int
from ..core.constants import DEFAULT_LEADERBOARD_LIMIT, MAX_PAGE_SIZE
from ..core.enums import Department, RequestType, Role
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..users.repository import UserRepository
from .model import DepartmentSummary, Performance, PerformanceCounters, PerformanceDelta
from .policy import ScoringPolicy
from .repository import PerformanceRepository

logger = logging.getLogger(__name__)


class PerformanceService:
    """Monthly score accumulator plus the read side built on top of it.

    Buckets are keyed by (employee, month, year). A bucket is created lazily,
    with every counter at zero, on the first event of the month; users
    without a department (founder, co-founder) never get one.
    """

    def __init__(
        self,
        performance: PerformanceRepository,
        users: UserRepository,
        policy: ScoringPolicy,
        *,
        attendance=None,
        tasks=None,
        requests=None,
    ):
        self._performance = performance
        self._users = users
        self._policy = policy
        self._attendance = attendance
        self._tasks = tasks
        self._requests = requests

    @property
    def policy(self) -> ScoringPolicy:
        return self._policy

    # --- accumulator -------------------------------------------------

    def _get_or_create(self, employee_id: int, month: int, year: int) -> Optional[Performance]:
        existing = self._performance.get(employee_id, month, year)
        if existing:
            return existing

        user = self._users.get_by_id(employee_id)
        if not user:
            logger.warning("performance event for unknown user %s ignored", employee_id)
            return None
        if user.department is None:
            logger.info("user %s has no department; no performance bucket kept", employee_id)
            return None

        try:
            self._performance.create(employee_id=employee_id, month=month, year=year, department=user.department)
        except ConflictError:
            # A concurrent request created the same bucket first.
            logger.debug("performance bucket %s/%s/%s created concurrently", employee_id, month, year)
        return self._performance.get(employee_id, month, year)

    def _apply(self, employee_id: int, month: int, year: int, delta: PerformanceDelta) -> Optional[Performance]:
        bucket = self._get_or_create(int(employee_id), month, year)
        if bucket is None:
            return None
        self._performance.apply_delta(bucket.performance_id, delta)
        return self._performance.get(bucket.employee_id, month, year)

    def on_task_completed(self, employee_id: int, *, now: Optional[datetime] = None) -> Optional[Performance]:
        month, year = self._policy.period_of(now or self._policy.now())
        return self._apply(
            employee_id,
            month,
            year,
            PerformanceDelta(tasks_completed=1, task_points=self._policy.task_completed_points),
        )

    def on_late_login(self, employee_id: int, login_time: datetime) -> Optional[Performance]:
        # The bucket is the one of the login itself, not of "now".
        month, year = self._policy.period_of(login_time)
        return self._apply(
            employee_id,
            month,
            year,
            PerformanceDelta(late_logins=1, late_login_penalty=self._policy.late_login_points),
        )

    def on_leave_approved(self, employee_id: int, *, now: Optional[datetime] = None) -> Optional[Performance]:
        month, year = self._policy.period_of(now or self._policy.now())
        return self._apply(employee_id, month, year, PerformanceDelta(approved_leaves=1))

    # --- reads -------------------------------------------------------

    def _period(self, month: Any, year: Any) -> Tuple[int, int]:
        current_month, current_year = self._policy.period_of(self._policy.now())
        m = parse_int(month, "month", minimum=1, maximum=12) if month not in (None, "") else current_month
        y = parse_int(year, "year", minimum=2000, maximum=9999) if year not in (None, "") else current_year
        return m, y

    def report(self, actor: Actor, *, month: Any = None, year: Any = None) -> Sequence[Performance]:
        m, y = self._period(month, year)
        return self._performance.list_period(visibility_filter(actor), month=m, year=y)

    def for_employee(self, actor: Actor, employee_id: int, *, month: Any = None, year: Any = None) -> Performance:
        user = self._users.get_by_id(int(employee_id))
        if not user:
            raise NotFoundError("Employee not found")
        if not can_access_record(actor, user.as_target()):
            raise AuthorizationError("You cannot view this employee's performance")
        m, y = self._period(month, year)
        bucket = self._performance.get(user.user_id, m, y)
        if not bucket:
            raise NotFoundError("No performance record for this period")
        return bucket

    def mine(self, actor: Actor, *, month: Any = None, year: Any = None) -> Performance:
        m, y = self._period(month, year)
        bucket = self._performance.get(actor.user_id, m, y)
        if bucket:
            return bucket
        return Performance(performance_id=0, employee_id=actor.user_id, month=m, year=y, department=actor.department)

    def leaderboard(self, actor: Actor, *, month: Any = None, year: Any = None, limit: Any = None) -> Sequence[Performance]:
        if actor.role == Role.EMPLOYEE:
            raise AuthorizationError("Employees cannot view the leaderboard")
        m, y = self._period(month, year)
        top = parse_int(limit, "limit", minimum=1, maximum=MAX_PAGE_SIZE) if limit else DEFAULT_LEADERBOARD_LIMIT
        return self._performance.list_period(visibility_filter(actor), month=m, year=y, limit=top)

    def department_summary(
        self, actor: Actor, department: Any, *, month: Any = None, year: Any = None
    ) -> DepartmentSummary:
        dept = parse_enum(Department, department, "department")
        if actor.role == Role.EMPLOYEE:
            raise AuthorizationError("Employees cannot view department summaries")
        bound = department_of(actor.role)
        if bound is not None and bound != dept:
            raise AuthorizationError("You can only view your own department")

        m, y = self._period(month, year)
        rows = list(self._performance.list_period(visibility_filter(actor), month=m, year=y, department=dept))
        count = len(rows)
        return DepartmentSummary(
            department=dept,
            month=m,
            year=y,
            employee_count=count,
            average_score=round(sum(r.total_score for r in rows) / count, 2) if count else 0.0,
            total_tasks_completed=sum(r.tasks_completed for r in rows),
            total_late_logins=sum(r.late_logins for r in rows),
            top_performer=rows[0] if rows else None,
        )

    def recalculate(self, actor: Actor, employee_id: int, *, month: Any = None, year: Any = None) -> Performance:
        """Rebuild one bucket from attendance, completed tasks and approved leaves."""
        if not is_top_management(actor.role):
            raise AuthorizationError("Only founders and co-founders can recalculate performance")
        user = self._users.get_by_id(int(employee_id))
        if not user:
            raise NotFoundError("Employee not found")
        if user.department is None:
            raise ValidationError("Performance is only tracked for users with a department", ["employee_id"])

        m, y = self._period(month, year)
        counters = self.count_period(user.user_id, m, y)
        bucket = self._get_or_create(user.user_id, m, y)
        if bucket is None:
            raise NotFoundError("Employee not found")
        self._performance.overwrite(bucket.performance_id, counters)
        logger.info(
            "performance recalculated for user %s %s/%s by %s: score=%s",
            user.user_id, m, y, actor.user_id, counters.total_score,
        )
        return self._performance.get(user.user_id, m, y) or bucket

    def count_period(self, employee_id: int, month: int, year: int) -> PerformanceCounters:
        start, end = month_bounds(month, year)
        late: List[Any] = []
        if self._attendance is not None:
            records = self._attendance.list_for_user_between(employee_id, start.date(), end.date())
            late = [r for r in records if r.login_time and self._policy.is_late(r.login_time)]
        tasks_done = self._tasks.count_completed_between(employee_id, start, end) if self._tasks is not None else 0
        leaves = (
            self._requests.count_approved_between(employee_id, RequestType.LEAVE, start, end)
            if self._requests is not None
            else 0
        )
        return PerformanceCounters(
            tasks_completed=tasks_done,
            late_logins=len(late),
            approved_leaves=leaves,
            task_points=tasks_done * self._policy.task_completed_points,
            late_login_penalty=len(late) * self._policy.late_login_points,
        )
