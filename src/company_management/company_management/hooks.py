"""Post-commit side effects.

Services call these after their primary write has committed. Notifications,
audit entries and score updates are best effort: any failure is logged here
and never reaches the caller, whose operation already succeeded.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Optional

from .audit.service import AuditService
from .core.enums import EntityType, NotificationType, RequestStatus, RequestType, Role
from .notifications.service import NotificationService
from .performance.service import PerformanceService

logger = logging.getLogger(__name__)


class PostCommitHooks:
    def __init__(self, notifications: NotificationService, audit: AuditService, performance: PerformanceService):
        self._notifications = notifications
        self._audit = audit
        self._performance = performance

    def _best_effort(self, label: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        try:
            return fn(*args, **kwargs)
        except Exception:
            logger.exception("side effect %r failed; primary operation is unaffected", label)
            return None

    def after_login(self, user, *, login_time: datetime, first_login_today: bool) -> None:
        self._best_effort(
            "login notification",
            self._notifications.notify,
            user_id=user.user_id,
            message=f"Welcome back, {user.name}! You logged in at {login_time.strftime('%H:%M')}.",
            type=NotificationType.LOGIN_SUCCESS,
            related_entity_type=EntityType.USER,
            related_entity_id=user.user_id,
            metadata={"login_time": login_time.isoformat()},
        )
        # Only the login that opened the day's attendance row can be late.
        if first_login_today and self._performance.policy.is_late(login_time):
            self._best_effort("late login score", self._performance.on_late_login, user.user_id, login_time)

    def after_task_assigned(self, task) -> None:
        self._best_effort(
            "task assigned notification",
            self._notifications.notify,
            user_id=task.assigned_to,
            message=f"New task assigned to you: {task.title}",
            type=NotificationType.TASK_ASSIGNED,
            related_entity_type=EntityType.TASK,
            related_entity_id=task.task_id,
            metadata={"priority": task.priority.value, "assigned_by": task.assigned_by},
        )

    def after_task_completed(self, task, *, completed_by: int, now: Optional[datetime] = None) -> None:
        self._best_effort("task completion score", self._performance.on_task_completed, task.assigned_to, now=now)
        if task.assigned_by == completed_by:
            return
        self._best_effort(
            "task completed notification",
            self._notifications.notify,
            user_id=task.assigned_by,
            message=f"Task completed: {task.title}",
            type=NotificationType.TASK_COMPLETED,
            related_entity_type=EntityType.TASK,
            related_entity_id=task.task_id,
            metadata={"completed_by": completed_by},
        )

    def after_request_decided(self, request, *, decided_by: int, now: Optional[datetime] = None) -> None:
        approved = request.status == RequestStatus.APPROVED
        message = f"Your {request.type.value} request was {'approved' if approved else 'rejected'}"
        if not approved and request.rejection_reason:
            message += f": {request.rejection_reason}"
        self._best_effort(
            "request decision notification",
            self._notifications.notify,
            user_id=request.created_by,
            message=message[:500],
            type=NotificationType.REQUEST_APPROVED if approved else NotificationType.REQUEST_REJECTED,
            related_entity_type=EntityType.REQUEST,
            related_entity_id=request.request_id,
            metadata={"decided_by": decided_by, "request_type": request.type.value},
        )
        if approved and request.type == RequestType.LEAVE:
            self._best_effort("approved leave score", self._performance.on_leave_approved, request.created_by, now=now)

    def after_role_change(
        self,
        user,
        new_role: Role,
        *,
        changed_by: int,
        reason: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> None:
        """``user`` is the state before the change."""
        if user.role == new_role:
            return
        self._best_effort(
            "role change audit",
            self._audit.log_role_change,
            user=user,
            new_role=new_role,
            changed_by=changed_by,
            reason=reason,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        self._best_effort(
            "role change notification",
            self._notifications.notify,
            user_id=user.user_id,
            message=f"Your role has been changed from {user.role.value} to {new_role.value}",
            type=NotificationType.ROLE_CHANGED,
            related_entity_type=EntityType.USER,
            related_entity_id=user.user_id,
            metadata={"old_role": user.role.value, "new_role": new_role.value, "changed_by": changed_by},
        )
