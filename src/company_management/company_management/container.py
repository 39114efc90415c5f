from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .audit.mysql_role_change_repository import MySQLRoleChangeLogRepository
from .audit.repository import RoleChangeLogRepository
from .audit.service import AuditService
from .core.constants import DEFAULT_HALF_DAY_MINUTES, DEFAULT_MAX_UPLOAD_MB, DEFAULT_TOKEN_MINUTES
from .dashboard.service import DashboardService
from .database.connection import DBConfig, DatabaseConnection
from .hooks import PostCommitHooks
from .notifications.mysql_notification_repository import MySQLNotificationRepository
from .notifications.repository import NotificationRepository
from .notifications.service import NotificationService
from .performance.mysql_performance_repository import MySQLPerformanceRepository
from .performance.policy import ScoringPolicy
from .performance.repository import PerformanceRepository
from .performance.service import PerformanceService
from .requests.mysql_request_repository import MySQLRequestRepository
from .requests.repository import RequestRepository
from .requests.service import RequestService
from .salary.calculator.standard_calculator import StandardSalaryCalculator
from .salary.mysql_salary_repository import MySQLSalaryRepository
from .salary.repository import SalaryRepository
from .salary.service import SalaryService
from .tasks.mysql_task_repository import MySQLTaskRepository
from .tasks.repository import TaskRepository
from .tasks.service import TaskService
from .tasks.storage import SubmissionStorage
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService
from .users.tokens import TokenIssuer


@dataclass(frozen=True)
class Repositories:
    users: UserRepository
    attendance: AttendanceRepository
    tasks: TaskRepository
    salaries: SalaryRepository
    requests: RequestRepository
    notifications: NotificationRepository
    role_changes: RoleChangeLogRepository
    performance: PerformanceRepository


@dataclass(frozen=True)
class Container:
    repos: Repositories
    scoring: ScoringPolicy
    storage: SubmissionStorage

    hooks: PostCommitHooks
    auth_service: AuthService
    user_service: UserService
    attendance_service: AttendanceService
    task_service: TaskService
    salary_service: SalaryService
    request_service: RequestService
    notification_service: NotificationService
    audit_service: AuditService
    performance_service: PerformanceService
    dashboard_service: DashboardService


def wire_container(
    repos: Repositories,
    *,
    token_issuer: TokenIssuer,
    storage: SubmissionStorage,
    scoring: ScoringPolicy,
    half_day_minutes: int = DEFAULT_HALF_DAY_MINUTES,
) -> Container:
    """Assemble services over any set of repositories (MySQL or in-memory)."""

    clock = scoring.now
    notification_service = NotificationService(repos.notifications)
    audit_service = AuditService(repos.role_changes, clock=clock)
    performance_service = PerformanceService(
        repos.performance,
        repos.users,
        scoring,
        attendance=repos.attendance,
        tasks=repos.tasks,
        requests=repos.requests,
    )
    hooks = PostCommitHooks(notification_service, audit_service, performance_service)

    attendance_service = AttendanceService(
        repos.attendance,
        strategy_factory=AttendanceStrategyFactory(half_day_minutes=half_day_minutes),
        policy=scoring,
    )

    return Container(
        repos=repos,
        scoring=scoring,
        storage=storage,
        hooks=hooks,
        auth_service=AuthService(repos.users, token_issuer, attendance_service, hooks, clock=clock),
        user_service=UserService(repos.users, hooks),
        attendance_service=attendance_service,
        task_service=TaskService(repos.tasks, repos.users, storage, hooks, clock=clock),
        salary_service=SalaryService(repos.salaries, repos.users, StandardSalaryCalculator()),
        request_service=RequestService(repos.requests, hooks, clock=clock),
        notification_service=notification_service,
        audit_service=audit_service,
        performance_service=performance_service,
        dashboard_service=DashboardService(
            users=repos.users,
            tasks=repos.tasks,
            attendance=repos.attendance,
            salaries=repos.salaries,
            requests=repos.requests,
            clock=clock,
        ),
    )


def build_container(*, db_config: dict, settings: Any) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    repos = Repositories(
        users=MySQLUserRepository(conn),
        attendance=MySQLAttendanceRepository(conn),
        tasks=MySQLTaskRepository(conn),
        salaries=MySQLSalaryRepository(conn),
        requests=MySQLRequestRepository(conn),
        notifications=MySQLNotificationRepository(conn),
        role_changes=MySQLRoleChangeLogRepository(conn),
        performance=MySQLPerformanceRepository(conn),
    )

    token_issuer = TokenIssuer(
        str(getattr(settings, "JWT_SECRET", None) or getattr(settings, "SECRET_KEY")),
        expire_minutes=int(getattr(settings, "JWT_EXPIRE_MINUTES", DEFAULT_TOKEN_MINUTES)),
    )
    storage = SubmissionStorage(
        str(getattr(settings, "UPLOAD_DIR", "uploads")),
        max_bytes=int(getattr(settings, "MAX_UPLOAD_MB", DEFAULT_MAX_UPLOAD_MB)) * 1024 * 1024,
    )

    return wire_container(
        repos,
        token_issuer=token_issuer,
        storage=storage,
        scoring=ScoringPolicy.from_settings(settings),
        half_day_minutes=int(getattr(settings, "HALF_DAY_MINUTES", DEFAULT_HALF_DAY_MINUTES)),
    )
