from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """The six company roles, ordered by ``access.roles.level``."""

    FOUNDER = "founder"
    CO_FOUNDER = "co-founder"
    TECHNICAL_HEAD = "technical_head"
    SALES_HEAD = "sales_head"
    FINANCE_HEAD = "finance_head"
    EMPLOYEE = "employee"


class Department(str, Enum):
    TECHNICAL = "technical"
    SALES = "sales"
    FINANCE = "finance"


class TaskStatus(str, Enum):
    """Task workflow; the declaration order is the forward order."""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    REVIEW = "review"
    COMPLETED = "completed"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    HALF_DAY = "half-day"
    LEAVE = "leave"


class SalaryStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    CANCELLED = "cancelled"


class RequestType(str, Enum):
    LEAVE = "leave"
    EXPENSE = "expense"
    TASK = "task"


class RequestStatus(str, Enum):
    """Request approval flow; approved and rejected are terminal."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class NotificationType(str, Enum):
    LOGIN_SUCCESS = "login_success"
    REQUEST_APPROVED = "request_approved"
    REQUEST_REJECTED = "request_rejected"
    ROLE_CHANGED = "role_changed"
    TASK_ASSIGNED = "task_assigned"
    TASK_COMPLETED = "task_completed"
    SYSTEM = "system"


class EntityType(str, Enum):
    """Kinds of record a notification can point at."""

    REQUEST = "request"
    TASK = "task"
    USER = "user"
