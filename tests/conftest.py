from __future__ import annotations

from io import BytesIO
from types import SimpleNamespace
from typing import Optional

import pytest
from werkzeug.datastructures import FileStorage
from werkzeug.security import generate_password_hash

from fakes import (
    FakeAttendanceRepo,
    FakeNotificationRepo,
    FakePerformanceRepo,
    FakeRequestRepo,
    FakeRoleChangeLogRepo,
    FakeSalaryRepo,
    FakeTaskRepo,
    FakeUserRepo,
    FailingNotificationRepo,
)
from src.company_management.company_management.container import Repositories, wire_container
from src.company_management.company_management.core.enums import Department, Role
from src.company_management.company_management.performance.policy import ScoringPolicy
from src.company_management.company_management.tasks.storage import SubmissionStorage
from src.company_management.company_management.users.model import User
from src.company_management.company_management.users.tokens import TokenIssuer

PASSWORD = "secret123"
_PASSWORD_HASH = generate_password_hash(PASSWORD, method="pbkdf2:sha256:1000")


class World:
    """A fully wired container over in-memory repositories."""

    def __init__(
        self,
        upload_dir: str,
        *,
        notifications: Optional[FakeNotificationRepo] = None,
        scoring: Optional[ScoringPolicy] = None,
    ):
        self.users = FakeUserRepo()
        self.attendance = FakeAttendanceRepo(self.users)
        self.tasks = FakeTaskRepo(self.users)
        self.salaries = FakeSalaryRepo(self.users)
        self.requests = FakeRequestRepo(self.users)
        self.notifications = notifications or FakeNotificationRepo()
        self.role_changes = FakeRoleChangeLogRepo()
        self.performance = FakePerformanceRepo(self.users)
        self.tokens = TokenIssuer("test-secret", expire_minutes=60)
        self.storage = SubmissionStorage(upload_dir, max_bytes=1024 * 1024)

        self.container = wire_container(
            Repositories(
                users=self.users,
                attendance=self.attendance,
                tasks=self.tasks,
                salaries=self.salaries,
                requests=self.requests,
                notifications=self.notifications,
                role_changes=self.role_changes,
                performance=self.performance,
            ),
            token_issuer=self.tokens,
            storage=self.storage,
            scoring=scoring or ScoringPolicy(),
        )

    def user(self, name: str, role: Role, department: Optional[Department] = None, *, is_active: bool = True) -> User:
        uid = self.users.create_user(
            name=name,
            email=f"{name.lower().replace(' ', '.')}@example.com",
            password_hash=_PASSWORD_HASH,
            role=role,
            department=department,
        )
        if not is_active:
            user = self.users.get_by_id(uid)
            self.users.update_profile(
                uid, name=user.name, email=user.email, department=user.department, is_active=False
            )
        return self.users.get_by_id(uid)

    def token_for(self, user: User) -> str:
        return self.tokens.issue(user.user_id)


def make_upload(name: str, content: bytes = b"%PDF-1.4 deliverable") -> FileStorage:
    return FileStorage(stream=BytesIO(content), filename=name, content_type="application/octet-stream")


@pytest.fixture
def world(tmp_path) -> World:
    return World(str(tmp_path / "uploads"))


@pytest.fixture
def world_factory(tmp_path):
    """Build extra worlds, e.g. with another scoring policy or a relative upload dir."""

    def build(upload_dir: Optional[str] = None, **kwargs) -> World:
        return World(upload_dir or str(tmp_path / "uploads"), **kwargs)

    return build


@pytest.fixture
def broken_notifications_world(tmp_path) -> World:
    return World(str(tmp_path / "uploads"), notifications=FailingNotificationRepo())


@pytest.fixture
def cast(world) -> SimpleNamespace:
    """One user per role, plus a second employee in another department."""
    return SimpleNamespace(
        founder=world.user("Fay Founder", Role.FOUNDER),
        cofounder=world.user("Cody Cofounder", Role.CO_FOUNDER),
        tech_head=world.user("Tess Techhead", Role.TECHNICAL_HEAD, Department.TECHNICAL),
        sales_head=world.user("Sam Saleshead", Role.SALES_HEAD, Department.SALES),
        finance_head=world.user("Finn Financehead", Role.FINANCE_HEAD, Department.FINANCE),
        tech_emp=world.user("Eve Engineer", Role.EMPLOYEE, Department.TECHNICAL),
        sales_emp=world.user("Sol Seller", Role.EMPLOYEE, Department.SALES),
    )


@pytest.fixture
def upload():
    return make_upload
