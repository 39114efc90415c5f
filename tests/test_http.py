from __future__ import annotations

from io import BytesIO

import pytest

from src.company_management.company_management.core.enums import Department, Role, TaskStatus
from src.company_management.company_management.main import create_app


@pytest.fixture
def client(world, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container=world.container)
    app.config["TESTING"] = True
    return app.test_client()


def _auth(world, user):
    return {"Authorization": f"Bearer {world.token_for(user)}"}


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "ok"


def test_missing_or_bad_token_is_401(client):
    resp = client.get("/api/users")
    assert resp.status_code == 401
    assert resp.get_json()["success"] is False

    resp = client.get("/api/users", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


def test_login_then_me(client, cast):
    resp = client.post("/api/auth/login", json={"email": cast.sales_emp.email, "password": "secret123"})
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["success"] is True
    assert body["user"]["email"] == cast.sales_emp.email
    assert body["attendance"]["user_id"] == cast.sales_emp.user_id

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['token']}"})
    assert me.status_code == 200
    assert me.get_json()["user"]["role"] == "employee"

    bad = client.post("/api/auth/login", json={"email": cast.sales_emp.email, "password": "wrong"})
    assert bad.status_code == 401


def test_forbidden_and_missing_are_distinct(client, world, cast):
    headers = _auth(world, cast.tech_head)

    forbidden = client.get(f"/api/users/{cast.sales_emp.user_id}", headers=headers)
    assert forbidden.status_code == 403
    assert forbidden.get_json()["success"] is False

    missing = client.get("/api/users/9999", headers=headers)
    assert missing.status_code == 404

    visible = client.get(f"/api/users/{cast.tech_emp.user_id}", headers=headers)
    assert visible.status_code == 200
    assert visible.get_json()["data"]["name"] == cast.tech_emp.name


def test_validation_errors_name_fields(client, world, cast):
    resp = client.post("/api/tasks", json={"assigned_to": cast.tech_emp.user_id}, headers=_auth(world, cast.tech_head))
    assert resp.status_code == 400
    assert resp.get_json()["fields"] == ["title"]


def test_duplicate_salary_is_409(client, world, cast):
    payload = {"user_id": cast.tech_emp.user_id, "month": 3, "year": 2025, "basic_salary": 4000}
    headers = _auth(world, cast.founder)
    assert client.post("/api/salaries", json=payload, headers=headers).status_code == 201
    conflict = client.post("/api/salaries", json=payload, headers=headers)
    assert conflict.status_code == 409
    assert conflict.get_json()["success"] is False


def test_complete_task_with_upload(client, world, cast):
    created = client.post(
        "/api/tasks",
        json={"title": "Quarterly report", "assigned_to": cast.tech_emp.user_id, "priority": "high"},
        headers=_auth(world, cast.tech_head),
    )
    assert created.status_code == 201
    task_id = created.get_json()["data"]["id"]

    missing_file = client.post(f"/api/tasks/{task_id}/complete", data={}, headers=_auth(world, cast.tech_emp))
    assert missing_file.status_code == 400

    resp = client.post(
        f"/api/tasks/{task_id}/complete",
        data={"completionFile": (BytesIO(b"%PDF-1.4 report"), "report.pdf")},
        content_type="multipart/form-data",
        headers=_auth(world, cast.tech_emp),
    )
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["data"]["status"] == "completed"
    assert body["submission"]["file_name"] == "report.pdf"
    assert world.tasks.get_by_id(task_id).status == TaskStatus.COMPLETED

    download = client.get(f"/api/tasks/{task_id}/submission/download", headers=_auth(world, cast.tech_head))
    assert download.status_code == 200
    assert download.data == b"%PDF-1.4 report"
    download.close()


def test_dashboard_per_role(client, world, cast):
    employee = client.get("/api/dashboard", headers=_auth(world, cast.sales_emp)).get_json()["data"]
    assert employee["role"] == "employee"

    head = client.get("/api/dashboard", headers=_auth(world, cast.sales_head)).get_json()["data"]
    assert head["department"] == "sales"
    assert head["stats"]["team_size"] == 1

def test_download_with_relative_upload_dir(world_factory, upload, monkeypatch, tmp_path):
    monkeypatch.setenv("APP_ENV", "testing")
    monkeypatch.chdir(tmp_path)
    relative = world_factory("uploads/task-submissions")
    client = create_app(container=relative.container).test_client()

    head = relative.user("Hal Head", Role.TECHNICAL_HEAD, Department.TECHNICAL)
    emp = relative.user("Ida Dev", Role.EMPLOYEE, Department.TECHNICAL)
    tasks = relative.container.task_service
    task = tasks.create(head.as_actor(), title="Export", assigned_to=emp.user_id)
    tasks.complete_with_submission(emp.as_actor(), task.task_id, upload("numbers.csv", b"a,b\n1,2\n"))

    resp = client.get(f"/api/tasks/{task.task_id}/submission/download", headers=_auth(relative, head))
    assert resp.status_code == 200
    assert resp.data == b"a,b\n1,2\n"
    resp.close()
