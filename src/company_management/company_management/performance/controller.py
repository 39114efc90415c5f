from __future__ import annotations

from flask import Flask, request

from ..common.http import auth_guard, current_actor, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    auth_required = auth_guard(container.auth_service)

    def _period():
        return {"month": request.args.get("month"), "year": request.args.get("year")}

    @app.route("/api/performance", methods=["GET"], endpoint="performance_report")
    @auth_required
    def performance_report():
        rows = container.performance_service.report(current_actor(), **_period())
        return ok(count=len(rows), data=[r.to_public() for r in rows])

    @app.route("/api/performance/my-performance", methods=["GET"], endpoint="my_performance")
    @auth_required
    def my_performance():
        return ok(data=container.performance_service.mine(current_actor(), **_period()).to_public())

    @app.route("/api/performance/leaderboard", methods=["GET"], endpoint="performance_leaderboard")
    @auth_required
    def performance_leaderboard():
        rows = container.performance_service.leaderboard(
            current_actor(), limit=request.args.get("limit"), **_period()
        )
        return ok(
            data=[dict(r.to_public(), rank=i) for i, r in enumerate(rows, start=1)],
        )

    @app.route("/api/performance/employee/<int:employee_id>", methods=["GET"], endpoint="employee_performance")
    @auth_required
    def employee_performance(employee_id: int):
        bucket = container.performance_service.for_employee(current_actor(), employee_id, **_period())
        return ok(data=bucket.to_public())

    @app.route("/api/performance/department/<string:department>", methods=["GET"], endpoint="department_performance")
    @auth_required
    def department_performance(department: str):
        summary = container.performance_service.department_summary(current_actor(), department, **_period())
        return ok(data=summary.to_public())

    @app.route("/api/performance/recalculate/<int:employee_id>", methods=["POST"], endpoint="recalculate_performance")
    @auth_required
    def recalculate_performance(employee_id: int):
        bucket = container.performance_service.recalculate(current_actor(), employee_id, **_period())
        return ok(message="Performance recalculated", data=bucket.to_public())

    @app.route("/api/performance/check-late-login", methods=["POST"], endpoint="check_late_login")
    @auth_required
    def check_late_login():
        return ok(data=container.attendance_service.today_login_status(current_actor()))
