from __future__ import annotations

from flask import Flask, request

from ..common.http import auth_guard, current_actor, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    auth_required = auth_guard(container.auth_service)

    @app.route("/api/attendance", methods=["GET"], endpoint="list_attendance")
    @auth_required
    def list_attendance():
        records = container.attendance_service.list_visible(
            current_actor(), start=request.args.get("start"), end=request.args.get("end")
        )
        return ok(count=len(records), data=[r.to_public() for r in records])

    @app.route("/api/attendance/my-attendance", methods=["GET"], endpoint="my_attendance")
    @auth_required
    def my_attendance():
        records = container.attendance_service.list_mine(
            current_actor(), start=request.args.get("start"), end=request.args.get("end")
        )
        return ok(count=len(records), data=[r.to_public() for r in records])

    @app.route("/api/attendance/<int:attendance_id>", methods=["GET"], endpoint="get_attendance")
    @auth_required
    def get_attendance(attendance_id: int):
        return ok(data=container.attendance_service.get(current_actor(), attendance_id).to_public())
