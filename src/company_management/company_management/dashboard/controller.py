from __future__ import annotations

from flask import Flask

from ..common.http import auth_guard, current_actor, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    auth_required = auth_guard(container.auth_service)

    @app.route("/api/dashboard", methods=["GET"], endpoint="dashboard")
    @auth_required
    def dashboard():
        return ok(data=container.dashboard_service.summary(current_actor()))
