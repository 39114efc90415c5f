from __future__ import annotations

from flask import Flask, request

from ..common.http import auth_guard, client_ip, current_actor, current_user, json_body, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    auth_required = auth_guard(container.auth_service)

    # --- auth --------------------------------------------------------

    @app.route("/api/auth/register", methods=["POST"], endpoint="auth_register")
    def auth_register():
        data = json_body()
        result = container.auth_service.register(
            name=data.get("name"),
            email=data.get("email"),
            password=data.get("password"),
            role=data.get("role"),
            department=data.get("department"),
        )
        return ok(201, token=result.token, user=result.user.to_public())

    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def auth_login():
        data = json_body()
        result = container.auth_service.login(data.get("email"), data.get("password"))
        return ok(
            token=result.token,
            user=result.user.to_public(),
            attendance=result.attendance.to_public() if result.attendance else None,
        )

    @app.route("/api/auth/logout", methods=["POST"], endpoint="auth_logout")
    @auth_required
    def auth_logout():
        record = container.auth_service.logout(current_user())
        return ok(message="Logged out", attendance=record.to_public() if record else None)

    @app.route("/api/auth/me", methods=["GET"], endpoint="auth_me")
    @auth_required
    def auth_me():
        return ok(user=current_user().to_public())

    # --- users -------------------------------------------------------

    @app.route("/api/users", methods=["GET"], endpoint="list_users")
    @auth_required
    def list_users():
        users = container.user_service.list_visible(current_actor())
        return ok(count=len(users), data=[u.to_public() for u in users])

    @app.route("/api/users", methods=["POST"], endpoint="create_user")
    @auth_required
    def create_user():
        data = json_body()
        user = container.user_service.create(
            current_actor(),
            name=data.get("name"),
            email=data.get("email"),
            password=data.get("password"),
            role=data.get("role"),
            department=data.get("department"),
        )
        return ok(201, data=user.to_public())

    @app.route("/api/users/eligible-for-role-change", methods=["GET"], endpoint="users_eligible_for_role_change")
    @auth_required
    def users_eligible_for_role_change():
        users = container.user_service.eligible_for_role_change(current_actor())
        return ok(count=len(users), data=[u.to_public() for u in users])

    @app.route("/api/users/<int:user_id>", methods=["GET"], endpoint="get_user")
    @auth_required
    def get_user(user_id: int):
        return ok(data=container.user_service.get(current_actor(), user_id).to_public())

    @app.route("/api/users/<int:user_id>", methods=["PUT"], endpoint="update_user")
    @auth_required
    def update_user(user_id: int):
        user = container.user_service.update(current_actor(), user_id, json_body())
        return ok(data=user.to_public())

    @app.route("/api/users/<int:user_id>", methods=["DELETE"], endpoint="delete_user")
    @auth_required
    def delete_user(user_id: int):
        container.user_service.delete(current_actor(), user_id)
        return ok(message="User deleted")

    @app.route("/api/users/<int:user_id>/change-role", methods=["POST"], endpoint="change_user_role")
    @auth_required
    def change_user_role(user_id: int):
        data = json_body()
        user = container.user_service.change_role(
            current_actor(),
            user_id,
            new_role=data.get("newRole") or data.get("role"),
            department=data.get("department"),
            reason=data.get("reason"),
            ip_address=client_ip(),
            user_agent=request.headers.get("User-Agent"),
        )
        return ok(message="Role updated", data=user.to_public())
