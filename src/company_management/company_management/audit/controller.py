from __future__ import annotations

from flask import Flask, request

from ..common.http import auth_guard, current_actor, ok, page_args
from ..container import Container
from ..core.constants import DEFAULT_AUDIT_PAGE_SIZE


def _paged(result):
    items, total, page, limit = result
    return ok(
        data=[log.to_public() for log in items],
        pagination={
            "page": page,
            "limit": limit,
            "total": total,
            "pages": (total + limit - 1) // limit if limit else 0,
        },
    )


def register(app: Flask, container: Container) -> None:
    auth_required = auth_guard(container.auth_service)

    def _filters():
        return container.audit_service.build_filter(
            start_date=request.args.get("startDate") or request.args.get("start_date"),
            end_date=request.args.get("endDate") or request.args.get("end_date"),
            old_role=request.args.get("oldRole") or request.args.get("old_role"),
            new_role=request.args.get("newRole") or request.args.get("new_role"),
        )

    @app.route("/api/role-changes", methods=["GET"], endpoint="list_role_changes")
    @auth_required
    def list_role_changes():
        return _paged(
            container.audit_service.list_all(current_actor(), _filters(), **page_args(DEFAULT_AUDIT_PAGE_SIZE))
        )

    @app.route("/api/role-changes/stats", methods=["GET"], endpoint="role_change_stats")
    @auth_required
    def role_change_stats():
        stats = container.audit_service.stats(current_actor(), _filters())
        return ok(
            data={
                "total_changes": stats.total_changes,
                "promotions": stats.promotions,
                "by_new_role": stats.by_new_role,
                "by_old_role": stats.by_old_role,
            }
        )

    @app.route("/api/role-changes/my-history", methods=["GET"], endpoint="my_role_history")
    @auth_required
    def my_role_history():
        return _paged(container.audit_service.my_history(current_actor(), **page_args(DEFAULT_AUDIT_PAGE_SIZE)))

    @app.route("/api/role-changes/user/<int:user_id>", methods=["GET"], endpoint="user_role_history")
    @auth_required
    def user_role_history(user_id: int):
        return _paged(
            container.audit_service.user_history(current_actor(), user_id, **page_args(DEFAULT_AUDIT_PAGE_SIZE))
        )

    @app.route("/api/role-changes/by-admin/<int:admin_id>", methods=["GET"], endpoint="role_changes_by_admin")
    @auth_required
    def role_changes_by_admin(admin_id: int):
        return _paged(
            container.audit_service.changes_by_admin(current_actor(), admin_id, **page_args(DEFAULT_AUDIT_PAGE_SIZE))
        )
