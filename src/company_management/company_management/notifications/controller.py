from __future__ import annotations

from flask import Flask, request

from ..common.http import auth_guard, current_actor, ok, page_args
from ..container import Container
from ..core.constants import DEFAULT_PAGE_SIZE
from ..core.exceptions import ValidationError
from .model import NotificationPage


def _page_payload(result: NotificationPage):
    return ok(
        data=[n.to_public() for n in result.items],
        unread_count=result.unread,
        pagination={"page": result.page, "limit": result.limit, "total": result.total, "pages": result.pages},
    )


def register(app: Flask, container: Container) -> None:
    auth_required = auth_guard(container.auth_service)

    def _paging():
        try:
            return {k: int(v) for k, v in page_args(DEFAULT_PAGE_SIZE).items()}
        except (TypeError, ValueError):
            raise ValidationError("page and limit must be integers", ["page", "limit"])

    @app.route("/api/notifications", methods=["GET"], endpoint="list_notifications")
    @auth_required
    def list_notifications():
        unread_only = request.args.get("unread_only", request.args.get("unreadOnly", "")).lower() in {"1", "true", "yes"}
        result = container.notification_service.list_for(
            current_actor(), unread_only=unread_only, type=request.args.get("type"), **_paging()
        )
        return _page_payload(result)

    @app.route("/api/notifications/unread-count", methods=["GET"], endpoint="unread_notification_count")
    @auth_required
    def unread_notification_count():
        return ok(unread_count=container.notification_service.unread_count(current_actor()))

    @app.route("/api/notifications/type/<string:kind>", methods=["GET"], endpoint="notifications_by_type")
    @auth_required
    def notifications_by_type(kind: str):
        result = container.notification_service.list_for(current_actor(), type=kind, **_paging())
        return _page_payload(result)

    @app.route("/api/notifications/read-all", methods=["PUT"], endpoint="mark_all_notifications_read")
    @auth_required
    def mark_all_notifications_read():
        updated = container.notification_service.mark_all_read(current_actor())
        return ok(message="All notifications marked as read", updated=updated)

    @app.route("/api/notifications/<int:notification_id>/read", methods=["PUT"], endpoint="mark_notification_read")
    @auth_required
    def mark_notification_read(notification_id: int):
        notification = container.notification_service.mark_read(current_actor(), notification_id)
        return ok(data=notification.to_public())

    @app.route("/api/notifications/clear-read", methods=["DELETE"], endpoint="clear_read_notifications")
    @auth_required
    def clear_read_notifications():
        deleted = container.notification_service.clear_read(current_actor())
        return ok(message="Read notifications cleared", deleted=deleted)

    @app.route("/api/notifications/<int:notification_id>", methods=["DELETE"], endpoint="delete_notification")
    @auth_required
    def delete_notification(notification_id: int):
        container.notification_service.delete(current_actor(), notification_id)
        return ok(message="Notification deleted")
