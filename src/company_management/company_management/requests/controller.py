from __future__ import annotations

from flask import Flask, request

from ..common.http import auth_guard, current_actor, json_body, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    auth_required = auth_guard(container.auth_service)

    @app.route("/api/requests", methods=["GET"], endpoint="list_requests")
    @auth_required
    def list_requests():
        items = container.request_service.list_visible(
            current_actor(), status=request.args.get("status"), type=request.args.get("type")
        )
        return ok(count=len(items), data=[r.to_public() for r in items])

    @app.route("/api/requests", methods=["POST"], endpoint="create_request")
    @auth_required
    def create_request():
        data = json_body()
        created = container.request_service.create(
            current_actor(),
            type=data.get("type"),
            description=data.get("description"),
            metadata=data.get("metadata"),
        )
        return ok(201, data=created.to_public())

    @app.route("/api/requests/my-requests", methods=["GET"], endpoint="my_requests")
    @auth_required
    def my_requests():
        items = container.request_service.list_mine(current_actor(), status=request.args.get("status"))
        return ok(count=len(items), data=[r.to_public() for r in items])

    @app.route("/api/requests/pending", methods=["GET"], endpoint="pending_requests")
    @auth_required
    def pending_requests():
        items = container.request_service.list_pending(current_actor())
        return ok(count=len(items), data=[r.to_public() for r in items])

    @app.route("/api/requests/<int:request_id>", methods=["GET"], endpoint="get_request")
    @auth_required
    def get_request(request_id: int):
        return ok(data=container.request_service.get(current_actor(), request_id).to_public())

    @app.route("/api/requests/<int:request_id>/approve", methods=["PUT"], endpoint="approve_request")
    @auth_required
    def approve_request(request_id: int):
        decided = container.request_service.approve(current_actor(), request_id)
        return ok(message="Request approved", data=decided.to_public())

    @app.route("/api/requests/<int:request_id>/reject", methods=["PUT"], endpoint="reject_request")
    @auth_required
    def reject_request(request_id: int):
        data = json_body()
        decided = container.request_service.reject(
            current_actor(), request_id, reason=data.get("rejection_reason") or data.get("reason")
        )
        return ok(message="Request rejected", data=decided.to_public())
