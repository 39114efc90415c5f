"""Flask glue shared by every controller: auth guard, JSON envelope, error mapping."""

from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Callable, Dict, Optional

from flask import Flask, g, jsonify, request
from werkzeug.exceptions import HTTPException

from ..access.policy import Actor
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
)


def ok(status: int = 200, **payload: Any):
    body: Dict[str, Any] = {"success": True}
    body.update(payload)
    return jsonify(body), status


def fail(status: int, message: str, **extra: Any):
    body: Dict[str, Any] = {"success": False, "message": message}
    body.update(extra)
    return jsonify(body), status


def json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("request body must be a JSON object")
    return data


def bearer_token() -> Optional[str]:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def client_ip() -> Optional[str]:
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.remote_addr


def auth_guard(auth_service) -> Callable:
    """Build a view decorator that resolves the bearer token into ``g.current_user``."""

    def auth_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            g.current_user = auth_service.authenticate_token(bearer_token())
            return view(*args, **kwargs)

        return wrapper

    return auth_required


def current_user():
    user = getattr(g, "current_user", None)
    if user is None:
        raise AuthenticationError("Not authenticated")
    return user


def current_actor() -> Actor:
    return current_user().as_actor()


def page_args(default_limit: int) -> Dict[str, Any]:
    return {
        "page": request.args.get("page", 1),
        "limit": request.args.get("limit", default_limit),
    }


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        for error_cls, status in _STATUS_BY_ERROR:
            if isinstance(exc, error_cls):
                if isinstance(exc, ValidationError) and exc.fields:
                    return fail(status, str(exc), fields=list(exc.fields))
                return fail(status, str(exc))
        logger.warning("unmapped domain error: %s", exc)
        return fail(400, str(exc))

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        return fail(exc.code or 500, exc.description or exc.name)

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        logger.exception("unhandled error on %s %s", request.method, request.path)
        if app.config.get("DEBUG"):
            return fail(500, "Internal server error", detail=str(exc))
        return fail(500, "Internal server error")
