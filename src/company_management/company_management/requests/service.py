from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..access.policy import Actor, can_access_record, can_decide_request, own_records, visibility_filter
from ..common.datetime_utils import Clock, now_local
from ..common.validators import parse_enum, parse_optional_enum, require_max_length, require_non_empty
from ..core.constants import MAX_DESCRIPTION_LENGTH, MAX_REASON_LENGTH
from ..core.enums import RequestStatus, RequestType, Role
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..hooks import PostCommitHooks
from .model import Request
from .repository import RequestRepository

logger = logging.getLogger(__name__)


class RequestService:
    """Use cases: employees file requests, their department head or top management decides.

    Requests go pending -> approved or pending -> rejected, and stay there.
    """

    def __init__(self, requests: RequestRepository, hooks: PostCommitHooks, *, clock: Clock = now_local):
        self._requests = requests
        self._hooks = hooks
        self._clock = clock

    def _get_or_404(self, request_id: Any) -> Request:
        try:
            rid = int(request_id)
        except (TypeError, ValueError):
            raise ValidationError("request id must be an integer", ["id"])
        req = self._requests.get_by_id(rid)
        if not req:
            raise NotFoundError("Request not found")
        return req

    def create(
        self,
        actor: Actor,
        *,
        type: Any,
        description: Any,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Request:
        if actor.role != Role.EMPLOYEE:
            raise AuthorizationError("Only employees can create requests")
        kind = parse_enum(RequestType, type, "type")
        description = require_non_empty(description, "description")
        require_max_length(description, "description", MAX_DESCRIPTION_LENGTH)
        if metadata is not None and not isinstance(metadata, dict):
            raise ValidationError("metadata must be an object", ["metadata"])
        if actor.department is None:
            raise ValidationError("your account has no department", ["department"])

        request_id = self._requests.create(
            type=kind,
            description=description,
            created_by=actor.user_id,
            department=actor.department,
            metadata=dict(metadata or {}),
        )
        logger.info("request %s (%s) created by %s", request_id, kind.value, actor.user_id)
        return self._requests.get_by_id(request_id)

    def list_visible(self, actor: Actor, *, status: Any = None, type: Any = None) -> Sequence[Request]:
        return self._requests.list_visible(
            visibility_filter(actor),
            status=parse_optional_enum(RequestStatus, status, "status"),
            type=parse_optional_enum(RequestType, type, "type"),
        )

    def list_mine(self, actor: Actor, *, status: Any = None) -> Sequence[Request]:
        return self._requests.list_visible(
            own_records(actor), status=parse_optional_enum(RequestStatus, status, "status")
        )

    def list_pending(self, actor: Actor) -> Sequence[Request]:
        if actor.role == Role.EMPLOYEE:
            raise AuthorizationError("Employees cannot review pending requests")
        return [
            r
            for r in self._requests.list_visible(visibility_filter(actor), status=RequestStatus.PENDING)
            if r.created_by != actor.user_id
        ]

    def get(self, actor: Actor, request_id: Any) -> Request:
        req = self._get_or_404(request_id)
        if not can_access_record(actor, req.owner()):
            raise AuthorizationError("You do not have permission to view this request")
        return req

    def _decide(
        self,
        actor: Actor,
        request_id: Any,
        status: RequestStatus,
        *,
        rejection_reason: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Request:
        req = self._get_or_404(request_id)
        if not can_decide_request(actor, req.department):
            raise AuthorizationError("You cannot decide requests of this department")
        if req.is_terminal:
            raise ConflictError(f"Request has already been {req.status.value}")

        decided_at = now or self._clock()
        if not self._requests.decide(
            req.request_id,
            status=status,
            decided_by=actor.user_id,
            decided_at=decided_at,
            rejection_reason=rejection_reason,
        ):
            raise ConflictError("Request was decided concurrently")

        decided = self._requests.get_by_id(req.request_id)
        logger.info("request %s %s by %s", req.request_id, status.value, actor.user_id)
        self._hooks.after_request_decided(decided, decided_by=actor.user_id, now=decided_at)
        return decided

    def approve(self, actor: Actor, request_id: Any, *, now: Optional[datetime] = None) -> Request:
        return self._decide(actor, request_id, RequestStatus.APPROVED, now=now)

    def reject(
        self,
        actor: Actor,
        request_id: Any,
        *,
        reason: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Request:
        reason = (reason or "").strip() or None
        require_max_length(reason, "rejection_reason", MAX_REASON_LENGTH)
        return self._decide(actor, request_id, RequestStatus.REJECTED, rejection_reason=reason, now=now)
