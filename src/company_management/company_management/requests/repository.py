from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Protocol, Sequence

from ..access.policy import Scope
from ..core.enums import Department, RequestStatus, RequestType
from .model import Request


class RequestRepository(Protocol):
    def create(
        self,
        *,
        type: RequestType,
        description: str,
        created_by: int,
        department: Department,
        metadata: Dict[str, Any],
    ) -> int:
        raise NotImplementedError

    def get_by_id(self, request_id: int) -> Optional[Request]:
        raise NotImplementedError

    def list_visible(
        self,
        scope: Scope,
        *,
        status: Optional[RequestStatus] = None,
        type: Optional[RequestType] = None,
    ) -> Sequence[Request]:
        raise NotImplementedError

    def decide(
        self,
        request_id: int,
        *,
        status: RequestStatus,
        decided_by: int,
        decided_at: datetime,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        """Move a pending request to ``status``; False if it was no longer pending."""
        raise NotImplementedError

    def count_approved_between(self, user_id: int, type: RequestType, start: datetime, end: datetime) -> int:
        raise NotImplementedError
