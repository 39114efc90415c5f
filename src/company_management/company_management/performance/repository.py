from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..access.policy import Scope
from ..core.enums import Department
from .model import Performance, PerformanceCounters, PerformanceDelta


class PerformanceRepository(Protocol):
    def get(self, employee_id: int, month: int, year: int) -> Optional[Performance]:
        raise NotImplementedError

    def create(self, *, employee_id: int, month: int, year: int, department: Department) -> int:
        """Insert a zeroed bucket; raises ConflictError if the period already exists."""
        raise NotImplementedError

    def apply_delta(self, performance_id: int, delta: PerformanceDelta) -> None:
        """Atomically add ``delta`` and recompute total_score from the two point columns."""
        raise NotImplementedError

    def overwrite(self, performance_id: int, counters: PerformanceCounters) -> None:
        raise NotImplementedError

    def list_period(
        self,
        scope: Scope,
        *,
        month: int,
        year: int,
        department: Optional[Department] = None,
        limit: Optional[int] = None,
    ) -> Sequence[Performance]:
        """Buckets of one period, best score first."""
        raise NotImplementedError
