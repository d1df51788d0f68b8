"""Use case for the match statistics dashboard."""

from dataclasses import dataclass, field
from typing import Any, Dict

from coaching.errors import CoachingError
from coaching.stats import Summary, aggregate

from ..ports.knowledge_store import KnowledgeStorePort
from ._runner import error_fields, run_blocking


@dataclass
class DashboardResult:
    success: bool
    summary: Summary | None = None
    error: str | None = None
    error_code: str | None = None
    details: Dict[str, Any] = field(default_factory=dict)


class DashboardUseCase:
    """Loads the full match history and aggregates it. Nothing is cached."""

    def __init__(self, store: KnowledgeStorePort):
        self._store = store

    async def execute(self) -> DashboardResult:
        try:
            history = await run_blocking(self._store.fetch_match_history)
        except CoachingError as e:
            return DashboardResult(**error_fields(e))
        return DashboardResult(success=True, summary=aggregate(history))
