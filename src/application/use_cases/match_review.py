"""Use case driving the match review workflow."""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict

from coaching.errors import CoachingError
from coaching.models import MatchRecord
from coaching.session import MatchSession

from ..ports.knowledge_store import KnowledgeStorePort
from ._runner import error_fields, run_blocking


@dataclass
class ConfigureMatchRequest:
    """Match details entered before the review."""

    role: str
    subject: str
    result: str = "Win"


@dataclass
class MatchReviewResult:
    """Session state after an action, plus the saved record when there is one."""

    success: bool
    session: Dict[str, Any] = field(default_factory=dict)
    record: MatchRecord | None = None
    error: str | None = None
    error_code: str | None = None
    details: Dict[str, Any] = field(default_factory=dict)


class MatchReviewUseCase:
    """Wraps a :class:`MatchSession` so every action reports the resulting state.

    Errors leave the session in its last stable state; the result carries both
    the error and that state.
    """

    def __init__(self, session: MatchSession, store: KnowledgeStorePort):
        self._session = session
        self._store = store

    def _fail(self, e: CoachingError) -> MatchReviewResult:
        return MatchReviewResult(session=self._session.snapshot(), **error_fields(e))

    def _ok(self, record: MatchRecord | None = None) -> MatchReviewResult:
        return MatchReviewResult(success=True, session=self._session.snapshot(), record=record)

    def state(self) -> MatchReviewResult:
        return self._ok()

    async def start(self, request: ConfigureMatchRequest) -> MatchReviewResult:
        try:
            await run_blocking(
                self._session.begin_review,
                self._store,
                role=request.role,
                subject=request.subject,
                result=request.result,
            )
            return self._ok()
        except CoachingError as e:
            return self._fail(e)

    def _apply(self, action: Callable[[], Any]) -> MatchReviewResult:
        try:
            action()
            return self._ok()
        except CoachingError as e:
            return self._fail(e)

    def toggle(self, index: int) -> MatchReviewResult:
        return self._apply(lambda: self._session.toggle(index))

    def set_note(self, note: str) -> MatchReviewResult:
        return self._apply(lambda: self._session.set_note(note))

    def back(self) -> MatchReviewResult:
        return self._apply(self._session.back)

    async def save(self) -> MatchReviewResult:
        try:
            record = await run_blocking(self._session.save, self._store)
            return self._ok(record)
        except CoachingError as e:
            return self._fail(e)
