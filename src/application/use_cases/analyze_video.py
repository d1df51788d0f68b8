"""Use cases for turning a video into knowledge-base advice."""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from coaching.errors import CoachingError
from coaching.extraction import VideoAnalyzer
from coaching.models import Advice, RawAdviceItem

from ..ports.extraction_service import ProgressCallbackPort
from ..ports.knowledge_store import KnowledgeStorePort
from ._runner import error_fields, run_blocking


@dataclass
class AnalyzeVideoRequest:
    """Request to analyze a video."""

    video_url: str
    notes: str = ""


@dataclass
class AnalyzeVideoResult:
    """Result of a video analysis."""

    success: bool
    items: List[RawAdviceItem] = field(default_factory=list)
    title: str | None = None
    error: str | None = None
    error_code: str | None = None
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass
class SaveAdviceResult:
    """Result of saving the analyzed advice."""

    success: bool
    saved: List[Advice] = field(default_factory=list)
    error: str | None = None
    error_code: str | None = None
    details: Dict[str, Any] = field(default_factory=dict)


class AnalyzeVideoUseCase:
    """Use case for extracting advice candidates from a video.

    The candidates stay on the analyzer until they are saved or replaced by
    the next analysis.
    """

    def __init__(self, analyzer: VideoAnalyzer):
        self._analyzer = analyzer

    async def execute(
        self,
        request: AnalyzeVideoRequest,
        progress_callback: ProgressCallbackPort | None = None,
    ) -> AnalyzeVideoResult:
        """Execute the analysis.

        Args:
            request: Video URL and notes
            progress_callback: Optional callback for progress updates

        Returns:
            Analysis result with the candidates or the error to show
        """
        try:
            if progress_callback:
                await progress_callback.report_progress(
                    10, "Asking the model to watch the video...", "processing"
                )

            items = await run_blocking(self._analyzer.analyze, request.video_url, request.notes)

            if progress_callback:
                await progress_callback.report_progress(
                    90, f"Found {len(items)} advice items...", "processing"
                )

            return AnalyzeVideoResult(success=True, items=items, title=self._analyzer.title)

        except CoachingError as e:
            if progress_callback:
                await progress_callback.report_progress(0, e.user_message, "error")
            return AnalyzeVideoResult(**error_fields(e))


class SaveAdviceUseCase:
    """Use case for appending the current candidates to the Knowledge Base."""

    def __init__(self, analyzer: VideoAnalyzer, store: KnowledgeStorePort):
        self._analyzer = analyzer
        self._store = store

    async def execute(self, title: str | None = None) -> SaveAdviceResult:
        try:
            saved = await run_blocking(self._analyzer.save, self._store, title)
            return SaveAdviceResult(success=True, saved=saved)
        except CoachingError as e:
            return SaveAdviceResult(**error_fields(e))
