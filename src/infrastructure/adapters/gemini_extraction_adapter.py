"""Adapter wrapping the Gemini advice extractor."""

from typing import List

from coaching.extraction import GeminiAdviceExtractor
from coaching.models import RawAdviceItem

from ...application.ports.extraction_service import ExtractionPort


class GeminiExtractionAdapter(ExtractionPort):
    """Adapter for extracting advice with Gemini and Google Search grounding."""

    def __init__(self, extractor: GeminiAdviceExtractor):
        self._extractor = extractor

    def extract(self, video_url: str, notes: str = "") -> List[RawAdviceItem]:
        return self._extractor.extract(video_url, notes)
