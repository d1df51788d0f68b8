"""Infrastructure adapters."""

from .gemini_extraction_adapter import GeminiExtractionAdapter
from .sheets_store_adapter import SheetsKnowledgeStoreAdapter

__all__ = [
    "GeminiExtractionAdapter",
    "SheetsKnowledgeStoreAdapter",
]
