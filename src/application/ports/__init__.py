"""Application ports (interfaces)."""

from .extraction_service import ExtractionPort, ProgressCallbackPort
from .knowledge_store import KnowledgeStorePort

__all__ = [
    "ExtractionPort",
    "KnowledgeStorePort",
    "ProgressCallbackPort",
]
