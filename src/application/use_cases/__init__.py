"""Application use cases."""

from .analyze_video import (
    AnalyzeVideoRequest,
    AnalyzeVideoResult,
    AnalyzeVideoUseCase,
    SaveAdviceResult,
    SaveAdviceUseCase,
)
from .dashboard import DashboardResult, DashboardUseCase
from .match_review import ConfigureMatchRequest, MatchReviewResult, MatchReviewUseCase

__all__ = [
    "AnalyzeVideoRequest",
    "AnalyzeVideoResult",
    "AnalyzeVideoUseCase",
    "ConfigureMatchRequest",
    "DashboardResult",
    "DashboardUseCase",
    "MatchReviewResult",
    "MatchReviewUseCase",
    "SaveAdviceResult",
    "SaveAdviceUseCase",
]
