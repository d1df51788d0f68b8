from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from .config import RECENT_TABLE_SIZE, RECENT_TREND_SIZE
from .models import MatchRecord

BUCKET_LABELS = ["0-25%", "26-50%", "51-75%", "76-100%"]


@dataclass
class BucketStats:
    range: str
    games: int = 0
    wins: int = 0

    @property
    def win_rate(self) -> float:
        return 100.0 * self.wins / self.games if self.games else 0.0


@dataclass(frozen=True)
class TrendPoint:
    game: int  # 1-based position within the window
    rate: float
    result: str


@dataclass(frozen=True)
class HistoryRow:
    result: str
    subject: str
    role: str
    achievement_rate: float
    timestamp: str


@dataclass
class Summary:
    total_games: int = 0
    wins: int = 0
    overall_win_rate: float = 0.0
    average_adherence: float = 0.0
    adherence_buckets: List[BucketStats] = field(default_factory=list)
    recent_trend: List[TrendPoint] = field(default_factory=list)
    recent_history_table: List[HistoryRow] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_games": self.total_games,
            "wins": self.wins,
            "overall_win_rate": self.overall_win_rate,
            "average_adherence": self.average_adherence,
            "adherence_buckets": [
                {"range": b.range, "win_rate": b.win_rate, "games": b.games, "wins": b.wins}
                for b in self.adherence_buckets
            ],
            "recent_trend": [
                {"game": p.game, "rate": p.rate, "result": p.result} for p in self.recent_trend
            ],
            "recent_history_table": [
                {
                    "result": r.result,
                    "subject": r.subject,
                    "role": r.role,
                    "achievement_rate": r.achievement_rate,
                    "timestamp": r.timestamp,
                }
                for r in self.recent_history_table
            ],
        }


def bucket_index(rate: float) -> int:
    # Strict ">" from the top down: 25, 50 and 75 land in the lower bucket.
    if rate > 75:
        return 3
    if rate > 50:
        return 2
    if rate > 25:
        return 1
    return 0


def _buckets(history: Sequence[MatchRecord]) -> List[BucketStats]:
    buckets = [BucketStats(range=label) for label in BUCKET_LABELS]
    for m in history:
        b = buckets[bucket_index(m.achievement_rate)]
        b.games += 1
        if m.won:
            b.wins += 1
    return buckets


def aggregate(history: Sequence[MatchRecord]) -> Summary:
    """Dashboard metrics over the full match history (oldest first)."""
    total = len(history)
    wins = sum(1 for m in history if m.won)

    trend_window = history[-RECENT_TREND_SIZE:] if total else []
    recent = list(reversed(history[-RECENT_TABLE_SIZE:])) if total else []

    return Summary(
        total_games=total,
        wins=wins,
        overall_win_rate=100.0 * wins / total if total else 0.0,
        average_adherence=sum(m.achievement_rate for m in history) / total if total else 0.0,
        adherence_buckets=_buckets(history),
        recent_trend=[
            TrendPoint(game=i + 1, rate=m.achievement_rate, result=m.result.value)
            for i, m in enumerate(trend_window)
        ],
        recent_history_table=[
            HistoryRow(
                result=m.result.value,
                subject=m.subject,
                role=m.role,
                achievement_rate=m.achievement_rate,
                timestamp=m.timestamp,
            )
            for m in recent
        ],
    )
