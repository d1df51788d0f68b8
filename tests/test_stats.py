import pytest

from coaching.models import MatchRecord, MatchResult
from coaching.stats import BUCKET_LABELS, aggregate, bucket_index


def _record(rate: float, won: bool, ts: str = "2025-01-01T00:00:00Z", subject: str = "Ahri") -> MatchRecord:
    return MatchRecord(
        timestamp=ts,
        role="Mid",
        subject=subject,
        result=MatchResult.WIN if won else MatchResult.LOSS,
        achievement_rate=rate,
        checked_count=0,
        total_count=0,
        note="",
    )


def test_empty_history() -> None:
    s = aggregate([])
    assert s.total_games == 0
    assert s.wins == 0
    assert s.overall_win_rate == 0.0
    assert s.average_adherence == 0.0
    assert [b.range for b in s.adherence_buckets] == BUCKET_LABELS
    assert all(b.games == 0 and b.win_rate == 0.0 for b in s.adherence_buckets)
    assert s.recent_trend == []
    assert s.recent_history_table == []


def test_three_game_summary() -> None:
    s = aggregate([_record(80, True), _record(30, False), _record(90, True)])
    assert s.total_games == 3
    assert s.wins == 2
    assert s.overall_win_rate == pytest.approx(66.667, abs=1e-3)
    assert s.average_adherence == pytest.approx(66.667, abs=1e-3)

    by_range = {b.range: b for b in s.adherence_buckets}
    assert (by_range["76-100%"].games, by_range["76-100%"].win_rate) == (2, 100.0)
    assert (by_range["26-50%"].games, by_range["26-50%"].win_rate) == (1, 0.0)
    assert by_range["0-25%"].games == 0
    assert by_range["51-75%"].games == 0


@pytest.mark.parametrize(
    "rate,expected",
    [(0, 0), (25, 0), (25.1, 1), (50, 1), (50.1, 2), (75, 2), (75.1, 3), (100, 3)],
)
def test_bucket_boundaries_fall_to_the_lower_bucket(rate: float, expected: int) -> None:
    assert bucket_index(rate) == expected


def test_buckets_partition_history() -> None:
    rates = [0, 10, 25, 40, 50, 60, 75, 76, 99, 100]
    s = aggregate([_record(r, i % 2 == 0) for i, r in enumerate(rates)])
    assert sum(b.games for b in s.adherence_buckets) == s.total_games
    assert sum(b.wins for b in s.adherence_buckets) == s.wins


def test_trend_uses_last_twenty_games_oldest_first() -> None:
    history = [_record(float(i), True, ts=f"t{i}") for i in range(25)]
    s = aggregate(history)
    assert len(s.recent_trend) == 20
    assert s.recent_trend[0].game == 1
    assert s.recent_trend[0].rate == 5.0
    assert s.recent_trend[-1].game == 20
    assert s.recent_trend[-1].rate == 24.0


def test_history_table_is_last_five_newest_first() -> None:
    history = [_record(50, i % 2 == 0, ts=f"t{i}", subject=f"champ{i}") for i in range(8)]
    s = aggregate(history)
    assert [r.timestamp for r in s.recent_history_table] == ["t7", "t6", "t5", "t4", "t3"]
    assert s.recent_history_table[0].subject == "champ7"


def test_short_history_windows() -> None:
    s = aggregate([_record(40, False, ts="a"), _record(60, True, ts="b")])
    assert [p.game for p in s.recent_trend] == [1, 2]
    assert [p.result for p in s.recent_trend] == ["Loss", "Win"]
    assert [r.timestamp for r in s.recent_history_table] == ["b", "a"]


def test_summary_to_dict_shape() -> None:
    d = aggregate([_record(80, True)]).to_dict()
    assert set(d) == {
        "total_games",
        "wins",
        "overall_win_rate",
        "average_adherence",
        "adherence_buckets",
        "recent_trend",
        "recent_history_table",
    }
    assert d["adherence_buckets"][3] == {"range": "76-100%", "win_rate": 100.0, "games": 1, "wins": 1}
