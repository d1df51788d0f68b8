import pytest

from coaching.models import MatchRecord, MatchResult
from src.api.transformers.frontend_transformer import camelize, champion_icon_key, transform_record


@pytest.mark.parametrize(
    "name,key",
    [
        ("Ahri", "Ahri"),
        ("Miss Fortune", "MissFortune"),
        ("Kai'Sa", "Kaisa"),
        ("kai'sa", "Kaisa"),
        ("Dr. Mundo", "DrMundo"),
        ("Wukong", "MonkeyKing"),
        ("Renata Glasc", "Renata"),
        ("lee sin", "LeeSin"),
        ("", ""),
    ],
)
def test_champion_icon_key(name: str, key: str) -> None:
    assert champion_icon_key(name) == key


def test_camelize_nested() -> None:
    assert camelize({"total_games": 1, "recent_trend": [{"achievement_rate": 50}]}) == {
        "totalGames": 1,
        "recentTrend": [{"achievementRate": 50}],
    }


def test_transform_record_adds_icon() -> None:
    record = MatchRecord.from_counts("Mid", "Miss Fortune", MatchResult.LOSS, 1, 2, timestamp="ts")
    out = transform_record(record)
    assert out["championIcon"] == "MissFortune"
    assert out["checkedCount"] == 1
    assert out["result"] == "Loss"
