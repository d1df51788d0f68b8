"""Transform core results to the camelCase format the frontend expects."""

import logging
from typing import Any, Dict, List

from coaching.models import Advice, MatchRecord, RawAdviceItem
from coaching.stats import Summary

logger = logging.getLogger(__name__)


def _to_camel_case(snake_str: str) -> str:
    """Convert snake_case to camelCase."""
    components = snake_str.split("_")
    return components[0] + "".join(x.title() for x in components[1:])


def camelize(value: Any) -> Any:
    """Recursively camelCase dictionary keys."""
    if isinstance(value, dict):
        return {_to_camel_case(str(k)): camelize(v) for k, v in value.items()}
    if isinstance(value, list):
        return [camelize(v) for v in value]
    return value


def champion_icon_key(name: str) -> str:
    """Normalize a free-text champion name to its Data Dragon key.

    Data Dragon uses specific formats:
    - No spaces: "MissFortune" not "Miss Fortune"
    - No apostrophes, with lowered tail: "Kaisa" not "Kai'Sa"
    - Some special cases like "Renata" not "Renata Glasc"
    """
    if not name:
        return name

    special_cases = {
        "renata glasc": "Renata",
        "nunu & willump": "Nunu",
        "wukong": "MonkeyKing",
        "bel'veth": "Belveth",
        "cho'gath": "Chogath",
        "kai'sa": "Kaisa",
        "kha'zix": "Khazix",
        "k'sante": "KSante",
        "leblanc": "Leblanc",
        "rek'sai": "RekSai",
        "vel'koz": "Velkoz",
    }
    key = special_cases.get(name.strip().lower())
    if key:
        return key

    # Title-case each word, then drop spaces, apostrophes and periods
    words = name.strip().replace(".", " ").split()
    return "".join(w[:1].upper() + w[1:] for w in words).replace("'", "")


def transform_advice(advice: List[Advice]) -> List[Dict[str, Any]]:
    return [camelize(a.to_dict()) for a in advice]


def transform_candidates(items: List[RawAdviceItem]) -> List[Dict[str, Any]]:
    return [camelize(i.to_dict()) for i in items]


def transform_record(record: MatchRecord) -> Dict[str, Any]:
    out = camelize(record.to_dict())
    out["championIcon"] = champion_icon_key(record.subject)
    return out


def transform_session(snapshot: Dict[str, Any]) -> Dict[str, Any]:
    out = camelize(snapshot)
    out["hasAdvice"] = bool(snapshot.get("checklist"))
    return out


def transform_summary(summary: Summary) -> Dict[str, Any]:
    """Dashboard payload: overview cards, correlation bars, trend line, history table."""
    data = summary.to_dict()
    for row in data["recent_history_table"]:
        row["champion_icon"] = champion_icon_key(row["subject"])
    logger.debug("Dashboard over %d games", summary.total_games)
    return {
        "overview": camelize(
            {
                "total_games": data["total_games"],
                "wins": data["wins"],
                "overall_win_rate": round(data["overall_win_rate"], 1),
                "average_adherence": round(data["average_adherence"], 1),
            }
        ),
        "correlation": camelize(data["adherence_buckets"]),
        "trend": camelize(data["recent_trend"]),
        "recentMatches": camelize(data["recent_history_table"]),
    }
