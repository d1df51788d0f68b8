from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Type, TypeVar

logger = logging.getLogger(__name__)

GENERAL_TAG = "General"

E = TypeVar("E", bound=Enum)


class Role(str, Enum):
    """Lane/position the user played."""

    TOP = "Top"
    JUNGLE = "Jungle"
    MID = "Mid"
    ADC = "ADC"
    SUPPORT = "Support"


DEFAULT_ROLE = Role.MID


class Category(str, Enum):
    LANING = "Laning"  # laning / positioning
    TEAMFIGHT = "Teamfight"  # team coordination
    VISION = "Vision"  # map awareness
    MACRO = "Macro"  # macro strategy
    MENTAL = "Mental"  # mental / tilt control


class Importance(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class MatchResult(str, Enum):
    WIN = "Win"
    LOSS = "Loss"


DEFAULT_CATEGORY = Category.MACRO
DEFAULT_IMPORTANCE = Importance.MEDIUM
DEFAULT_RESULT = MatchResult.WIN


def parse_enum(enum_cls: Type[E], value: Any) -> Optional[E]:
    """Case-insensitive lookup by value or member name; None when unknown."""
    if isinstance(value, enum_cls):
        return value
    text = str(value or "").strip().lower()
    if not text:
        return None
    for member in enum_cls:
        if member.value.lower() == text or member.name.lower() == text:
            return member
    return None


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def achievement_rate(checked_count: int, total_count: int) -> float:
    """Percentage of checklist items followed, one decimal; 0 for an empty checklist."""
    if total_count <= 0:
        return 0.0
    return round(100.0 * checked_count / total_count, 1)


def _safe_int(value: Any) -> int:
    try:
        return int(float(value or 0))
    except (TypeError, ValueError):
        return 0


def _safe_float(value: Any) -> Optional[float]:
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(result) else result


def _cell(row: List[Any], idx: int) -> str:
    if idx < len(row) and row[idx] is not None:
        return str(row[idx])
    return ""


@dataclass(frozen=True)
class Advice:
    timestamp: str
    source_title: str
    source_reference: str
    content: str
    role_tags: str
    subject_tags: str
    category: Category
    importance: Importance

    def to_row(self) -> List[Any]:
        return [
            self.timestamp,
            self.source_title,
            self.source_reference,
            self.content,
            self.role_tags,
            self.subject_tags,
            self.category.value,
            self.importance.value,
        ]

    @classmethod
    def from_row(cls, row: List[Any]) -> "Advice":
        category = parse_enum(Category, _cell(row, 6))
        if category is None:
            logger.warning("Unknown advice category %r, using %s", _cell(row, 6), DEFAULT_CATEGORY.value)
            category = DEFAULT_CATEGORY
        importance = parse_enum(Importance, _cell(row, 7))
        if importance is None:
            logger.warning("Unknown advice importance %r, using %s", _cell(row, 7), DEFAULT_IMPORTANCE.value)
            importance = DEFAULT_IMPORTANCE
        return cls(
            timestamp=_cell(row, 0),
            source_title=_cell(row, 1),
            source_reference=_cell(row, 2),
            content=_cell(row, 3),
            role_tags=_cell(row, 4),
            subject_tags=_cell(row, 5),
            category=category,
            importance=importance,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "source_title": self.source_title,
            "source_reference": self.source_reference,
            "content": self.content,
            "role_tags": self.role_tags,
            "subject_tags": self.subject_tags,
            "category": self.category.value,
            "importance": self.importance.value,
        }


@dataclass(frozen=True)
class MatchRecord:
    timestamp: str
    role: str
    subject: str
    result: MatchResult
    achievement_rate: float
    checked_count: int
    total_count: int
    note: str

    @classmethod
    def from_counts(
        cls,
        role: str,
        subject: str,
        result: MatchResult,
        checked_count: int,
        total_count: int,
        note: str = "",
        timestamp: Optional[str] = None,
    ) -> "MatchRecord":
        if not 0 <= checked_count <= total_count:
            raise ValueError(f"checked_count {checked_count} outside 0..{total_count}")
        return cls(
            timestamp=timestamp or now_iso(),
            role=role,
            subject=subject,
            result=result,
            achievement_rate=achievement_rate(checked_count, total_count),
            checked_count=checked_count,
            total_count=total_count,
            note=note,
        )

    @property
    def won(self) -> bool:
        return self.result is MatchResult.WIN

    def to_row(self) -> List[Any]:
        return [
            self.timestamp,
            self.role,
            self.subject,
            self.result.value,
            self.achievement_rate,
            self.checked_count,
            self.total_count,
            self.note,
        ]

    @classmethod
    def from_row(cls, row: List[Any]) -> "MatchRecord":
        checked = _safe_int(_cell(row, 5))
        total = _safe_int(_cell(row, 6))
        rate = _safe_float(_cell(row, 4))
        if rate is None:
            rate = achievement_rate(checked, total)
        # Anything that is not a win counts against the win rate.
        result = parse_enum(MatchResult, _cell(row, 3)) or MatchResult.LOSS
        return cls(
            timestamp=_cell(row, 0),
            role=_cell(row, 1),
            subject=_cell(row, 2),
            result=result,
            achievement_rate=rate,
            checked_count=checked,
            total_count=total,
            note=_cell(row, 7),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "role": self.role,
            "subject": self.subject,
            "result": self.result.value,
            "achievement_rate": self.achievement_rate,
            "checked_count": self.checked_count,
            "total_count": self.total_count,
            "note": self.note,
        }


@dataclass(frozen=True)
class RawAdviceItem:
    """One advice candidate as returned by the model; any field may be missing."""

    content: Optional[str] = None
    role_tags: Optional[str] = None
    subject_tags: Optional[str] = None
    category: Optional[str] = None
    importance: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "RawAdviceItem":
        def _text(*keys: str) -> Optional[str]:
            for key in keys:
                val = payload.get(key)
                if val is None or val == "":
                    continue
                if isinstance(val, (list, tuple)):
                    return ", ".join(str(v) for v in val if v)
                return str(val)
            return None

        return cls(
            content=_text("content"),
            role_tags=_text("role_tags", "roles"),
            subject_tags=_text("subject_tags", "champion_tags", "champions"),
            category=_text("category"),
            importance=_text("importance"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "content": self.content,
            "role_tags": self.role_tags,
            "subject_tags": self.subject_tags,
            "category": self.category,
            "importance": self.importance,
        }


def normalize_extracted(
    item: RawAdviceItem,
    source_title: str,
    source_reference: str,
    timestamp: str,
) -> Advice:
    return Advice(
        timestamp=timestamp,
        source_title=source_title,
        source_reference=source_reference,
        content=(item.content or "").strip(),
        role_tags=(item.role_tags or "").strip() or GENERAL_TAG,
        subject_tags=(item.subject_tags or "").strip() or GENERAL_TAG,
        category=parse_enum(Category, item.category) or DEFAULT_CATEGORY,
        importance=parse_enum(Importance, item.importance) or DEFAULT_IMPORTANCE,
    )
