from __future__ import annotations

from typing import Iterable, List

from .models import GENERAL_TAG, Advice, Role

_GENERAL = GENERAL_TAG.lower()


def _tag_matches(tags: str, wanted: str) -> bool:
    # Substring containment on the comma-joined tag string, not token equality:
    # "Malphite" matches subject "phi".
    haystack = (tags or "").lower()
    return _GENERAL in haystack or wanted.lower() in haystack


def is_relevant(advice: Advice, role: Role | str, subject: str) -> bool:
    role_name = role.value if isinstance(role, Role) else str(role)
    return _tag_matches(advice.role_tags, role_name) and _tag_matches(advice.subject_tags, subject)


def match_advice(advice: Iterable[Advice], role: Role | str, subject: str) -> List[Advice]:
    """Advice that applies to ``role`` and ``subject``, in knowledge-base order."""
    return [a for a in advice if is_relevant(a, role, subject)]
