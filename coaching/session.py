"""Two-step match review: configure the match, then tick off the advice you followed."""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, List, Optional, Set, Tuple

from .errors import InvalidInputError, InvalidStateError
from .inflight import InFlightGuard
from .matcher import match_advice
from .models import (
    DEFAULT_RESULT,
    DEFAULT_ROLE,
    Advice,
    MatchRecord,
    MatchResult,
    Role,
    parse_enum,
)

if TYPE_CHECKING:
    from .sheets_client import KnowledgeStore

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    CONFIGURING = "configuring"
    REVIEWING = "reviewing"


class MatchSession:
    def __init__(self) -> None:
        self.state = SessionState.CONFIGURING
        self.role: Role = DEFAULT_ROLE
        self.subject = ""
        self.result: MatchResult = DEFAULT_RESULT
        self.note = ""
        self._checklist: Tuple[Advice, ...] = ()
        self._checked: Set[int] = set()
        self._load_guard = InFlightGuard("load advice")
        self._save_guard = InFlightGuard("save match")

    # -- Configuring --------------------------------------------------------

    def configure(
        self,
        role: Role | str | None = None,
        subject: Optional[str] = None,
        result: MatchResult | str | None = None,
    ) -> None:
        """Edit the match details. Rejected while the knowledge base is loading."""
        with self._load_guard.hold():
            self._require(SessionState.CONFIGURING)
            self._apply(role, subject, result)

    def _apply(
        self,
        role: Role | str | None,
        subject: Optional[str],
        result: MatchResult | str | None,
    ) -> None:
        parsed_role = self.role
        if role is not None:
            parsed_role = parse_enum(Role, role)
            if parsed_role is None:
                raise InvalidInputError(f"Unknown role: {role}")
        parsed_result = self.result
        if result is not None:
            parsed_result = parse_enum(MatchResult, result)
            if parsed_result is None:
                raise InvalidInputError(f"Unknown result: {result}")
        self.role = parsed_role
        self.result = parsed_result
        if subject is not None:
            self.subject = subject.strip()

    def begin_review(
        self,
        store: "KnowledgeStore",
        role: Role | str | None = None,
        subject: Optional[str] = None,
        result: MatchResult | str | None = None,
    ) -> List[Advice]:
        """Apply any match details, load the knowledge base and snapshot the advice for this match.

        The details are applied under the load guard, so a concurrent request
        is rejected without touching the match being loaded.
        """
        with self._load_guard.hold():
            self._require(SessionState.CONFIGURING)
            self._apply(role, subject, result)
            if not self.subject:
                raise InvalidInputError("Enter the champion you played.")
            match_role, match_subject = self.role, self.subject
            advice = store.fetch_knowledge_base()
            matched = match_advice(advice, match_role, match_subject)
            logger.info(
                "Review started for %s %s: %d of %d advice items apply",
                match_role.value,
                match_subject,
                len(matched),
                len(advice),
            )
            self._checklist = tuple(matched)
            self._checked = set()
            self.note = ""
            self.state = SessionState.REVIEWING
        return list(self._checklist)

    # -- Reviewing ----------------------------------------------------------

    @property
    def checklist(self) -> List[Advice]:
        return list(self._checklist)

    @property
    def checked_indices(self) -> Set[int]:
        return set(self._checked)

    @property
    def has_advice(self) -> bool:
        return bool(self._checklist)

    def toggle(self, index: int) -> bool:
        """Flip one checklist item; returns whether it is now checked."""
        self._require(SessionState.REVIEWING)
        if not 0 <= index < len(self._checklist):
            raise InvalidInputError(f"No checklist item at index {index}.")
        if index in self._checked:
            self._checked.discard(index)
            return False
        self._checked.add(index)
        return True

    def set_note(self, note: str) -> None:
        self._require(SessionState.REVIEWING)
        self.note = note

    def current_rate(self) -> float:
        return MatchRecord.from_counts(
            self.role.value, self.subject, self.result, len(self._checked), len(self._checklist)
        ).achievement_rate

    def save(self, store: "KnowledgeStore", timestamp: Optional[str] = None) -> MatchRecord:
        """Persist the review. On failure the checklist and note stay put for a retry."""
        self._require(SessionState.REVIEWING)
        with self._save_guard.hold():
            record = MatchRecord.from_counts(
                role=self.role.value,
                subject=self.subject,
                result=self.result,
                checked_count=len(self._checked),
                total_count=len(self._checklist),
                note=self.note,
                timestamp=timestamp,
            )
            store.append_match_record(record)
        logger.info("Saved match record: %s %s, rate %.1f", record.result.value, record.subject, record.achievement_rate)
        self._reset()
        return record

    def back(self) -> None:
        self._require(SessionState.REVIEWING)
        self._checklist = ()
        self._checked = set()
        self.note = ""
        self.state = SessionState.CONFIGURING

    # -- helpers ------------------------------------------------------------

    def _reset(self) -> None:
        self.state = SessionState.CONFIGURING
        self.role = DEFAULT_ROLE
        self.subject = ""
        self.result = DEFAULT_RESULT
        self.note = ""
        self._checklist = ()
        self._checked = set()

    def _require(self, state: SessionState) -> None:
        if self.state is not state:
            raise InvalidStateError(
                f"Match session is {self.state.value}, expected {state.value}.",
                details={"state": self.state.value},
            )

    def snapshot(self) -> dict:
        return {
            "state": self.state.value,
            "role": self.role.value,
            "subject": self.subject,
            "result": self.result.value,
            "note": self.note,
            "checklist": [a.to_dict() for a in self._checklist],
            "checked": sorted(self._checked),
            "achievement_rate": self.current_rate(),
        }
