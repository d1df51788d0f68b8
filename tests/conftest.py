from typing import List, Optional

import pytest

from coaching.models import Advice, MatchRecord


class FakeStore:
    """In-memory stand-in for the spreadsheet; set ``fail_*`` to an exception to simulate outages."""

    def __init__(self, advice: Optional[List[Advice]] = None, history: Optional[List[MatchRecord]] = None):
        self.advice = list(advice or [])
        self.history = list(history or [])
        self.fail_reads: Optional[Exception] = None
        self.fail_writes: Optional[Exception] = None
        self.read_calls = 0

    def fetch_knowledge_base(self) -> List[Advice]:
        self.read_calls += 1
        if self.fail_reads:
            raise self.fail_reads
        return list(self.advice)

    def append_advice(self, advice: List[Advice]) -> None:
        if self.fail_writes:
            raise self.fail_writes
        self.advice.extend(advice)

    def fetch_match_history(self) -> List[MatchRecord]:
        self.read_calls += 1
        if self.fail_reads:
            raise self.fail_reads
        return list(self.history)

    def append_match_record(self, record: MatchRecord) -> None:
        if self.fail_writes:
            raise self.fail_writes
        self.history.append(record)

    def ensure_sheets(self) -> List[str]:
        return []


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    for key in (
        "COACH_SPREADSHEET_ID",
        "GOOGLE_CLIENT_ID",
        "GEMINI_API_KEY",
        "GOOGLE_CLIENT_SECRET",
        "GOOGLE_REDIRECT_URI",
        "GEMINI_MODEL",
        "COACH_ADVICE_LANGUAGE",
        "COACH_HTTP_TIMEOUT",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("COACH_SETTINGS_PATH", str(tmp_path / "settings.json"))
