"""Adapter wrapping the Google Sheets knowledge store."""

from typing import List

from coaching.models import Advice, MatchRecord
from coaching.sheets_client import KnowledgeStore

from ...application.ports.knowledge_store import KnowledgeStorePort


class SheetsKnowledgeStoreAdapter(KnowledgeStorePort):
    """Adapter for reading and appending rows in the user's spreadsheet."""

    def __init__(self, store: KnowledgeStore):
        """Initialize with a configured store.

        Args:
            store: Store bound to a spreadsheet id and an auth session
        """
        self._store = store

    @property
    def spreadsheet_id(self) -> str:
        return self._store.spreadsheet_id

    def fetch_knowledge_base(self) -> List[Advice]:
        return self._store.fetch_knowledge_base()

    def append_advice(self, advice: List[Advice]) -> None:
        self._store.append_advice(advice)

    def fetch_match_history(self) -> List[MatchRecord]:
        return self._store.fetch_match_history()

    def append_match_record(self, record: MatchRecord) -> None:
        self._store.append_match_record(record)

    def ensure_sheets(self) -> List[str]:
        return self._store.ensure_sheets()
