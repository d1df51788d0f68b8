"""Port (interface) for the spreadsheet-backed knowledge store."""

from abc import ABC, abstractmethod
from typing import List

from coaching.models import Advice, MatchRecord


class KnowledgeStorePort(ABC):
    """Port for reading and appending Knowledge Base and Match History rows."""

    @abstractmethod
    def fetch_knowledge_base(self) -> List[Advice]:
        """Return every stored advice item in sheet order."""
        ...

    @abstractmethod
    def append_advice(self, advice: List[Advice]) -> None:
        """Append advice rows to the Knowledge Base."""
        ...

    @abstractmethod
    def fetch_match_history(self) -> List[MatchRecord]:
        """Return every match record, oldest first."""
        ...

    @abstractmethod
    def append_match_record(self, record: MatchRecord) -> None:
        """Append one match record to the Match History."""
        ...

    @abstractmethod
    def ensure_sheets(self) -> List[str]:
        """Create missing tabs and return the titles that were created."""
        ...
