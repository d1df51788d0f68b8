"""Port (interface) for the advice extraction service."""

from abc import ABC, abstractmethod
from typing import List

from coaching.models import RawAdviceItem


class ExtractionPort(ABC):
    """Port for extracting advice candidates from a video reference."""

    @abstractmethod
    def extract(self, video_url: str, notes: str = "") -> List[RawAdviceItem]:
        """Extract advice candidates.

        Args:
            video_url: Video reference the model should look up
            notes: Free-text context from the user

        Returns:
            Candidates in the order the model produced them

        Raises:
            CredentialError, QuotaExceededError, ExtractionFailedError
        """
        ...


class ProgressCallbackPort(ABC):
    """Port for reporting progress during long operations."""

    @abstractmethod
    async def report_progress(
        self, progress: int, message: str, status: str = "processing"
    ) -> None:
        """Report progress update.

        Args:
            progress: Progress percentage (0-100)
            message: Human-readable status message
            status: Status type (connecting, processing, completed, error)
        """
        ...
