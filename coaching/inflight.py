from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator

from .errors import OperationInProgressError


class InFlightGuard:
    """Allows at most one running call per action; a second caller is rejected, not queued."""

    def __init__(self, action: str) -> None:
        self.action = action
        self._lock = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    @contextmanager
    def hold(self) -> Iterator[None]:
        if not self._lock.acquire(blocking=False):
            raise OperationInProgressError(
                f"'{self.action}' is already running. Wait for it to finish.",
                details={"action": self.action},
            )
        try:
            yield
        finally:
            self._lock.release()
