"""Per-user, per-operation busy flags for long-running triggers (import, backup)."""

import threading
from collections.abc import Iterator
from contextlib import contextmanager

from kontak.errors import OperationBusy


class OperationGuard:
    """A second trigger of a running operation fails fast instead of queueing.

    Only running operations are tracked; a slot is forgotten once released.
    """

    def __init__(self) -> None:
        self._running: set[tuple[str, str]] = set()
        self._lock = threading.Lock()

    def is_busy(self, user_id: str, operation: str) -> bool:
        with self._lock:
            return (user_id, operation) in self._running

    @contextmanager
    def hold(self, user_id: str, operation: str) -> Iterator[None]:
        key = (user_id, operation)
        with self._lock:
            if key in self._running:
                raise OperationBusy(operation)
            self._running.add(key)
        try:
            yield
        finally:
            with self._lock:
                self._running.discard(key)
