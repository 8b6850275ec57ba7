from __future__ import annotations

import threading
from collections.abc import Hashable, Iterator
from contextlib import contextmanager

from ..infrastructure.exceptions import SubmissionInProgressError
from ..infrastructure.logging import get_logger

logger = get_logger(__name__)


class SubmissionGuard:
    """
    Allows one in-flight mutating submission per ``(action, key)``.

    Example:
        >>> guard = SubmissionGuard()
        >>> with guard.hold("create_sprint", mentee_id):
        ...     store.create_sprint(mentee_id, sprint)
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._in_flight: set[tuple[str, Hashable]] = set()

    def is_busy(self, action: str, key: Hashable) -> bool:
        with self._lock:
            return (action, key) in self._in_flight

    @contextmanager
    def hold(self, action: str, key: Hashable) -> Iterator[None]:
        token = (action, key)
        with self._lock:
            if token in self._in_flight:
                logger.warning("Rejected duplicate %s submission for %r", action, key)
                raise SubmissionInProgressError(action, key)
            self._in_flight.add(token)
        try:
            yield
        finally:
            with self._lock:
                self._in_flight.discard(token)
