"""
Bounded alert log for the cybersim warfare engine.

Holds the short list of human-readable lines a dashboard shows next to
the network map. Entries are evicted oldest-first once the log exceeds
its capacity, and any entry older than ``max_age_ms`` simulated
milliseconds is dropped at the end of each tick.
"""

import logging
from collections import deque
from collections.abc import Iterator

from cybersim.engine.models import AlertLogEntry, AlertSeverity

logger = logging.getLogger(__name__)


class AlertLog:
    """FIFO of immutable alert entries."""

    def __init__(self, capacity: int = 5, max_age_ms: float = 8000, sequence: int = 0) -> None:
        """
        Args:
            sequence: Last sequence number already handed out. Numbering
                continues from here, so a rebuilt log never reuses one.
        """
        self._entries: deque[AlertLogEntry] = deque()
        self.capacity = capacity
        self.max_age_ms = max_age_ms
        self._sequence = sequence

    @property
    def last_sequence(self) -> int:
        return self._sequence

    def append(self, message: str, severity: AlertSeverity, now_ms: float) -> AlertLogEntry:
        self._sequence += 1
        entry = AlertLogEntry(
            message=message, severity=severity, created_at=now_ms, sequence=self._sequence
        )
        self._entries.append(entry)
        logger.debug("alert[%s] %s", severity.value, message)
        self._enforce_capacity()
        return entry

    def evict_expired(self, now_ms: float) -> int:
        """
        Drop entries older than ``max_age_ms`` and return how many went.
        """
        evicted = 0
        # Entries are appended in time order, so expired ones sit at the left
        while self._entries and now_ms - self._entries[0].created_at > self.max_age_ms:
            self._entries.popleft()
            evicted += 1
        evicted += self._enforce_capacity()
        return evicted

    def configure(self, capacity: int, max_age_ms: float) -> None:
        self.capacity = capacity
        self.max_age_ms = max_age_ms
        self._enforce_capacity()

    def _enforce_capacity(self) -> int:
        evicted = 0
        while len(self._entries) > self.capacity:
            self._entries.popleft()
            evicted += 1
        return evicted

    def entries(self) -> tuple[AlertLogEntry, ...]:
        return tuple(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def __iter__(self) -> Iterator[AlertLogEntry]:
        return iter(tuple(self._entries))

    def __len__(self) -> int:
        return len(self._entries)
