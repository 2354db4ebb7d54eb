"""Bounded, observable event log of per-stage activity.

The EventLog is the engine's single activity record. Entries are appended
in time order and the oldest entries are evicted once the configured
capacity is reached. Observers registered with ``subscribe`` receive each
entry after it is stored.

Example:
    ```python
    log = EventLog(capacity=200)
    unsubscribe = log.subscribe(lambda entry: print(entry.message))
    log.append(LogEntry.create("HUNTER", "Found 6 sources"))
    log.recent(limit=10)
    unsubscribe()
    ```
"""

import logging
from collections import deque
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Optional

from sentinel.graph.state import utc_timestamp

logger = logging.getLogger(__name__)

LogHandler = Callable[["LogEntry"], None]


@dataclass(frozen=True)
class LogEntry:
    """A single immutable log record.

    Attributes:
        timestamp: ISO-8601 UTC time the entry was created
        agent: Stage role (or "SYSTEM") that emitted the entry
        message: Human-readable message
        cost: Optional USD cost attributed to the activity
        workflow_id: Optional id of the run the entry belongs to
    """

    timestamp: str
    agent: str
    message: str
    cost: Optional[float] = None
    workflow_id: Optional[str] = None

    @classmethod
    def create(
        cls,
        agent: str,
        message: str,
        cost: Optional[float] = None,
        workflow_id: Optional[str] = None,
    ) -> "LogEntry":
        """Build an entry stamped with the current time."""
        return cls(
            timestamp=utc_timestamp(),
            agent=str(getattr(agent, "value", agent)),
            message=message,
            cost=cost,
            workflow_id=workflow_id,
        )


class EventLog:
    """Append-only, bounded, time-ordered record of activity.

    Thread-safe: appends and snapshots are serialized by a lock. Handlers
    are invoked outside the lock so a slow observer never blocks writers.
    """

    def __init__(self, capacity: int = 200) -> None:
        if capacity < 1:
            raise ValueError(f"EventLog capacity must be >= 1, got {capacity}")
        self._entries: deque[LogEntry] = deque(maxlen=capacity)
        self._handlers: list[LogHandler] = []
        self._lock = Lock()
        self.capacity = capacity

    def append(self, entry: LogEntry) -> None:
        """Store an entry and notify subscribers."""
        with self._lock:
            self._entries.append(entry)
            handlers = list(self._handlers)

        for handler in handlers:
            try:
                handler(entry)
            except Exception as e:
                logger.warning(f"Log subscriber {handler!r} failed: {e}", exc_info=True)

    def recent(self, limit: Optional[int] = None) -> list[LogEntry]:
        """Return retained entries, oldest first.

        Args:
            limit: When given, only the newest ``limit`` entries are returned

        Returns:
            Snapshot list of entries in append order
        """
        with self._lock:
            entries = list(self._entries)
        if limit is not None:
            if limit <= 0:
                return []
            entries = entries[-limit:]
        return entries

    def subscribe(self, handler: LogHandler) -> Callable[[], None]:
        """Register a handler called with every new entry.

        Returns:
            A callable that removes the handler. Calling it twice is harmless.
        """
        with self._lock:
            self._handlers.append(handler)

        def unsubscribe() -> None:
            with self._lock:
                if handler in self._handlers:
                    self._handlers.remove(handler)

        return unsubscribe

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
