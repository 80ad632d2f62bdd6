"""
Thread-safe, append-only log of recorded events.
"""

import threading
from typing import List

from dirwatch.events import Event


class EventLog:
    """
    Ordered sequence of Events guarded by a single lock.

    Appends keep arrival order. Readers only ever get copies, so nothing
    outside the log can observe or cause a partially applied append.
    """

    def __init__(self):
        self._events: List[Event] = []
        self._lock = threading.Lock()

    def append(self, event: Event) -> None:
        """Add an event to the tail of the log."""
        with self._lock:
            self._events.append(event)

    def snapshot(self) -> List[Event]:
        """
        Return an independent copy of the current contents.

        Returns:
            list: The events recorded so far, oldest first.
        """
        with self._lock:
            return list(self._events)

    def __len__(self):
        with self._lock:
            return len(self._events)
