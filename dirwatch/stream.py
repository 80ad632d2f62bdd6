"""
Outbound event stream shared by the processing loop and its consumers.

With the default maxsize of 0 the stream is a rendezvous channel: publish()
returns only once a consumer has taken the item, so a slow consumer stalls
the producer. A positive maxsize turns it into a bounded buffer where
publish() only blocks while the buffer is full. Bounding keeps memory in
check either way; the cost of blocking is that the OS notifier's own finite
queue may overflow and drop changes.
"""

import collections
import queue
import threading
import time
from typing import Any, Optional


class StreamClosed(Exception):
    """Raised by get() once the stream is closed and drained."""

    pass


class EventStream:
    """
    Single-producer, multi-consumer channel with explicit backpressure.

    Every published item is delivered to exactly one get() call.
    """

    def __init__(self, maxsize: int = 0, poll_interval: float = 0.05):
        """
        Args:
            maxsize (int): Buffered capacity. 0 means unbuffered.
            poll_interval (float): How often a blocked publish() re-checks
                its cancel event.
        """
        if maxsize < 0:
            raise ValueError("maxsize must be >= 0")
        self.maxsize = maxsize
        self.poll_interval = poll_interval
        self._items = collections.deque()
        self._cond = threading.Condition()
        self._closed = False
        self._next_ticket = 0
        self._last_taken = -1

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def qsize(self) -> int:
        with self._cond:
            return len(self._items)

    def publish(self, item: Any, cancel: Optional[threading.Event] = None) -> bool:
        """
        Publish an item, blocking while no consumer or buffer slot is free.

        Args:
            item: The item to deliver.
            cancel (threading.Event, optional): Abandons the publish once set.

        Returns:
            bool: True if the item was delivered (or buffered), False if the
                publish was cancelled or the stream closed first.
        """
        capacity = self.maxsize or 1
        with self._cond:
            while len(self._items) >= capacity:
                if self._closed or (cancel is not None and cancel.is_set()):
                    return False
                self._cond.wait(self.poll_interval)
            if self._closed or (cancel is not None and cancel.is_set()):
                return False

            ticket = self._next_ticket
            self._next_ticket += 1
            self._items.append((ticket, item))
            self._cond.notify_all()

            if self.maxsize:
                return True

            # Rendezvous: wait until a consumer has taken this exact item.
            while self._last_taken < ticket:
                if self._closed or (cancel is not None and cancel.is_set()):
                    self._discard(ticket)
                    return False
                self._cond.wait(self.poll_interval)
            return True

    def get(self, timeout: Optional[float] = None) -> Any:
        """
        Take the next item, blocking until one is published.

        Args:
            timeout (float, optional): Seconds to wait before giving up.

        Returns:
            The next published item.

        Raises:
            queue.Empty: If nothing arrived within the timeout.
            StreamClosed: If the stream is closed and has nothing left.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._cond:
            while not self._items:
                if self._closed:
                    raise StreamClosed("stream is closed")
                if deadline is None:
                    self._cond.wait()
                else:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        raise queue.Empty
                    self._cond.wait(remaining)
            ticket, item = self._items.popleft()
            self._last_taken = ticket
            self._cond.notify_all()
            return item

    def close(self) -> None:
        """Close the stream and wake every blocked producer and consumer."""
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def __iter__(self):
        while True:
            try:
                yield self.get()
            except StreamClosed:
                return

    def _discard(self, ticket):
        for entry in self._items:
            if entry[0] == ticket:
                self._items.remove(entry)
                break
        self._cond.notify_all()
