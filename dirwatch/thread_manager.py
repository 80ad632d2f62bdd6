"""
Registry for the worker threads a dirwatch process runs alongside its monitor.

Threads are stopped cooperatively: each registered thread is expected to
expose a stop() method that sets its stop signal. Python threads cannot be
killed, so join() only waits for them to notice.
"""

import logging
import threading

logger = logging.getLogger(__name__)


class ThreadManager:
    """
    Tracks the consumer threads of a monitor so they can be shut down together.

    Attributes:
        threads (list): The registered threads, in registration order.
    """

    def __init__(self):
        self.threads = []
        self._lock = threading.Lock()

    def register_thread(self, thread):
        """
        Register a thread with the manager.

        Raises:
            ValueError: If the thread is not an instance of threading.Thread.
        """
        if not isinstance(thread, threading.Thread):
            raise ValueError("Only threading.Thread instances can be registered.")
        with self._lock:
            self.threads.append(thread)
        logger.debug("Registered thread: %s", thread.name)

    def _snapshot(self):
        with self._lock:
            return list(self.threads)

    def get_status(self, thread):
        """
        Get the status of a specific thread.

        Returns:
            dict: name, is_alive, daemon and, for consumer workers, the
                number of events processed so far.
        """
        status = {
            'name': str(thread.name),
            'is_alive': bool(thread.is_alive()),
            'daemon': bool(thread.daemon),
        }
        if hasattr(thread, 'processed'):
            status['processed'] = int(thread.processed)
        return status

    def get_all_statuses(self):
        return {str(thread.name): self.get_status(thread) for thread in self._snapshot()}

    def stop_all(self):
        """
        Call stop() on every registered thread that is still running.
        """
        for thread in self._snapshot():
            if not thread.is_alive():
                continue
            if callable(getattr(thread, 'stop', None)):
                logger.debug("Stopping thread: %s", thread.name)
                thread.stop()
            else:
                logger.warning("Thread %s does not have a stop() method.", thread.name)

    def join_all(self, timeout=None):
        """
        Wait for every registered thread.

        Returns:
            list: Names of the threads still alive after the wait.
        """
        for thread in self._snapshot():
            thread.join(timeout)
        return [thread.name for thread in self._snapshot() if thread.is_alive()]

    def shutdown(self, timeout=None):
        """
        Let consumers finish on their own, then stop whatever is left.

        Consumers end by themselves once their stream is closed and drained,
        so they get one full timeout to do that before being signalled.

        Returns:
            list: Names of the threads that are still alive at the end.
        """
        if not self.join_all(timeout):
            return []
        self.stop_all()
        remaining = self.join_all(timeout)
        for name in remaining:
            logger.warning("Thread %s did not stop within %s seconds", name, timeout)
        return remaining
