"""
Notifier adapters for dirwatch.

A notifier owns the OS-level watch registration and exposes two feeds: raw
change notifications and notifier-level failures. The monitor depends only
on the Notifier interface; WatchdogNotifier is the implementation backed by
the watchdog library.
"""

import abc
import logging
import os
import queue
import threading

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from dirwatch.errors import (NotifierInitError, NotifierRuntimeError,
                             WatchRegistrationError)
from dirwatch.events import Notification

logger = logging.getLogger(__name__)

# Put on both feeds when the notifier is released.
CLOSED = object()

# Access events, not changes.
IGNORED_EVENT_TYPES = {"opened", "closed", "closed_no_write"}


class Notifier(abc.ABC):
    """
    Capability consumed by the monitor.

    Attributes:
        notifications (queue.Queue): Feed of Notification tuples.
        failures (queue.Queue): Feed of exceptions raised while watching.
    """

    def __init__(self):
        self.notifications = queue.Queue()
        self.failures = queue.Queue()
        self._released = False
        self._release_lock = threading.Lock()

    @abc.abstractmethod
    def register_watch(self, path):
        """
        Start watching a directory.

        Raises:
            WatchRegistrationError: If the path cannot be watched.
        """

    def emit(self, path, kind):
        self.notifications.put(Notification(path, kind))

    def report(self, error):
        self.failures.put(error)

    @property
    def released(self):
        return self._released

    def release(self):
        """
        Stop watching and close both feeds. Safe to call more than once.
        """
        with self._release_lock:
            if self._released:
                return
            self._released = True
        try:
            self._shutdown()
        finally:
            self.notifications.put(CLOSED)
            self.failures.put(CLOSED)

    def _shutdown(self):
        """Release adapter-specific resources."""
        pass


class _NotificationHandler(FileSystemEventHandler):
    """Forwards watchdog events to the owning notifier's feeds."""

    def __init__(self, notifier):
        super().__init__()
        self.notifier = notifier

    def on_any_event(self, event):
        try:
            if event.event_type in IGNORED_EVENT_TYPES:
                return
            # watchdog adds a modified event for the parent directory of
            # every change; the watched root itself is not a change.
            if (
                event.is_directory
                and event.event_type == "modified"
                and os.path.normpath(event.src_path) in self.notifier.watched_paths
            ):
                return
            self.notifier.emit(os.fsdecode(event.src_path), event.event_type)
            dest_path = getattr(event, "dest_path", "")
            if event.event_type == "moved" and dest_path:
                self.notifier.emit(os.fsdecode(dest_path), "created")
        except Exception as e:
            self.notifier.report(
                NotifierRuntimeError("Error handling watchdog event", path=str(event.src_path), cause=e)
            )


class WatchdogNotifier(Notifier):
    """
    Notifier backed by a watchdog Observer.

    Each registered directory is watched non-recursively.
    """

    def __init__(self, join_timeout=5.0):
        super().__init__()
        self.join_timeout = join_timeout
        self.watched_paths = set()
        self._handler = _NotificationHandler(self)
        try:
            self._observer = Observer()
            self._observer.daemon = True
            self._observer.start()
        except Exception as e:
            raise NotifierInitError("Failed to create watcher", cause=e) from e
        logger.debug("Watchdog observer started: %s", type(self._observer).__name__)

    def register_watch(self, path):
        path = os.path.normpath(path)
        if self.released:
            raise WatchRegistrationError("Watcher already released", path=path)
        try:
            self._observer.schedule(self._handler, path, recursive=False)
        except Exception as e:
            try:
                self._observer.unschedule_all()
            except Exception as cleanup_error:
                logger.debug("Error unscheduling after failed registration: %s", cleanup_error)
            raise WatchRegistrationError(
                f"Failed to add directory to watcher: {path}", path=path, cause=e
            ) from e
        self.watched_paths.add(path)
        logger.info("Registered watch on %s", path)

    def _shutdown(self):
        self._observer.stop()
        if self._observer.is_alive():
            self._observer.join(self.join_timeout)
        self.watched_paths.clear()
        logger.debug("Watchdog observer stopped")
