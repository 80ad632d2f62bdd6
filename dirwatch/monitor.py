"""
Monitor module for dirwatch.

The Monitor watches a single directory through a Notifier and drives:
- Lifecycle (uninitialized -> running -> stopped, no way back)
- The processing loop, which turns notifications into timestamped Events
- The Event Log, which records every Event in arrival order
- The outbound EventStream, on which every Event is republished
"""

import logging
import os
import threading
from enum import Enum
from queue import Empty
from typing import List, Optional

from dirwatch.errors import (MonitorStateError, NotifierRuntimeError,
                             TargetNotFoundError, WatchRegistrationError)
from dirwatch.event_log import EventLog
from dirwatch.events import Event
from dirwatch.notifier import CLOSED, Notifier, WatchdogNotifier
from dirwatch.stream import EventStream


class MonitorState(Enum):
    UNINITIALIZED = "uninitialized"
    RUNNING = "running"
    STOPPED = "stopped"


def resolve_path(path: str) -> str:
    """Return the absolute, normalized form of a path."""
    return os.path.normpath(os.path.abspath(os.path.expanduser(path)))


class ProcessingLoop(threading.Thread):
    """
    Thread that converts raw notifications into Events.

    Each pass checks the failure feed, the stop signal and the notification
    feed. The loop ends on the stop signal or when the notifier closes either
    feed; remaining notifications are not drained.
    """

    def __init__(
        self,
        notifier: Notifier,
        event_log: EventLog,
        stream: EventStream,
        stop_event: threading.Event,
        poll_interval: float = 0.1,
        logger: Optional[logging.Logger] = None,
    ):
        super(ProcessingLoop, self).__init__(name="dirwatch-processing-loop")
        self.notifier = notifier
        self.event_log = event_log
        self.stream = stream
        self.stop_event = stop_event
        self.poll_interval = poll_interval
        self.logger = logger or logging.getLogger(__name__)
        self.exited = threading.Event()
        self.daemon = True

    def run(self):
        self.logger.debug("Processing loop started.")
        try:
            while not self.stop_event.is_set():
                if not self._handle_failure():
                    break
                try:
                    item = self.notifier.notifications.get(timeout=self.poll_interval)
                except Empty:
                    continue
                if item is CLOSED:
                    self.logger.info("Notifier closed its notification feed.")
                    break
                if self.stop_event.is_set():
                    break
                if not self._handle_notification(item):
                    break
        finally:
            self.stream.close()
            self.exited.set()
            self.logger.debug("Processing loop stopped.")

    def _handle_failure(self) -> bool:
        """Log one pending notifier failure. Returns False if the feed closed."""
        try:
            error = self.notifier.failures.get_nowait()
        except Empty:
            return True
        if error is CLOSED:
            self.logger.info("Notifier closed its failure feed.")
            return False
        if not isinstance(error, NotifierRuntimeError):
            error = NotifierRuntimeError("Notifier error", cause=error)
        self.logger.warning(f"Error: {error}")
        return True

    def _handle_notification(self, notification) -> bool:
        """Record and publish one event. Returns False if publishing was abandoned."""
        event = Event.from_notification(notification)
        self.event_log.append(event)
        self.logger.debug(f"Recorded {event.operation} for {event.path}")
        return self.stream.publish(event, cancel=self.stop_event)


class Monitor:
    """
    Watches one directory and exposes the resulting events.

    Attributes:
        notifier (Notifier): The adapter that owns the OS-level watch.
        watched_path (str): Resolved directory being watched, once started.
        logger (logging.Logger): Logger used by the monitor and its loop.
    """

    def __init__(
        self,
        notifier: Notifier,
        stream_buffer: int = 0,
        poll_interval: float = 0.1,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the monitor in the uninitialized state.

        Args:
            notifier: Notifier adapter the monitor takes ownership of.
            stream_buffer: Capacity of the outbound stream, 0 for unbuffered.
            poll_interval: Seconds the loop waits on the notification feed
                before re-checking the stop signal and failure feed.
            logger: Optional logger, defaults to the module logger.
        """
        self.notifier = notifier
        self.poll_interval = poll_interval
        self.logger = logger or logging.getLogger(__name__)
        self.watched_path: Optional[str] = None
        self._event_log = EventLog()
        self._stream = EventStream(maxsize=stream_buffer)
        self._stop_event = threading.Event()
        self._loop: Optional[ProcessingLoop] = None
        self._state = MonitorState.UNINITIALIZED
        self._state_lock = threading.Lock()

    @classmethod
    def create(cls, notifier: Optional[Notifier] = None, **kwargs) -> "Monitor":
        """
        Create a monitor, allocating a WatchdogNotifier unless one is given.

        Raises:
            NotifierInitError: If the watch mechanism cannot be allocated.
        """
        if notifier is None:
            notifier = WatchdogNotifier()
        try:
            return cls(notifier, **kwargs)
        except Exception:
            notifier.release()
            raise

    @property
    def state(self) -> MonitorState:
        return self._state

    @property
    def events(self) -> EventStream:
        """Outbound stream of events for live consumers."""
        return self._stream

    @property
    def loop_exited(self) -> bool:
        return self._loop is not None and self._loop.exited.is_set()

    @property
    def is_running(self) -> bool:
        return self._state is MonitorState.RUNNING and not self.loop_exited

    def wait_exited(self, timeout: Optional[float] = None) -> bool:
        """Wait for the processing loop to exit. Returns True if it has."""
        if self._loop is None:
            return False
        return self._loop.exited.wait(timeout)

    def start(self, path: str) -> None:
        """
        Begin monitoring a directory.

        Returns as soon as the watch is registered and the processing loop
        has been started.

        Args:
            path: Directory to watch; resolved to an absolute path.

        Raises:
            MonitorStateError: If the monitor was already started.
            TargetNotFoundError: If the path is missing or not a directory.
            WatchRegistrationError: If the notifier rejects the path.
        """
        with self._state_lock:
            if self._state is not MonitorState.UNINITIALIZED:
                raise MonitorStateError(f"Monitor cannot be started while {self._state.value}")

            abs_path = resolve_path(path)
            if not os.path.exists(abs_path):
                raise TargetNotFoundError(f"directory does not exist: {abs_path}", path=abs_path)
            if not os.path.isdir(abs_path):
                raise TargetNotFoundError(f"not a directory: {abs_path}", path=abs_path)

            try:
                self.notifier.register_watch(abs_path)
            except WatchRegistrationError:
                raise
            except Exception as e:
                raise WatchRegistrationError(
                    "failed to add directory to watcher", path=abs_path, cause=e
                ) from e

            self._loop = ProcessingLoop(
                self.notifier,
                self._event_log,
                self._stream,
                self._stop_event,
                poll_interval=self.poll_interval,
                logger=self.logger,
            )
            self._loop.start()
            self.watched_path = abs_path
            self._state = MonitorState.RUNNING
        self.logger.debug(f"Started monitoring directory: {abs_path}")

    def log(self) -> List[Event]:
        """Return a copy of every event recorded so far, oldest first."""
        return self._event_log.snapshot()

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        """
        Stop the processing loop and release the notifier.

        The stop request never blocks on the loop, so it is safe after the
        loop has already exited. A second call is a no-op.

        Args:
            timeout: Seconds to wait for the loop thread to finish.

        Raises:
            MonitorStateError: If the monitor was never started.
        """
        with self._state_lock:
            if self._state is MonitorState.UNINITIALIZED:
                raise MonitorStateError("Monitor was never started")
            if self._state is MonitorState.STOPPED:
                self.logger.debug("Monitor already stopped.")
                return
            self._state = MonitorState.STOPPED

        self.logger.info("Monitor stopping.")
        self._stop_event.set()
        try:
            self.notifier.release()
        finally:
            self._loop.join(timeout)
            if self._loop.is_alive():
                self.logger.warning(f"Processing loop did not exit within {timeout} seconds")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if self._state is MonitorState.RUNNING:
            self.stop()
        elif self._state is MonitorState.UNINITIALIZED:
            self.notifier.release()
        return False
