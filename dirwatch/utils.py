"""
Worker threads for consuming a monitor's outbound event stream.

ConsumerWorker drains an EventStream and hands every event to a handler
function. It runs until the stream is closed or a stop signal is set.
"""

import logging
import threading
from queue import Empty

from dirwatch.stream import StreamClosed

logger = logging.getLogger(__name__)


class ConsumerWorker(threading.Thread):
    """
    A thread that takes events from a stream and processes them with a handler.
    """

    def __init__(self, stream, handler, poll_interval=0.5, *args, **kwargs):
        """
        Initialize the consumer worker thread.

        Args:
            stream (EventStream): The stream to take events from.
            handler (callable): Called with each event as its first parameter.
            poll_interval (float): Seconds to wait for an event before
                re-checking the stop signal.
            *args: Additional positional arguments passed to handler.
            **kwargs: Additional keyword arguments passed to handler.
        """
        super(ConsumerWorker, self).__init__(name="dirwatch-consumer")
        self.stream = stream
        self.handler = handler
        self.poll_interval = poll_interval
        self.args = args
        self.kwargs = kwargs
        self.processed = 0
        self.stop_event = threading.Event()
        self.daemon = True

    def run(self):
        logger.debug("ConsumerWorker started with poll interval: %s seconds", self.poll_interval)
        while not self.stop_event.is_set():
            try:
                event = self.stream.get(timeout=self.poll_interval)
            except Empty:
                continue
            except StreamClosed:
                logger.debug("ConsumerWorker: stream closed.")
                break
            try:
                self.handler(event, *self.args, **self.kwargs)
            except Exception as e:
                logger.exception("Exception in handling event %s: %s", event, e)
            self.processed += 1
        logger.debug("ConsumerWorker stopped after %d events.", self.processed)

    def stop(self):
        """
        Signal the thread to stop.
        """
        logger.debug("ConsumerWorker received stop signal.")
        self.stop_event.set()


def spawn_consumer_worker(stream, handler, poll_interval=0.5, *args, **kwargs):
    """
    Factory function to spawn a consumer worker thread.

    Args:
        stream (EventStream): Stream to consume.
        handler (callable): Function to process events.
        poll_interval (float): Time interval to poll the stream for events.
        *args: Positional arguments for handler.
        **kwargs: Keyword arguments for handler.

    Returns:
        ConsumerWorker: The running consumer worker thread instance.
    """
    worker = ConsumerWorker(stream, handler, poll_interval, *args, **kwargs)
    worker.start()
    logger.debug("spawn_consumer_worker: Started a new ConsumerWorker thread.")
    return worker
