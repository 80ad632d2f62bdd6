"""
Unit tests for the ThreadManager class in thread_manager.py.
"""
import threading
import time
import unittest

from dirwatch.stream import EventStream
from dirwatch.thread_manager import ThreadManager
from dirwatch.utils import spawn_consumer_worker


class TestThreadManager(unittest.TestCase):
    def test_register_and_get_status(self):
        """
        Test that a thread can be registered and its status is reported correctly.
        """
        manager = ThreadManager()
        stream = EventStream(maxsize=1)
        worker = spawn_consumer_worker(stream, lambda item: None, poll_interval=0.05)
        manager.register_thread(worker)

        status = manager.get_status(worker)
        self.assertEqual(status['name'], worker.name)
        self.assertTrue(status['is_alive'], "Worker should be alive immediately after start.")
        self.assertEqual(status['processed'], 0)

        worker.stop()
        worker.join(timeout=1)
        self.assertFalse(manager.get_status(worker)['is_alive'], "Worker should not be alive after stopping.")

    def test_register_rejects_non_threads(self):
        with self.assertRaises(ValueError):
            ThreadManager().register_thread(object())

    def test_shutdown_lets_consumers_drain_closed_stream(self):
        """
        Test that shutdown waits for consumers to print everything that was
        buffered before the stream closed.
        """
        manager = ThreadManager()
        stream = EventStream(maxsize=5)
        handled = []

        def slow_handler(item):
            time.sleep(0.05)
            handled.append(item)

        manager.register_thread(spawn_consumer_worker(stream, slow_handler, poll_interval=0.05))
        for i in range(5):
            self.assertTrue(stream.publish(i))
        stream.close()

        self.assertEqual(manager.shutdown(timeout=2), [])
        self.assertEqual(handled, list(range(5)))

    def test_shutdown_stops_consumers_of_open_stream(self):
        """
        Test that shutdown signals consumers whose stream never closes.
        """
        manager = ThreadManager()
        worker1 = spawn_consumer_worker(EventStream(), lambda item: None, poll_interval=0.05)
        worker2 = spawn_consumer_worker(EventStream(), lambda item: None, poll_interval=0.05)
        worker2.name = "dirwatch-consumer-2"
        manager.register_thread(worker1)
        manager.register_thread(worker2)

        statuses_before = manager.get_all_statuses()
        self.assertTrue(statuses_before[worker1.name]['is_alive'])
        self.assertTrue(statuses_before[worker2.name]['is_alive'])

        self.assertEqual(manager.shutdown(timeout=0.2), [])
        statuses_after = manager.get_all_statuses()
        self.assertFalse(statuses_after[worker1.name]['is_alive'])
        self.assertFalse(statuses_after[worker2.name]['is_alive'])

    def test_threads_without_stop_are_reported(self):
        manager = ThreadManager()
        release = threading.Event()
        plain = threading.Thread(target=release.wait, daemon=True, name="plain")
        plain.start()
        manager.register_thread(plain)
        with self.assertLogs("dirwatch.thread_manager", level="WARNING"):
            remaining = manager.shutdown(timeout=0.1)
        self.assertEqual(remaining, ["plain"])
        release.set()
        self.assertEqual(manager.join_all(timeout=1), [])


if __name__ == '__main__':
    unittest.main()
