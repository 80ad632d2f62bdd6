import queue
import threading
import time

import pytest

from dirwatch.stream import EventStream, StreamClosed

from conftest import wait_for


def publish_in_thread(stream, item, cancel=None):
    result = {}

    def target():
        result["delivered"] = stream.publish(item, cancel=cancel)

    t = threading.Thread(target=target, daemon=True)
    t.start()
    return t, result


def test_unbuffered_publish_blocks_until_consumed():
    stream = EventStream()
    t, result = publish_in_thread(stream, "first")
    time.sleep(0.2)
    assert t.is_alive(), "publish should block with no consumer"

    assert stream.get(timeout=1) == "first"
    t.join(timeout=1)
    assert not t.is_alive()
    assert result["delivered"] is True


def test_unbuffered_next_publish_waits_for_next_consumer():
    stream = EventStream()
    t1, _ = publish_in_thread(stream, 1)
    assert stream.get(timeout=1) == 1
    t1.join(timeout=1)

    t2, result = publish_in_thread(stream, 2)
    time.sleep(0.2)
    assert t2.is_alive()
    assert stream.get(timeout=1) == 2
    t2.join(timeout=1)
    assert result["delivered"] is True


def test_bounded_publish_blocks_only_when_full():
    stream = EventStream(maxsize=2)
    assert stream.publish("a") is True
    assert stream.publish("b") is True
    assert stream.qsize() == 2

    t, result = publish_in_thread(stream, "c")
    time.sleep(0.2)
    assert t.is_alive(), "publish should block while the buffer is full"

    assert stream.get(timeout=1) == "a"
    t.join(timeout=1)
    assert result["delivered"] is True
    assert [stream.get(timeout=1), stream.get(timeout=1)] == ["b", "c"]


def test_cancel_abandons_blocked_publish():
    stream = EventStream()
    cancel = threading.Event()
    t, result = publish_in_thread(stream, "x", cancel=cancel)
    time.sleep(0.1)
    cancel.set()
    t.join(timeout=1)
    assert result["delivered"] is False
    assert stream.qsize() == 0
    with pytest.raises(queue.Empty):
        stream.get(timeout=0.1)


def test_close_wakes_publisher_and_consumer():
    stream = EventStream()
    t, result = publish_in_thread(stream, "x")
    assert wait_for(lambda: stream.qsize() == 1)
    stream.close()
    t.join(timeout=1)
    assert result["delivered"] is False
    with pytest.raises(StreamClosed):
        stream.get(timeout=1)
    assert stream.publish("y") is False


def test_close_lets_consumers_drain_buffer():
    stream = EventStream(maxsize=3)
    for item in range(3):
        stream.publish(item)
    stream.close()
    assert list(stream) == [0, 1, 2]
    assert stream.closed


def test_each_item_goes_to_exactly_one_consumer():
    stream = EventStream()
    received = []
    lock = threading.Lock()

    def consumer():
        for item in stream:
            with lock:
                received.append(item)

    consumers = [threading.Thread(target=consumer, daemon=True) for _ in range(3)]
    for c in consumers:
        c.start()
    for i in range(50):
        assert stream.publish(i) is True
    stream.close()
    for c in consumers:
        c.join(timeout=2)
    assert sorted(received) == list(range(50))


def test_negative_maxsize_rejected():
    with pytest.raises(ValueError):
        EventStream(maxsize=-1)
