import time

import pytest

from dirwatch.errors import WatchRegistrationError
from dirwatch.notifier import Notifier


class FakeNotifier(Notifier):
    """Notifier test double driven by hand from the test."""

    def __init__(self, reject=False):
        super().__init__()
        self.reject = reject
        self.registered = []
        self.watched_paths = set()

    def register_watch(self, path):
        self.registered.append(path)
        if self.reject:
            raise WatchRegistrationError("permission denied", path=path)
        self.watched_paths.add(path)


def wait_for(predicate, timeout=5.0, interval=0.01):
    """Poll until predicate() is true. Returns the final result."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


@pytest.fixture
def fake_notifier():
    notifier = FakeNotifier()
    yield notifier
    notifier.release()


@pytest.fixture
def watch_dir(tmp_path):
    """Directory to watch."""
    d = tmp_path / "watched"
    d.mkdir()
    return d
