import datetime

import pytest

from dirwatch.events import Event, Notification, Operation


@pytest.mark.parametrize("kind,expected", [
    ("created", Operation.CREATE),
    ("modified", Operation.WRITE),
    ("deleted", Operation.REMOVE),
    ("moved", Operation.RENAME),
    ("attrib", Operation.CHMOD),
    ("CREATE", Operation.CREATE),
    ("chmod", Operation.CHMOD),
    (Operation.REMOVE, Operation.REMOVE),
])
def test_parse_known_kinds(kind, expected):
    assert Operation.parse(kind) is expected


@pytest.mark.parametrize("kind", ["CREATE|WRITE", "closed", "", None, 42])
def test_parse_unknown_kinds(kind):
    assert Operation.parse(kind) is Operation.UNKNOWN


def test_event_is_immutable():
    event = Event("/tmp/a.txt", Operation.CREATE)
    with pytest.raises(AttributeError):
        event.path = "/tmp/b.txt"


def test_from_notification_stamps_processing_time():
    before = datetime.datetime.now()
    event = Event.from_notification(Notification("/tmp/a.txt", "created"))
    after = datetime.datetime.now()
    assert event.operation is Operation.CREATE
    assert event.path == "/tmp/a.txt"
    assert before <= event.timestamp <= after


def test_format_matches_console_line():
    ts = datetime.datetime(2024, 5, 1, 9, 3, 7)
    event = Event("/data/a.txt", Operation.WRITE, ts)
    assert event.format() == "[09:03:07] WRITE: /data/a.txt"
    assert event.to_dict() == {
        "path": "/data/a.txt",
        "operation": "WRITE",
        "timestamp": "2024-05-01T09:03:07",
    }
