"""
Event types for dirwatch.

A notification is the raw (path, kind) pair produced by a notifier. The
processing loop turns each notification into an immutable, timestamped Event.
"""

import datetime
from collections import namedtuple
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

DEFAULT_TIME_FORMAT = "%H:%M:%S"

Notification = namedtuple("Notification", ["path", "kind"])


class Operation(Enum):
    """Kinds of change an Event can describe."""

    CREATE = "CREATE"
    WRITE = "WRITE"
    REMOVE = "REMOVE"
    RENAME = "RENAME"
    CHMOD = "CHMOD"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, kind: Any) -> "Operation":
        """
        Map a raw notification kind to an Operation.

        Accepts Operation members, member names/values in any case and the
        event type names used by watchdog. Combined kinds such as
        "CREATE|WRITE" and anything unrecognized map to UNKNOWN.

        Args:
            kind: The raw kind reported by a notifier.

        Returns:
            Operation: The matching member, or Operation.UNKNOWN.
        """
        if isinstance(kind, cls):
            return kind
        if not isinstance(kind, str):
            return cls.UNKNOWN
        return _KIND_ALIASES.get(kind.strip().lower(), cls.UNKNOWN)

    def __str__(self):
        return self.value


_KIND_ALIASES = {
    "create": Operation.CREATE,
    "created": Operation.CREATE,
    "write": Operation.WRITE,
    "modified": Operation.WRITE,
    "remove": Operation.REMOVE,
    "deleted": Operation.REMOVE,
    "rename": Operation.RENAME,
    "moved": Operation.RENAME,
    "chmod": Operation.CHMOD,
    "attrib": Operation.CHMOD,
}


@dataclass(frozen=True)
class Event:
    """A single recorded filesystem change."""

    path: str
    operation: Operation
    timestamp: datetime.datetime = field(default_factory=datetime.datetime.now)

    @classmethod
    def from_notification(
        cls, notification: Notification, now: Optional[datetime.datetime] = None
    ) -> "Event":
        """Build an Event, stamping it with the current time unless given."""
        return cls(
            path=str(notification.path),
            operation=Operation.parse(notification.kind),
            timestamp=now or datetime.datetime.now(),
        )

    def format(self, time_format: str = DEFAULT_TIME_FORMAT) -> str:
        """Render the event as "[HH:MM:SS] OPERATION: path"."""
        return f"[{self.timestamp.strftime(time_format)}] {self.operation}: {self.path}"

    def to_dict(self) -> Dict[str, str]:
        return {
            "path": self.path,
            "operation": self.operation.value,
            "timestamp": self.timestamp.isoformat(),
        }
