"""Transient, auto-expiring user notifications."""
from __future__ import annotations

import itertools
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

log = logging.getLogger("landmarkdrive.notifications")

Clock = Callable[[], float]


def monotonic_ms() -> float:
    """Default clock for :class:`NotificationQueue`, in milliseconds."""

    return time.monotonic() * 1000.0


@dataclass(frozen=True)
class Notification:
    """A single message shown to the user until its time to live elapses."""

    id: int
    text: str
    created_at: float
    ttl_ms: int

    @property
    def expires_at(self) -> float:
        return self.created_at + self.ttl_ms

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class NotificationQueue:
    """FIFO queue of notifications with lazy, clock driven expiry.

    Expiry never needs a timer: :meth:`list` hides entries whose TTL has elapsed
    and :meth:`expire` drops them for good. The clock is injectable so tests and
    the video renderer can run on simulated time.
    """

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self._clock: Clock = clock or monotonic_ms
        self._entries: Dict[int, Notification] = {}
        self._ids = itertools.count(1)

    def __len__(self) -> int:
        return len(self.list())

    def push(self, text: str, ttl_ms: int) -> int:
        """Append ``text`` to the tail of the queue and return its identifier."""

        if ttl_ms < 0:
            raise ValueError(f"ttl_ms must be non-negative, got {ttl_ms}")
        notification = Notification(
            id=next(self._ids),
            text=text,
            created_at=self._clock(),
            ttl_ms=int(ttl_ms),
        )
        # dicts keep insertion order, which is the display order
        self._entries[notification.id] = notification
        log.debug("Queued notification %d: %s", notification.id, text)
        return notification.id

    def list(self) -> List[Notification]:
        now = self._clock()
        return [entry for entry in self._entries.values() if not entry.is_expired(now)]

    def expire(self, now: Optional[float] = None) -> int:
        """Remove every notification whose TTL has elapsed at ``now``; return how many."""

        if now is None:
            now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def cancel(self, notification_id: int) -> bool:
        """Remove a notification before its TTL; unknown identifiers are ignored."""

        return self._entries.pop(notification_id, None) is not None

    def clear_text(self, text: str) -> int:
        """Remove every queued notification whose text equals ``text``."""

        matching = [key for key, entry in self._entries.items() if entry.text == text]
        for key in matching:
            del self._entries[key]
        return len(matching)
