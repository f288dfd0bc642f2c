"""In-process change feed for the classes table.

Teacher dashboards poll `changes_after(seq)` to refresh their class list
when a class is created; other components may `subscribe` a callback.
"""
from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from ..common.datetime_utils import now_local
from ..core.constants import CLASS_FEED_CAPACITY

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClassChange:
    seq: int
    event: str
    class_id: str
    teacher_id: str
    occurred_at: datetime

    def to_dict(self) -> dict:
        return {
            "seq": self.seq,
            "event": self.event,
            "class_id": self.class_id,
            "teacher_id": self.teacher_id,
            "occurred_at": self.occurred_at.isoformat(timespec="seconds"),
        }


Listener = Callable[[ClassChange], None]


class ClassChangeFeed:
    def __init__(self, capacity: int = CLASS_FEED_CAPACITY):
        self._lock = threading.Lock()
        self._events: deque[ClassChange] = deque(maxlen=capacity)
        self._listeners: list[Listener] = []
        self._seq = 0

    @property
    def last_seq(self) -> int:
        with self._lock:
            return self._seq

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a callback; returns a function that unsubscribes it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def publish(self, *, event: str, class_id: str, teacher_id: str) -> ClassChange:
        with self._lock:
            self._seq += 1
            change = ClassChange(
                seq=self._seq,
                event=event,
                class_id=class_id,
                teacher_id=teacher_id,
                occurred_at=now_local(),
            )
            self._events.append(change)
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(change)
            except Exception:
                logger.exception("class change listener failed for seq=%d", change.seq)
        return change

    def changes_after(self, seq: int, *, teacher_id: Optional[str] = None) -> list[ClassChange]:
        with self._lock:
            events = [e for e in self._events if e.seq > seq]
        if teacher_id is not None:
            events = [e for e in events if e.teacher_id == teacher_id]
        return events
