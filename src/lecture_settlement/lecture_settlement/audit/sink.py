from __future__ import annotations

import threading
import uuid
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..common.datetime_utils import now_local
from ..common.logger import log
from ..core.enums import EventType
from .model import SystemEvent


class AuditSink(Protocol):
    """Append-only activity log. Not part of any transaction."""

    def log_event(
        self,
        event_type: EventType,
        actor_label: str,
        description: str,
        amount: Optional[Decimal] = None,
    ) -> None:
        raise NotImplementedError

    def recent(self, limit: int) -> Sequence[SystemEvent]:
        """Newest first."""

        raise NotImplementedError


def new_event(event_type: EventType, actor_label: str, description: str, amount: Optional[Decimal]) -> SystemEvent:
    return SystemEvent(
        event_id=uuid.uuid4().hex,
        event_type=event_type,
        timestamp=now_local(),
        actor_label=actor_label,
        description=description,
        amount=amount,
    )


class InMemoryAuditSink(AuditSink):
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._events: list[SystemEvent] = []

    def log_event(self, event_type, actor_label, description, amount=None) -> None:
        with self._lock:
            self._events.append(new_event(event_type, actor_label, description, amount))

    def recent(self, limit: int) -> Sequence[SystemEvent]:
        with self._lock:
            events = list(self._events)
        events.reverse()
        return events[: int(limit)]


class LoggingAuditSink(AuditSink):
    """Writes events to the application log only; keeps no history."""

    def log_event(self, event_type, actor_label, description, amount=None) -> None:
        log.info("[audit] %s | %s | %s | amount=%s", event_type.value, actor_label, description, amount)

    def recent(self, limit: int) -> Sequence[SystemEvent]:
        return []
