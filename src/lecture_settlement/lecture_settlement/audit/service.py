from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

from ..common.logger import log
from ..core.constants import DEFAULT_ACTIVITY_LIMIT
from ..core.enums import EventType
from .model import SystemEvent
from .sink import AuditSink


class AuditTrail:
    """Best-effort delivery to the audit sink.

    Callers emit after their own writes are committed; a sink failure is
    logged and never reaches the caller.
    """

    def __init__(self, sink: AuditSink):
        self._sink = sink

    def emit(
        self,
        event_type: EventType,
        actor_label: str,
        description: str,
        amount: Optional[Decimal] = None,
    ) -> bool:
        try:
            self._sink.log_event(event_type, actor_label, description, amount)
            return True
        except Exception:
            log.exception("audit delivery failed for %s event (%s)", event_type.value, description)
            return False

    def recent_activity(self, limit: int = DEFAULT_ACTIVITY_LIMIT) -> Sequence[SystemEvent]:
        return self._sink.recent(limit)
