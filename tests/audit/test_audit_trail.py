from decimal import Decimal

from src.lecture_settlement.lecture_settlement.audit.service import AuditTrail
from src.lecture_settlement.lecture_settlement.audit.sink import InMemoryAuditSink, LoggingAuditSink
from src.lecture_settlement.lecture_settlement.core.enums import EventType


class ExplodingSink:
    def log_event(self, event_type, actor_label, description, amount=None):
        raise ConnectionError("sink offline")

    def recent(self, limit):
        return []


def test_emit_records_event_newest_first():
    trail = AuditTrail(InMemoryAuditSink())

    assert trail.emit(EventType.ADVANCE_GRANTED, "Asha Iyer", "Granted advance of ₹100", Decimal("100"))
    assert trail.emit(EventType.ATTENDANCE_MARK, "Asha Iyer", "Marked attendance for Physics XI on 2025-03-01")

    events = trail.recent_activity()
    assert [e.event_type for e in events] == [EventType.ATTENDANCE_MARK, EventType.ADVANCE_GRANTED]
    assert events[1].amount == Decimal("100")


def test_recent_activity_respects_limit():
    trail = AuditTrail(InMemoryAuditSink())
    for i in range(5):
        trail.emit(EventType.ATTENDANCE_MARK, "Asha Iyer", f"event {i}")

    assert [e.description for e in trail.recent_activity(2)] == ["event 4", "event 3"]


def test_emit_swallows_sink_failures():
    trail = AuditTrail(ExplodingSink())
    assert trail.emit(EventType.PAYMENT_PROCESSED, "Asha Iyer", "Settled ₹1,000 for 1 lectures.") is False


def test_logging_sink_keeps_no_history():
    trail = AuditTrail(LoggingAuditSink())
    assert trail.emit(EventType.ATTENDANCE_REMOVE, "Asha Iyer", "Removed attendance")
    assert trail.recent_activity() == []
