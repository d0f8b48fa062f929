from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Role of the acting user, used for permission checks."""

    ADMIN = "admin"
    TEACHER = "teacher"


class AttendanceStatus(str, Enum):
    """Lifecycle of a lecture mark: SUBMITTED -> VERIFIED -> PAID."""

    SUBMITTED = "SUBMITTED"
    VERIFIED = "VERIFIED"
    PAID = "PAID"


class RecordKind(str, Enum):
    """Writable record kinds handled by the batch writer."""

    ATTENDANCE = "attendance"
    ADVANCE = "advance"
    PAYMENT = "payment"


class EventType(str, Enum):
    ATTENDANCE_MARK = "attendance_mark"
    ATTENDANCE_REMOVE = "attendance_remove"
    PAYMENT_PROCESSED = "payment_processed"
    RATE_CHANGE = "rate_change"
    TEACHER_ADD = "teacher_add"
    ADVANCE_GRANTED = "advance_granted"
    ADVANCE_SETTLED = "advance_settled"
