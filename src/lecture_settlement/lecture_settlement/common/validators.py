from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from ..attendance.model import AttendanceRecord
from ..core.enums import AttendanceStatus, RecordKind
from ..core.exceptions import ValidationError
from ..ledger.model import AdvanceLedgerEntry
from ..payments.model import PaymentRecord
from .money import ZERO, to_money


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_positive_amount(value: Any, field_name: str = "amount") -> Decimal:
    amount = to_money(value, field_name)
    if amount <= ZERO:
        raise ValidationError(f"{field_name} must be greater than 0")
    return amount


def require_non_negative_amount(value: Any, field_name: str = "amount") -> Decimal:
    amount = to_money(value, field_name)
    if amount < ZERO:
        raise ValidationError(f"{field_name} cannot be negative")
    return amount


def require_positive_int(value: Any, field_name: str) -> int:
    # bool is an int subclass; 2.9 must not quietly become 2.
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a whole number")
    try:
        exact = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} must be a whole number")
    if not exact.is_finite() or exact != exact.to_integral_value():
        raise ValidationError(f"{field_name} must be a whole number")
    number = int(exact)
    if number <= 0:
        raise ValidationError(f"{field_name} must be greater than 0")
    return number


def _require_type(value: Any, expected: type, field_name: str) -> None:
    if not isinstance(value, expected):
        raise ValidationError(f"{field_name} must be {expected.__name__}, got {type(value).__name__}")


def _require_money(value: Any, field_name: str) -> None:
    _require_type(value, Decimal, field_name)
    to_money(value, field_name)


def _require_lecture_date(value: Any) -> None:
    # datetime is a date subclass; a lecture is a calendar day.
    if isinstance(value, datetime) or not isinstance(value, date):
        raise ValidationError("lecture_date must be a date")


def validate_attendance(record: AttendanceRecord) -> None:
    require_non_empty(record.attendance_id, "attendance_id")
    require_non_empty(record.teacher_id, "teacher_id")
    require_non_empty(record.class_id, "class_id")
    _require_lecture_date(record.lecture_date)
    _require_type(record.status, AttendanceStatus, "status")
    _require_type(record.marked_at, datetime, "marked_at")
    if (record.status == AttendanceStatus.PAID) != (record.payment_id is not None):
        raise ValidationError("payment_id must be set exactly when status is PAID")


def validate_advance(entry: AdvanceLedgerEntry) -> None:
    require_non_empty(entry.entry_id, "entry_id")
    require_non_empty(entry.teacher_id, "teacher_id")
    _require_money(entry.amount, "amount")
    _require_money(entry.remaining_amount, "remaining_amount")
    _require_type(entry.date, datetime, "date")
    if entry.amount <= ZERO:
        raise ValidationError("amount must be greater than 0")
    if not ZERO <= entry.remaining_amount <= entry.amount:
        raise ValidationError("remaining_amount must be between 0 and amount")


def validate_payment(payment: PaymentRecord) -> None:
    require_non_empty(payment.payment_id, "payment_id")
    require_non_empty(payment.teacher_id, "teacher_id")
    require_non_empty(payment.class_id, "class_id")
    for name in ("gross_amount", "advance_deduction", "net_disbursement"):
        _require_money(getattr(payment, name), name)
    _require_type(payment.date_paid, datetime, "date_paid")
    _require_lecture_date(payment.start_date_covered)
    _require_lecture_date(payment.end_date_covered)
    if payment.lecture_count <= 0:
        raise ValidationError("lecture_count must be greater than 0")
    if payment.advance_deduction < ZERO or payment.advance_deduction > payment.gross_amount:
        raise ValidationError("advance_deduction must be between 0 and gross_amount")
    if payment.net_disbursement != payment.gross_amount - payment.advance_deduction:
        raise ValidationError("net_disbursement must equal gross_amount - advance_deduction")
    if payment.start_date_covered > payment.end_date_covered:
        raise ValidationError("start_date_covered cannot be after end_date_covered")


_VALIDATORS = {
    RecordKind.ATTENDANCE: (AttendanceRecord, validate_attendance),
    RecordKind.ADVANCE: (AdvanceLedgerEntry, validate_advance),
    RecordKind.PAYMENT: (PaymentRecord, validate_payment),
}


def validate_record(kind: RecordKind, record: Any) -> None:
    """Reject writes whose shape does not match the record kind."""
    record_type, validator = _VALIDATORS[kind]
    if not isinstance(record, record_type):
        raise ValidationError(f"{kind.value} write expects {record_type.__name__}, got {type(record).__name__}")
    validator(record)
