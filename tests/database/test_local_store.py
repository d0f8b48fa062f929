from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal

import pytest

from src.lecture_settlement.lecture_settlement.attendance.model import AttendanceRecord
from src.lecture_settlement.lecture_settlement.core.enums import AttendanceStatus, RecordKind
from src.lecture_settlement.lecture_settlement.core.exceptions import ConcurrencyConflict, ValidationError
from src.lecture_settlement.lecture_settlement.database.batch import DeleteOp, InsertOp, UpdateOp
from src.lecture_settlement.lecture_settlement.database.memory_store import LocalStore
from src.lecture_settlement.lecture_settlement.ledger.model import AdvanceLedgerEntry


def _attendance(aid: str, day: int = 1, status=AttendanceStatus.SUBMITTED) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=aid,
        teacher_id="t1",
        class_id="c1",
        lecture_date=date(2025, 3, day),
        status=status,
        marked_at=datetime(2025, 3, day, 9, 0),
    )


def _advance(eid: str, amount: str = "100") -> AdvanceLedgerEntry:
    return AdvanceLedgerEntry(
        entry_id=eid,
        teacher_id="t1",
        amount=Decimal(amount),
        remaining_amount=Decimal(amount),
        date=datetime(2025, 3, 1, 9, 0),
    )


def test_batch_applies_all_operations():
    store = LocalStore()
    store.commit_batch([InsertOp(RecordKind.ATTENDANCE, _attendance("a1")), InsertOp(RecordKind.ADVANCE, _advance("e1"))])

    assert store.get(RecordKind.ATTENDANCE, "a1") is not None
    assert store.get(RecordKind.ADVANCE, "e1") is not None


def test_failed_guard_leaves_store_untouched():
    store = LocalStore()
    store.commit_batch([InsertOp(RecordKind.ATTENDANCE, _attendance("a1")), InsertOp(RecordKind.ADVANCE, _advance("e1"))])
    drained = replace(_advance("e1"), remaining_amount=Decimal("0"))

    with pytest.raises(ConcurrencyConflict):
        store.commit_batch(
            [
                UpdateOp(RecordKind.ADVANCE, drained, {"remaining_amount": Decimal("100")}),
                InsertOp(RecordKind.ATTENDANCE, _attendance("a2", day=2)),
                UpdateOp(
                    RecordKind.ATTENDANCE,
                    replace(_attendance("a1"), status=AttendanceStatus.VERIFIED),
                    {"status": AttendanceStatus.VERIFIED},
                ),
            ]
        )

    assert store.get(RecordKind.ADVANCE, "e1").remaining_amount == Decimal("100")
    assert store.get(RecordKind.ATTENDANCE, "a2") is None


def test_later_operations_see_earlier_staged_writes():
    store = LocalStore()
    store.commit_batch(
        [
            InsertOp(RecordKind.ATTENDANCE, _attendance("a1")),
            UpdateOp(
                RecordKind.ATTENDANCE,
                replace(_attendance("a1"), status=AttendanceStatus.VERIFIED),
                {"status": AttendanceStatus.SUBMITTED},
            ),
        ]
    )
    assert store.get(RecordKind.ATTENDANCE, "a1").status == AttendanceStatus.VERIFIED


def test_duplicate_lecture_key_is_a_conflict():
    store = LocalStore()
    store.commit_batch([InsertOp(RecordKind.ATTENDANCE, _attendance("a1"))])

    with pytest.raises(ConcurrencyConflict):
        store.commit_batch([InsertOp(RecordKind.ATTENDANCE, _attendance("a2"))])


def test_delete_of_missing_record_is_a_conflict():
    store = LocalStore()
    with pytest.raises(ConcurrencyConflict):
        store.commit_batch([DeleteOp(RecordKind.ATTENDANCE, "missing", {})])


def test_malformed_records_are_rejected():
    store = LocalStore()

    with pytest.raises(ValidationError):
        store.commit_batch([InsertOp(RecordKind.ATTENDANCE, _advance("e1"))])
    with pytest.raises(ValidationError):
        store.commit_batch([InsertOp(RecordKind.ATTENDANCE, replace(_attendance("a1"), status=AttendanceStatus.PAID))])
    with pytest.raises(ValidationError):
        store.commit_batch([InsertOp(RecordKind.ADVANCE, replace(_advance("e1"), remaining_amount=Decimal("150")))])

    assert store.select(RecordKind.ATTENDANCE) == []
    assert store.select(RecordKind.ADVANCE) == []
