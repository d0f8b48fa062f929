from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, Iterable, Optional, Sequence

from ..audit.service import AuditTrail
from ..common.datetime_utils import now_local
from ..common.logger import log
from ..common.validators import require_non_empty
from ..core.actor import Actor
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import AttendanceStatus, EventType, RecordKind
from ..core.exceptions import (
    AuthorizationError,
    ConcurrencyConflict,
    PaidRecordLocked,
    RecordNotFound,
    ValidationError,
    VerifiedRecordImmutable,
)
from ..database.batch import UpdateOp
from ..roster.repository import RosterRepository
from .model import AttendanceRecord
from .repository import AttendanceRepository


class AttendanceStateMachine:
    """Creation, verification and locking of lecture marks.

    None -> SUBMITTED -> VERIFIED -> PAID. Toggle creates or deletes a
    mark; it never flips fields in place. Every write is guarded by the
    status observed when the record was read.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        roster: RosterRepository,
        audit: AuditTrail,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._roster = roster
        self._audit = audit
        self._clock = clock

    def toggle(self, *, actor: Actor, teacher_id: str, class_id: str, lecture_date: date) -> Optional[AttendanceRecord]:
        """Mark the lecture if unmarked, otherwise remove the mark.

        Returns the created record, or None when a mark was removed.
        """
        teacher_id = require_non_empty(teacher_id, "teacher_id")
        class_id = require_non_empty(class_id, "class_id")
        if not isinstance(lecture_date, date) or isinstance(lecture_date, datetime):
            raise ValidationError("lecture_date must be a date")
        if not actor.is_admin and actor.actor_id != teacher_id:
            raise AuthorizationError("Teachers can only mark their own lectures")

        teacher = self._roster.get_teacher(teacher_id)
        if not teacher:
            raise ValidationError(f"Unknown teacher: {teacher_id}")
        cls = self._roster.get_class(class_id)
        if not cls:
            raise ValidationError(f"Unknown class: {class_id}")

        existing = self._attendance.get_by_key(teacher_id, class_id, lecture_date)

        if existing is None:
            record = AttendanceRecord(
                attendance_id=uuid.uuid4().hex,
                teacher_id=teacher_id,
                class_id=class_id,
                lecture_date=lecture_date,
                status=AttendanceStatus.VERIFIED if actor.is_admin else AttendanceStatus.SUBMITTED,
                marked_at=self._clock(),
            )
            # A concurrent toggle that created the same key surfaces as ConcurrencyConflict.
            self._attendance.create(record)
            log.info("attendance marked %s/%s on %s as %s", teacher_id, class_id, lecture_date, record.status.value)
            self._audit.emit(
                EventType.ATTENDANCE_MARK,
                teacher.name,
                f"Marked attendance for {cls.name} on {lecture_date.isoformat()}",
            )
            return record

        if existing.status == AttendanceStatus.PAID:
            raise PaidRecordLocked("Paid records are locked")
        if existing.status != AttendanceStatus.SUBMITTED and not actor.is_admin:
            raise VerifiedRecordImmutable("Cannot modify verified records")

        self._attendance.delete(existing.attendance_id, expected={"status": existing.status})
        log.info("attendance removed %s/%s on %s", teacher_id, class_id, lecture_date)
        self._audit.emit(
            EventType.ATTENDANCE_REMOVE,
            teacher.name,
            f"Removed attendance for {cls.name} on {lecture_date.isoformat()}",
        )
        return None

    def verify(self, *, actor: Actor, attendance_id: str) -> AttendanceRecord:
        """Confirm a SUBMITTED lecture. Verifying a VERIFIED record is a no-op."""
        if not actor.is_admin:
            raise AuthorizationError("Only admins can verify attendance")

        record = self._require(attendance_id)
        if record.status == AttendanceStatus.PAID:
            raise PaidRecordLocked("Paid records are locked")
        if record.status == AttendanceStatus.VERIFIED:
            return record

        verified = replace(record, status=AttendanceStatus.VERIFIED)
        try:
            self._attendance.update(verified, expected={"status": AttendanceStatus.SUBMITTED})
        except ConcurrencyConflict:
            # Another admin may have verified it first; that is the state we wanted.
            current = self._require(attendance_id)
            if current.status == AttendanceStatus.VERIFIED:
                return current
            if current.status == AttendanceStatus.PAID:
                raise PaidRecordLocked("Paid records are locked")
            raise
        log.info("attendance %s verified", attendance_id)
        return verified

    def payable(self, teacher_id: str, class_id: str) -> Sequence[AttendanceRecord]:
        """VERIFIED lectures for a class, oldest first."""
        return self._attendance.list_verified(teacher_id, class_id)

    def history(self, teacher_id: str, *, class_id: Optional[str] = None, limit: int = DEFAULT_HISTORY_LIMIT):
        return self._attendance.list_for_teacher(teacher_id, class_id=class_id, limit=limit)

    @staticmethod
    def paid_operations(records: Iterable[AttendanceRecord], payment_id: str) -> list[UpdateOp]:
        """Guarded VERIFIED -> PAID flips, to be committed with the payment itself."""
        ops: list[UpdateOp] = []
        for record in records:
            if record.status != AttendanceStatus.VERIFIED:
                raise ValidationError(f"Attendance {record.attendance_id} is not verified")
            ops.append(
                UpdateOp(
                    RecordKind.ATTENDANCE,
                    replace(record, status=AttendanceStatus.PAID, payment_id=payment_id),
                    expected={"status": AttendanceStatus.VERIFIED, "payment_id": None},
                )
            )
        return ops

    def _require(self, attendance_id: str) -> AttendanceRecord:
        record = self._attendance.get(require_non_empty(attendance_id, "attendance_id"))
        if not record:
            raise RecordNotFound(f"Attendance {attendance_id} not found")
        return record
