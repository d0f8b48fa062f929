from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus, RecordKind
from ..database.memory_records import InMemoryRecordRepository
from .model import AttendanceRecord
from .repository import AttendanceRepository


class InMemoryAttendanceRepository(InMemoryRecordRepository[AttendanceRecord], AttendanceRepository):
    kind = RecordKind.ATTENDANCE
    record_type = AttendanceRecord

    def get_by_key(self, teacher_id: str, class_id: str, lecture_date: date) -> Optional[AttendanceRecord]:
        rows = self.query({"teacher_id": teacher_id, "class_id": class_id, "lecture_date": lecture_date}, limit=1)
        return rows[0] if rows else None

    def list_verified(self, teacher_id: str, class_id: str) -> Sequence[AttendanceRecord]:
        return self.query(
            {"teacher_id": teacher_id, "class_id": class_id, "status": AttendanceStatus.VERIFIED},
            order_by="lecture_date",
        )

    def list_for_teacher(
        self,
        teacher_id: str,
        *,
        class_id: Optional[str] = None,
        limit: int = 200,
    ) -> Sequence[AttendanceRecord]:
        filters = {"teacher_id": teacher_id}
        if class_id is not None:
            filters["class_id"] = class_id
        return self.query(filters, order_by="lecture_date", descending=True, limit=limit)
