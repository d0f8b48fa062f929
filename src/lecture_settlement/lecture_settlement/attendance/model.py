from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one lecture a teacher delivered for a class on a date."""

    attendance_id: str
    teacher_id: str
    class_id: str
    lecture_date: date
    status: AttendanceStatus
    marked_at: datetime
    payment_id: Optional[str] = None

    @property
    def key(self) -> tuple[str, str, date]:
        return (self.teacher_id, self.class_id, self.lecture_date)
