from __future__ import annotations

from datetime import date
from typing import Any, Mapping, Optional, Protocol, Sequence

from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        raise NotImplementedError

    def get(self, attendance_id: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def query(
        self,
        filters: Mapping[str, Any],
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def update(self, record: AttendanceRecord, *, expected: Optional[Mapping[str, Any]] = None) -> AttendanceRecord:
        """Replace the record if the stored fields still match `expected`."""

        raise NotImplementedError

    def delete(self, attendance_id: str, *, expected: Optional[Mapping[str, Any]] = None) -> None:
        raise NotImplementedError

    def get_by_key(self, teacher_id: str, class_id: str, lecture_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_verified(self, teacher_id: str, class_id: str) -> Sequence[AttendanceRecord]:
        """VERIFIED records for one class, oldest lecture first."""

        raise NotImplementedError

    def list_for_teacher(
        self,
        teacher_id: str,
        *,
        class_id: Optional[str] = None,
        limit: int = 200,
    ) -> Sequence[AttendanceRecord]:
        """Newest lecture first."""

        raise NotImplementedError
