from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..core.enums import AttendanceStatus, RecordKind
from ..database.mysql_base import as_date, db_cursor, fetchall, fetchone
from ..database.mysql_batch import TableSpec
from ..database.mysql_records import MySQLRecordRepository
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = ("attendance_id", "teacher_id", "class_id", "lecture_date", "status", "payment_id", "marked_at")


def _to_row(r: AttendanceRecord) -> Dict[str, Any]:
    return {
        "attendance_id": r.attendance_id,
        "teacher_id": r.teacher_id,
        "class_id": r.class_id,
        "lecture_date": r.lecture_date,
        "status": r.status.value,
        "payment_id": r.payment_id,
        "marked_at": r.marked_at,
    }


def _from_row(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=str(r["attendance_id"]),
        teacher_id=str(r["teacher_id"]),
        class_id=str(r["class_id"]),
        lecture_date=as_date(r["lecture_date"]),
        status=AttendanceStatus(r["status"]),
        marked_at=r["marked_at"],
        payment_id=r.get("payment_id"),
    )


ATTENDANCE_TABLE = TableSpec(
    table="attendance_records",
    id_column="attendance_id",
    columns=_COLUMNS,
    to_row=_to_row,
    from_row=_from_row,
)


class MySQLAttendanceRepository(MySQLRecordRepository[AttendanceRecord], AttendanceRepository):
    kind = RecordKind.ATTENDANCE

    def get_by_key(self, teacher_id: str, class_id: str, lecture_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {ATTENDANCE_TABLE.select_list}
                FROM attendance_records
                WHERE teacher_id=%s AND class_id=%s AND lecture_date=%s
                """,
                (teacher_id, class_id, lecture_date),
            )
            row = fetchone(cur)
            return _from_row(row) if row else None

    def list_verified(self, teacher_id: str, class_id: str) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {ATTENDANCE_TABLE.select_list}
                FROM attendance_records
                WHERE teacher_id=%s AND class_id=%s AND status=%s
                ORDER BY lecture_date ASC, attendance_id ASC
                """,
                (teacher_id, class_id, AttendanceStatus.VERIFIED.value),
            )
            return [_from_row(r) for r in fetchall(cur)]

    def list_for_teacher(
        self,
        teacher_id: str,
        *,
        class_id: Optional[str] = None,
        limit: int = 200,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["teacher_id=%s"]
        params: list[object] = [teacher_id]
        if class_id is not None:
            clauses.append("class_id=%s")
            params.append(class_id)
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {ATTENDANCE_TABLE.select_list}
                FROM attendance_records
                WHERE {" AND ".join(clauses)}
                ORDER BY lecture_date DESC, class_id ASC
                LIMIT %s
                """,
                tuple(params),
            )
            return [_from_row(r) for r in fetchall(cur)]
