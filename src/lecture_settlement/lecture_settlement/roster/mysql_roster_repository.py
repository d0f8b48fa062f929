from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_date, as_decimal, db_cursor, fetchall, fetchone
from .model import ClassConfig, Teacher, TeacherAssignment
from .repository import RosterRepository


def _assignment(r: dict) -> TeacherAssignment:
    return TeacherAssignment(
        teacher_id=str(r["teacher_id"]),
        class_id=str(r["class_id"]),
        rate=as_decimal(r["rate"]),
        subject=r.get("subject"),
        active_from=as_date(r["active_from"]) if r.get("active_from") else None,
    )


class MySQLRosterRepository(RosterRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_teacher(self, teacher_id: str) -> Optional[Teacher]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT teacher_id, name, phone FROM teachers WHERE teacher_id=%s", (teacher_id,))
            r = fetchone(cur)
            if not r:
                return None
            return Teacher(teacher_id=str(r["teacher_id"]), name=r["name"], phone=r.get("phone"))

    def list_teachers(self) -> Sequence[Teacher]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT teacher_id, name, phone FROM teachers ORDER BY name ASC")
            return [Teacher(teacher_id=str(r["teacher_id"]), name=r["name"], phone=r.get("phone")) for r in fetchall(cur)]

    def get_class(self, class_id: str) -> Optional[ClassConfig]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT class_id, name, batch_size FROM classes WHERE class_id=%s", (class_id,))
            r = fetchone(cur)
            if not r:
                return None
            return ClassConfig(class_id=str(r["class_id"]), name=r["name"], batch_size=int(r["batch_size"]))

    def list_assignments(self, teacher_id: str) -> Sequence[TeacherAssignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT teacher_id, class_id, subject, rate, active_from
                FROM teacher_assignments
                WHERE teacher_id=%s
                ORDER BY class_id ASC
                """,
                (teacher_id,),
            )
            return [_assignment(r) for r in fetchall(cur)]

    def get_assignment(self, teacher_id: str, class_id: str) -> Optional[TeacherAssignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT teacher_id, class_id, subject, rate, active_from
                FROM teacher_assignments
                WHERE teacher_id=%s AND class_id=%s
                """,
                (teacher_id, class_id),
            )
            r = fetchone(cur)
            return _assignment(r) if r else None
