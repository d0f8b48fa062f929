from __future__ import annotations

import threading
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from ..common.money import to_money
from .model import ClassConfig, Teacher, TeacherAssignment
from .repository import RosterRepository


class InMemoryRosterRepository(RosterRepository):
    """Roster for the local backing; the seeding helpers stand in for the roster subsystem."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._teachers: dict[str, Teacher] = {}
        self._classes: dict[str, ClassConfig] = {}
        self._assignments: dict[tuple[str, str], TeacherAssignment] = {}

    def add_teacher(self, teacher_id: str, name: str, phone: Optional[str] = None) -> Teacher:
        teacher = Teacher(teacher_id=teacher_id, name=name, phone=phone)
        with self._lock:
            self._teachers[teacher_id] = teacher
        return teacher

    def add_class(self, class_id: str, name: str, batch_size: int) -> ClassConfig:
        cls = ClassConfig(class_id=class_id, name=name, batch_size=int(batch_size))
        with self._lock:
            self._classes[class_id] = cls
        return cls

    def assign(
        self,
        teacher_id: str,
        class_id: str,
        rate: Decimal | int | str,
        *,
        subject: Optional[str] = None,
        active_from: Optional[date] = None,
    ) -> TeacherAssignment:
        asg = TeacherAssignment(
            teacher_id=teacher_id,
            class_id=class_id,
            rate=to_money(rate, "rate"),
            subject=subject,
            active_from=active_from,
        )
        with self._lock:
            self._assignments[(teacher_id, class_id)] = asg
        return asg

    def get_teacher(self, teacher_id: str) -> Optional[Teacher]:
        return self._teachers.get(teacher_id)

    def list_teachers(self) -> Sequence[Teacher]:
        return sorted(self._teachers.values(), key=lambda t: t.name)

    def get_class(self, class_id: str) -> Optional[ClassConfig]:
        return self._classes.get(class_id)

    def list_assignments(self, teacher_id: str) -> Sequence[TeacherAssignment]:
        with self._lock:
            rows = [a for (tid, _), a in self._assignments.items() if tid == teacher_id]
        return sorted(rows, key=lambda a: a.class_id)

    def get_assignment(self, teacher_id: str, class_id: str) -> Optional[TeacherAssignment]:
        return self._assignments.get((teacher_id, class_id))
