from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import ClassConfig, Teacher, TeacherAssignment


class RosterRepository(Protocol):
    """Read-only view of teachers, classes and rates owned by the roster subsystem."""

    def get_teacher(self, teacher_id: str) -> Optional[Teacher]:
        raise NotImplementedError

    def list_teachers(self) -> Sequence[Teacher]:
        raise NotImplementedError

    def get_class(self, class_id: str) -> Optional[ClassConfig]:
        raise NotImplementedError

    def list_assignments(self, teacher_id: str) -> Sequence[TeacherAssignment]:
        raise NotImplementedError

    def get_assignment(self, teacher_id: str, class_id: str) -> Optional[TeacherAssignment]:
        raise NotImplementedError
