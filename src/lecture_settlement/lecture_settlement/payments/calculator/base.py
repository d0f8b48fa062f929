from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

from ...roster.model import ClassConfig, TeacherAssignment


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for lecture pay)."""

    @abstractmethod
    def rate_per_lecture(self, assignment: TeacherAssignment, cls: ClassConfig) -> Decimal:
        raise NotImplementedError

    @abstractmethod
    def amount_for(self, lecture_count: int, assignment: TeacherAssignment, cls: ClassConfig) -> Decimal:
        raise NotImplementedError

    @abstractmethod
    def default_lecture_count(self, pending_count: int, cls: ClassConfig) -> int:
        raise NotImplementedError
