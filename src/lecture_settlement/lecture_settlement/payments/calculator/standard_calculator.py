from __future__ import annotations

from decimal import Decimal

from ...common.money import ZERO, round_currency
from ...roster.model import ClassConfig, TeacherAssignment
from .base import PayrollCalculator


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule: rate covers one full cycle of batch_size lectures.

    Suggested pay is at most one cycle; amounts round half-up to whole units.
    """

    def rate_per_lecture(self, assignment: TeacherAssignment, cls: ClassConfig) -> Decimal:
        if cls.batch_size <= 0:
            return ZERO
        return assignment.rate / Decimal(cls.batch_size)

    def amount_for(self, lecture_count: int, assignment: TeacherAssignment, cls: ClassConfig) -> Decimal:
        if cls.batch_size <= 0 or lecture_count <= 0:
            return ZERO
        return round_currency(assignment.rate * Decimal(lecture_count) / Decimal(cls.batch_size))

    def default_lecture_count(self, pending_count: int, cls: ClassConfig) -> int:
        if cls.batch_size <= 0:
            return pending_count
        return min(pending_count, cls.batch_size)
