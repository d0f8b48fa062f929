from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class AdvanceLedgerEntry:
    """Money advanced to a teacher and the part of it still to be recovered."""

    entry_id: str
    teacher_id: str
    amount: Decimal
    remaining_amount: Decimal
    date: datetime
    notes: Optional[str] = None

    @property
    def is_outstanding(self) -> bool:
        return self.remaining_amount > 0


@dataclass(frozen=True)
class DeductionPlan:
    """Result of planning an oldest-first deduction.

    `applied` is what will actually be recovered; `operations` must be
    committed in the same batch as the payment they back.
    """

    requested: Decimal
    applied: Decimal
    operations: tuple = ()
