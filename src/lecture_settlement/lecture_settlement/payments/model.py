from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..ledger.model import AdvanceLedgerEntry


@dataclass(frozen=True)
class PaymentRecord:
    """Immutable record of one settled block of lectures for a class."""

    payment_id: str
    teacher_id: str
    class_id: str
    gross_amount: Decimal
    advance_deduction: Decimal
    net_disbursement: Decimal
    lecture_count: int
    date_paid: datetime
    start_date_covered: date
    end_date_covered: date


@dataclass(frozen=True)
class PaymentRequest:
    class_id: str
    lecture_count: int
    amount: Decimal


@dataclass(frozen=True)
class SettlementCandidate:
    """Read-model row for one assignment of the teacher."""

    class_id: str
    class_name: str
    subject: Optional[str]
    pending_count: int
    rate_per_lecture: Decimal
    suggested_lecture_count: int
    suggested_amount: Decimal
    start_date: Optional[date] = None
    end_date: Optional[date] = None


@dataclass(frozen=True)
class SettlementProposal:
    teacher_id: str
    candidates: list[SettlementCandidate]
    advance_balance: Decimal

    @property
    def gross_total(self) -> Decimal:
        return sum((c.suggested_amount for c in self.candidates), Decimal("0"))

    @property
    def applicable_advance(self) -> Decimal:
        return min(self.gross_total, self.advance_balance)

    @property
    def net_total(self) -> Decimal:
        return self.gross_total - self.applicable_advance


@dataclass(frozen=True)
class SettlementResult:
    payments: list[PaymentRecord]
    advance_applied: Decimal
    overflow_entry: Optional[AdvanceLedgerEntry] = None
    net_total: Decimal = field(default=Decimal("0"))
