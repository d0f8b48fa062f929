from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Optional, Sequence

from .attendance.model import AttendanceRecord
from .attendance.service import AttendanceStateMachine
from .audit.model import SystemEvent
from .audit.service import AuditTrail
from .common.datetime_utils import coerce_lecture_date
from .core.actor import Actor
from .core.constants import DEFAULT_ACTIVITY_LIMIT, DEFAULT_HISTORY_LIMIT
from .ledger.model import AdvanceLedgerEntry
from .ledger.service import AdvanceLedger
from .payments.model import PaymentRecord, SettlementCandidate, SettlementProposal, SettlementResult
from .payments.service import RequestLike, SettlementProcessor


class SettlementEngine:
    """Entry point used by the API layer.

    Thin facade over the state machine, the ledger and the settlement
    processor; it is agnostic to which storage backing they run on.
    """

    def __init__(
        self,
        attendance: AttendanceStateMachine,
        ledger: AdvanceLedger,
        settlements: SettlementProcessor,
        audit: AuditTrail,
    ):
        self._attendance = attendance
        self._ledger = ledger
        self._settlements = settlements
        self._audit = audit

    def toggle_attendance(
        self, actor: Actor, teacher_id: str, class_id: str, lecture_date: date | str
    ) -> Optional[AttendanceRecord]:
        return self._attendance.toggle(
            actor=actor,
            teacher_id=teacher_id,
            class_id=class_id,
            lecture_date=coerce_lecture_date(lecture_date),
        )

    def verify_attendance(self, actor: Actor, attendance_id: str) -> AttendanceRecord:
        return self._attendance.verify(actor=actor, attendance_id=attendance_id)

    def propose_settlement(self, teacher_id: str, *, pay_all_pending: bool = False) -> SettlementProposal:
        return self._settlements.propose(teacher_id, pay_all_pending=pay_all_pending)

    def quote_settlement(self, teacher_id: str, class_id: str, lecture_count: Any) -> SettlementCandidate:
        return self._settlements.quote(teacher_id, class_id, lecture_count)

    def commit_settlement(
        self,
        actor: Actor,
        teacher_id: str,
        requests: Iterable[RequestLike],
        advance_deduction_total: Any = 0,
        cash_payout_override: Any = None,
    ) -> SettlementResult:
        return self._settlements.commit(
            actor=actor,
            teacher_id=teacher_id,
            requests=requests,
            advance_deduction_total=advance_deduction_total,
            cash_payout=cash_payout_override,
        )

    def grant_advance(self, actor: Actor, teacher_id: str, amount: Any, notes: Optional[str] = None) -> AdvanceLedgerEntry:
        return self._ledger.grant(actor=actor, teacher_id=teacher_id, amount=amount, notes=notes)

    def get_advance_balance(self, teacher_id: str) -> Decimal:
        return self._ledger.balance(teacher_id)

    def list_advances(self, teacher_id: str, *, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[AdvanceLedgerEntry]:
        return self._ledger.entries(teacher_id, limit=limit)

    def list_attendance(
        self, teacher_id: str, *, class_id: Optional[str] = None, limit: int = DEFAULT_HISTORY_LIMIT
    ) -> Sequence[AttendanceRecord]:
        return self._attendance.history(teacher_id, class_id=class_id, limit=limit)

    def list_payments(self, *, teacher_id: Optional[str] = None, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[PaymentRecord]:
        return self._settlements.history(teacher_id=teacher_id, limit=limit)

    def recent_activity(self, limit: int = DEFAULT_ACTIVITY_LIMIT) -> Sequence[SystemEvent]:
        return self._audit.recent_activity(limit)
