from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence, Union

from ..attendance.service import AttendanceStateMachine
from ..audit.service import AuditTrail
from ..common.datetime_utils import now_local
from ..common.logger import log
from ..common.money import ZERO, format_amount
from ..common.validators import (
    require_non_empty,
    require_non_negative_amount,
    require_positive_amount,
    require_positive_int,
)
from ..core.actor import Actor
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import EventType, RecordKind
from ..core.exceptions import AuthorizationError, InsufficientVerifiedRecords, ValidationError
from ..database.batch import BatchOperation, BatchWriter, InsertOp
from ..ledger.service import AdvanceLedger
from ..roster.model import Teacher
from ..roster.repository import RosterRepository
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .model import PaymentRecord, PaymentRequest, SettlementCandidate, SettlementProposal, SettlementResult
from .repository import PaymentRepository

RequestLike = Union[PaymentRequest, Mapping[str, Any]]

OVERFLOW_NOTE = "Rounding overflow from settlement"


class SettlementProcessor:
    """Turns VERIFIED lectures into payments, netted against the advance ledger.

    `commit` re-reads the verified lectures under the teacher's lock and
    writes the ledger deduction, the payments, the PAID flips and any
    rounding-overflow advance in one batch.
    """

    def __init__(
        self,
        attendance: AttendanceStateMachine,
        ledger: AdvanceLedger,
        payments: PaymentRepository,
        roster: RosterRepository,
        writer: BatchWriter,
        audit: AuditTrail,
        *,
        calculator: Optional[PayrollCalculator] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._ledger = ledger
        self._payments = payments
        self._roster = roster
        self._writer = writer
        self._audit = audit
        self._calculator = calculator or StandardPayrollCalculator()
        self._clock = clock

    # Proposals (advisory reads, not fresh at commit time)
    def compute_candidates(self, teacher_id: str, *, pay_all_pending: bool = False) -> list[SettlementCandidate]:
        self._require_teacher(teacher_id)
        candidates: list[SettlementCandidate] = []

        for asg in self._roster.list_assignments(teacher_id):
            cls = self._roster.get_class(asg.class_id)
            if not cls:
                continue
            pending = self._attendance.payable(teacher_id, asg.class_id)
            count = len(pending) if pay_all_pending else self._calculator.default_lecture_count(len(pending), cls)
            selected = pending[:count]
            candidates.append(
                SettlementCandidate(
                    class_id=asg.class_id,
                    class_name=cls.name,
                    subject=asg.subject,
                    pending_count=len(pending),
                    rate_per_lecture=self._calculator.rate_per_lecture(asg, cls),
                    suggested_lecture_count=count,
                    suggested_amount=self._calculator.amount_for(count, asg, cls),
                    start_date=selected[0].lecture_date if selected else None,
                    end_date=selected[-1].lecture_date if selected else None,
                )
            )
        return candidates

    def propose(self, teacher_id: str, *, pay_all_pending: bool = False) -> SettlementProposal:
        candidates = self.compute_candidates(teacher_id, pay_all_pending=pay_all_pending)
        return SettlementProposal(
            teacher_id=teacher_id,
            candidates=candidates,
            advance_balance=self._ledger.balance(teacher_id),
        )

    def quote(self, teacher_id: str, class_id: str, lecture_count: Any) -> SettlementCandidate:
        """Price an operator override, clamped to [0, pending]."""
        self._require_teacher(teacher_id)
        asg = self._roster.get_assignment(teacher_id, class_id)
        cls = self._roster.get_class(class_id)
        if not asg or not cls:
            raise ValidationError(f"Class {class_id} is not assigned to teacher {teacher_id}")

        try:
            wanted = int(lecture_count or 0)
        except (TypeError, ValueError):
            raise ValidationError("lecture_count must be a whole number")

        pending = self._attendance.payable(teacher_id, class_id)
        count = min(max(0, wanted), len(pending))
        selected = pending[:count]
        return SettlementCandidate(
            class_id=class_id,
            class_name=cls.name,
            subject=asg.subject,
            pending_count=len(pending),
            rate_per_lecture=self._calculator.rate_per_lecture(asg, cls),
            suggested_lecture_count=count,
            suggested_amount=self._calculator.amount_for(count, asg, cls),
            start_date=selected[0].lecture_date if selected else None,
            end_date=selected[-1].lecture_date if selected else None,
        )

    def history(self, *, teacher_id: Optional[str] = None, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[PaymentRecord]:
        return self._payments.list_recent(teacher_id=teacher_id, limit=limit)

    # Commit
    def commit(
        self,
        *,
        actor: Actor,
        teacher_id: str,
        requests: Iterable[RequestLike],
        advance_deduction_total: Any = 0,
        cash_payout: Any = None,
    ) -> SettlementResult:
        if not actor.is_admin:
            raise AuthorizationError("Only admins can settle payments")

        teacher = self._require_teacher(teacher_id)
        reqs = self._validate_requests(teacher.teacher_id, requests)
        deduction_total = require_non_negative_amount(advance_deduction_total, "advance_deduction_total")
        cash = None if cash_payout is None else require_non_negative_amount(cash_payout, "cash_payout")
        if not reqs and not (cash and cash > ZERO):
            raise ValidationError("Nothing to settle")

        gross_total = sum((r.amount for r in reqs), ZERO)

        with self._writer.serialized(teacher.teacher_id):
            # Fresh read under the lock; proposals shown to the operator may be stale.
            selections = {}
            for req in reqs:
                verified = self._attendance.payable(teacher.teacher_id, req.class_id)
                if req.lecture_count > len(verified):
                    raise InsufficientVerifiedRecords(
                        f"Class {req.class_id}: {req.lecture_count} lecture(s) requested, "
                        f"only {len(verified)} verified"
                    )
                selections[req.class_id] = verified[: req.lecture_count]

            plan = self._ledger.plan_deduction(teacher.teacher_id, min(deduction_total, gross_total))
            ops: list[BatchOperation] = list(plan.operations)

            now = self._clock()
            pool = plan.applied
            payments: list[PaymentRecord] = []
            # Caller order decides which class absorbs the deduction first.
            for req in reqs:
                this_deduction = min(req.amount, pool)
                pool -= this_deduction
                records = selections[req.class_id]
                payment = PaymentRecord(
                    payment_id=uuid.uuid4().hex,
                    teacher_id=teacher.teacher_id,
                    class_id=req.class_id,
                    gross_amount=req.amount,
                    advance_deduction=this_deduction,
                    net_disbursement=req.amount - this_deduction,
                    lecture_count=req.lecture_count,
                    date_paid=now,
                    start_date_covered=records[0].lecture_date,
                    end_date_covered=records[-1].lecture_date,
                )
                ops.append(InsertOp(RecordKind.PAYMENT, payment))
                ops.extend(self._attendance.paid_operations(records, payment.payment_id))
                payments.append(payment)

            net_total = sum((p.net_disbursement for p in payments), ZERO)
            overflow = None
            if cash is not None and cash > net_total:
                overflow = self._ledger.new_entry(teacher.teacher_id, cash - net_total, notes=OVERFLOW_NOTE, when=now)
                ops.append(InsertOp(RecordKind.ADVANCE, overflow))

            self._writer.commit_batch(ops)

        log.info(
            "settled %d payment(s) for %s: gross=%s advance=%s net=%s overflow=%s",
            len(payments),
            teacher.teacher_id,
            gross_total,
            plan.applied,
            net_total,
            overflow.amount if overflow else ZERO,
        )
        for p in payments:
            self._audit.emit(
                EventType.PAYMENT_PROCESSED,
                teacher.name,
                f"Settled {format_amount(p.gross_amount)} for {p.lecture_count} lectures.",
                p.gross_amount,
            )
        if overflow:
            self._audit.emit(
                EventType.ADVANCE_GRANTED,
                teacher.name,
                f"Banked rounding overflow of {format_amount(overflow.amount)}",
                overflow.amount,
            )

        return SettlementResult(payments=payments, advance_applied=plan.applied, overflow_entry=overflow, net_total=net_total)

    def _require_teacher(self, teacher_id: str) -> Teacher:
        teacher = self._roster.get_teacher(require_non_empty(teacher_id, "teacher_id"))
        if not teacher:
            raise ValidationError(f"Unknown teacher: {teacher_id}")
        return teacher

    def _validate_requests(self, teacher_id: str, requests: Iterable[RequestLike]) -> list[PaymentRequest]:
        out: list[PaymentRequest] = []
        seen: set[str] = set()
        for raw in requests or []:
            req = self._coerce_request(raw)
            if req.class_id in seen:
                raise ValidationError(f"Class {req.class_id} appears more than once")
            if not self._roster.get_assignment(teacher_id, req.class_id) or not self._roster.get_class(req.class_id):
                raise ValidationError(f"Class {req.class_id} is not assigned to teacher {teacher_id}")
            seen.add(req.class_id)
            out.append(req)
        return out

    @staticmethod
    def _coerce_request(raw: RequestLike) -> PaymentRequest:
        if isinstance(raw, PaymentRequest):
            class_id, lecture_count, amount = raw.class_id, raw.lecture_count, raw.amount
        elif isinstance(raw, Mapping):
            class_id, lecture_count, amount = raw.get("class_id"), raw.get("lecture_count"), raw.get("amount")
        else:
            raise ValidationError("Each request needs class_id, lecture_count and amount")
        return PaymentRequest(
            class_id=require_non_empty(class_id, "class_id"),
            lecture_count=require_positive_int(lecture_count, "lecture_count"),
            amount=require_positive_amount(amount, "amount"),
        )
