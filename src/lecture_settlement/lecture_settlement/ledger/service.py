from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Optional, Sequence

from ..audit.service import AuditTrail
from ..common.datetime_utils import now_local
from ..common.logger import log
from ..common.money import ZERO, format_amount
from ..common.validators import require_non_empty, require_non_negative_amount, require_positive_amount
from ..core.actor import Actor
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import EventType, RecordKind
from ..core.exceptions import AuthorizationError, ValidationError
from ..database.batch import BatchWriter, UpdateOp
from ..roster.repository import RosterRepository
from .model import AdvanceLedgerEntry, DeductionPlan
from .repository import AdvanceRepository

DEFAULT_ADVANCE_NOTE = "Advance Payment"


class AdvanceLedger:
    """Per-teacher advances and their remaining balance.

    Deduction drains the oldest debt first and is clamped to what is
    outstanding; an overdraw is not an error.
    """

    def __init__(
        self,
        advances: AdvanceRepository,
        writer: BatchWriter,
        roster: RosterRepository,
        audit: AuditTrail,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._advances = advances
        self._writer = writer
        self._roster = roster
        self._audit = audit
        self._clock = clock

    def grant(self, *, actor: Actor, teacher_id: str, amount: Any, notes: Optional[str] = None) -> AdvanceLedgerEntry:
        if not actor.is_admin:
            raise AuthorizationError("Only admins can grant advances")
        teacher_id = require_non_empty(teacher_id, "teacher_id")
        amount = require_positive_amount(amount, "amount")
        teacher = self._roster.get_teacher(teacher_id)
        if not teacher:
            raise ValidationError(f"Unknown teacher: {teacher_id}")

        entry = self.new_entry(teacher_id, amount, notes=(notes or "").strip() or DEFAULT_ADVANCE_NOTE)
        self._advances.create(entry)
        log.info("advance of %s granted to %s", amount, teacher_id)
        self._audit.emit(EventType.ADVANCE_GRANTED, teacher.name, f"Granted advance of {format_amount(amount)}", amount)
        return entry

    def new_entry(
        self,
        teacher_id: str,
        amount: Decimal,
        *,
        notes: Optional[str] = None,
        when: Optional[datetime] = None,
    ) -> AdvanceLedgerEntry:
        """Build (not persist) a fresh entry with its full amount outstanding."""
        return AdvanceLedgerEntry(
            entry_id=uuid.uuid4().hex,
            teacher_id=teacher_id,
            amount=amount,
            remaining_amount=amount,
            date=when or self._clock(),
            notes=notes,
        )

    def balance(self, teacher_id: str) -> Decimal:
        return sum((e.remaining_amount for e in self._advances.list_outstanding(teacher_id)), ZERO)

    def entries(self, teacher_id: str, *, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[AdvanceLedgerEntry]:
        return self._advances.list_for_teacher(teacher_id, limit=limit)

    def plan_deduction(self, teacher_id: str, requested: Any) -> DeductionPlan:
        """Work out an oldest-first deduction without writing it.

        The returned operations are guarded on each entry's current
        remaining_amount and belong in the caller's batch.
        """
        requested = require_non_negative_amount(requested, "requested amount")
        still_to_deduct = requested
        ops: list[UpdateOp] = []

        for entry in self._advances.list_outstanding(teacher_id):
            if still_to_deduct <= ZERO:
                break
            take = min(entry.remaining_amount, still_to_deduct)
            ops.append(
                UpdateOp(
                    RecordKind.ADVANCE,
                    replace(entry, remaining_amount=entry.remaining_amount - take),
                    expected={"remaining_amount": entry.remaining_amount},
                )
            )
            still_to_deduct -= take

        return DeductionPlan(requested=requested, applied=requested - still_to_deduct, operations=tuple(ops))

    def deduct(self, teacher_id: str, requested: Any) -> Decimal:
        """Deduct on its own and return the amount actually applied."""
        teacher_id = require_non_empty(teacher_id, "teacher_id")
        with self._writer.serialized(teacher_id):
            plan = self.plan_deduction(teacher_id, requested)
            if plan.operations:
                self._writer.commit_batch(list(plan.operations))
        log.info("deducted %s of %s requested from %s advances", plan.applied, plan.requested, teacher_id)
        return plan.applied
