from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import RecordKind
from ..database.memory_records import InMemoryRecordRepository
from .model import PaymentRecord
from .repository import PaymentRepository


class InMemoryPaymentRepository(InMemoryRecordRepository[PaymentRecord], PaymentRepository):
    kind = RecordKind.PAYMENT
    record_type = PaymentRecord

    def list_recent(self, *, teacher_id: Optional[str] = None, limit: int = 200) -> Sequence[PaymentRecord]:
        filters = {"teacher_id": teacher_id} if teacher_id is not None else {}
        return self.query(filters, order_by="date_paid", descending=True, limit=limit)
