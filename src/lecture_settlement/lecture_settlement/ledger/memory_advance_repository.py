from __future__ import annotations

from typing import Sequence

from ..core.enums import RecordKind
from ..database.memory_records import InMemoryRecordRepository
from .model import AdvanceLedgerEntry
from .repository import AdvanceRepository


class InMemoryAdvanceRepository(InMemoryRecordRepository[AdvanceLedgerEntry], AdvanceRepository):
    kind = RecordKind.ADVANCE
    record_type = AdvanceLedgerEntry

    def list_outstanding(self, teacher_id: str) -> Sequence[AdvanceLedgerEntry]:
        rows = self.query({"teacher_id": teacher_id}, order_by="date")
        return [e for e in rows if e.is_outstanding]

    def list_for_teacher(self, teacher_id: str, *, limit: int = 200) -> Sequence[AdvanceLedgerEntry]:
        return self.query({"teacher_id": teacher_id}, order_by="date", descending=True, limit=limit)
