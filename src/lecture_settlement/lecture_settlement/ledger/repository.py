from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence

from .model import AdvanceLedgerEntry


class AdvanceRepository(Protocol):
    def create(self, entry: AdvanceLedgerEntry) -> AdvanceLedgerEntry:
        raise NotImplementedError

    def get(self, entry_id: str) -> Optional[AdvanceLedgerEntry]:
        raise NotImplementedError

    def query(
        self,
        filters: Mapping[str, Any],
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> Sequence[AdvanceLedgerEntry]:
        raise NotImplementedError

    def update(self, entry: AdvanceLedgerEntry, *, expected: Optional[Mapping[str, Any]] = None) -> AdvanceLedgerEntry:
        raise NotImplementedError

    def delete(self, entry_id: str, *, expected: Optional[Mapping[str, Any]] = None) -> None:
        """Part of the generic contract; the ledger itself never deletes entries."""

        raise NotImplementedError

    def list_outstanding(self, teacher_id: str) -> Sequence[AdvanceLedgerEntry]:
        """Entries with remaining_amount > 0, oldest first."""

        raise NotImplementedError

    def list_for_teacher(self, teacher_id: str, *, limit: int = 200) -> Sequence[AdvanceLedgerEntry]:
        """All entries, newest first."""

        raise NotImplementedError
