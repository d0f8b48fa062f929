from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence

from .model import PaymentRecord


class PaymentRepository(Protocol):
    def create(self, payment: PaymentRecord) -> PaymentRecord:
        raise NotImplementedError

    def get(self, payment_id: str) -> Optional[PaymentRecord]:
        raise NotImplementedError

    def query(
        self,
        filters: Mapping[str, Any],
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> Sequence[PaymentRecord]:
        raise NotImplementedError

    def update(self, payment: PaymentRecord, *, expected: Optional[Mapping[str, Any]] = None) -> PaymentRecord:
        """Part of the generic contract; payments are never mutated once created."""

        raise NotImplementedError

    def delete(self, payment_id: str, *, expected: Optional[Mapping[str, Any]] = None) -> None:
        raise NotImplementedError

    def list_recent(self, *, teacher_id: Optional[str] = None, limit: int = 200) -> Sequence[PaymentRecord]:
        """Newest date_paid first."""

        raise NotImplementedError
