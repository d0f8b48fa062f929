from __future__ import annotations

from typing import Any, Generic, Mapping, Optional, Sequence, TypeVar

from ..core.enums import RecordKind
from ..core.exceptions import ValidationError
from .batch import ID_FIELDS, DeleteOp, InsertOp, UpdateOp
from .memory_store import LocalStore

R = TypeVar("R")


class InMemoryRecordRepository(Generic[R]):
    """Shared create/get/query/update/delete over one LocalStore table."""

    kind: RecordKind
    record_type: type

    def __init__(self, store: LocalStore):
        self._store = store

    def create(self, record: R) -> R:
        self._store.commit_batch([InsertOp(self.kind, record)])
        return record

    def get(self, record_id: str) -> Optional[R]:
        return self._store.get(self.kind, record_id)

    def query(
        self,
        filters: Mapping[str, Any],
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> Sequence[R]:
        fields = self.record_type.__dataclass_fields__
        for name in list(filters) + ([order_by] if order_by else []):
            if name not in fields:
                raise ValidationError(f"Unknown field: {name}")

        rows = self._store.select(
            self.kind,
            lambda r: all(getattr(r, k) == v for k, v in filters.items()),
        )
        id_field = ID_FIELDS[self.kind]
        rows.sort(key=lambda r: getattr(r, id_field))
        if order_by:
            rows.sort(key=lambda r: getattr(r, order_by), reverse=descending)
        if limit is not None:
            rows = rows[: int(limit)]
        return rows

    def update(self, record: R, *, expected: Optional[Mapping[str, Any]] = None) -> R:
        self._store.commit_batch([UpdateOp(self.kind, record, dict(expected or {}))])
        return record

    def delete(self, record_id: str, *, expected: Optional[Mapping[str, Any]] = None) -> None:
        self._store.commit_batch([DeleteOp(self.kind, record_id, dict(expected or {}))])
