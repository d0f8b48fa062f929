from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ContextManager, Mapping, Protocol, Sequence, Union

from ..core.enums import RecordKind

ID_FIELDS: dict[RecordKind, str] = {
    RecordKind.ATTENDANCE: "attendance_id",
    RecordKind.ADVANCE: "entry_id",
    RecordKind.PAYMENT: "payment_id",
}

UNIQUE_KEYS: dict[RecordKind, tuple[str, ...]] = {
    RecordKind.ATTENDANCE: ("teacher_id", "class_id", "lecture_date"),
}


def record_id(kind: RecordKind, record: Any) -> str:
    return getattr(record, ID_FIELDS[kind])


@dataclass(frozen=True)
class InsertOp:
    kind: RecordKind
    record: Any


@dataclass(frozen=True)
class UpdateOp:
    """Replace a stored record, provided its current fields match `expected`."""

    kind: RecordKind
    record: Any
    expected: Mapping[str, Any] = field(default_factory=dict)

    @property
    def record_id(self) -> str:
        return record_id(self.kind, self.record)


@dataclass(frozen=True)
class DeleteOp:
    kind: RecordKind
    record_id: str
    expected: Mapping[str, Any] = field(default_factory=dict)


BatchOperation = Union[InsertOp, UpdateOp, DeleteOp]


class BatchWriter(Protocol):
    def commit_batch(self, operations: Sequence[BatchOperation]) -> None:
        """Apply every operation or none of them.

        Raises ConcurrencyConflict when a guard does not hold and
        ValidationError when a record shape is invalid.
        """

        raise NotImplementedError

    def serialized(self, teacher_id: str) -> ContextManager[None]:
        """Mutual exclusion for multi-read settlement work on one teacher."""

        raise NotImplementedError
