from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional, Sequence

from ..common.logger import log
from ..common.validators import validate_record
from ..core.enums import RecordKind
from ..core.exceptions import ConcurrencyConflict
from .batch import UNIQUE_KEYS, BatchOperation, BatchWriter, DeleteOp, InsertOp, UpdateOp, record_id


class LocalStore(BatchWriter):
    """Single-process backing store.

    There are no native multi-record transactions here, so batches are
    applied in two phases: every operation is staged against a copy of the
    tables (shape validation and guards are checked on the staged state),
    then the copy replaces the live tables in one assignment. Any failure
    while staging discards the copy and leaves the live tables untouched.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._tables: dict[RecordKind, dict[str, Any]] = {kind: {} for kind in RecordKind}
        self._teacher_locks: dict[str, threading.Lock] = {}

    # Reads
    def get(self, kind: RecordKind, rid: str) -> Optional[Any]:
        with self._lock:
            return self._tables[kind].get(rid)

    def select(self, kind: RecordKind, predicate: Callable[[Any], bool] | None = None) -> list[Any]:
        with self._lock:
            rows = list(self._tables[kind].values())
        if predicate is None:
            return rows
        return [r for r in rows if predicate(r)]

    # Writes
    def commit_batch(self, operations: Sequence[BatchOperation]) -> None:
        with self._lock:
            staged = {kind: dict(table) for kind, table in self._tables.items()}
            for op in operations:
                self._stage(staged, op)
            self._tables = staged
        log.debug("local store committed %d operation(s)", len(operations))

    @contextmanager
    def serialized(self, teacher_id: str) -> Iterator[None]:
        with self._lock:
            lock = self._teacher_locks.setdefault(str(teacher_id), threading.Lock())
        with lock:
            yield

    def _stage(self, staged: dict[RecordKind, dict[str, Any]], op: BatchOperation) -> None:
        if isinstance(op, InsertOp):
            validate_record(op.kind, op.record)
            table = staged[op.kind]
            rid = record_id(op.kind, op.record)
            if rid in table:
                raise ConcurrencyConflict(f"{op.kind.value} {rid} already exists")
            unique = UNIQUE_KEYS.get(op.kind)
            if unique:
                key = tuple(getattr(op.record, f) for f in unique)
                if any(tuple(getattr(r, f) for f in unique) == key for r in table.values()):
                    raise ConcurrencyConflict(f"{op.kind.value} {key} already exists")
            table[rid] = op.record
        elif isinstance(op, UpdateOp):
            validate_record(op.kind, op.record)
            table = staged[op.kind]
            self._check_guard(op.kind, table.get(op.record_id), op.record_id, op.expected)
            table[op.record_id] = op.record
        elif isinstance(op, DeleteOp):
            table = staged[op.kind]
            self._check_guard(op.kind, table.get(op.record_id), op.record_id, op.expected)
            del table[op.record_id]
        else:
            raise TypeError(f"Unsupported batch operation: {op!r}")

    @staticmethod
    def _check_guard(kind: RecordKind, current: Any, rid: str, expected) -> None:
        if current is None:
            raise ConcurrencyConflict(f"{kind.value} {rid} no longer exists")
        for field_name, value in (expected or {}).items():
            if getattr(current, field_name) != value:
                raise ConcurrencyConflict(
                    f"{kind.value} {rid} changed: {field_name} is {getattr(current, field_name)!r}, expected {value!r}"
                )
