from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, Mapping, Optional, Sequence

import mysql.connector

from ..common.logger import log
from ..common.validators import validate_record
from ..core.enums import RecordKind
from ..core.exceptions import ConcurrencyConflict
from .batch import BatchOperation, BatchWriter, DeleteOp, InsertOp, UpdateOp
from .connection import DatabaseConnection
from .mysql_base import db_cursor, named_lock, to_db_value


@dataclass(frozen=True)
class TableSpec:
    """How one record kind maps onto a MySQL table."""

    table: str
    id_column: str
    columns: tuple[str, ...]
    to_row: Callable[[Any], Dict[str, Any]]
    from_row: Callable[[Dict[str, Any]], Any]
    # record field name -> column name, where they differ
    aliases: Mapping[str, str] = field(default_factory=dict)

    def column(self, field_name: str) -> Optional[str]:
        column = self.aliases.get(field_name, field_name)
        return column if column in self.columns else None

    @property
    def select_list(self) -> str:
        return ", ".join(self.columns)


def guard_clause(mapping: TableSpec, expected: Mapping[str, Any]) -> tuple[str, list[Any]]:
    clauses: list[str] = []
    params: list[Any] = []
    for field_name, value in expected.items():
        column = mapping.column(field_name)
        if column is None:
            raise ValueError(f"Unknown guard field for {mapping.table}: {field_name}")
        if value is None:
            clauses.append(f"{column} IS NULL")
        else:
            clauses.append(f"{column}=%s")
            params.append(to_db_value(value))
    return "".join(f" AND {c}" for c in clauses), params


class MySQLBatchWriter(BatchWriter):
    """All-or-nothing batches on a single connection/transaction."""

    def __init__(self, conn_factory: DatabaseConnection, tables: Mapping[RecordKind, TableSpec]):
        self._conn_factory = conn_factory
        self._tables = dict(tables)

    def table(self, kind: RecordKind) -> TableSpec:
        return self._tables[kind]

    def commit_batch(self, operations: Sequence[BatchOperation]) -> None:
        for op in operations:
            if isinstance(op, (InsertOp, UpdateOp)):
                validate_record(op.kind, op.record)

        try:
            with db_cursor(self._conn_factory, dictionary=False) as (_, cur):
                for op in operations:
                    self._execute(cur, op)
        except mysql.connector.errors.IntegrityError as e:
            raise ConcurrencyConflict(f"Write rejected by a uniqueness constraint: {e.msg}") from e
        log.debug("mysql batch committed %d operation(s)", len(operations))

    @contextmanager
    def serialized(self, teacher_id: str) -> Iterator[None]:
        timeout = self._conn_factory.config.lock_timeout
        with named_lock(self._conn_factory, f"lecture-settlement:{teacher_id}", timeout=timeout):
            yield

    def _execute(self, cur, op: BatchOperation) -> None:
        mapping = self._tables[op.kind]

        if isinstance(op, InsertOp):
            row = mapping.to_row(op.record)
            columns = ", ".join(row.keys())
            placeholders = ", ".join(["%s"] * len(row))
            cur.execute(
                f"INSERT INTO {mapping.table}({columns}) VALUES({placeholders})",
                tuple(to_db_value(v) for v in row.values()),
            )
            return

        if isinstance(op, UpdateOp):
            row = mapping.to_row(op.record)
            row.pop(mapping.id_column, None)
            assignments = ", ".join(f"{c}=%s" for c in row.keys())
            guard_sql, guard_params = guard_clause(mapping, op.expected)
            cur.execute(
                f"UPDATE {mapping.table} SET {assignments} WHERE {mapping.id_column}=%s{guard_sql}",
                tuple(to_db_value(v) for v in row.values()) + (op.record_id, *guard_params),
            )
            if cur.rowcount != 1:
                raise ConcurrencyConflict(f"{op.kind.value} {op.record_id} changed or disappeared before update")
            return

        if isinstance(op, DeleteOp):
            guard_sql, guard_params = guard_clause(mapping, op.expected)
            cur.execute(
                f"DELETE FROM {mapping.table} WHERE {mapping.id_column}=%s{guard_sql}",
                (op.record_id, *guard_params),
            )
            if cur.rowcount != 1:
                raise ConcurrencyConflict(f"{op.kind.value} {op.record_id} changed or disappeared before delete")
            return

        raise TypeError(f"Unsupported batch operation: {op!r}")
