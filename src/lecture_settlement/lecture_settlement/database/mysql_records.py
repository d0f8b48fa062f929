from __future__ import annotations

from typing import Any, Generic, Mapping, Optional, Sequence, TypeVar

from ..core.enums import RecordKind
from ..core.exceptions import ValidationError
from .batch import DeleteOp, InsertOp, UpdateOp
from .connection import DatabaseConnection
from .mysql_base import db_cursor, fetchall, fetchone, to_db_value
from .mysql_batch import MySQLBatchWriter, TableSpec

R = TypeVar("R")


class MySQLRecordRepository(Generic[R]):
    """Shared create/get/query/update/delete for one table.

    Writes go through the batch writer so shape validation and guards are
    applied the same way for single writes and settlement batches.
    """

    kind: RecordKind

    def __init__(self, conn_factory: DatabaseConnection, writer: MySQLBatchWriter):
        self._conn_factory = conn_factory
        self._writer = writer

    @property
    def _mapping(self) -> TableSpec:
        return self._writer.table(self.kind)

    def create(self, record: R) -> R:
        self._writer.commit_batch([InsertOp(self.kind, record)])
        return record

    def get(self, record_id: str) -> Optional[R]:
        mapping = self._mapping
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {mapping.select_list} FROM {mapping.table} WHERE {mapping.id_column}=%s",
                (record_id,),
            )
            row = fetchone(cur)
            return mapping.from_row(row) if row else None

    def query(
        self,
        filters: Mapping[str, Any],
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> Sequence[R]:
        mapping = self._mapping
        clauses: list[str] = []
        params: list[Any] = []
        for field_name, value in filters.items():
            column = mapping.column(field_name)
            if column is None:
                raise ValidationError(f"Unknown filter field: {field_name}")
            if value is None:
                clauses.append(f"{column} IS NULL")
            else:
                clauses.append(f"{column}=%s")
                params.append(to_db_value(value))

        sql = f"SELECT {mapping.select_list} FROM {mapping.table}"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        if order_by:
            order_column = mapping.column(order_by)
            if order_column is None:
                raise ValidationError(f"Unknown order field: {order_by}")
            sql += f" ORDER BY {order_column} {'DESC' if descending else 'ASC'}, {mapping.id_column} ASC"
        if limit is not None:
            sql += " LIMIT %s"
            params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [mapping.from_row(r) for r in fetchall(cur)]

    def update(self, record: R, *, expected: Optional[Mapping[str, Any]] = None) -> R:
        self._writer.commit_batch([UpdateOp(self.kind, record, dict(expected or {}))])
        return record

    def delete(self, record_id: str, *, expected: Optional[Mapping[str, Any]] = None) -> None:
        self._writer.commit_batch([DeleteOp(self.kind, record_id, dict(expected or {}))])
