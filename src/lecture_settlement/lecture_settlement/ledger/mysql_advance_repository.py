from __future__ import annotations

from typing import Any, Dict, Sequence

from ..core.enums import RecordKind
from ..database.mysql_base import as_decimal, db_cursor, fetchall
from ..database.mysql_batch import TableSpec
from ..database.mysql_records import MySQLRecordRepository
from .model import AdvanceLedgerEntry
from .repository import AdvanceRepository

_COLUMNS = ("entry_id", "teacher_id", "amount", "remaining_amount", "entry_date", "notes")


def _to_row(e: AdvanceLedgerEntry) -> Dict[str, Any]:
    return {
        "entry_id": e.entry_id,
        "teacher_id": e.teacher_id,
        "amount": e.amount,
        "remaining_amount": e.remaining_amount,
        "entry_date": e.date,
        "notes": e.notes,
    }


def _from_row(r: Dict[str, Any]) -> AdvanceLedgerEntry:
    return AdvanceLedgerEntry(
        entry_id=str(r["entry_id"]),
        teacher_id=str(r["teacher_id"]),
        amount=as_decimal(r["amount"]),
        remaining_amount=as_decimal(r["remaining_amount"]),
        date=r["entry_date"],
        notes=r.get("notes"),
    )


ADVANCE_TABLE = TableSpec(
    table="advance_entries",
    id_column="entry_id",
    columns=_COLUMNS,
    to_row=_to_row,
    from_row=_from_row,
    aliases={"date": "entry_date"},
)


class MySQLAdvanceRepository(MySQLRecordRepository[AdvanceLedgerEntry], AdvanceRepository):
    kind = RecordKind.ADVANCE

    def list_outstanding(self, teacher_id: str) -> Sequence[AdvanceLedgerEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {ADVANCE_TABLE.select_list}
                FROM advance_entries
                WHERE teacher_id=%s AND remaining_amount > 0
                ORDER BY entry_date ASC, entry_id ASC
                """,
                (teacher_id,),
            )
            return [_from_row(r) for r in fetchall(cur)]

    def list_for_teacher(self, teacher_id: str, *, limit: int = 200) -> Sequence[AdvanceLedgerEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {ADVANCE_TABLE.select_list}
                FROM advance_entries
                WHERE teacher_id=%s
                ORDER BY entry_date DESC
                LIMIT %s
                """,
                (teacher_id, int(limit)),
            )
            return [_from_row(r) for r in fetchall(cur)]
