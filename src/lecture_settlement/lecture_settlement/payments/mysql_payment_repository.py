from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..core.enums import RecordKind
from ..database.mysql_base import as_date, as_decimal, db_cursor, fetchall
from ..database.mysql_batch import TableSpec
from ..database.mysql_records import MySQLRecordRepository
from .model import PaymentRecord
from .repository import PaymentRepository

_COLUMNS = (
    "payment_id",
    "teacher_id",
    "class_id",
    "gross_amount",
    "advance_deduction",
    "net_disbursement",
    "lecture_count",
    "date_paid",
    "start_date_covered",
    "end_date_covered",
)


def _to_row(p: PaymentRecord) -> Dict[str, Any]:
    return {name: getattr(p, name) for name in _COLUMNS}


def _from_row(r: Dict[str, Any]) -> PaymentRecord:
    return PaymentRecord(
        payment_id=str(r["payment_id"]),
        teacher_id=str(r["teacher_id"]),
        class_id=str(r["class_id"]),
        gross_amount=as_decimal(r["gross_amount"]),
        advance_deduction=as_decimal(r["advance_deduction"]),
        net_disbursement=as_decimal(r["net_disbursement"]),
        lecture_count=int(r["lecture_count"]),
        date_paid=r["date_paid"],
        start_date_covered=as_date(r["start_date_covered"]),
        end_date_covered=as_date(r["end_date_covered"]),
    )


PAYMENT_TABLE = TableSpec(
    table="payments",
    id_column="payment_id",
    columns=_COLUMNS,
    to_row=_to_row,
    from_row=_from_row,
)


class MySQLPaymentRepository(MySQLRecordRepository[PaymentRecord], PaymentRepository):
    kind = RecordKind.PAYMENT

    def list_recent(self, *, teacher_id: Optional[str] = None, limit: int = 200) -> Sequence[PaymentRecord]:
        where = ""
        params: list[object] = []
        if teacher_id is not None:
            where = "WHERE teacher_id=%s"
            params.append(teacher_id)
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {PAYMENT_TABLE.select_list}
                FROM payments
                {where}
                ORDER BY date_paid DESC
                LIMIT %s
                """,
                tuple(params),
            )
            return [_from_row(r) for r in fetchall(cur)]
