from __future__ import annotations

from typing import Sequence

from ..core.enums import EventType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchall
from .model import SystemEvent
from .sink import AuditSink, new_event


class MySQLAuditSink(AuditSink):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def log_event(self, event_type, actor_label, description, amount=None) -> None:
        event = new_event(event_type, actor_label, description, amount)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO activity_log(event_id, event_type, event_time, actor_label, description, amount)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    event.event_id,
                    event.event_type.value,
                    event.timestamp,
                    event.actor_label,
                    event.description,
                    event.amount,
                ),
            )

    def recent(self, limit: int) -> Sequence[SystemEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT event_id, event_type, event_time, actor_label, description, amount
                FROM activity_log
                ORDER BY event_time DESC
                LIMIT %s
                """,
                (int(limit),),
            )
            return [
                SystemEvent(
                    event_id=str(r["event_id"]),
                    event_type=EventType(r["event_type"]),
                    timestamp=r["event_time"],
                    actor_label=r["actor_label"],
                    description=r["description"],
                    amount=as_decimal(r["amount"]) if r.get("amount") is not None else None,
                )
                for r in fetchall(cur)
            ]
