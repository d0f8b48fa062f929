from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from .attendance.memory_attendance_repository import InMemoryAttendanceRepository
from .attendance.mysql_attendance_repository import ATTENDANCE_TABLE, MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceStateMachine
from .audit.mysql_audit_sink import MySQLAuditSink
from .audit.service import AuditTrail
from .audit.sink import AuditSink, InMemoryAuditSink
from .core.constants import DEFAULT_LOCK_TIMEOUT_SECONDS, DEFAULT_RETRY_ATTEMPTS, DEFAULT_RETRY_BASE_DELAY
from .core.enums import RecordKind
from .database.batch import BatchWriter
from .database.connection import DatabaseConnection, DBConfig
from .database.memory_store import LocalStore
from .database.mysql_batch import MySQLBatchWriter
from .engine import SettlementEngine
from .ledger.memory_advance_repository import InMemoryAdvanceRepository
from .ledger.mysql_advance_repository import ADVANCE_TABLE, MySQLAdvanceRepository
from .ledger.repository import AdvanceRepository
from .ledger.service import AdvanceLedger
from .payments.memory_payment_repository import InMemoryPaymentRepository
from .payments.mysql_payment_repository import PAYMENT_TABLE, MySQLPaymentRepository
from .payments.repository import PaymentRepository
from .payments.service import SettlementProcessor
from .roster.memory_roster_repository import InMemoryRosterRepository
from .roster.mysql_roster_repository import MySQLRosterRepository
from .roster.repository import RosterRepository

BACKENDS = ("mysql", "memory")


@dataclass(frozen=True)
class Container:
    backend: str
    writer: BatchWriter

    roster_repo: RosterRepository
    attendance_repo: AttendanceRepository
    advances_repo: AdvanceRepository
    payments_repo: PaymentRepository
    audit_sink: AuditSink

    audit: AuditTrail
    attendance_service: AttendanceStateMachine
    ledger_service: AdvanceLedger
    settlement_service: SettlementProcessor
    engine: SettlementEngine


def _db_config(db_config: dict) -> DBConfig:
    return DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
        retry_attempts=int(db_config.get("retry_attempts", DEFAULT_RETRY_ATTEMPTS)),
        retry_base_delay=float(db_config.get("retry_base_delay", DEFAULT_RETRY_BASE_DELAY)),
        lock_timeout=int(db_config.get("lock_timeout", DEFAULT_LOCK_TIMEOUT_SECONDS)),
    )


def build_container(
    *,
    backend: str = "mysql",
    db_config: Optional[dict] = None,
    audit_sink: Optional[AuditSink] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> Container:
    """Wire repositories and services for one storage backing."""
    backend = (backend or "mysql").lower()

    if backend == "memory":
        store = LocalStore()
        writer: BatchWriter = store
        roster_repo: RosterRepository = InMemoryRosterRepository()
        attendance_repo: AttendanceRepository = InMemoryAttendanceRepository(store)
        advances_repo: AdvanceRepository = InMemoryAdvanceRepository(store)
        payments_repo: PaymentRepository = InMemoryPaymentRepository(store)
        sink = audit_sink or InMemoryAuditSink()
    elif backend == "mysql":
        if not db_config:
            raise ValueError("db_config is required for the mysql backend")
        conn = DatabaseConnection.get_instance(_db_config(db_config))
        mysql_writer = MySQLBatchWriter(
            conn,
            tables={
                RecordKind.ATTENDANCE: ATTENDANCE_TABLE,
                RecordKind.ADVANCE: ADVANCE_TABLE,
                RecordKind.PAYMENT: PAYMENT_TABLE,
            },
        )
        writer = mysql_writer
        roster_repo = MySQLRosterRepository(conn)
        attendance_repo = MySQLAttendanceRepository(conn, mysql_writer)
        advances_repo = MySQLAdvanceRepository(conn, mysql_writer)
        payments_repo = MySQLPaymentRepository(conn, mysql_writer)
        sink = audit_sink or MySQLAuditSink(conn)
    else:
        raise ValueError(f"Unknown storage backend {backend!r}; expected one of {BACKENDS}")

    audit = AuditTrail(sink)
    service_options: dict[str, Any] = {"clock": clock} if clock else {}
    attendance_service = AttendanceStateMachine(attendance_repo, roster_repo, audit, **service_options)
    ledger_service = AdvanceLedger(advances_repo, writer, roster_repo, audit, **service_options)
    settlement_service = SettlementProcessor(
        attendance_service,
        ledger_service,
        payments_repo,
        roster_repo,
        writer,
        audit,
        **service_options,
    )
    engine = SettlementEngine(attendance_service, ledger_service, settlement_service, audit)

    return Container(
        backend=backend,
        writer=writer,
        roster_repo=roster_repo,
        attendance_repo=attendance_repo,
        advances_repo=advances_repo,
        payments_repo=payments_repo,
        audit_sink=sink,
        audit=audit,
        attendance_service=attendance_service,
        ledger_service=ledger_service,
        settlement_service=settlement_service,
        engine=engine,
    )
