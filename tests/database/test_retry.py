from __future__ import annotations

import mysql.connector
import pytest

from src.lecture_settlement.lecture_settlement.core.exceptions import StorageError
from src.lecture_settlement.lecture_settlement.database.connection import DatabaseConnection, DBConfig
from src.lecture_settlement.lecture_settlement.database.retry import call_with_retry


class Flaky:
    def __init__(self, failures: int, error: Exception):
        self.failures = failures
        self.error = error
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return "ok"


def test_transient_errors_are_retried_with_backoff():
    delays: list[float] = []
    func = Flaky(2, mysql.connector.errors.InterfaceError("server gone away"))

    assert call_with_retry(func, attempts=3, base_delay=0.5, sleep=delays.append) == "ok"
    assert func.calls == 3
    assert delays == [0.5, 1.0]


def test_gives_up_after_last_attempt():
    delays: list[float] = []
    func = Flaky(5, mysql.connector.errors.OperationalError("lock wait timeout"))

    with pytest.raises(StorageError):
        call_with_retry(func, attempts=2, base_delay=0.1, sleep=delays.append)
    assert func.calls == 2
    assert delays == [0.1]


def test_non_transient_errors_propagate_immediately():
    func = Flaky(1, mysql.connector.errors.ProgrammingError("bad sql"))

    with pytest.raises(mysql.connector.errors.ProgrammingError):
        call_with_retry(func, attempts=3, sleep=lambda _: None)
    assert func.calls == 1


def test_connect_goes_through_retry(monkeypatch):
    attempts: list[dict] = []

    def fake_connect(**kwargs):
        attempts.append(kwargs)
        if len(attempts) == 1:
            raise mysql.connector.errors.InterfaceError("connection refused")
        return "connection"

    monkeypatch.setattr(mysql.connector, "connect", fake_connect)
    conn_factory = DatabaseConnection(
        DBConfig(host="db", port=3306, user="u", password="p", database="d", retry_attempts=2, retry_base_delay=0.0)
    )

    assert conn_factory.connect() == "connection"
    assert len(attempts) == 2
    assert attempts[0]["autocommit"] is False
