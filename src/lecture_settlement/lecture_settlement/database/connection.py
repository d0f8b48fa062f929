from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import mysql.connector
from mysql.connector.constants import ClientFlag

from ..core.constants import DEFAULT_LOCK_TIMEOUT_SECONDS, DEFAULT_RETRY_ATTEMPTS, DEFAULT_RETRY_BASE_DELAY
from .retry import call_with_retry


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    retry_attempts: int = DEFAULT_RETRY_ATTEMPTS
    retry_base_delay: float = DEFAULT_RETRY_BASE_DELAY
    lock_timeout: int = DEFAULT_LOCK_TIMEOUT_SECONDS


class DatabaseConnection:
    """Singleton-like DB connection factory.

    Note: We create short-lived connections per operation (one per batch).
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config

    @property
    def config(self) -> DBConfig:
        return self._config

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None:
            cls._instance = DatabaseConnection(config)
        return cls._instance

    def connect(self):
        # FOUND_ROWS: guarded UPDATEs report matched rows, not changed rows.
        return call_with_retry(
            lambda: mysql.connector.connect(
                host=self._config.host,
                port=int(self._config.port),
                user=self._config.user,
                password=self._config.password,
                database=self._config.database,
                autocommit=False,
                client_flags=[ClientFlag.FOUND_ROWS],
            ),
            attempts=self._config.retry_attempts,
            base_delay=self._config.retry_base_delay,
        )
