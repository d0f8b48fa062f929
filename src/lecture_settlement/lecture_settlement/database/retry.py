from __future__ import annotations

import time
from typing import Callable, Tuple, Type, TypeVar

import mysql.connector

from ..common.logger import log
from ..core.constants import DEFAULT_RETRY_ATTEMPTS, DEFAULT_RETRY_BASE_DELAY
from ..core.exceptions import StorageError

T = TypeVar("T")

# Errors worth retrying: dropped connections, server gone away, lock wait timeouts.
TRANSIENT_ERRORS: Tuple[Type[BaseException], ...] = (
    mysql.connector.errors.InterfaceError,
    mysql.connector.errors.OperationalError,
)


def call_with_retry(
    func: Callable[[], T],
    *,
    attempts: int = DEFAULT_RETRY_ATTEMPTS,
    base_delay: float = DEFAULT_RETRY_BASE_DELAY,
    transient: Tuple[Type[BaseException], ...] = TRANSIENT_ERRORS,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Run a storage call, retrying transient failures with exponential backoff.

    Only storage primitives go through here. Business decisions are made
    once by the caller and never re-run.
    """
    attempts = max(int(attempts), 1)
    for attempt in range(attempts):
        try:
            return func()
        except transient as e:
            if attempt == attempts - 1:
                raise StorageError(f"storage unavailable after {attempts} attempt(s): {e}") from e
            delay = base_delay * (2 ** attempt)
            log.warning("transient storage error on attempt %d/%d (%s); retrying in %.2fs", attempt + 1, attempts, e, delay)
            sleep(delay)
    raise StorageError("unreachable")
