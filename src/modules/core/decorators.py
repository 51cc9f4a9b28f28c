"""Service boundary decorators.

``returns_result`` converts ``DomainError`` raised by a read-only service
method into an ``Err`` and wraps plain return values in ``Ok``.

``unit_of_work`` wraps a service method in ``transaction.atomic()`` and
turns its outcome into a tagged result:

- normal return → ``Ok(value)`` (transaction committed);
- ``DomainError`` → ``Err`` (transaction rolled back, nothing observable);
- transient storage failure (deadlock, serialization failure, locked
  database) → the whole method is re-run, with linear backoff, up to
  ``UNIT_OF_WORK_MAX_ATTEMPTS`` times.

Only the outermost unit of work retries; inside an enclosing atomic block
a failure must surface so the caller's transaction can roll back.
"""

from __future__ import annotations

import functools
import time
from typing import Any, Callable, TypeVar

import structlog
from django.conf import settings
from django.db import OperationalError, transaction

from modules.core.exceptions import DomainError
from modules.core.results import Ok, Result

logger = structlog.get_logger(__name__)

T = TypeVar("T")

# PostgreSQL SQLSTATEs: serialization_failure, deadlock_detected
TRANSIENT_SQLSTATES = frozenset({"40001", "40P01"})
# MySQL error codes: lock wait timeout, deadlock
TRANSIENT_MYSQL_CODES = frozenset({1205, 1213})
TRANSIENT_MARKERS = (
    "deadlock",
    "could not serialize access",
    "database is locked",
)


def is_transient(exc: BaseException) -> bool:
    """Return ``True`` when re-running the transaction may succeed."""
    cause = exc.__cause__ or exc
    sqlstate = getattr(cause, "pgcode", None) or getattr(cause, "sqlstate", None)
    if sqlstate in TRANSIENT_SQLSTATES:
        return True
    args = getattr(cause, "args", ())
    if args and args[0] in TRANSIENT_MYSQL_CODES:
        return True
    message = str(exc).lower()
    return any(marker in message for marker in TRANSIENT_MARKERS)


def returns_result(func: Callable[..., T]) -> Callable[..., Result[T]]:
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Result[T]:
        try:
            return Ok(func(*args, **kwargs))
        except DomainError as exc:
            return exc.to_result()

    return wrapper


def unit_of_work(func: Callable[..., T]) -> Callable[..., Result[T]]:
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Result[T]:
        operation = func.__qualname__
        nested = transaction.get_connection().in_atomic_block
        max_attempts = 1 if nested else max(1, settings.UNIT_OF_WORK_MAX_ATTEMPTS)

        attempt = 1
        while True:
            try:
                with transaction.atomic():
                    value = func(*args, **kwargs)
            except DomainError as exc:
                logger.info(
                    "unit_of_work.rejected",
                    operation=operation,
                    kind=str(exc.kind),
                    reason=exc.message,
                )
                return exc.to_result()
            except OperationalError as exc:
                if attempt >= max_attempts or not is_transient(exc):
                    raise
                logger.warning(
                    "unit_of_work.retrying",
                    operation=operation,
                    attempt=attempt,
                    error=str(exc),
                )
                time.sleep(settings.UNIT_OF_WORK_RETRY_BACKOFF * attempt)
                attempt += 1
                continue
            return Ok(value)

    return wrapper
