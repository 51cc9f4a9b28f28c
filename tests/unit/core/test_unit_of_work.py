"""Unit tests for the service-boundary decorators.

Covers:
- ``returns_result`` wraps values in ``Ok`` and domain errors in ``Err``.
- ``unit_of_work`` commits on success and rolls back on ``DomainError``.
- Transient storage failures are retried; other failures propagate.
- ``is_transient`` classification.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest
from django.db import OperationalError, transaction
from django.test import override_settings

from modules.catalog.models import Category
from modules.core.decorators import is_transient, returns_result, unit_of_work
from modules.core.exceptions import BusinessRuleViolation, NotFound
from modules.core.results import Err, ErrorKind, Ok

pytestmark = pytest.mark.unit


class _FakePgError(Exception):
    def __init__(self, pgcode):
        super().__init__("backend error")
        self.pgcode = pgcode


class TestReturnsResult:
    def test_value_wrapped_in_ok(self):
        @returns_result
        def answer():
            return 42

        assert answer() == Ok(42)

    def test_domain_error_becomes_err(self):
        @returns_result
        def missing():
            raise NotFound("Thing 1 not found.", thing_id=1)

        result = missing()
        assert isinstance(result, Err)
        assert result.kind == ErrorKind.NOT_FOUND
        assert result.details == {"thing_id": 1}

    def test_other_exceptions_propagate(self):
        @returns_result
        def broken():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            broken()


class TestUnitOfWork:
    def test_commits_on_success(self):
        @unit_of_work
        def create():
            return Category.objects.create(name="Books")

        result = create()

        assert result.is_ok
        assert Category.objects.filter(name="Books").exists()

    def test_rolls_back_on_domain_error(self):
        @unit_of_work
        def create_then_fail():
            Category.objects.create(name="Toys")
            raise BusinessRuleViolation("Not today.")

        result = create_then_fail()

        assert result == Err(kind=ErrorKind.BUSINESS_RULE, message="Not today.")
        assert not Category.objects.filter(name="Toys").exists()

    @override_settings(UNIT_OF_WORK_MAX_ATTEMPTS=3, UNIT_OF_WORK_RETRY_BACKOFF=0)
    def test_transient_failure_retried_when_outermost(self):
        calls = []

        @unit_of_work
        def flaky():
            calls.append(1)
            if len(calls) < 3:
                raise OperationalError("deadlock detected")
            return "done"

        # pytest-django wraps each test in an atomic block; pretend we are outermost.
        with patch("modules.core.decorators.transaction.get_connection") as conn:
            conn.return_value.in_atomic_block = False
            result = flaky()

        assert result == Ok("done")
        assert len(calls) == 3

    @override_settings(UNIT_OF_WORK_MAX_ATTEMPTS=2, UNIT_OF_WORK_RETRY_BACKOFF=0)
    def test_gives_up_after_max_attempts(self):
        calls = []

        @unit_of_work
        def always_locked():
            calls.append(1)
            raise OperationalError("database is locked")

        with patch("modules.core.decorators.transaction.get_connection") as conn:
            conn.return_value.in_atomic_block = False
            with pytest.raises(OperationalError):
                always_locked()

        assert len(calls) == 2

    def test_no_retry_inside_enclosing_transaction(self):
        calls = []

        @unit_of_work
        def flaky():
            calls.append(1)
            raise OperationalError("deadlock detected")

        with transaction.atomic():
            with pytest.raises(OperationalError):
                flaky()

        assert len(calls) == 1

    def test_non_transient_operational_error_not_retried(self):
        calls = []

        @unit_of_work
        def broken():
            calls.append(1)
            raise OperationalError("no such table: nowhere")

        with patch("modules.core.decorators.transaction.get_connection") as conn:
            conn.return_value.in_atomic_block = False
            with pytest.raises(OperationalError):
                broken()

        assert len(calls) == 1


class TestIsTransient:
    @pytest.mark.parametrize("pgcode", ["40001", "40P01"])
    def test_postgres_sqlstates(self, pgcode):
        exc = OperationalError("failed")
        exc.__cause__ = _FakePgError(pgcode)
        assert is_transient(exc)

    def test_mysql_deadlock_code(self):
        exc = OperationalError(1213, "Deadlock found when trying to get lock")
        assert is_transient(exc)

    def test_message_markers(self):
        assert is_transient(OperationalError("could not serialize access due to update"))

    def test_other_errors_are_not_transient(self):
        assert not is_transient(OperationalError("connection refused"))
