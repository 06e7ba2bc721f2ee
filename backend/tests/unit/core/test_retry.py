"""Unit tests for bounded retries around store calls."""

from __future__ import annotations

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy.exc import OperationalError

from vaxtrack.services._shared.errors import InternalError, NotFoundError
from vaxtrack.services._shared.retry import call_with_retry


class _Flaky:
    def __init__(self, failures: int, exc: BaseException) -> None:
        self.failures = failures
        self.exc = exc
        self.calls = 0

    def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.exc
        return "ok"


def _operational() -> OperationalError:
    return OperationalError("SELECT 1", {}, Exception("connection reset"))


def test_recovers_from_transient_error(app):
    fn = _Flaky(2, _operational())
    assert call_with_retry(fn, attempts=3) == "ok"
    assert fn.calls == 3


def test_exhausted_retries_raise_internal_error(app):
    fn = _Flaky(5, RedisConnectionError("down"))
    with pytest.raises(InternalError) as excinfo:
        call_with_retry(fn, attempts=2)
    assert fn.calls == 2
    assert isinstance(excinfo.value.__cause__, RedisConnectionError)


def test_service_errors_are_not_retried(app):
    fn = _Flaky(1, NotFoundError("Child", 1))
    with pytest.raises(NotFoundError):
        call_with_retry(fn, attempts=3)
    assert fn.calls == 1
