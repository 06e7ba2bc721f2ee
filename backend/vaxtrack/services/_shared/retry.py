"""Bounded retries for transient store failures.

Only connectivity-class errors are retried. Authorization and validation
failures (every :class:`ServiceError`) propagate on the first attempt.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeVar

from flask import current_app, has_app_context
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError
from sqlalchemy.exc import DisconnectionError, OperationalError
from tenacity import (
    RetryCallState,
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from vaxtrack.services._shared.errors import InternalError

logger = logging.getLogger(__name__)

T = TypeVar("T")

TRANSIENT_ERRORS: tuple[type[BaseException], ...] = (
    OperationalError,
    DisconnectionError,
    RedisConnectionError,
    RedisTimeoutError,
)

DEFAULT_ATTEMPTS = 3
DEFAULT_MAX_WAIT = 2


def _settings() -> tuple[int, float]:
    if has_app_context():
        cfg = current_app.config
        return (
            int(cfg.get("STORE_RETRY_ATTEMPTS", DEFAULT_ATTEMPTS)),
            float(cfg.get("STORE_RETRY_MAX_WAIT_SECONDS", DEFAULT_MAX_WAIT)),
        )
    return DEFAULT_ATTEMPTS, DEFAULT_MAX_WAIT


def _log_retry(state: RetryCallState) -> None:
    exc = state.outcome.exception() if state.outcome else None
    logger.warning(
        "store.transient_error",
        extra={"attempt": state.attempt_number, "action": type(exc).__name__},
    )


def call_with_retry(fn: Callable[[], T], *, attempts: int | None = None) -> T:
    """
    Run ``fn`` retrying transient connectivity errors with exponential backoff.

    :param fn: Zero-argument callable performing one complete store interaction
        (typically a whole unit of work, so each attempt starts clean).
    :param attempts: Override for the configured ``STORE_RETRY_ATTEMPTS``.
    :returns: Whatever ``fn`` returns.
    :raises InternalError: When every attempt failed with a transient error.
    """
    configured_attempts, max_wait = _settings()
    retrying = Retrying(
        retry=retry_if_exception_type(TRANSIENT_ERRORS),
        stop=stop_after_attempt(max(1, attempts or configured_attempts)),
        wait=wait_exponential(multiplier=0.1, max=max_wait),
        before_sleep=_log_retry,
        reraise=False,
    )
    try:
        return retrying(fn)
    except RetryError as exc:
        cause = exc.last_attempt.exception()
        logger.error("store.retries_exhausted", exc_info=cause)
        raise InternalError() from cause
