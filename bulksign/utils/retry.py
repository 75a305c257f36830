"""Bounded retry with linearly escalating delays.

Attempt ``i`` (zero-based) waits ``i * delay_seconds`` before running, so the
first attempt is immediate. The policy never raises on exhaustion; it reports
failure and lets the caller decide what to do next.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


def _is_success(outcome: object) -> bool:
    if isinstance(outcome, bool):
        return outcome
    return bool(getattr(outcome, "success", False))


def _is_retryable(outcome: object) -> bool:
    if isinstance(outcome, bool):
        return True
    return bool(getattr(outcome, "retryable", True))


def _format_seconds(seconds: float) -> str:
    return f"{seconds:g}"


@dataclass(slots=True)
class RetryResult(Generic[T]):
    """Summary of a retried operation."""

    success: bool
    attempts: int
    outcomes: list[T] = field(default_factory=list)
    errors: list[Exception] = field(default_factory=list)

    @property
    def last_outcome(self) -> T | None:
        return self.outcomes[-1] if self.outcomes else None


@dataclass
class RetryPolicy:
    """Retry a zero-argument operation a bounded number of times.

    The operation reports its result either as a ``bool`` or as an object with
    a ``success`` attribute. Objects may also expose ``retryable``; a failed
    outcome with ``retryable=False`` stops the loop early. An exception of a
    type listed in ``retry_on`` (any ``Exception`` by default) is logged and
    counts as a failed attempt; anything else propagates.

    Example:
        >>> policy = RetryPolicy(max_attempts=5, delay_seconds=1.0)
        >>> result = policy.run(lambda: signer.attempt(path), label=path)
        >>> if not result.success:
        >>>     report_unsigned(path)
    """

    max_attempts: int = 5
    """Maximum number of invocations of the operation"""

    delay_seconds: float = 1.0
    """Time unit; attempt i waits i * delay_seconds"""

    sleep: Callable[[float], None] = time.sleep
    """Blocking wait, replaceable in tests"""

    retry_on: tuple[type[Exception], ...] = (Exception,)
    """Exception types treated as a failed attempt"""

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        if self.delay_seconds < 0:
            raise ValueError(f"delay_seconds must be non-negative, got {self.delay_seconds}")

    def delay_for(self, attempt_index: int) -> float:
        """Return the wait before the zero-based ``attempt_index``."""
        return attempt_index * self.delay_seconds

    def run(self, operation: Callable[[], T], *, label: str = "operation") -> RetryResult[T]:
        """Run ``operation`` until it succeeds or the budget is spent.

        Args:
            operation: Callable taking no arguments
            label: Name used in log messages

        Returns:
            RetryResult describing every attempt made
        """
        result: RetryResult[T] = RetryResult(success=False, attempts=0)

        for attempt_index in range(self.max_attempts):
            delay = self.delay_for(attempt_index)
            if delay > 0:
                logger.info("waiting for %s seconds.", _format_seconds(delay))
                self.sleep(delay)

            result.attempts += 1
            attempt_number = attempt_index + 1
            try:
                outcome = operation()
            except self.retry_on as exc:
                result.errors.append(exc)
                logger.warning(
                    "%s: attempt %d/%d raised %s: %s",
                    label,
                    attempt_number,
                    self.max_attempts,
                    type(exc).__name__,
                    exc,
                )
                continue

            result.outcomes.append(outcome)
            if _is_success(outcome):
                result.success = True
                return result

            detail = getattr(outcome, "output", "")
            logger.warning(
                "%s: attempt %d/%d failed%s",
                label,
                attempt_number,
                self.max_attempts,
                f"\n{detail}" if detail else "",
            )
            if not _is_retryable(outcome):
                logger.info("%s: failure is not retryable; giving up", label)
                return result

        return result


def with_retry(
    operation: Callable[[], T],
    max_attempts: int = 5,
    *,
    delay_seconds: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """Run ``operation`` under a ``RetryPolicy`` and return whether it succeeded."""
    policy = RetryPolicy(max_attempts=max_attempts, delay_seconds=delay_seconds, sleep=sleep)
    return policy.run(operation).success
