"""
Bounded Fixed-Delay Retry

A retry loop with a fixed sleep between attempts and a hard cap on the
number of attempts. Used for the best-effort reset after an accessor is
created and for availability waits.

Usage:
    from statsprobe.wait import retry, RetryPolicy, TimeUnit

    # Up to 2 attempts, 150ms apart
    retry(stats.reset, max_attempts=2, delay_ms=150)

    # Poll every 100ms for up to 5 seconds
    RetryPolicy.for_timeout(5, TimeUnit.SECONDS).run(check_ready)

    # Wait for a statistic to reach a value
    wait_for_statistic(stats, "numberOfEntries", 3, timeout=10)
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, TypeVar

from .config import DEFAULT_POLL_INTERVAL_MS
from .errors import RetryExhausted, StatisticsError

T = TypeVar('T')

Sleep = Callable[[float], None]


class TimeUnit(Enum):
    """Time units, valued in milliseconds."""
    MILLISECONDS = 1
    SECONDS = 1000
    MINUTES = 60_000
    HOURS = 3_600_000

    def to_millis(self, amount: float) -> int:
        """Convert an amount of this unit to whole milliseconds, truncating."""
        return int(amount * self.value)


@dataclass(frozen=True)
class RetryPolicy:
    """Fixed-delay retry with a cap on total attempts."""
    max_attempts: int
    delay_ms: int

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.delay_ms < 0:
            raise ValueError(f"delay_ms must be >= 0, got {self.delay_ms}")

    @classmethod
    def for_timeout(
        cls,
        timeout: float,
        unit: TimeUnit = TimeUnit.SECONDS,
        interval_ms: int = DEFAULT_POLL_INTERVAL_MS
    ) -> "RetryPolicy":
        """
        Build the polling policy for a timeout.

        A timeout of T milliseconds gives 1 + T // interval_ms attempts.
        """
        millis = max(0, unit.to_millis(timeout))
        return cls(max_attempts=1 + millis // interval_ms, delay_ms=interval_ms)

    @property
    def budget_ms(self) -> int:
        """Total sleep time when every attempt fails."""
        return (self.max_attempts - 1) * self.delay_ms

    def run(self, action: Callable[[], T], sleep: Optional[Sleep] = None) -> T:
        """
        Invoke action until it returns without raising.

        Args:
            action: Zero-argument callable
            sleep: Sleep function taking seconds (default: time.sleep)

        Returns:
            The result of the first successful attempt

        Raises:
            RetryExhausted: If every attempt raised, chained to the last error
        """
        if sleep is None:
            sleep = time.sleep

        last_error: Optional[Exception] = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                return action()
            except Exception as e:
                last_error = e
            if attempt < self.max_attempts and self.delay_ms > 0:
                sleep(self.delay_ms / 1000)

        raise RetryExhausted(self.max_attempts, last_error) from last_error


def retry(
    action: Callable[[], T],
    max_attempts: int,
    delay_ms: int,
    sleep: Optional[Sleep] = None
) -> T:
    """Run action under a RetryPolicy(max_attempts, delay_ms)."""
    return RetryPolicy(max_attempts, delay_ms).run(action, sleep=sleep)


def wait_for_statistic(
    accessor,
    name: str,
    expected: Any,
    timeout: float = 30.0,
    unit: TimeUnit = TimeUnit.SECONDS,
    sleep: Optional[Sleep] = None
) -> Any:
    """
    Poll one statistic until it has the expected value.

    Args:
        accessor: Statistics accessor to read from
        name: Statistic name
        expected: Expected value, or a predicate taking the value
        timeout: Maximum time to wait
        unit: Unit of timeout
        sleep: Sleep function taking seconds (default: time.sleep)

    Returns:
        The matching value

    Raises:
        RetryExhausted: If the value never matched
    """
    def check():
        value = accessor.get_single_statistics(name)
        matched = expected(value) if callable(expected) else value == expected
        if not matched:
            raise StatisticsError(
                f"Statistic {name} of {accessor.template} is {value!r}, expected {expected!r}"
            )
        return value

    return RetryPolicy.for_timeout(timeout, unit).run(check, sleep=sleep)
