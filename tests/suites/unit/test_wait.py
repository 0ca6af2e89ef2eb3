"""
Test: Bounded Retry

Validates the fixed-delay retry loop:
- Attempt counting and sleeps between (not after) attempts
- RetryExhausted chaining the last failure
- Timeout to attempt budget conversion
- Caller-side statistic polling

Tier: 0 (Required on every merge)
"""

import pytest

from statsprobe.accessor import StatisticsAccessor
from statsprobe.errors import RetryExhausted
from statsprobe.wait import RetryPolicy, TimeUnit, retry, wait_for_statistic

from tests.utilities import ValueSequence, cache_object


class Flaky:
    """Fails `failures` times, then returns `result`."""

    def __init__(self, failures: int, result="ok"):
        self.failures = failures
        self.result = result
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise RuntimeError(f"failure {self.calls}")
        return self.result


class TestRetry:

    def test_first_success_returns_immediately(self, sleep):
        action = Flaky(0)
        assert retry(action, 3, 100, sleep=sleep) == "ok"
        assert action.calls == 1
        assert sleep.calls == []

    def test_retries_until_success(self, sleep):
        action = Flaky(2)
        assert retry(action, 3, 150, sleep=sleep) == "ok"
        assert action.calls == 3
        assert sleep.calls == [0.15, 0.15]

    def test_exhaustion_wraps_last_error(self, sleep):
        action = Flaky(10)

        with pytest.raises(RetryExhausted) as exc_info:
            retry(action, 2, 150, sleep=sleep)

        assert action.calls == 2
        assert sleep.calls == [0.15]
        assert exc_info.value.attempts == 2
        assert str(exc_info.value.last_error) == "failure 2"
        assert exc_info.value.__cause__ is exc_info.value.last_error

    def test_assertion_errors_are_retried(self, sleep):
        calls = []

        def check():
            calls.append(1)
            assert len(calls) > 1

        retry(check, 2, 10, sleep=sleep)
        assert len(calls) == 2

    def test_interrupt_is_not_retried(self, sleep):
        calls = []

        def interrupted():
            calls.append(1)
            raise KeyboardInterrupt

        with pytest.raises(KeyboardInterrupt):
            retry(interrupted, 5, 10, sleep=sleep)
        assert len(calls) == 1

    def test_zero_delay_never_sleeps(self, sleep):
        with pytest.raises(RetryExhausted):
            retry(Flaky(5), 3, 0, sleep=sleep)
        assert sleep.calls == []

    @pytest.mark.parametrize("attempts, delay", [(0, 100), (-1, 100), (1, -5)])
    def test_invalid_policy(self, attempts, delay):
        with pytest.raises(ValueError):
            RetryPolicy(attempts, delay)


class TestForTimeout:

    @pytest.mark.parametrize("timeout, unit, attempts", [
        (500, TimeUnit.MILLISECONDS, 6),
        (0, TimeUnit.SECONDS, 1),
        (99, TimeUnit.MILLISECONDS, 1),
        (100, TimeUnit.MILLISECONDS, 2),
        (1, TimeUnit.SECONDS, 11),
        (1.5, TimeUnit.SECONDS, 16),
        (1, TimeUnit.MINUTES, 601),
    ])
    def test_attempts_from_timeout(self, timeout, unit, attempts):
        policy = RetryPolicy.for_timeout(timeout, unit)
        assert policy.max_attempts == attempts
        assert policy.delay_ms == 100

    def test_budget(self):
        assert RetryPolicy.for_timeout(500, TimeUnit.MILLISECONDS).budget_ms == 500

    def test_custom_interval(self):
        policy = RetryPolicy.for_timeout(1, TimeUnit.SECONDS, interval_ms=250)
        assert policy == RetryPolicy(5, 250)


class TestWaitForStatistic:

    NAME = "app:type=Cache,name=work"

    def test_waits_for_expected_value(self, server, source, logger, sleep):
        entries = ValueSequence(0, 1, 3)
        server.register(self.NAME, cache_object(numberOfEntries=entries))
        stats = StatisticsAccessor(source, self.NAME, logger=logger)

        assert wait_for_statistic(stats, "numberOfEntries", 3, timeout=1, sleep=sleep) == 3
        assert entries.reads == 3
        assert len(sleep.calls) == 2

    def test_accepts_predicate(self, server, source, logger, sleep):
        server.register(self.NAME, cache_object(hits=ValueSequence(1, 5, 10)))
        stats = StatisticsAccessor(source, self.NAME, logger=logger)

        assert wait_for_statistic(stats, "hits", lambda v: v >= 5, timeout=1, sleep=sleep) == 5

    def test_gives_up(self, server, source, logger, sleep):
        server.register(self.NAME, cache_object(hits=0))
        stats = StatisticsAccessor(source, self.NAME, logger=logger)

        with pytest.raises(RetryExhausted) as exc_info:
            wait_for_statistic(stats, "hits", 1, timeout=300, unit=TimeUnit.MILLISECONDS, sleep=sleep)

        assert exc_info.value.attempts == 4
        assert "expected 1" in str(exc_info.value.last_error)
