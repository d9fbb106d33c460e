"""Tests for the shared retry policy."""

import pytest

from landing_seo.errors import ProviderError
from landing_seo.retry import RetryError, RetryPolicy, is_transient


class Flaky:
    """Raises ``errors`` in turn, then returns ``value``."""

    def __init__(self, errors, value="ok"):
        self.errors = list(errors)
        self.value = value
        self.calls = 0

    def __call__(self, *args, **kwargs):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.value


class TestRetryPolicy:
    def test_returns_first_success_after_transient_failures(self, sleep):
        fn = Flaky([ProviderError("overloaded", 529, retryable=True)] * 2)
        policy = RetryPolicy(max_attempts=3, base_delay=1.0, sleep=sleep)

        assert policy.call(fn) == "ok"
        assert fn.calls == 3
        assert sleep.calls == [1.0, 2.0]

    def test_gives_up_after_max_attempts(self, sleep):
        error = ProviderError("rate limited", 429, retryable=True)
        fn = Flaky([error] * 5)
        policy = RetryPolicy(max_attempts=3, base_delay=0.5, sleep=sleep)

        with pytest.raises(RetryError) as exc_info:
            policy.call(fn)

        assert exc_info.value.attempts == 3
        assert exc_info.value.last_error is error
        assert sleep.calls == [0.5, 1.0]

    def test_permanent_error_is_not_retried(self, sleep):
        fn = Flaky([ProviderError("bad request", 400)])
        policy = RetryPolicy(max_attempts=3, sleep=sleep)

        with pytest.raises(RetryError) as exc_info:
            policy.call(fn)

        assert exc_info.value.attempts == 1
        assert fn.calls == 1
        assert sleep.calls == []

    def test_custom_predicate(self, sleep):
        fn = Flaky([ConnectionError("reset")])
        policy = RetryPolicy(retry_if=lambda e: isinstance(e, ConnectionError), sleep=sleep)

        assert policy.call(fn) == "ok"
        assert fn.calls == 2

    def test_passes_arguments_through(self):
        policy = RetryPolicy(sleep=lambda s: None)
        assert policy.call(lambda a, b=0: a + b, 2, b=3) == 5

    def test_delay_is_capped(self):
        policy = RetryPolicy(base_delay=10.0, max_delay=25.0)
        assert [policy.delay_for(n) for n in (1, 2, 3, 4)] == [10.0, 20.0, 25.0, 25.0]

    def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError):
            RetryPolicy(max_attempts=0)


class TestIsTransient:
    def test_reads_retryable_flag(self):
        assert is_transient(ProviderError("x", 503, retryable=True))
        assert not is_transient(ProviderError("x", 400))
        assert not is_transient(ValueError("x"))
