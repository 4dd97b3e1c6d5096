"""Unit tests for quota accounting (token bucket and fixed window)."""

import threading
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import Mock

import pytest

from trademark_api.adapters.rate_limit.base import (
    FixedWindowState,
    QuotaPolicy,
    TokenBucketState,
)
from trademark_api.adapters.rate_limit.in_memory import InMemoryQuotaStore
from trademark_api.services.quota_ledger import QuotaLedger, refill_tokens


def _ledger(*policies: QuotaPolicy, clock: Mock) -> QuotaLedger:
    return QuotaLedger(InMemoryQuotaStore(), policies, clock=clock)


BUCKET = QuotaPolicy(name="minute", kind="token_bucket", rate=3, period_seconds=60, capacity=3)
WINDOW = QuotaPolicy(name="minute", kind="fixed_window", rate=3, period_seconds=60)


class TestTokenBucket:
    def test_burst_up_to_capacity_then_reject(self) -> None:
        clock = Mock(return_value=1000.0)
        ledger = _ledger(BUCKET, clock=clock)

        results = [ledger.consume("minute", "fp-abc123") for _ in range(4)]

        assert [r.ok for r in results] == [True, True, True, False]
        assert results[3].quota_name == "minute"
        assert results[3].retry_after is not None
        assert results[3].retry_after >= 1000.0 + 60 / 3

    def test_retry_after_not_before_one_interval_after_first_consumption(self) -> None:
        clock = Mock(return_value=1000.0)
        ledger = _ledger(BUCKET, clock=clock)

        for offset in (0.0, 3.0, 6.0):
            clock.return_value = 1000.0 + offset
            assert ledger.consume("minute", "k").ok is True

        clock.return_value = 1009.0
        rejected = ledger.consume("minute", "k")

        assert rejected.ok is False
        assert rejected.retry_after >= 1000.0 + 20.0

    def test_rejection_does_not_mutate_state(self) -> None:
        clock = Mock(return_value=1000.0)
        ledger = _ledger(BUCKET, clock=clock)
        for _ in range(3):
            ledger.consume("minute", "k")
        before = ledger.peek("minute", "k")

        clock.return_value = 1001.0
        assert ledger.consume("minute", "k").ok is False

        assert ledger.peek("minute", "k") == before

    def test_waiting_a_full_period_after_exhaustion_yields_a_unit(self) -> None:
        clock = Mock(return_value=1000.0)
        ledger = _ledger(BUCKET, clock=clock)
        for _ in range(3):
            ledger.consume("minute", "k")

        for wait in (60.0, 61.5, 3600.0):
            clock.return_value = 1000.0 + wait
            assert refill_tokens(BUCKET, ledger.peek("minute", "k"), clock.return_value) >= 1

        clock.return_value = 1060.0
        assert ledger.consume("minute", "k").ok is True

    def test_refill_is_monotonic_in_elapsed_time(self) -> None:
        state = TokenBucketState(tokens=0.0, last_refill_at=0.0)
        samples = [refill_tokens(BUCKET, state, t) for t in (0, 5, 10, 20, 40, 60, 600)]

        assert samples == sorted(samples)
        assert samples[-1] == BUCKET.max_tokens

    def test_tokens_never_exceed_capacity(self) -> None:
        clock = Mock(return_value=1000.0)
        ledger = _ledger(BUCKET, clock=clock)
        ledger.consume("minute", "k")

        clock.return_value = 1000.0 + 10 * 3600
        ledger.consume("minute", "k")

        state = ledger.peek("minute", "k")
        assert isinstance(state, TokenBucketState)
        assert state.tokens == pytest.approx(BUCKET.max_tokens - 1)

    def test_first_use_is_a_full_bucket(self) -> None:
        policy = QuotaPolicy(name="hour", kind="token_bucket", rate=20, period_seconds=3600, capacity=10)
        ledger = _ledger(policy, clock=Mock(return_value=5.0))

        assert ledger.peek("hour", "fresh") is None
        assert ledger.consume("hour", "fresh").ok is True
        assert ledger.peek("hour", "fresh").tokens == pytest.approx(9.0)

    def test_capacity_defaults_to_rate(self) -> None:
        policy = QuotaPolicy(name="q", kind="token_bucket", rate=2, period_seconds=10)
        ledger = _ledger(policy, clock=Mock(return_value=0.0))

        assert [ledger.consume("q", "k").ok for _ in range(3)] == [True, True, False]


class TestFixedWindow:
    def test_allows_rate_then_rejects_until_window_end(self) -> None:
        clock = Mock(return_value=1000.0)
        ledger = _ledger(WINDOW, clock=clock)

        results = []
        for offset in (0.0, 2.0, 4.0, 6.0):
            clock.return_value = 1000.0 + offset
            results.append(ledger.consume("minute", "k"))

        assert [r.ok for r in results] == [True, True, True, False]
        assert results[3].retry_after == 1060.0

    def test_window_boundary_is_exact(self) -> None:
        policy = QuotaPolicy(name="minute", kind="fixed_window", rate=1, period_seconds=60)
        clock = Mock(return_value=1000.0)
        ledger = _ledger(policy, clock=clock)

        assert ledger.consume("minute", "k").ok is True

        clock.return_value = 1000.0 + 60 - 0.001
        assert ledger.consume("minute", "k").ok is False
        assert ledger.peek("minute", "k") == FixedWindowState(window_start=1000.0, count=1)

        clock.return_value = 1060.0
        assert ledger.consume("minute", "k").ok is True
        assert ledger.peek("minute", "k") == FixedWindowState(window_start=1060.0, count=1)

    def test_window_opens_on_first_request_not_on_clock_boundary(self) -> None:
        clock = Mock(return_value=1037.5)
        ledger = _ledger(WINDOW, clock=clock)

        ledger.consume("minute", "k")

        assert ledger.peek("minute", "k").window_start == 1037.5


class TestCheck:
    @pytest.mark.parametrize("policy", [BUCKET, WINDOW], ids=["token_bucket", "fixed_window"])
    def test_check_on_fresh_key_admits_and_writes_nothing(self, policy: QuotaPolicy) -> None:
        ledger = _ledger(policy, clock=Mock(return_value=1000.0))

        for _ in range(10):
            assert ledger.check("minute", "k").ok is True

        assert ledger.peek("minute", "k") is None

    @pytest.mark.parametrize("policy", [BUCKET, WINDOW], ids=["token_bucket", "fixed_window"])
    def test_check_matches_next_consume_without_mutating(self, policy: QuotaPolicy) -> None:
        clock = Mock(return_value=1000.0)
        ledger = _ledger(policy, clock=clock)

        for offset in (0.0, 1.0, 2.0, 3.0, 30.0, 61.0):
            clock.return_value = 1000.0 + offset
            before = ledger.peek("minute", "k")
            checked = ledger.check("minute", "k")
            assert ledger.peek("minute", "k") == before
            assert ledger.consume("minute", "k") == checked

    def test_check_reports_retry_after_when_exhausted(self) -> None:
        clock = Mock(return_value=1000.0)
        ledger = _ledger(WINDOW, clock=clock)
        for _ in range(3):
            ledger.consume("minute", "k")

        clock.return_value = 1010.0
        result = ledger.check("minute", "k")

        assert result.ok is False
        assert result.retry_after == 1060.0
        assert result.quota_name == "minute"

    def test_check_unknown_quota_raises(self) -> None:
        ledger = _ledger(WINDOW, clock=Mock(return_value=0.0))

        with pytest.raises(ValueError, match="unknown quota"):
            ledger.check("week", "k")


class TestLedger:
    def test_keys_are_isolated(self) -> None:
        policy = QuotaPolicy(name="minute", kind="fixed_window", rate=1, period_seconds=60)
        ledger = _ledger(policy, clock=Mock(return_value=0.0))

        assert ledger.consume("minute", "fp-one").ok is True
        assert ledger.consume("minute", "fp-one").ok is False
        assert ledger.consume("minute", "fp-two").ok is True

    def test_unknown_quota_raises(self) -> None:
        ledger = _ledger(WINDOW, clock=Mock(return_value=0.0))

        with pytest.raises(ValueError, match="unknown quota"):
            ledger.consume("week", "k")

    def test_duplicate_policy_names_rejected(self) -> None:
        with pytest.raises(ValueError, match="duplicate"):
            _ledger(WINDOW, BUCKET, clock=Mock(return_value=0.0))

    def test_empty_key_rejected(self) -> None:
        ledger = _ledger(WINDOW, clock=Mock(return_value=0.0))

        with pytest.raises(ValueError):
            ledger.consume("minute", "")

    def test_concurrent_consumers_never_double_spend(self) -> None:
        policy = QuotaPolicy(name="minute", kind="token_bucket", rate=5, period_seconds=3600, capacity=5)
        ledger = _ledger(policy, clock=Mock(return_value=1000.0))
        barrier = threading.Barrier(16)

        def worker(_: int) -> bool:
            barrier.wait()
            return ledger.consume("minute", "fp-shared").ok

        with ThreadPoolExecutor(max_workers=16) as pool:
            outcomes = list(pool.map(worker, range(16)))

        assert outcomes.count(True) == 5


@pytest.mark.parametrize(
    "kwargs",
    [
        {"name": "", "kind": "fixed_window", "rate": 1, "period_seconds": 60},
        {"name": "q", "kind": "sliding_log", "rate": 1, "period_seconds": 60},
        {"name": "q", "kind": "fixed_window", "rate": 0, "period_seconds": 60},
        {"name": "q", "kind": "fixed_window", "rate": 1, "period_seconds": 0},
        {"name": "q", "kind": "token_bucket", "rate": 1, "period_seconds": 60, "capacity": 0},
    ],
)
def test_invalid_policy_args(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        QuotaPolicy(**kwargs)
