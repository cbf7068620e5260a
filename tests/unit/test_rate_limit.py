"""Tests for the sliding-window admission control."""

import threading

import pytest
from gena.errors import RateLimitedError
from gena.models import FailureKind
from gena.rate_limit import RateLimiter


class TestAdmission:
    """Test the 10-per-60-seconds window."""

    def test_admits_up_to_the_limit(self, limiter, clock):
        for _ in range(10):
            limiter.admit()
            clock.advance(1)

        assert limiter.snapshot().requests_last_minute == 10

    def test_eleventh_request_in_window_is_rejected(self, limiter, clock):
        for _ in range(10):
            limiter.admit()
            clock.advance(0.5)

        with pytest.raises(RateLimitedError) as exc_info:
            limiter.admit()

        assert exc_info.value.kind == FailureKind.RATE_LIMITED
        assert "Rate limit exceeded" in str(exc_info.value)

    def test_rejection_does_not_record_a_request(self, limiter, clock):
        for _ in range(10):
            limiter.admit()
        with pytest.raises(RateLimitedError):
            limiter.admit()

        assert limiter.snapshot().total_requests == 10

    def test_wait_time_counts_down_from_oldest_request(self, limiter, clock):
        limiter.admit()
        clock.advance(15)
        for _ in range(9):
            limiter.admit()
        clock.advance(0.2)

        with pytest.raises(RateLimitedError) as exc_info:
            limiter.admit()

        # oldest is 15.2s old -> 44.8s remaining, rounded up
        assert exc_info.value.wait_seconds == 45
        assert "45 seconds" in str(exc_info.value)

    def test_capacity_frees_one_for_one(self, limiter, clock):
        limiter.admit()
        clock.advance(10)
        for _ in range(9):
            limiter.admit()

        clock.advance(51)  # only the first request has left the window
        limiter.admit()

        with pytest.raises(RateLimitedError):
            limiter.admit()

    def test_custom_limits(self, clock):
        limiter = RateLimiter(max_requests=2, window_seconds=5, clock=clock)
        limiter.admit()
        limiter.admit()
        with pytest.raises(RateLimitedError):
            limiter.admit()

        clock.advance(6)
        limiter.admit()


class TestHourlyReset:
    """Test the full clear after the reset interval."""

    def test_window_clears_after_an_hour(self, clock):
        limiter = RateLimiter(window_seconds=7200, clock=clock)
        for _ in range(10):
            limiter.admit()

        clock.advance(3601)
        limiter.admit()

        snapshot = limiter.snapshot()
        assert snapshot.total_requests == 1
        assert snapshot.last_reset == clock.now

    def test_no_reset_before_an_hour(self, clock):
        limiter = RateLimiter(window_seconds=7200, clock=clock)
        for _ in range(10):
            limiter.admit()

        clock.advance(3599)
        with pytest.raises(RateLimitedError):
            limiter.admit()


class TestSnapshot:
    """Test the read-only usage view."""

    def test_snapshot_does_not_admit(self, limiter):
        limiter.snapshot()
        limiter.snapshot()
        assert limiter.snapshot().total_requests == 0

    def test_snapshot_excludes_expired_requests(self, limiter, clock):
        limiter.admit()
        clock.advance(30)
        limiter.admit()
        clock.advance(31)

        snapshot = limiter.snapshot()
        assert snapshot.requests_last_minute == 1
        assert snapshot.total_requests == 2

    def test_next_reset_is_an_hour_after_last_reset(self, limiter, clock):
        snapshot = limiter.snapshot()
        assert snapshot.next_reset == snapshot.last_reset + 3600
        assert snapshot.max_requests == 10


class TestConcurrentAdmission:
    def test_simultaneous_requests_never_exceed_the_limit(self):
        limiter = RateLimiter(max_requests=10, window_seconds=60.0)
        barrier = threading.Barrier(50)
        admitted, rejected = [], []

        def worker():
            barrier.wait()
            try:
                limiter.admit()
            except RateLimitedError:
                rejected.append(1)
            else:
                admitted.append(1)

        threads = [threading.Thread(target=worker) for _ in range(50)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)

        assert len(admitted) == 10
        assert len(rejected) == 40
        assert limiter.snapshot().requests_last_minute == 10
