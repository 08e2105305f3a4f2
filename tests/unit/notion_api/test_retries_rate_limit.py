"""Tests for retry decisions, backoff and the token bucket."""

import asyncio

import httpx
import pytest

from mdnotion.notion_api.rate_limit import AsyncTokenBucket
from mdnotion.notion_api.retries import compute_backoff, should_retry


class TestShouldRetry:
    @pytest.mark.parametrize("status", [429, 500, 502, 503, 504])
    def test_retryable_statuses(self, status):
        assert should_retry(status, None, attempt=0, max_attempts=3) is True

    @pytest.mark.parametrize("status", [400, 401, 403, 404, 409])
    def test_client_errors_not_retried(self, status):
        assert should_retry(status, None, attempt=0, max_attempts=3) is False

    def test_network_errors_retried(self):
        exc = httpx.ConnectError("refused")
        assert should_retry(None, exc, attempt=0, max_attempts=2) is True

    def test_other_exceptions_not_retried(self):
        assert should_retry(None, ValueError("x"), attempt=0, max_attempts=3) is False

    def test_single_attempt_never_retries(self):
        assert should_retry(503, None, attempt=0, max_attempts=1) is False

    def test_last_attempt_not_retried(self):
        assert should_retry(500, None, attempt=2, max_attempts=3) is False


class TestComputeBackoff:
    def test_exponential_growth(self):
        assert [compute_backoff(n, base=1.0, jitter=False) for n in range(4)] == [1.0, 2.0, 4.0, 8.0]

    def test_capped_at_maximum(self):
        assert compute_backoff(10, base=1.0, maximum=5.0, jitter=False) == 5.0

    def test_retry_after_wins(self):
        assert compute_backoff(3, base=1.0, jitter=False, retry_after=7.5) == 7.5

    def test_jitter_range(self):
        for _ in range(50):
            delay = compute_backoff(2, base=1.0, jitter=True)
            assert 2.0 <= delay <= 4.0


class TestAsyncTokenBucket:
    def test_invalid_parameters(self):
        with pytest.raises(ValueError):
            AsyncTokenBucket(rate_rps=0)
        with pytest.raises(ValueError):
            AsyncTokenBucket(rate_rps=1, burst=0)

    async def test_burst_is_immediate(self):
        bucket = AsyncTokenBucket(rate_rps=1.0, burst=3)
        waits = [await bucket.acquire() for _ in range(3)]
        assert waits == [0.0, 0.0, 0.0]

    async def test_empty_bucket_waits(self, monkeypatch):
        slept = []

        async def fake_sleep(seconds):
            slept.append(seconds)

        monkeypatch.setattr(asyncio, "sleep", fake_sleep)
        bucket = AsyncTokenBucket(rate_rps=2.0, burst=1)
        await bucket.acquire()
        wait = await bucket.acquire()
        assert wait > 0
        assert slept == [wait]
        assert wait <= 0.5
