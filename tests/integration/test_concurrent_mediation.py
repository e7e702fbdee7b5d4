"""
Integration tests for concurrent use of the mediators.
"""

import asyncio
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from prometheus_client import CollectorRegistry

from access_mediator import AccessMediator, AsyncAccessMediator, InMemoryResponseCache
from shared.metrics import MetricsCollector
from shared.test_helpers import (
    AsyncCountingDelegate, CountingDelegate, CountingDelegateFactory, create_request_keys
)


class TestConcurrentAccessMediator:
    """Thread-level races against AccessMediator."""

    THREADS = 16

    def _run_together(self, func, args):
        barrier = threading.Barrier(len(args))

        def call(arg):
            barrier.wait()
            return func(arg)

        with ThreadPoolExecutor(max_workers=len(args)) as pool:
            return list(pool.map(call, args))

    def test_same_key_first_requests(self):
        """N concurrent first-time calls with one key: one construction, one answer."""
        factory = CountingDelegateFactory(
            delegate=CountingDelegate(delay_seconds=0.01),
            construction_delay=0.05,
        )
        mediator = AccessMediator(factory)

        responses = self._run_together(mediator.handle, ["alpha"] * self.THREADS)

        assert set(responses) == {"result: alpha"}
        assert factory.constructions == 1
        assert mediator.cache.keys() == ["alpha"]
        assert mediator.get_stats()["delegate_constructions"] == 1

    def test_racing_writers_observe_winning_value(self):
        """Racing invocations for one key all return the first stored response."""
        sequence = iter(range(1000))
        lock = threading.Lock()
        started = threading.Barrier(4)

        class NumberingDelegate:
            def handle(self, request_key):
                with lock:
                    number = next(sequence)
                started.wait()
                return f"{request_key}#{number}"

        mediator = AccessMediator(NumberingDelegate)

        responses = self._run_together(mediator.handle, ["alpha"] * 4)

        assert len(set(responses)) == 1
        assert mediator.handle("alpha") == responses[0]

    def test_distinct_keys(self):
        """Concurrent distinct keys each get their own entry from one delegate."""
        factory = CountingDelegateFactory(construction_delay=0.02)
        registry = CollectorRegistry()
        mediator = AccessMediator(factory, metrics=MetricsCollector("access-mediator", registry))
        keys = create_request_keys(self.THREADS) + ["forbidden-1", "forbidden-2"]

        responses = self._run_together(mediator.handle, keys)

        assert responses[:-2] == [f"result: {key}" for key in keys[:-2]]
        assert responses[-2:] == ["denied: forbidden-1", "denied: forbidden-2"]
        assert factory.constructions == 1
        assert len(mediator.cache) == self.THREADS
        assert registry.get_sample_value("delegate_constructions_total") == 1.0
        assert registry.get_sample_value("mediation_requests_total", {"outcome": "denied"}) == 2.0

    def test_bounded_cache_under_load(self):
        """LRU bound holds while many threads write."""
        mediator = AccessMediator(CountingDelegateFactory(), cache=InMemoryResponseCache(max_entries=5))

        self._run_together(mediator.handle, create_request_keys(self.THREADS))

        assert len(mediator.cache) == 5
        assert mediator.cache.get_stats()["evictions"] == self.THREADS - 5


class TestConcurrentAsyncAccessMediator:
    """Task-level races against AsyncAccessMediator."""

    @pytest.mark.asyncio
    async def test_same_key_first_requests(self):
        delegate = AsyncCountingDelegate(delay_seconds=0.01)
        factory = CountingDelegateFactory(delegate=delegate)
        mediator = AsyncAccessMediator(factory)

        responses = await asyncio.gather(*(mediator.handle("alpha") for _ in range(32)))

        assert set(responses) == {"result: alpha"}
        assert factory.constructions == 1
        assert len(mediator.cache) == 1

        # Settled: further calls are pure cache hits
        calls_before = delegate.invocation_count
        assert await mediator.handle("alpha") == "result: alpha"
        assert delegate.invocation_count == calls_before

    @pytest.mark.asyncio
    async def test_mixed_keys(self):
        factory = CountingDelegateFactory(delegate=AsyncCountingDelegate())
        mediator = AsyncAccessMediator(factory)
        keys = create_request_keys(10) * 3 + ["forbidden-x"]

        responses = await asyncio.gather(*(mediator.handle(key) for key in keys))

        assert responses[-1] == "denied: forbidden-x"
        assert responses[:10] == responses[10:20] == responses[20:30]
        assert factory.constructions == 1
        assert len(mediator.cache) == 10
