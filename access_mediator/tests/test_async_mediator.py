"""
Unit tests for AsyncAccessMediator.
"""

import asyncio

import pytest

from access_mediator.app.async_mediator import AsyncAccessMediator
from access_mediator.app.models import MediationOutcome
from shared.errors import DelegateFailureError, InvalidArgumentError
from shared.test_helpers import AsyncCountingDelegate, CountingDelegate, CountingDelegateFactory, FailingDelegate


class TestAsyncAccessMediator:
    """Test cases for AsyncAccessMediator."""

    @pytest.fixture
    def delegate(self):
        """Coroutine-based delegate."""
        return AsyncCountingDelegate()

    @pytest.fixture
    def factory(self, delegate):
        """Delegate factory that counts constructions."""
        return CountingDelegateFactory(delegate=delegate)

    @pytest.fixture
    def mediator(self, factory):
        """Create AsyncAccessMediator instance."""
        return AsyncAccessMediator(factory)

    @pytest.mark.asyncio
    async def test_forbidden_key_is_denied(self, mediator, factory):
        """Test denied keys never construct the delegate."""
        response = await mediator.handle("forbidden-x")

        assert response == "denied: forbidden-x"
        assert factory.attempts == 0
        assert mediator.delegate_constructed is False

    @pytest.mark.asyncio
    async def test_repeated_request_served_from_cache(self, mediator, factory, delegate):
        """Test identical requests invoke the delegate once."""
        first = await mediator.handle("alpha")
        second = await mediator.mediate("alpha")

        assert first == "result: alpha"
        assert second.response == first
        assert second.outcome == MediationOutcome.CACHE_HIT
        assert factory.constructions == 1
        assert delegate.calls == ["alpha"]

    @pytest.mark.asyncio
    async def test_sync_delegate_supported(self):
        """Test a regular (non-coroutine) delegate works."""
        delegate = CountingDelegate()
        mediator = AsyncAccessMediator(lambda: delegate)

        assert await mediator.handle("alpha") == "result: alpha"
        assert delegate.calls == ["alpha"]

    @pytest.mark.asyncio
    async def test_async_factory_supported(self, delegate):
        """Test a coroutine factory is awaited once."""
        constructions = []

        async def build():
            constructions.append(1)
            return delegate

        mediator = AsyncAccessMediator(build)

        await mediator.handle("alpha")
        await mediator.handle("beta")

        assert len(constructions) == 1
        assert delegate.calls == ["alpha", "beta"]

    @pytest.mark.asyncio
    async def test_invalid_key(self, mediator):
        """Test None keys are rejected."""
        with pytest.raises(InvalidArgumentError):
            await mediator.handle(None)

    @pytest.mark.asyncio
    async def test_delegate_failure_propagates(self):
        """Test delegate errors surface and are not cached."""
        delegate = FailingDelegate(failures=1)
        mediator = AsyncAccessMediator(lambda: delegate)

        with pytest.raises(DelegateFailureError) as exc_info:
            await mediator.handle("alpha")

        assert exc_info.value.stage == "invocation"
        assert mediator.cache.contains("alpha") is False
        assert await mediator.handle("alpha") == "recovered: alpha"

    @pytest.mark.asyncio
    async def test_construction_failure_is_retried(self):
        """Test a failed construction can be retried."""
        factory = CountingDelegateFactory(fail_times=1)
        mediator = AsyncAccessMediator(factory)

        with pytest.raises(DelegateFailureError):
            await mediator.handle("alpha")

        assert mediator.delegate_constructed is False
        assert await mediator.handle("alpha") == "result: alpha"
        assert mediator.get_stats()["delegate_constructions"] == 1

    @pytest.mark.asyncio
    async def test_concurrent_first_requests_share_construction(self):
        """Test concurrent first-time calls build a single delegate."""
        delegate = AsyncCountingDelegate(delay_seconds=0.01)
        constructions = []

        async def build():
            constructions.append(1)
            await asyncio.sleep(0.01)
            return delegate

        mediator = AsyncAccessMediator(build)

        responses = await asyncio.gather(*(mediator.handle("alpha") for _ in range(20)))

        assert set(responses) == {"result: alpha"}
        assert len(constructions) == 1
        assert mediator.cache.keys() == ["alpha"]
