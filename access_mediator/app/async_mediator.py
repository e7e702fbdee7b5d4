"""
asyncio flavour of the access mediator.
"""

import inspect
import time
from typing import Any, Callable, Optional

from shared.errors import DelegateFailureError
from shared.metrics import MetricsCollector
from .cache.memory_cache import InMemoryResponseCache
from .delegate.lazy import AsyncLazyDelegate
from .mediator import BaseMediator
from .models import MediationResult
from .policy.engine import AdmissionPolicy


class AsyncAccessMediator(BaseMediator):
    """Mediator for use inside an event loop.

    Same pipeline and guarantees as AccessMediator. The delegate factory may
    be a plain callable or return an awaitable, and the delegate's ``handle``
    may be a regular method or a coroutine. Concurrent first requests share a
    single delegate construction.
    """

    def __init__(
        self,
        delegate_factory: Callable[[], Any],
        admission_policy: Optional[AdmissionPolicy] = None,
        cache: Optional[InMemoryResponseCache] = None,
        metrics: Optional[MetricsCollector] = None,
        name: str = "access_async",
    ):
        super().__init__(admission_policy, cache, metrics, name)
        self._delegate = AsyncLazyDelegate(delegate_factory, on_construct=self._on_delegate_constructed)

    async def handle(self, request_key: str) -> str:
        """Mediate a request and return only the response text."""
        result = await self.mediate(request_key)
        return result.response

    async def mediate(self, request_key: str) -> MediationResult:
        """Mediate a request and describe how it was resolved."""
        start = time.perf_counter()
        self._validate(request_key)

        result = self._admit(request_key, start) or self._lookup(request_key, start)
        if result is not None:
            return result

        try:
            delegate = await self._delegate.get(request_key)
        except DelegateFailureError as e:
            self._record_failure("construction", request_key, e)
            raise

        invoke_start = time.perf_counter()
        try:
            response = delegate.handle(request_key)
            if inspect.isawaitable(response):
                response = await response
        except Exception as e:
            raise self._invocation_failed(request_key, e, time.perf_counter() - invoke_start) from e

        response = self._accept_response(request_key, response, time.perf_counter() - invoke_start)
        return self._store(request_key, response, start)
