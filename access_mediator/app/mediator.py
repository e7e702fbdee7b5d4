"""
Access mediator: admission, memoization and lazy delegation in one object.

Every request key goes through the same pipeline:

1. the admission policy (denied keys get ``"denied: <key>"`` back and never
   reach the cache or the delegate),
2. the response cache,
3. on a miss, the lazily built delegate, whose response is then cached.

The mediator exposes the same ``handle(request_key) -> str`` contract as the
delegate it wraps, so callers cannot tell the two apart.
"""

import threading
import time
from typing import Any, Callable, Dict, Optional

from shared.errors import DelegateFailureError, InvalidArgumentError
from shared.logging import get_logger
from shared.metrics import MetricsCollector
from .cache.memory_cache import InMemoryResponseCache
from .delegate.lazy import LazyDelegate
from .models import MediationOutcome, MediationResult, denial_response
from .policy.engine import AdmissionPolicy, SubstringDenyPolicy


class BaseMediator:
    """State and steps shared by the sync and async mediators."""

    def __init__(
        self,
        admission_policy: Optional[AdmissionPolicy] = None,
        cache: Optional[InMemoryResponseCache] = None,
        metrics: Optional[MetricsCollector] = None,
        name: str = "access",
    ):
        self.admission_policy = admission_policy if admission_policy is not None else SubstringDenyPolicy()
        self.cache = cache if cache is not None else InMemoryResponseCache()
        self.metrics = metrics
        self.name = name
        self.logger = get_logger(f"mediator.{name}")

        self._stats_lock = threading.Lock()
        self._stats: Dict[str, int] = {
            "requests": 0,
            "denied": 0,
            "cache_hits": 0,
            "delegated": 0,
            "delegate_failures": 0,
        }

    def _validate(self, request_key: Any) -> None:
        if request_key is None:
            raise InvalidArgumentError("request_key must not be None")
        if not isinstance(request_key, str):
            raise InvalidArgumentError(
                "request_key must be a string",
                {"type": type(request_key).__name__}
            )

    def _admit(self, request_key: str, start: float) -> Optional[MediationResult]:
        """Return a denial result when the policy rejects the key."""
        self._increment("requests")
        if self.admission_policy(request_key):
            return None

        self.logger.debug("Request denied by admission policy", request_key=request_key)
        return self._finish(request_key, denial_response(request_key), MediationOutcome.DENIED, start)

    def _lookup(self, request_key: str, start: float) -> Optional[MediationResult]:
        cached = self.cache.get(request_key)
        if cached is None:
            return None

        self.logger.debug("Returning cached response", request_key=request_key)
        return self._finish(request_key, cached, MediationOutcome.CACHE_HIT, start)

    def _accept_response(self, request_key: str, response: Any, duration: float) -> str:
        """Validate a delegate response and account for the invocation."""
        if not isinstance(response, str):
            error = DelegateFailureError(
                "invocation",
                "Delegate returned a non-string response",
                {"request_key": request_key, "type": type(response).__name__}
            )
            self._record_failure("invocation", request_key, error, duration)
            raise error

        if self.metrics is not None:
            self.metrics.record_delegate_invocation("success", duration)
        return response

    def _invocation_failed(self, request_key: str, error: Exception, duration: float) -> DelegateFailureError:
        failure = DelegateFailureError(
            "invocation",
            "Delegate failed to handle request",
            {"request_key": request_key, "error": str(error), "error_type": type(error).__name__}
        )
        self._record_failure("invocation", request_key, failure, duration)
        return failure

    def _record_failure(self, stage: str, request_key: str, error: Exception, duration: Optional[float] = None):
        self._increment("delegate_failures")
        self.logger.error("Delegate failure", stage=stage, request_key=request_key, error=str(error))
        if self.metrics is not None:
            if duration is not None:
                self.metrics.record_delegate_invocation("failure", duration)
            self.metrics.record_error(f"delegate_{stage}")

    def _store(self, request_key: str, response: str, start: float) -> MediationResult:
        stored = self.cache.put_if_absent(request_key, response)
        if stored is not response:
            self.logger.debug("Concurrent response already cached", request_key=request_key)
        else:
            self.logger.info("Cached delegate response", request_key=request_key)
        return self._finish(request_key, stored, MediationOutcome.DELEGATED, start)

    def _finish(self, request_key: str, response: str, outcome: MediationOutcome, start: float) -> MediationResult:
        counter = {
            MediationOutcome.DENIED: "denied",
            MediationOutcome.CACHE_HIT: "cache_hits",
            MediationOutcome.DELEGATED: "delegated",
        }[outcome]
        self._increment(counter)
        if self.metrics is not None:
            self.metrics.record_mediation(outcome.value)

        return MediationResult(
            request_key=request_key,
            response=response,
            outcome=outcome,
            duration_ms=(time.perf_counter() - start) * 1000
        )

    def _on_delegate_constructed(self):
        self.logger.info("Delegate constructed", mediator=self.name)
        if self.metrics is not None:
            self.metrics.record_delegate_construction()

    def _increment(self, counter: str):
        with self._stats_lock:
            self._stats[counter] += 1

    @property
    def delegate_constructed(self) -> bool:
        return self._delegate.constructed

    def get_stats(self) -> Dict[str, Any]:
        """Get mediator statistics."""
        with self._stats_lock:
            stats: Dict[str, Any] = dict(self._stats)
        stats["name"] = self.name
        stats["admission_policy"] = type(self.admission_policy).__name__
        stats["delegate_constructed"] = self._delegate.constructed
        stats["delegate_constructions"] = self._delegate.construction_count
        stats["cache"] = self.cache.get_stats()
        return stats


class AccessMediator(BaseMediator):
    """Thread-safe mediator in front of a lazily built, synchronous delegate.

    At most one delegate is ever constructed. Two threads racing on the same
    uncached key may both invoke the delegate, but only the first response is
    stored and both callers return that stored response.
    """

    def __init__(
        self,
        delegate_factory: Callable[[], Any],
        admission_policy: Optional[AdmissionPolicy] = None,
        cache: Optional[InMemoryResponseCache] = None,
        metrics: Optional[MetricsCollector] = None,
        name: str = "access",
    ):
        super().__init__(admission_policy, cache, metrics, name)
        self._delegate = LazyDelegate(delegate_factory, on_construct=self._on_delegate_constructed)

    def handle(self, request_key: str) -> str:
        """Mediate a request and return only the response text."""
        return self.mediate(request_key).response

    def mediate(self, request_key: str) -> MediationResult:
        """Mediate a request and describe how it was resolved."""
        start = time.perf_counter()
        self._validate(request_key)

        result = self._admit(request_key, start) or self._lookup(request_key, start)
        if result is not None:
            return result

        try:
            delegate = self._delegate.get(request_key)
        except DelegateFailureError as e:
            self._record_failure("construction", request_key, e)
            raise

        invoke_start = time.perf_counter()
        try:
            response = delegate.handle(request_key)
        except Exception as e:
            raise self._invocation_failed(request_key, e, time.perf_counter() - invoke_start) from e

        response = self._accept_response(request_key, response, time.perf_counter() - invoke_start)
        return self._store(request_key, response, start)
