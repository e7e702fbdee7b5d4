"""
At-most-once lazy construction of the delegate.
"""

import asyncio
import inspect
import threading
from typing import Any, Callable, Optional

from shared.errors import DelegateFailureError
from shared.logging import get_logger


def _construction_failed(logger, request_key: Optional[str], message: str, error: str) -> DelegateFailureError:
    logger.error(message, request_key=request_key, error=error)
    return DelegateFailureError("construction", message, {"request_key": request_key, "error": error})


class LazyDelegate:
    """Builds the delegate on first ``get()`` using double-checked locking.

    A factory that raises, or returns None, leaves the holder empty; the next
    ``get()`` tries again. Once a delegate has been built it is returned
    forever.
    """

    def __init__(self, factory: Callable[[], Any], on_construct: Optional[Callable[[], None]] = None):
        self._factory = factory
        self._on_construct = on_construct
        self._delegate: Optional[Any] = None
        self._lock = threading.Lock()
        self.construction_count = 0
        self.logger = get_logger("mediator.delegate.lazy")

    @property
    def constructed(self) -> bool:
        return self._delegate is not None

    def get(self, request_key: Optional[str] = None) -> Any:
        delegate = self._delegate
        if delegate is not None:
            return delegate

        with self._lock:
            if self._delegate is None:
                self.logger.info("Constructing delegate lazily", request_key=request_key)
                try:
                    built = self._factory()
                except Exception as e:
                    raise _construction_failed(
                        self.logger, request_key, "Delegate construction failed", str(e)
                    ) from e
                if built is None:
                    raise _construction_failed(
                        self.logger, request_key, "Delegate factory returned None", "factory returned None"
                    )
                self._delegate = built
                self.construction_count += 1
                if self._on_construct is not None:
                    self._on_construct()
            return self._delegate


class AsyncLazyDelegate:
    """asyncio counterpart of LazyDelegate.

    The factory may return the delegate directly or an awaitable resolving
    to it. The lock is created on first use so the holder can be built
    outside the event loop that later drives it.
    """

    def __init__(self, factory: Callable[[], Any], on_construct: Optional[Callable[[], None]] = None):
        self._factory = factory
        self._on_construct = on_construct
        self._delegate: Optional[Any] = None
        self._lock: Optional[asyncio.Lock] = None
        self.construction_count = 0
        self.logger = get_logger("mediator.delegate.lazy")

    @property
    def constructed(self) -> bool:
        return self._delegate is not None

    async def get(self, request_key: Optional[str] = None) -> Any:
        if self._delegate is not None:
            return self._delegate

        # No await between the check and the assignment
        if self._lock is None:
            self._lock = asyncio.Lock()

        async with self._lock:
            if self._delegate is None:
                self.logger.info("Constructing delegate lazily", request_key=request_key)
                try:
                    built = self._factory()
                    if inspect.isawaitable(built):
                        built = await built
                except Exception as e:
                    raise _construction_failed(
                        self.logger, request_key, "Delegate construction failed", str(e)
                    ) from e
                if built is None:
                    raise _construction_failed(
                        self.logger, request_key, "Delegate factory returned None", "factory returned None"
                    )
                self._delegate = built
                self.construction_count += 1
                if self._on_construct is not None:
                    self._on_construct()
            return self._delegate
