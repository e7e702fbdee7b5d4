"""
Delegate contract and built-in delegates.
"""

import time
from typing import Callable, Protocol, runtime_checkable

from shared.logging import get_logger


@runtime_checkable
class Delegate(Protocol):
    """The real handler a mediator stands in front of."""

    def handle(self, request_key: str) -> str:
        ...


DelegateFactory = Callable[[], Delegate]


class CallableDelegate:
    """Adapts a plain ``str -> str`` function to the Delegate contract."""

    def __init__(self, func: Callable[[str], str]):
        self.func = func

    def handle(self, request_key: str) -> str:
        return self.func(request_key)


class ExpensiveDelegate:
    """Slow handler simulating costly processing."""

    def __init__(self, delay_seconds: float = 1.0):
        self.delay_seconds = delay_seconds
        self.logger = get_logger("mediator.delegate.expensive")
        self.logger.info("Expensive delegate created", delay_seconds=delay_seconds)

    def handle(self, request_key: str) -> str:
        self.logger.info("Delegate processing request", request_key=request_key)
        if self.delay_seconds:
            time.sleep(self.delay_seconds)

        response = f"processed: {request_key.upper()}"
        self.logger.info("Delegate finished request", request_key=request_key, response=response)
        return response
