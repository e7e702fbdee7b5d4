"""
Delegate package.

The delegate is the expensive object a mediator wraps. Mediators never
receive a delegate instance, only a factory; LazyDelegate and
AsyncLazyDelegate call it at most once, on the first admitted cache miss.
"""

from .base import Delegate, DelegateFactory, CallableDelegate, ExpensiveDelegate
from .lazy import LazyDelegate, AsyncLazyDelegate

__all__ = [
    "Delegate",
    "DelegateFactory",
    "CallableDelegate",
    "ExpensiveDelegate",
    "LazyDelegate",
    "AsyncLazyDelegate",
]
