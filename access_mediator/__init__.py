"""
Access Mediator.

Stands in front of an expensive delegate: admits or denies each request key,
answers repeats from a memo cache and builds the delegate once, on first use.
"""

from .app.async_mediator import AsyncAccessMediator
from .app.cache.memory_cache import InMemoryResponseCache
from .app.delegate.base import CallableDelegate, Delegate, ExpensiveDelegate
from .app.factory import create_async_mediator, create_mediator
from .app.mediator import AccessMediator
from .app.models import MediationOutcome, MediationResult, denial_response
from .app.policy import (
    AllowAllPolicy,
    RuleBasedAdmissionPolicy,
    SubstringDenyPolicy,
    load_rules,
)

__all__ = [
    "AccessMediator",
    "AsyncAccessMediator",
    "InMemoryResponseCache",
    "CallableDelegate",
    "Delegate",
    "ExpensiveDelegate",
    "create_mediator",
    "create_async_mediator",
    "MediationOutcome",
    "MediationResult",
    "denial_response",
    "AllowAllPolicy",
    "RuleBasedAdmissionPolicy",
    "SubstringDenyPolicy",
    "load_rules",
]
