"""
Cache package for the Access Mediator.

Provides the in-process memo table mapping request keys to delegate
responses. By default it never evicts; an LRU bound and a TTL are opt-in.
"""

from .memory_cache import InMemoryResponseCache

__all__ = ["InMemoryResponseCache"]
