"""
Assembly of mediators from MediatorConfig.
"""

from typing import Any, Callable, Optional

from prometheus_client import CollectorRegistry

from shared.config import MediatorConfig, get_config
from shared.logging import configure_logging, get_logger
from shared.metrics import MetricsCollector, get_metrics_collector
from .async_mediator import AsyncAccessMediator
from .cache.memory_cache import InMemoryResponseCache
from .delegate.base import ExpensiveDelegate
from .mediator import AccessMediator
from .policy.engine import AdmissionPolicy, SubstringDenyPolicy
from .policy.loader import load_rules
from .policy.models import RuleAction

logger = get_logger("mediator.factory")


def build_admission_policy(config: MediatorConfig) -> AdmissionPolicy:
    """Rule file when configured, otherwise the substring deny list."""
    if config.admission_rules_file:
        return load_rules(config.admission_rules_file, RuleAction(config.default_admission))
    return SubstringDenyPolicy(config.denied_substrings)


def build_cache(config: MediatorConfig) -> InMemoryResponseCache:
    return InMemoryResponseCache(
        max_entries=config.cache_max_entries,
        ttl_seconds=config.cache_ttl_seconds,
    )


def build_metrics(config: MediatorConfig, registry: Optional[CollectorRegistry]) -> Optional[MetricsCollector]:
    if not config.metrics_enabled:
        return None
    return get_metrics_collector(config.service_name, registry)


def _default_delegate_factory(config: MediatorConfig) -> Callable[[], Any]:
    delay = config.delegate_delay_seconds
    return lambda: ExpensiveDelegate(delay_seconds=delay)


def _startup(config: Optional[MediatorConfig], setup_logging: bool) -> MediatorConfig:
    config = config or get_config()
    if setup_logging:
        configure_logging(config.service_name, config.log_level, env=config.env)
    return config


def create_mediator(
    config: Optional[MediatorConfig] = None,
    delegate_factory: Optional[Callable[[], Any]] = None,
    registry: Optional[CollectorRegistry] = None,
    setup_logging: bool = True,
) -> AccessMediator:
    """Create a thread-safe mediator from configuration.

    Unless ``setup_logging`` is False, structured logging is configured from
    the config first, the way a service does at startup.
    """
    config = _startup(config, setup_logging)
    mediator = AccessMediator(
        delegate_factory or _default_delegate_factory(config),
        admission_policy=build_admission_policy(config),
        cache=build_cache(config),
        metrics=build_metrics(config, registry),
        name=config.service_name,
    )
    logger.info(
        "Mediator created",
        name=config.service_name,
        cache_max_entries=config.cache_max_entries,
        cache_ttl_seconds=config.cache_ttl_seconds,
        metrics_enabled=config.metrics_enabled,
    )
    return mediator


def create_async_mediator(
    config: Optional[MediatorConfig] = None,
    delegate_factory: Optional[Callable[[], Any]] = None,
    registry: Optional[CollectorRegistry] = None,
    setup_logging: bool = True,
) -> AsyncAccessMediator:
    """Create an asyncio mediator from configuration."""
    config = _startup(config, setup_logging)
    mediator = AsyncAccessMediator(
        delegate_factory or _default_delegate_factory(config),
        admission_policy=build_admission_policy(config),
        cache=build_cache(config),
        metrics=build_metrics(config, registry),
        name=config.service_name,
    )
    logger.info("Async mediator created", name=config.service_name, metrics_enabled=config.metrics_enabled)
    return mediator
