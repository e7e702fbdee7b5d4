"""
Structured logging for the Access Mediator.

Every event is rendered as one JSON line carrying the logger name, level, an
ISO-8601 UTC timestamp, and the mediator's service context (service name,
deployment environment, current request id).
"""

import sys
import structlog
import logging
import uuid
from typing import Any, Dict, List, Optional
from contextvars import ContextVar

request_id_var: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
service_name_var: ContextVar[Optional[str]] = ContextVar('service_name', default=None)
environment_var: ContextVar[Optional[str]] = ContextVar('environment', default=None)


def _processors() -> List[Any]:
    return [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        add_service_context,
        add_correlation_context,
        structlog.processors.JSONRenderer(),
    ]


def configure_logging(service_name: str, log_level: str = "info", env: Optional[str] = None) -> None:
    """Route structlog through stdlib logging as JSON lines on stdout."""
    service_name_var.set(service_name)
    environment_var.set(env)

    structlog.configure(
        processors=_processors(),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )


def add_service_context(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Tag the event with the configured service and environment.

    Without a configured service, the logger name prefix stands in
    ("mediator.cache" -> "mediator").
    """
    service_name = service_name_var.get()
    if not service_name:
        logger_name = event_dict.get("logger", "")
        service_name = logger_name.split(".")[0] if "." in logger_name else None
    if service_name:
        event_dict["service"] = service_name

    env = environment_var.get()
    if env:
        event_dict["env"] = env
    return event_dict


def add_correlation_context(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    request_id = request_id_var.get()
    if request_id:
        event_dict["request_id"] = request_id
    return event_dict


def set_request_id(request_id: Optional[str] = None) -> str:
    """Bind a request id (a fresh uuid4 when omitted) to the current context."""
    if request_id is None:
        request_id = str(uuid.uuid4())
    request_id_var.set(request_id)
    return request_id


def clear_context():
    request_id_var.set(None)


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)
