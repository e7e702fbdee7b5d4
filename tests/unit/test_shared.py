"""
Unit tests for the shared error, logging and metrics helpers.
"""

import json
import logging
from datetime import datetime

import pytest
import structlog
from prometheus_client import CollectorRegistry

from shared.errors import (
    ConfigurationError, DelegateFailureError, ErrorResponse, InvalidArgumentError, MediatorException
)
from shared.logging import (
    clear_context, configure_logging, environment_var, get_logger, request_id_var, service_name_var, set_request_id
)
from shared.metrics import MetricsCollector


class TestErrors:
    """Test cases for the mediator exception hierarchy."""

    def test_to_response(self):
        error = InvalidArgumentError("request_key must not be None")

        response = error.to_response()

        assert isinstance(response, ErrorResponse)
        assert response.code == "INVALID_ARGUMENT"
        assert response.message == "request_key must not be None"
        assert response.details == {}

    def test_to_response_carries_request_id(self):
        set_request_id("req-1")
        try:
            response = ConfigurationError().to_response()
        finally:
            clear_context()

        assert response.request_id == "req-1"
        assert response.code == "CONFIGURATION_ERROR"

    def test_delegate_failure_stage_in_details(self):
        error = DelegateFailureError("invocation", details={"request_key": "alpha"})

        assert error.stage == "invocation"
        assert error.details == {"request_key": "alpha", "stage": "invocation"}
        assert isinstance(error, MediatorException)
        assert str(error) == "Delegate failure"


class TestLogging:
    """Test cases for structured logging setup."""

    @pytest.fixture(autouse=True)
    def reset_structlog(self):
        yield
        structlog.reset_defaults()
        clear_context()
        service_name_var.set(None)
        environment_var.set(None)

    def test_set_request_id_generates_uuid(self):
        request_id = set_request_id()

        assert request_id_var.get() == request_id
        assert len(request_id) == 36

    def test_configured_output_is_json_with_context(self, caplog):
        configure_logging("access-mediator", "debug", env="test")
        caplog.set_level(logging.DEBUG)
        set_request_id("req-42")

        get_logger("mediator.test").info("Delegate constructed", mediator="access")

        payload = json.loads(caplog.records[-1].getMessage())
        assert payload["event"] == "Delegate constructed"
        assert payload["service"] == "access-mediator"
        assert payload["request_id"] == "req-42"
        assert payload["mediator"] == "access"
        assert payload["level"] == "info"
        assert payload["env"] == "test"

        timestamp = payload["timestamp"]
        assert isinstance(timestamp, str)
        assert datetime.fromisoformat(timestamp.replace("Z", "+00:00")).tzinfo is not None


class TestMetricsCollector:
    """Test cases for the prometheus metrics collector."""

    def test_records_into_injected_registry(self):
        registry = CollectorRegistry()
        collector = MetricsCollector("orders", registry)

        collector.record_mediation("cache_hit")
        collector.record_delegate_construction()
        collector.record_delegate_invocation("success", 0.25)
        collector.record_error("delegate_invocation")

        assert registry.get_sample_value("mediation_requests_total", {"outcome": "cache_hit"}) == 1.0
        assert registry.get_sample_value("delegate_constructions_total") == 1.0
        assert registry.get_sample_value("delegate_invocations_total", {"status": "success"}) == 1.0
        assert registry.get_sample_value("delegate_duration_seconds_sum") == 0.25
        assert registry.get_sample_value(
            "errors_total", {"error_type": "delegate_invocation", "service": "orders"}
        ) == 1.0
        assert registry.get_sample_value("service_info_info", {"service": "orders", "version": "1.0.0"}) == 1.0

    def test_unregistered_collectors_coexist(self):
        first = MetricsCollector("a")
        second = MetricsCollector("b")

        first.record_mediation("denied")
        second.record_mediation("denied")

        assert first.registry is None and second.registry is None
