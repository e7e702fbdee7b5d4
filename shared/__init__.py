"""
Shared utilities for the Access Mediator.

This package aggregates common building blocks consumed by the mediator:

- config: Mediator configuration via pydantic-settings
- logging: Structured logging with request correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses
- test_helpers: Delegate doubles shared by the test suites

Do not import from access_mediator into shared/.
"""
