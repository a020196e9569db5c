"""
Shared utilities for the OAuth credential core.

This package aggregates common building blocks consumed by the service
packages:

- config: Settings via pydantic-settings
- logging: Structured logging through structlog
- errors: Canonical error types and responses

Any cross-service logic should live here to avoid import cycles across
service packages. Do not import from service_* packages into shared/.
"""
