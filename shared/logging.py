"""
Shared logging configuration for the OAuth credential core.

Log events pass through ``mask_credentials`` before rendering, so a token,
code or PKCE verifier handed to a logger as keyword context never reaches
the output.
"""

import sys
import structlog
import logging
from typing import Any, Callable, Dict

MASK = "******"

CREDENTIAL_FIELDS = {
    "access", "access_token", "refresh", "refresh_token", "token",
    "code", "code_verifier", "verifier", "client_secret", "authorization",
}

Processor = Callable[[Any, str, Dict[str, Any]], Dict[str, Any]]


def configure_logging(service_name: str, log_level: str = "info") -> None:
    """Configure structured JSON logging for a service."""

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            service_context(service_name),
            mask_credentials,
            structlog.processors.JSONRenderer()
        ],
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

    get_logger(f"{service_name}.logging").debug("Logging configured", log_level=log_level)


def service_context(service_name: str) -> Processor:
    """Build a processor that stamps events with the service and component."""

    def processor(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
        event_dict.setdefault("service", service_name)
        # "oauth.storage.memory" -> "storage.memory"
        logger_name = event_dict.get("logger", "")
        if logger_name.startswith(f"{service_name}."):
            event_dict["component"] = logger_name[len(service_name) + 1:]
        return event_dict

    return processor


def mask_credentials(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Replace credential values anywhere in the event with a fixed mask."""
    return {key: _mask(key, value) for key, value in event_dict.items()}


def _mask(key: str, value: Any) -> Any:
    if key.lower() in CREDENTIAL_FIELDS and value is not None:
        return MASK
    if isinstance(value, dict):
        return {k: _mask(k, v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_mask("", item) for item in value]
    return value


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
