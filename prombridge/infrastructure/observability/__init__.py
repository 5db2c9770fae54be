"""Observability infrastructure: structured logging and correlation ids.

Usage:
    from prombridge.infrastructure.observability import (
        configure_structlog,
        get_logger_for_service,
    )

    configure_structlog(environment="production")
    log = get_logger_for_service("pull_exporter", component="pull")
"""

from prombridge.infrastructure.observability.correlation import (
    CORRELATION_ID_HEADER,
    correlation_id_processor,
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from prombridge.infrastructure.observability.logging import (
    configure_structlog,
    get_logger_for_service,
)

__all__: list[str] = [
    "CORRELATION_ID_HEADER",
    "configure_structlog",
    "correlation_id_processor",
    "generate_correlation_id",
    "get_correlation_id",
    "get_logger_for_service",
    "set_correlation_id",
]
