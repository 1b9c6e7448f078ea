"""
Lectio - Observability Package

Structured logging, tracing and metrics for the content engine.

Components:
- logging: structlog integration with trace context propagation
- tracing: OpenTelemetry SDK provider setup
- metrics: cache and fallback counters

Usage:
    from observability import setup_observability, get_logger

    setup_observability(config)
    logger = get_logger(__name__)
"""
from typing import TYPE_CHECKING

from .logging import (
    LogContext,
    LoggingConfig,
    get_logger,
    setup_logging,
    shutdown_logging,
)
from .metrics import LectioMetrics, get_metrics
from .tracing import (
    TracingConfig,
    create_span,
    setup_tracing,
    shutdown_tracing,
)

if TYPE_CHECKING:
    from config import Config


def setup_observability(config: "Config") -> None:
    """Configure logging and tracing from the application config."""
    setup_logging(LoggingConfig(
        service_name=config.observability.service_name,
        level=config.logging.level,
        json_format=config.logging.json_format,
        log_to_file=config.logging.log_to_file,
        log_file_path=config.logging.log_dir / "lectio.log",
        environment=config.env.value,
    ))
    setup_tracing(TracingConfig(
        service_name=config.observability.service_name,
        service_version=config.observability.service_version,
        enabled=config.observability.tracing_enabled,
        otlp_endpoint=config.observability.otlp_endpoint,
        console_export=config.observability.console_export,
        environment=config.env.value,
    ))


def shutdown_observability() -> None:
    """Flush tracing and logging handlers."""
    shutdown_tracing()
    shutdown_logging()


__all__ = [
    # Logging
    "LogContext",
    "LoggingConfig",
    "get_logger",
    "setup_logging",
    "shutdown_logging",
    # Tracing
    "TracingConfig",
    "create_span",
    "setup_tracing",
    "shutdown_tracing",
    # Metrics
    "LectioMetrics",
    "get_metrics",
    # Combined setup
    "setup_observability",
    "shutdown_observability",
]
