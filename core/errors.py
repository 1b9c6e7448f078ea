"""
Lectio - Unified Error Handling

Provides the error hierarchy shared by the content engine.

Features:
- Hierarchical exception classes with context preservation
- Error severity levels for prioritized handling
- Structured error context for debugging
- OpenTelemetry span recording
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import (
    Any,
    Dict,
    List,
    Optional,
)

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode


class ErrorSeverity(Enum):
    """Error severity levels for prioritized handling."""

    WARNING = "warning"    # Degraded operation, a fallback exists
    ERROR = "error"        # Operation failed
    CRITICAL = "critical"  # Engine cannot run


@dataclass
class ErrorContext:
    """Structured context for error debugging and tracing."""

    operation: str
    component: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    translation_id: Optional[str] = None
    book: Optional[str] = None
    chapter: Optional[int] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert context to dictionary for serialization."""
        return {
            "operation": self.operation,
            "component": self.component,
            "timestamp": self.timestamp.isoformat(),
            "translation_id": self.translation_id,
            "book": self.book,
            "chapter": self.chapter,
            "metadata": self.metadata,
        }


class LectioError(Exception):
    """
    Base exception for all Lectio-specific errors.

    Provides:
    - Structured error context
    - Severity level
    - Chained exception support
    - OpenTelemetry span recording
    """

    default_severity: ErrorSeverity = ErrorSeverity.ERROR
    error_code: str = "LECTIO_ERROR"

    def __init__(
        self,
        message: str,
        context: Optional[ErrorContext] = None,
        severity: Optional[ErrorSeverity] = None,
        cause: Optional[Exception] = None,
        recoverable: bool = False,
        suggestions: Optional[List[str]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.context = context
        self.severity = severity or self.default_severity
        self.cause = cause
        self.recoverable = recoverable
        self.suggestions = suggestions or []
        self.timestamp = datetime.now(timezone.utc)

        self._record_to_span()

    def _record_to_span(self) -> None:
        """Record exception to current OpenTelemetry span."""
        span = trace.get_current_span()
        if span and span.is_recording():
            span.set_status(Status(StatusCode.ERROR, self.message))
            span.record_exception(self)
            span.set_attribute("error.code", self.error_code)
            span.set_attribute("error.severity", self.severity.value)
            span.set_attribute("error.recoverable", self.recoverable)
            if self.context:
                span.set_attribute("error.component", self.context.component)
                span.set_attribute("error.operation", self.context.operation)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "severity": self.severity.value,
            "recoverable": self.recoverable,
            "suggestions": self.suggestions,
            "timestamp": self.timestamp.isoformat(),
            "context": self.context.to_dict() if self.context else None,
            "cause": str(self.cause) if self.cause else None,
        }

    def __str__(self) -> str:
        parts = [f"[{self.error_code}] {self.message}"]
        if self.context:
            parts.append(f" (component: {self.context.component})")
        if self.cause:
            parts.append(f" [caused by: {self.cause}]")
        return "".join(parts)


class LectioConfigError(LectioError):
    """Configuration-related errors."""

    error_code = "CONFIG_ERROR"
    default_severity = ErrorSeverity.CRITICAL

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        actual_value: Any = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.config_key = config_key
        self.actual_value = actual_value


class StoreError(LectioError):
    """Durable key/value store failures."""

    error_code = "STORE_ERROR"
    default_severity = ErrorSeverity.WARNING

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        backend: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(message, recoverable=True, **kwargs)
        self.key = key
        self.backend = backend


class UnknownTranslation(LectioError):
    """A translation id that the catalog does not offer."""

    error_code = "UNKNOWN_TRANSLATION"
    default_severity = ErrorSeverity.WARNING

    def __init__(
        self,
        translation_id: str,
        available: Optional[List[str]] = None,
        **kwargs: Any,
    ):
        super().__init__(
            f"Translation {translation_id!r} is not available",
            suggestions=list(available or [])[:5],
            **kwargs,
        )
        self.translation_id = translation_id


class ContentRetrievalError(LectioError):
    """Base for failures the fallback coordinator absorbs."""

    error_code = "RETRIEVAL_ERROR"
    default_severity = ErrorSeverity.WARNING

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(message, recoverable=True, **kwargs)
        self.url = url


class UpstreamUnavailable(ContentRetrievalError):
    """Transport failure or non-2xx response from the provider."""

    error_code = "UPSTREAM_UNAVAILABLE"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.status_code = status_code


class BadResponseFormat(ContentRetrievalError):
    """The provider answered, but not with a payload we can parse."""

    error_code = "BAD_RESPONSE_FORMAT"

    def __init__(
        self,
        message: str,
        content_type: Optional[str] = None,
        body_preview: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.content_type = content_type
        self.body_preview = body_preview


class EmptyContent(ContentRetrievalError):
    """Normalization produced zero verses."""

    error_code = "EMPTY_CONTENT"
