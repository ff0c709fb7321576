"""Custom exception hierarchy for harnessreport.

Every error raised by this package inherits from HarnessReportError and
carries:
- error_code: A unique ErrorCode enum for categorization
- context: ErrorContext with test class/method/path details
- suggestions: List of actionable steps to resolve the issue

Sink absence is never an error. Factory methods return ``None`` for a
disabled sink and callers skip it.

Example:
    try:
        config = ReportConfiguration(**options)
    except ConfigValidationError as e:
        print(f"Error [{e.error_code.value}]: {e.message}")
        for suggestion in e.suggestions:
            print(f"  - {suggestion}")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Standardized error codes for harnessreport.

    Error codes are organized by category:
    - E2xx: Validation errors
    - E6xx: Reporter errors
    - E9xx: Unknown/internal errors
    """

    # Validation errors (E2xx)
    VALIDATION_FAILED = "E201"
    INVALID_CONFIG = "E202"

    # Reporter errors (E6xx)
    REPORTER_ERROR = "E602"
    REPORT_WRITE_FAILED = "E603"

    # Unknown/internal errors (E9xx)
    UNKNOWN = "E999"

    @property
    def category(self) -> str:
        """Get the error category name."""
        code_num = int(self.value[1:])
        if 200 <= code_num < 300:
            return "validation"
        elif 600 <= code_num < 700:
            return "reporter"
        else:
            return "unknown"


@dataclass
class ErrorContext:
    """Structured context for error logging and debugging.

    Attributes:
        class_name: Test class being reported when the error occurred.
        method_name: Test method being reported when the error occurred.
        path: File the failing operation was touching.
        extra: Additional context-specific information.
        timestamp: When the error occurred.
    """

    class_name: str | None = None
    method_name: str | None = None
    path: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        """Convert context to dictionary for serialization."""
        result = {
            "class_name": self.class_name,
            "method_name": self.method_name,
            "path": self.path,
            "extra": self.extra,
            "timestamp": self.timestamp.isoformat(),
        }
        return {k: v for k, v in result.items() if v is not None}

    def format_location(self) -> str:
        """Format the error location as a readable string."""
        parts = []
        if self.class_name:
            parts.append(f"class={self.class_name}")
        if self.method_name:
            parts.append(f"method={self.method_name}")
        if self.path:
            parts.append(f"path={self.path}")
        return " > ".join(parts) if parts else "unknown location"


class HarnessReportError(Exception):
    """Base exception for all harnessreport errors.

    Attributes:
        error_code: Unique ErrorCode for this error type
        message: Human-readable error description
        context: ErrorContext with execution details
        suggestions: List of actionable steps to resolve the issue
        recoverable: Whether the error can be retried
        cause: The underlying exception (if any)
    """

    error_code: ErrorCode = ErrorCode.UNKNOWN
    default_message: str = "An unexpected error occurred"
    default_suggestions: list[str] = []

    def __init__(
        self,
        message: str | None = None,
        error_code: ErrorCode | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
        recoverable: bool = True,
        suggestions: list[str] | None = None,
        **extra_context: Any,
    ) -> None:
        self.message = message or self.default_message
        self.error_code = error_code or self.error_code
        self.context = context or ErrorContext()
        self.cause = cause
        self.recoverable = recoverable
        self._suggestions = suggestions

        if extra_context:
            self.context.extra.update(extra_context)

        super().__init__(self.message)

    @property
    def suggestions(self) -> list[str]:
        """Get actionable suggestions for resolving this error."""
        if self._suggestions is not None:
            return self._suggestions
        return self.default_suggestions.copy()

    def __str__(self) -> str:
        parts = [f"[{self.error_code.value}] {self.message}"]

        location = self.context.format_location()
        if location != "unknown location":
            parts.append(f"at {location}")

        return " | ".join(parts)

    def format_verbose(self) -> str:
        """Format error with full details including suggestions."""
        lines = [
            f"Error [{self.error_code.value}]: {self.message}",
            "",
        ]

        location = self.context.format_location()
        if location != "unknown location":
            lines.append(f"Location: {location}")

        if self.cause is not None:
            lines.append(f"Cause: {self.cause}")

        if self.suggestions:
            lines.append("")
            lines.append("Suggestions:")
            for suggestion in self.suggestions:
                lines.append(f"  - {suggestion}")

        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "error_code": self.error_code.value,
            "error_type": self.__class__.__name__,
            "message": self.message,
            "recoverable": self.recoverable,
            "suggestions": self.suggestions,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
        }


class ValidationError(HarnessReportError):
    """Validation failed.

    Check the 'field' and 'value' attributes for specific details about
    what failed validation.
    """

    error_code = ErrorCode.VALIDATION_FAILED
    default_message = "Validation failed"
    default_suggestions = [
        "Check the field name and value mentioned in the error",
    ]

    def __init__(
        self,
        message: str | None = None,
        field: str | None = None,
        value: Any = None,
        expected: str | None = None,
        **kwargs: Any,
    ) -> None:
        self.field = field
        self.value = value
        self.expected = expected
        kwargs.setdefault("recoverable", False)
        super().__init__(message=message, **kwargs)

    def __str__(self) -> str:
        base = super().__str__()
        if self.field:
            base = f"{base} (field: {self.field})"
        return base

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["field"] = self.field
        result["value"] = repr(self.value)
        if self.expected:
            result["expected"] = self.expected
        return result


class ConfigValidationError(ValidationError):
    """Report configuration validation failed.

    Raised while constructing a ReportConfiguration. The configuration is
    never built with silently defaulted values.
    """

    error_code = ErrorCode.INVALID_CONFIG
    default_message = "Invalid report configuration"
    default_suggestions = [
        "Pass a non-null reports_directory",
        "Use a rerun_failing_tests_count of zero or more",
    ]

    def __init__(
        self,
        message: str | None = None,
        errors: list[str] | None = None,
        **kwargs: Any,
    ) -> None:
        self.errors = errors or []
        super().__init__(message=message, **kwargs)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["errors"] = list(self.errors)
        return result


class ReporterError(HarnessReportError):
    """Reporter execution error."""

    error_code = ErrorCode.REPORTER_ERROR
    default_message = "Reporter execution failed"


class ReportWriteError(ReporterError):
    """A file-backed sink could not write its output."""

    error_code = ErrorCode.REPORT_WRITE_FAILED
    default_message = "Failed to write report file"
    default_suggestions = [
        "Check that the reports directory is writable",
        "Check available disk space",
    ]
