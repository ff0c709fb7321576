"""Error hierarchy for harnessreport."""

from harnessreport.errors.base import (
    ConfigValidationError,
    ErrorCode,
    ErrorContext,
    HarnessReportError,
    ReporterError,
    ReportWriteError,
    ValidationError,
)

__all__ = [
    "ConfigValidationError",
    "ErrorCode",
    "ErrorContext",
    "HarnessReportError",
    "ReportWriteError",
    "ReporterError",
    "ValidationError",
]
