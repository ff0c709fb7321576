"""Core models and shared state for harnessreport."""

from harnessreport.core.history import RunHistoryRegistry
from harnessreport.core.models import (
    ReportEntry,
    ReportEntryType,
    ReportFormat,
    TestSetResult,
)
from harnessreport.core.properties import SystemProperties

__all__ = [
    "ReportEntry",
    "ReportEntryType",
    "ReportFormat",
    "RunHistoryRegistry",
    "SystemProperties",
    "TestSetResult",
]
