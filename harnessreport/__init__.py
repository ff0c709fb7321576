"""harnessreport - reporter provisioning for test execution harnesses.

Build one ReportConfiguration per test run invocation, then ask it for the
sinks each forked run should receive:

    >>> from harnessreport import ReportConfiguration, TestSetRunListener
    >>> config = ReportConfiguration(...)
    >>> with TestSetRunListener.from_configuration(config) as listener:
    ...     listener.test_set_starting("pkg.UserTest")
    ...     listener.test_completed(entry)
    ...     listener.test_set_completed("pkg.UserTest", elapsed_ms=120)
"""

import logging

from harnessreport.config import ReportConfiguration, statistics_file_path
from harnessreport.core import (
    ReportEntry,
    ReportEntryType,
    ReportFormat,
    RunHistoryRegistry,
    SystemProperties,
    TestSetResult,
)
from harnessreport.errors import (
    ConfigValidationError,
    ErrorCode,
    HarnessReportError,
    ReporterError,
    ReportWriteError,
)
from harnessreport.reporters import (
    ForkedTestRun,
    SinkFactory,
    TestSetRunListener,
    is_brief_or_plain,
    should_use_console,
)

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "ConfigValidationError",
    "ErrorCode",
    "ForkedTestRun",
    "HarnessReportError",
    "ReportConfiguration",
    "ReportEntry",
    "ReportEntryType",
    "ReportFormat",
    "ReportWriteError",
    "ReporterError",
    "RunHistoryRegistry",
    "SinkFactory",
    "SystemProperties",
    "TestSetResult",
    "TestSetRunListener",
    "is_brief_or_plain",
    "should_use_console",
    "statistics_file_path",
    "__version__",
]
