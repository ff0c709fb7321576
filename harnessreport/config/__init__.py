"""Report configuration for harnessreport."""

from harnessreport.config.paths import STATISTICS_FILE_PREFIX, statistics_file_path
from harnessreport.config.settings import (
    BRIEF_REPORT_FORMAT,
    PLAIN_REPORT_FORMAT,
    ReportConfiguration,
)

__all__ = [
    "BRIEF_REPORT_FORMAT",
    "PLAIN_REPORT_FORMAT",
    "ReportConfiguration",
    "STATISTICS_FILE_PREFIX",
    "statistics_file_path",
]
