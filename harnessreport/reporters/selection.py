"""Decisions about which sinks a test run receives.

Pure predicates with no side effects. SinkFactory combines them with the
configuration fields to build or omit each sink.
"""

from __future__ import annotations

from harnessreport.core.models import ReportFormat

_DETAILED_FORMATS = frozenset(fmt.value for fmt in ReportFormat)


def is_brief_or_plain(report_format: str | ReportFormat | None) -> bool:
    """Return True iff the format is ``brief`` or ``plain``."""
    if isinstance(report_format, ReportFormat):
        return True
    return report_format in _DETAILED_FORMATS


def should_use_console(
    use_file: bool,
    print_summary: bool,
    redirect_output_to_file: bool,
    report_format: str | ReportFormat | None,
) -> bool:
    """Decide whether the console reporter is enabled.

    When file output is on, the console only carries the summary, so
    ``print_summary`` decides. When file output is off, the console has to
    carry either the redirected-output markers or the brief/plain detail.
    """
    if use_file:
        return print_summary
    return redirect_output_to_file or is_brief_or_plain(report_format)
