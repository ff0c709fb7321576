"""Construction of the sinks a test run receives.

SinkFactory is the only place that builds sinks. Each method returns the
sink, or ``None`` when the configuration disables it; a disabled sink is
not an error and nothing here raises.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from harnessreport.config.paths import statistics_file_path
from harnessreport.reporters.console import ConsoleReporter
from harnessreport.reporters.file import FileReporter
from harnessreport.reporters.junit import StatelessXmlReporter
from harnessreport.reporters.output import (
    ConsoleOutputFileReporter,
    ConsoleOutputReceiver,
    DirectConsoleOutput,
)
from harnessreport.reporters.selection import is_brief_or_plain, should_use_console
from harnessreport.reporters.statistics import StatisticsReporter

if TYPE_CHECKING:
    from harnessreport.config.settings import ReportConfiguration
    from harnessreport.reporters.base import ReportSink

logger = logging.getLogger(__name__)


class SinkFactory:
    """Build sinks from a ReportConfiguration.

    Example:
        >>> factory = SinkFactory(config)
        >>> reporter = factory.xml_reporter()
        >>> if reporter is not None:
        ...     reporter.test_set_completed(result)
    """

    def __init__(self, config: ReportConfiguration) -> None:
        self.config = config

    def console_reporter(self) -> ConsoleReporter | None:
        config = self.config
        enabled = should_use_console(
            config.use_file,
            config.print_summary,
            config.redirect_test_output_to_file,
            config.report_format,
        )
        logger.debug("Console reporter %s", "enabled" if enabled else "disabled")
        return ConsoleReporter(config.original_stdout) if enabled else None

    def file_reporter(self) -> FileReporter | None:
        config = self.config
        enabled = config.use_file and is_brief_or_plain(config.report_format)
        logger.debug("File reporter %s", "enabled" if enabled else "disabled")
        if not enabled:
            return None
        return FileReporter(config.reports_directory, config.report_name_suffix)

    def xml_reporter(self) -> StatelessXmlReporter | None:
        config = self.config
        if config.disable_xml_report:
            logger.debug("XML reporter disabled")
            return None
        return StatelessXmlReporter(
            config.reports_directory,
            config.report_name_suffix,
            config.trim_stack_trace,
            config.rerun_failing_tests_count,
            config.run_history,
            config.xsd_schema_location,
            system_properties=config.test_vm_system_properties,
        )

    def console_output_receiver(self) -> ConsoleOutputReceiver:
        """Return where raw test output goes; never None."""
        config = self.config
        if config.redirect_test_output_to_file:
            return ConsoleOutputFileReporter(config.reports_directory, config.report_name_suffix)
        return DirectConsoleOutput(config.original_stdout, config.original_stderr)

    def statistics_reporter(self) -> StatisticsReporter | None:
        config = self.config
        if not config.requires_run_history:
            logger.debug("Statistics reporter disabled")
            return None
        path = statistics_file_path(config.reports_directory, config.configuration_hash)
        logger.debug("Statistics reporter writes to %s", path)
        return StatisticsReporter(path)

    def create_reporters(self) -> list[ReportSink]:
        """Return every enabled test set reporter: console, file, XML, statistics."""
        candidates = [
            self.console_reporter(),
            self.file_reporter(),
            self.xml_reporter(),
            self.statistics_reporter(),
        ]
        return [reporter for reporter in candidates if reporter is not None]
