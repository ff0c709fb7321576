"""Reporters module for harnessreport.

Sinks a test run can receive:
- ConsoleReporter: Summary lines on the captured stdout
- FileReporter: Plain-text summary per test set
- StatelessXmlReporter: JUnit XML per test set, rerun aware
- StatisticsReporter: Persistent per-test run statistics
- ConsoleOutputFileReporter / DirectConsoleOutput: Raw test output

SinkFactory decides which of them a run gets. TestSetRunListener serves one
fork; ForkedTestRun shares the run-level sinks between forks.
"""

from harnessreport.reporters.base import BaseFileReporter, ConsoleOutputReceiver, ReportSink
from harnessreport.reporters.console import ConsoleReporter
from harnessreport.reporters.factory import SinkFactory
from harnessreport.reporters.file import FileReporter
from harnessreport.reporters.junit import StatelessXmlReporter
from harnessreport.reporters.listener import ForkedTestRun, TestSetRunListener
from harnessreport.reporters.output import ConsoleOutputFileReporter, DirectConsoleOutput
from harnessreport.reporters.selection import is_brief_or_plain, should_use_console
from harnessreport.reporters.statistics import RunEntryStatistics, StatisticsReporter

__all__ = [
    "BaseFileReporter",
    "ConsoleOutputFileReporter",
    "ConsoleOutputReceiver",
    "ConsoleReporter",
    "DirectConsoleOutput",
    "FileReporter",
    "ForkedTestRun",
    "ReportSink",
    "RunEntryStatistics",
    "SinkFactory",
    "StatelessXmlReporter",
    "StatisticsReporter",
    "TestSetRunListener",
    "is_brief_or_plain",
    "should_use_console",
]
