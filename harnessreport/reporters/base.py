"""Sink interfaces for harnessreport.

Two kinds of sinks exist:

- ReportSink: receives one TestSetResult per test class and a final
  run_completed() call. Console, file, XML and statistics reporters
  implement it.
- ConsoleOutputReceiver: receives the raw output a test process writes to
  its standard streams.

BaseFileReporter holds the file naming and writing shared by the sinks that
write under the reports directory.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from harnessreport.errors import ErrorContext, ReportWriteError

if TYPE_CHECKING:
    from harnessreport.core.models import TestSetResult

logger = logging.getLogger(__name__)


@runtime_checkable
class ReportSink(Protocol):
    """Protocol for sinks that consume per-test-set results."""

    def test_set_starting(self, class_name: str) -> None:
        """Called before the first test of a class runs."""
        ...

    def test_set_completed(self, result: TestSetResult) -> None:
        """Called after every test of a class has reported."""
        ...

    def run_completed(self) -> None:
        """Called once after the last test set of the run."""
        ...


@runtime_checkable
class ConsoleOutputReceiver(Protocol):
    """Protocol for destinations of raw test process output."""

    def write_test_output(self, class_name: str, output: str, stdout: bool) -> None:
        """Write a chunk of output produced while ``class_name`` was running."""
        ...

    def close_test_set(self, class_name: str) -> None:
        """Release whatever the receiver holds for a finished test set."""
        ...

    def close(self) -> None:
        ...


class BaseFileReporter:
    """Common behavior of sinks writing files under the reports directory.

    Attributes:
        reports_directory: Directory receiving the report files.
        report_name_suffix: Optional suffix appended to every file stem.
    """

    def __init__(self, reports_directory: str | Path, report_name_suffix: str | None = None) -> None:
        self.reports_directory = Path(reports_directory)
        self.report_name_suffix = report_name_suffix

    def report_file(self, class_name: str, extension: str, prefix: str = "", extra: str = "") -> Path:
        """Build ``<dir>/<prefix><class>[-<suffix>]<extra><extension>``."""
        stem = f"{prefix}{class_name}"
        if self.report_name_suffix:
            stem = f"{stem}-{self.report_name_suffix}"
        return self.reports_directory / f"{stem}{extra}{extension}"

    def write_report(self, path: Path, content: str, class_name: str | None = None) -> Path:
        """Write ``content`` to ``path``, creating the reports directory.

        Raises:
            ReportWriteError: If the file cannot be written.
        """
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                f.write(content)
        except OSError as e:
            raise ReportWriteError(
                f"Failed to write report {path.name}",
                context=ErrorContext(class_name=class_name, path=str(path)),
                cause=e,
            ) from e

        logger.debug("Wrote report %s", path)
        return path
