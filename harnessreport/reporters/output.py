"""Destinations for raw test process output.

Every test run gets exactly one receiver:

- ConsoleOutputFileReporter when output is redirected to files
- DirectConsoleOutput otherwise, writing to the captured standard streams
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import IO

from harnessreport.errors import ErrorContext, ReportWriteError
from harnessreport.reporters.base import BaseFileReporter, ConsoleOutputReceiver

logger = logging.getLogger(__name__)

__all__ = [
    "ConsoleOutputFileReporter",
    "ConsoleOutputReceiver",
    "DirectConsoleOutput",
]


class ConsoleOutputFileReporter(BaseFileReporter):
    """Append test output to ``<class>[-<suffix>]-output.txt``.

    One file is opened lazily per test class and kept open until close().
    Standard output and standard error of a class go to the same file.
    """

    def __init__(self, reports_directory: str | Path, report_name_suffix: str | None = None) -> None:
        super().__init__(reports_directory, report_name_suffix)
        self._files: dict[str, IO[str]] = {}
        self._lock = threading.Lock()

    def output_file(self, class_name: str) -> Path:
        return self.report_file(class_name, ".txt", extra="-output")

    def write_test_output(self, class_name: str, output: str, stdout: bool) -> None:
        path = self.output_file(class_name)
        with self._lock:
            try:
                handle = self._files.get(class_name)
                if handle is None:
                    path.parent.mkdir(parents=True, exist_ok=True)
                    handle = open(path, "a", encoding="utf-8")
                    self._files[class_name] = handle
                    logger.debug("Opened test output file %s", path)
                handle.write(output)
                handle.flush()
            except OSError as e:
                raise ReportWriteError(
                    f"Failed to write test output for {class_name}",
                    context=ErrorContext(class_name=class_name, path=str(path)),
                    cause=e,
                ) from e

    def close_test_set(self, class_name: str) -> None:
        """Close the output file of a finished test set."""
        with self._lock:
            handle = self._files.pop(class_name, None)
        if handle is not None:
            handle.close()

    def close(self) -> None:
        with self._lock:
            handles = list(self._files.values())
            self._files.clear()
        for handle in handles:
            handle.close()


class DirectConsoleOutput:
    """Pass test output straight to the captured stdout and stderr."""

    def __init__(self, stdout: IO[str], stderr: IO[str]) -> None:
        self.stdout = stdout
        self.stderr = stderr
        self._lock = threading.Lock()

    def write_test_output(self, class_name: str, output: str, stdout: bool) -> None:
        stream = self.stdout if stdout else self.stderr
        with self._lock:
            stream.write(output)
            stream.flush()

    def close_test_set(self, class_name: str) -> None:
        pass

    def close(self) -> None:
        pass
