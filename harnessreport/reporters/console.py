"""Console reporter printing test set summaries to the captured stdout."""

from __future__ import annotations

import threading
from typing import IO, TYPE_CHECKING

from rich.console import Console

if TYPE_CHECKING:
    from harnessreport.core.models import TestSetResult


class ConsoleReporter:
    """Print a line per test set and a final summary.

    The reporter writes to the stream captured by the configuration at
    construction time, so output still reaches the real terminal when the
    process later redirects ``sys.stdout``.

    Example:
        >>> reporter = ConsoleReporter(sys.stdout)
        >>> reporter.test_set_starting("pkg.UserTest")
        Running pkg.UserTest
    """

    def __init__(self, stream: IO[str]) -> None:
        self.stream = stream
        self._console = Console(file=stream, highlight=False, soft_wrap=True, emoji=False)
        self._lock = threading.Lock()
        self._completed = 0
        self._failures = 0
        self._errors = 0
        self._skipped = 0
        self._failed_tests: list[str] = []

    def test_set_starting(self, class_name: str) -> None:
        self._print(f"Running {class_name}")

    def test_set_completed(self, result: TestSetResult) -> None:
        with self._lock:
            self._completed += result.completed_count
            self._failures += result.failures
            self._errors += result.errors
            self._skipped += result.skipped
            for entry in result.entries:
                if entry.is_failure:
                    self._failed_tests.append(f"{entry.class_name}.{entry.method_name}")

        style = "bold red" if result.has_failures else None
        self._print(result.summary_line(), style=style)

    def run_completed(self) -> None:
        with self._lock:
            failed = list(self._failed_tests)
            line = (
                f"Tests run: {self._completed}, Failures: {self._failures}, "
                f"Errors: {self._errors}, Skipped: {self._skipped}"
            )

        self._print("")
        self._print("Results :")
        if failed:
            self._print("")
            self._print("Failed tests:")
            for name in failed:
                self._print(f"  {name}")
        self._print("")
        self._print(line, style="bold red" if failed else "bold green")

    def _print(self, text: str, style: str | None = None) -> None:
        with self._lock:
            self._console.print(text, style=style, markup=False)
