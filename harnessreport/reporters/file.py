"""Plain-text file reporter."""

from __future__ import annotations

from typing import TYPE_CHECKING

from harnessreport.reporters.base import BaseFileReporter

if TYPE_CHECKING:
    from harnessreport.core.models import ReportEntry, TestSetResult


class FileReporter(BaseFileReporter):
    """Write one ``<class>[-<suffix>].txt`` summary per test set.

    Each file holds a header naming the test set, the summary line, and a
    block for every test that did not pass.
    """

    def test_set_starting(self, class_name: str) -> None:
        pass

    def test_set_completed(self, result: TestSetResult) -> None:
        rule = "-" * 63
        lines = [
            rule,
            f"Test set: {result.class_name}",
            rule,
            result.summary_line(),
        ]
        for entry in result.entries:
            if not entry.is_success:
                lines.extend(self._format_entry(entry))

        path = self.report_file(result.class_name, ".txt")
        self.write_report(path, "\n".join(lines) + "\n", class_name=result.class_name)

    def run_completed(self) -> None:
        pass

    def _format_entry(self, entry: ReportEntry) -> list[str]:
        label = {
            "failure": "FAILURE!",
            "error": "ERROR!",
            "skipped": "SKIPPED",
        }[entry.entry_type.value]
        lines = [f"{entry.method_name}  Time elapsed: {entry.elapsed_seconds:.3f} s  <<< {label}"]
        if entry.stack_trace:
            lines.append(entry.stack_trace.rstrip("\n"))
        elif entry.message:
            lines.append(entry.message)
        return lines
