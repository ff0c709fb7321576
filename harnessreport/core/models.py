"""Core domain models for harnessreport.

This module defines the values that flow from test executors to sinks:
- ReportFormat: Console/file detail level
- ReportEntryType: Outcome of one test method attempt
- ReportEntry: A single attempt of a test method
- TestSetResult: All entries reported for one test class in one fork

Example:
    >>> entry = ReportEntry(
    ...     class_name="tests.test_users.UserTest",
    ...     method_name="test_create",
    ...     entry_type=ReportEntryType.SUCCESS,
    ...     elapsed_ms=12,
    ... )
    >>> entry.is_success
    True
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator


class ReportFormat(str, Enum):
    """Report formats that produce detailed console and file output.

    Any other format string is accepted by the configuration but does not
    enable the plain-text file reporter.
    """

    BRIEF = "brief"
    PLAIN = "plain"


class ReportEntryType(Enum):
    """Outcome of a single test method attempt."""

    SUCCESS = "success"
    FAILURE = "failure"
    ERROR = "error"
    SKIPPED = "skipped"


class ReportEntry(BaseModel):
    """Result of one execution attempt of a test method.

    Reruns of the same method produce one ReportEntry each; they are
    accumulated in the RunHistoryRegistry in attempt order.

    Attributes:
        class_name: Fully-qualified name of the test class.
        method_name: Name of the test method.
        entry_type: Outcome of this attempt.
        elapsed_ms: Execution duration in milliseconds, if measured.
        message: Failure, error or skip message.
        stack_trace: Full stack trace for failures and errors.
        stdout: Output the attempt wrote to standard output.
        stderr: Output the attempt wrote to standard error.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
    )

    class_name: str = Field(..., min_length=1, description="Fully-qualified test class name")
    method_name: str = Field(..., min_length=1, description="Test method name")
    entry_type: ReportEntryType = Field(..., description="Outcome of the attempt")
    elapsed_ms: int | None = Field(default=None, ge=0, description="Duration in milliseconds")
    message: str | None = Field(default=None, description="Failure or skip message")
    stack_trace: str | None = Field(default=None, description="Stack trace of the failure")
    stdout: str = Field(default="", description="Captured standard output")
    stderr: str = Field(default="", description="Captured standard error")

    @model_validator(mode="after")
    def validate_consistency(self) -> ReportEntry:
        if self.entry_type is ReportEntryType.SUCCESS and self.stack_trace:
            raise ValueError("Successful entry should not have a stack trace")
        return self

    @property
    def is_success(self) -> bool:
        return self.entry_type is ReportEntryType.SUCCESS

    @property
    def is_failure(self) -> bool:
        """True for both assertion failures and errors."""
        return self.entry_type in (ReportEntryType.FAILURE, ReportEntryType.ERROR)

    @property
    def is_error(self) -> bool:
        return self.entry_type is ReportEntryType.ERROR

    @property
    def is_skipped(self) -> bool:
        return self.entry_type is ReportEntryType.SKIPPED

    @property
    def elapsed_seconds(self) -> float:
        """Duration in seconds, zero when not measured."""
        return (self.elapsed_ms or 0) / 1000.0

    @property
    def simple_class_name(self) -> str:
        return self.class_name.rsplit(".", 1)[-1]

    def trimmed_stack_trace(self) -> str | None:
        """Return the stack trace reduced to the frames of the test class.

        The exception header (first line) and the final exception line are
        always kept. Frames are kept when they mention the test class, its
        module, or the test method.
        """
        if not self.stack_trace:
            return self.stack_trace

        lines = self.stack_trace.rstrip("\n").splitlines()
        if len(lines) <= 2:
            return "\n".join(lines)

        module_path = self.class_name.rsplit(".", 1)[0].replace(".", "/")
        markers = {self.class_name, self.simple_class_name, module_path, self.method_name}

        kept = [lines[0]]
        for line in lines[1:-1]:
            if any(marker and marker in line for marker in markers):
                kept.append(line)
        kept.append(lines[-1])
        return "\n".join(kept)


class TestSetResult(BaseModel):
    """All entries reported for one test class during a test set run."""

    __test__ = False

    model_config = ConfigDict(extra="forbid")

    class_name: str = Field(..., min_length=1)
    entries: list[ReportEntry] = Field(default_factory=list)
    elapsed_ms: int = Field(default=0, ge=0)

    @computed_field
    @property
    def completed_count(self) -> int:
        return len(self.entries)

    @computed_field
    @property
    def failures(self) -> int:
        return sum(1 for e in self.entries if e.entry_type is ReportEntryType.FAILURE)

    @computed_field
    @property
    def errors(self) -> int:
        return sum(1 for e in self.entries if e.entry_type is ReportEntryType.ERROR)

    @computed_field
    @property
    def skipped(self) -> int:
        return sum(1 for e in self.entries if e.is_skipped)

    @property
    def has_failures(self) -> bool:
        return self.failures > 0 or self.errors > 0

    @property
    def elapsed_seconds(self) -> float:
        return self.elapsed_ms / 1000.0

    def summary_line(self) -> str:
        """Format the counts the way console and file reporters print them."""
        line = (
            f"Tests run: {self.completed_count}, Failures: {self.failures}, "
            f"Errors: {self.errors}, Skipped: {self.skipped}, "
            f"Time elapsed: {self.elapsed_seconds:.3f} s"
        )
        if self.has_failures:
            line += " <<< FAILURE!"
        return line
