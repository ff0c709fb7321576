"""Report configuration shared by every fork of a test run.

A ReportConfiguration is built once by the harness after it has parsed the
build configuration. Its scalar fields never change afterwards. It owns two
pieces of mutable, concurrently shared state: the system properties
forwarded to forked test VMs and the run history used for reruns.

Sink construction is delegated to SinkFactory. Every ``instantiate_*``
method returns ``None`` when the corresponding sink is disabled, except
``instantiate_console_output_receiver`` which always returns a receiver.

Example:
    >>> config = ReportConfiguration(
    ...     use_file=True,
    ...     print_summary=True,
    ...     report_format="plain",
    ...     redirect_test_output_to_file=False,
    ...     disable_xml_report=False,
    ...     reports_directory=Path("app/target/reports"),
    ...     trim_stack_trace=False,
    ...     configuration_hash="abc123",
    ...     requires_run_history=False,
    ...     rerun_failing_tests_count=0,
    ... )
    >>> config.instantiate_statistics_reporter() is None
    True
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from harnessreport.config.paths import statistics_file_path
from harnessreport.core.history import RunHistoryRegistry
from harnessreport.core.models import ReportFormat
from harnessreport.core.properties import SystemProperties
from harnessreport.errors import ConfigValidationError
from harnessreport.reporters.selection import is_brief_or_plain

if TYPE_CHECKING:
    from harnessreport.reporters.console import ConsoleReporter
    from harnessreport.reporters.factory import SinkFactory
    from harnessreport.reporters.file import FileReporter
    from harnessreport.reporters.junit import StatelessXmlReporter
    from harnessreport.reporters.output import ConsoleOutputReceiver
    from harnessreport.reporters.statistics import StatisticsReporter


BRIEF_REPORT_FORMAT = ReportFormat.BRIEF.value
PLAIN_REPORT_FORMAT = ReportFormat.PLAIN.value


class ReportConfiguration(BaseModel):
    """All the parameters used to construct reporters."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        arbitrary_types_allowed=True,
    )

    use_file: bool
    print_summary: bool
    report_format: str
    redirect_test_output_to_file: bool
    disable_xml_report: bool
    reports_directory: Path
    trim_stack_trace: bool
    report_name_suffix: str | None = None
    configuration_hash: str
    requires_run_history: bool
    rerun_failing_tests_count: int = Field(..., ge=0)
    xsd_schema_location: str | None = None

    # Captured once during construction; never re-read from sys afterwards.
    original_stdout: Any = Field(default=None, exclude=True, repr=False)
    original_stderr: Any = Field(default=None, exclude=True, repr=False)

    _test_vm_system_properties: SystemProperties = PrivateAttr(default_factory=SystemProperties)
    _run_history: RunHistoryRegistry = PrivateAttr(default_factory=RunHistoryRegistry)

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except PydanticValidationError as exc:
            raise _to_config_error(exc) from exc

    @model_validator(mode="before")
    @classmethod
    def capture_original_streams(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            if data.get("original_stdout") is None:
                data["original_stdout"] = sys.stdout
            if data.get("original_stderr") is None:
                data["original_stderr"] = sys.stderr
        return data

    @field_validator("report_format", mode="before")
    @classmethod
    def normalize_report_format(cls, v: Any) -> Any:
        if isinstance(v, ReportFormat):
            return v.value
        return v

    @property
    def test_vm_system_properties(self) -> SystemProperties:
        """Mutable properties forwarded to forked test VMs."""
        return self._test_vm_system_properties

    @property
    def run_history(self) -> RunHistoryRegistry:
        """Run history shared by producers and sinks of this configuration."""
        return self._run_history

    @property
    def statistics_file(self) -> Path:
        return statistics_file_path(self.reports_directory, self.configuration_hash)

    def is_brief_or_plain_format(self) -> bool:
        return is_brief_or_plain(self.report_format)

    def sink_factory(self) -> SinkFactory:
        from harnessreport.reporters.factory import SinkFactory

        return SinkFactory(self)

    def instantiate_console_reporter(self) -> ConsoleReporter | None:
        return self.sink_factory().console_reporter()

    def instantiate_file_reporter(self) -> FileReporter | None:
        return self.sink_factory().file_reporter()

    def instantiate_xml_reporter(self) -> StatelessXmlReporter | None:
        return self.sink_factory().xml_reporter()

    def instantiate_console_output_receiver(self) -> ConsoleOutputReceiver:
        return self.sink_factory().console_output_receiver()

    def instantiate_statistics_reporter(self) -> StatisticsReporter | None:
        return self.sink_factory().statistics_reporter()


def _to_config_error(exc: PydanticValidationError) -> ConfigValidationError:
    """Translate a pydantic validation failure into the project's hierarchy."""
    errors = exc.errors()
    messages = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ()))
        messages.append(f"{location}: {error.get('msg', 'invalid value')}" if location else error.get("msg", ""))

    first = errors[0] if errors else {}
    loc = first.get("loc", ())
    field = str(loc[0]) if loc else None
    return ConfigValidationError(
        message="Invalid report configuration: " + "; ".join(messages),
        errors=messages,
        field=field,
        value=first.get("input"),
    )
