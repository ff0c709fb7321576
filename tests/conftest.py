"""Pytest fixtures for harnessreport tests."""

from __future__ import annotations

import io
from pathlib import Path
from typing import Any

import pytest

from harnessreport.config import ReportConfiguration
from harnessreport.core.models import ReportEntry, ReportEntryType


def make_config(reports_directory: Path, **overrides: Any) -> ReportConfiguration:
    """Build a configuration with every scalar field spelled out."""
    options: dict[str, Any] = {
        "use_file": True,
        "print_summary": True,
        "report_format": "plain",
        "redirect_test_output_to_file": False,
        "disable_xml_report": False,
        "reports_directory": reports_directory,
        "trim_stack_trace": False,
        "report_name_suffix": None,
        "configuration_hash": "TESTHASH",
        "requires_run_history": False,
        "rerun_failing_tests_count": 0,
        "xsd_schema_location": None,
    }
    options.update(overrides)
    return ReportConfiguration(**options)


def default_value(reports_directory: Path = Path("./target"), **overrides: Any) -> ReportConfiguration:
    """Preset with XML reporting on, plain format, file output, no reruns."""
    return make_config(reports_directory, **overrides)


def default_no_xml(reports_directory: Path = Path("./target"), **overrides: Any) -> ReportConfiguration:
    """Preset identical to default_value but with XML reporting off."""
    overrides.setdefault("disable_xml_report", True)
    overrides.setdefault("configuration_hash", "TESTHASHxXML")
    return make_config(reports_directory, **overrides)


def make_entry(
    method_name: str = "test_method",
    entry_type: ReportEntryType = ReportEntryType.SUCCESS,
    class_name: str = "pkg.tests.UserTest",
    **kwargs: Any,
) -> ReportEntry:
    if entry_type in (ReportEntryType.FAILURE, ReportEntryType.ERROR):
        kwargs.setdefault("message", "boom")
        kwargs.setdefault(
            "stack_trace",
            "Traceback (most recent call last):\n"
            '  File "/src/pkg/tests/UserTest.py", line 10, in test_method\n'
            "    assert False\n"
            "AssertionError: boom",
        )
    return ReportEntry(
        class_name=class_name,
        method_name=method_name,
        entry_type=entry_type,
        **kwargs,
    )


@pytest.fixture
def reports_dir(tmp_path: Path) -> Path:
    """Reports directory laid out as <module>/target/<reports-dir>."""
    return tmp_path / "module" / "target" / "test-reports"


@pytest.fixture
def stdout() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def stderr() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def default_config(reports_dir: Path, stdout: io.StringIO, stderr: io.StringIO) -> ReportConfiguration:
    return default_value(reports_dir, original_stdout=stdout, original_stderr=stderr)


@pytest.fixture
def no_xml_config(reports_dir: Path, stdout: io.StringIO, stderr: io.StringIO) -> ReportConfiguration:
    return default_no_xml(reports_dir, original_stdout=stdout, original_stderr=stderr)
