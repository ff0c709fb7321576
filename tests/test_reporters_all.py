"""Tests for all sink implementations in harnessreport."""

from __future__ import annotations

import io
import threading
import time
from pathlib import Path
from xml.etree import ElementTree

import pytest

from harnessreport.core.history import RunHistoryRegistry
from harnessreport.core.models import ReportEntryType, TestSetResult
from harnessreport.errors import ReportWriteError
from harnessreport.reporters.base import ConsoleOutputReceiver, ReportSink
from harnessreport.reporters.console import ConsoleReporter
from harnessreport.reporters.file import FileReporter
from harnessreport.reporters.junit import XSI_NAMESPACE, StatelessXmlReporter
from harnessreport.reporters.output import ConsoleOutputFileReporter, DirectConsoleOutput
from harnessreport.reporters.statistics import RunEntryStatistics, StatisticsReporter
from tests.conftest import make_entry

CLASS_NAME = "pkg.tests.UserTest"


@pytest.fixture
def mixed_result() -> TestSetResult:
    return TestSetResult(
        class_name=CLASS_NAME,
        elapsed_ms=1500,
        entries=[
            make_entry("test_ok", ReportEntryType.SUCCESS, elapsed_ms=100),
            make_entry("test_fail", ReportEntryType.FAILURE, elapsed_ms=200),
            make_entry("test_error", ReportEntryType.ERROR, elapsed_ms=300),
            make_entry("test_skip", ReportEntryType.SKIPPED, message="not on CI"),
        ],
    )


def xml_reporter(reports_dir: Path, history: RunHistoryRegistry | None = None, **kwargs) -> StatelessXmlReporter:
    options = {
        "report_name_suffix": None,
        "trim_stack_trace": False,
        "rerun_failing_tests_count": 0,
        "run_history": history or RunHistoryRegistry(),
        "xsd_schema_location": None,
    }
    options.update(kwargs)
    return StatelessXmlReporter(reports_dir, **options)


class TestProtocols:
    def test_reporters_satisfy_report_sink(self, tmp_path: Path) -> None:
        sinks = [
            ConsoleReporter(io.StringIO()),
            FileReporter(tmp_path),
            xml_reporter(tmp_path),
            StatisticsReporter(tmp_path / ".stats"),
        ]
        assert all(isinstance(sink, ReportSink) for sink in sinks)

    def test_receivers_satisfy_protocol(self, tmp_path: Path) -> None:
        assert isinstance(ConsoleOutputFileReporter(tmp_path), ConsoleOutputReceiver)
        assert isinstance(DirectConsoleOutput(io.StringIO(), io.StringIO()), ConsoleOutputReceiver)


class TestTestSetResult:
    def test_counts(self, mixed_result: TestSetResult) -> None:
        assert mixed_result.completed_count == 4
        assert mixed_result.failures == 1
        assert mixed_result.errors == 1
        assert mixed_result.skipped == 1
        assert mixed_result.has_failures

    def test_summary_line(self, mixed_result: TestSetResult) -> None:
        assert mixed_result.summary_line() == (
            "Tests run: 4, Failures: 1, Errors: 1, Skipped: 1, "
            "Time elapsed: 1.500 s <<< FAILURE!"
        )


class TestConsoleReporter:
    def test_set_lines(self, mixed_result: TestSetResult) -> None:
        stream = io.StringIO()
        reporter = ConsoleReporter(stream)

        reporter.test_set_starting(CLASS_NAME)
        reporter.test_set_completed(mixed_result)

        output = stream.getvalue()
        assert f"Running {CLASS_NAME}" in output
        assert "Tests run: 4, Failures: 1, Errors: 1, Skipped: 1" in output
        assert "<<< FAILURE!" in output

    def test_run_summary(self, mixed_result: TestSetResult) -> None:
        stream = io.StringIO()
        reporter = ConsoleReporter(stream)
        reporter.test_set_completed(mixed_result)
        reporter.test_set_completed(
            TestSetResult(class_name="pkg.Other", entries=[make_entry(class_name="pkg.Other")])
        )

        reporter.run_completed()

        output = stream.getvalue()
        assert "Results :" in output
        assert f"{CLASS_NAME}.test_fail" in output
        assert f"{CLASS_NAME}.test_error" in output
        assert "Tests run: 5, Failures: 1, Errors: 1, Skipped: 1" in output

    def test_markup_is_not_interpreted(self) -> None:
        stream = io.StringIO()
        ConsoleReporter(stream).test_set_starting("pkg.[bold]Odd")
        assert "pkg.[bold]Odd" in stream.getvalue()


class TestFileReporter:
    def test_writes_summary_file(self, tmp_path: Path, mixed_result: TestSetResult) -> None:
        reporter = FileReporter(tmp_path / "reports")
        reporter.test_set_completed(mixed_result)

        content = (tmp_path / "reports" / f"{CLASS_NAME}.txt").read_text()
        assert f"Test set: {CLASS_NAME}" in content
        assert "Tests run: 4, Failures: 1" in content
        assert "test_fail  Time elapsed: 0.200 s  <<< FAILURE!" in content
        assert "test_error  Time elapsed: 0.300 s  <<< ERROR!" in content
        assert "test_skip" in content and "not on CI" in content
        assert "test_ok" not in content

    def test_suffix_in_file_name(self, tmp_path: Path, mixed_result: TestSetResult) -> None:
        FileReporter(tmp_path, "py311").test_set_completed(mixed_result)
        assert (tmp_path / f"{CLASS_NAME}-py311.txt").exists()

    def test_write_failure_raises_report_write_error(self, tmp_path: Path, mixed_result: TestSetResult) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")

        with pytest.raises(ReportWriteError) as exc_info:
            FileReporter(blocker / "reports").test_set_completed(mixed_result)

        assert isinstance(exc_info.value.cause, OSError)
        assert exc_info.value.context.class_name == CLASS_NAME


class TestStatelessXmlReporter:
    def test_writes_junit_document(self, tmp_path: Path, mixed_result: TestSetResult) -> None:
        xml_reporter(tmp_path).test_set_completed(mixed_result)

        root = ElementTree.parse(tmp_path / f"TEST-{CLASS_NAME}.xml").getroot()
        assert root.tag == "testsuite"
        assert root.get("name") == CLASS_NAME
        assert root.get("tests") == "4"
        assert root.get("failures") == "1"
        assert root.get("errors") == "1"
        assert root.get("skipped") == "1"
        assert root.get("flakes") == "0"
        assert root.get("time") == "1.500"

        cases = {case.get("name"): case for case in root.findall("testcase")}
        assert set(cases) == {"test_ok", "test_fail", "test_error", "test_skip"}
        assert cases["test_ok"].get("classname") == CLASS_NAME
        assert cases["test_ok"].get("time") == "0.100"

        failure = cases["test_fail"].find("failure")
        assert failure.get("message") == "boom"
        assert failure.get("type") == "AssertionError"
        assert "Traceback" in failure.text
        assert cases["test_error"].find("error") is not None
        assert cases["test_skip"].find("skipped").get("message") == "not on CI"

    def test_suffix_and_schema_location(self, tmp_path: Path, mixed_result: TestSetResult) -> None:
        reporter = xml_reporter(
            tmp_path, report_name_suffix="py311", xsd_schema_location="https://example.org/junit.xsd"
        )
        reporter.test_set_completed(mixed_result)

        root = ElementTree.parse(tmp_path / f"TEST-{CLASS_NAME}-py311.xml").getroot()
        assert root.get(f"{{{XSI_NAMESPACE}}}noNamespaceSchemaLocation") == "https://example.org/junit.xsd"

    def test_system_properties(self, tmp_path: Path, mixed_result: TestSetResult) -> None:
        reporter = xml_reporter(tmp_path, system_properties={"b": "2", "a": "1"})
        root = ElementTree.fromstring(reporter.generate(mixed_result))

        props = [(p.get("name"), p.get("value")) for p in root.find("properties")]
        assert props == [("a", "1"), ("b", "2")]

    def test_captured_output(self, tmp_path: Path) -> None:
        result = TestSetResult(
            class_name=CLASS_NAME,
            entries=[make_entry("test_print", stdout="hello\n", stderr="warn\n")],
        )
        root = ElementTree.fromstring(xml_reporter(tmp_path).generate(result))

        case = root.find("testcase")
        assert case.find("system-out").text == "hello\n"
        assert case.find("system-err").text == "warn\n"

    def test_trim_stack_trace(self, tmp_path: Path) -> None:
        trace = (
            "Traceback (most recent call last):\n"
            '  File "/venv/lib/runner.py", line 5, in run\n'
            "    call()\n"
            '  File "/src/pkg/tests/UserTest.py", line 10, in test_fail\n'
            "    assert False\n"
            "AssertionError: boom"
        )
        result = TestSetResult(
            class_name=CLASS_NAME,
            entries=[make_entry("test_fail", ReportEntryType.FAILURE, stack_trace=trace)],
        )

        full = ElementTree.fromstring(xml_reporter(tmp_path).generate(result))
        trimmed = ElementTree.fromstring(xml_reporter(tmp_path, trim_stack_trace=True).generate(result))

        assert "runner.py" in full.find("testcase/failure").text
        trimmed_text = trimmed.find("testcase/failure").text
        assert "runner.py" not in trimmed_text
        assert "UserTest.py" in trimmed_text
        assert trimmed_text.endswith("AssertionError: boom")

    def test_without_reruns_every_entry_is_a_testcase(self, tmp_path: Path) -> None:
        result = TestSetResult(
            class_name=CLASS_NAME,
            entries=[
                make_entry("test_a", ReportEntryType.FAILURE),
                make_entry("test_a", ReportEntryType.SUCCESS),
            ],
        )
        root = ElementTree.fromstring(xml_reporter(tmp_path).generate(result))

        assert len(root.findall("testcase")) == 2
        assert root.get("failures") == "1"

    def test_flaky_test(self, tmp_path: Path) -> None:
        history = RunHistoryRegistry()
        attempts = [
            make_entry("test_a", ReportEntryType.FAILURE, elapsed_ms=10),
            make_entry("test_a", ReportEntryType.ERROR, elapsed_ms=20),
            make_entry("test_a", ReportEntryType.SUCCESS, elapsed_ms=30),
        ]
        for attempt in attempts:
            history.record(CLASS_NAME, "test_a", attempt)
        result = TestSetResult(class_name=CLASS_NAME, entries=attempts)

        root = ElementTree.fromstring(
            xml_reporter(tmp_path, history, rerun_failing_tests_count=2).generate(result)
        )

        assert root.get("tests") == "1"
        assert root.get("flakes") == "1"
        assert root.get("failures") == "0"
        case = root.find("testcase")
        assert case.get("time") == "0.030"
        assert [child.tag for child in case] == ["flakyFailure", "flakyError"]
        assert "Traceback" in case.find("flakyFailure/stackTrace").text

    def test_failing_after_reruns(self, tmp_path: Path) -> None:
        history = RunHistoryRegistry()
        attempts = [
            make_entry("test_a", ReportEntryType.FAILURE),
            make_entry("test_a", ReportEntryType.FAILURE),
            make_entry("test_a", ReportEntryType.ERROR),
        ]
        for attempt in attempts:
            history.record(CLASS_NAME, "test_a", attempt)
        result = TestSetResult(class_name=CLASS_NAME, entries=attempts)

        root = ElementTree.fromstring(
            xml_reporter(tmp_path, history, rerun_failing_tests_count=2).generate(result)
        )

        assert root.get("tests") == "1"
        assert root.get("failures") == "1"
        assert root.get("flakes") == "0"
        case = root.find("testcase")
        assert [child.tag for child in case] == ["failure", "rerunFailure", "rerunError"]

    def test_passing_first_time_with_reruns(self, tmp_path: Path) -> None:
        history = RunHistoryRegistry()
        entry = make_entry("test_a")
        history.record(CLASS_NAME, "test_a", entry)
        result = TestSetResult(class_name=CLASS_NAME, entries=[entry])

        root = ElementTree.fromstring(
            xml_reporter(tmp_path, history, rerun_failing_tests_count=3).generate(result)
        )

        case = root.find("testcase")
        assert list(case) == []
        assert root.get("failures") == "0"

    def test_rerun_set_keeps_methods_from_earlier_sets(self, tmp_path: Path) -> None:
        history = RunHistoryRegistry()
        first_set = [
            make_entry("test_a"),
            make_entry("test_b", ReportEntryType.FAILURE),
        ]
        rerun = make_entry("test_b")
        for entry in [*first_set, rerun]:
            history.record(CLASS_NAME, entry.method_name, entry)
        result = TestSetResult(class_name=CLASS_NAME, entries=[rerun])

        root = ElementTree.fromstring(
            xml_reporter(tmp_path, history, rerun_failing_tests_count=1).generate(result)
        )

        assert [case.get("name") for case in root.findall("testcase")] == ["test_a", "test_b"]
        assert root.get("tests") == "2"
        assert root.get("flakes") == "1"

    def test_unrecorded_entries_still_reported(self, tmp_path: Path) -> None:
        result = TestSetResult(
            class_name=CLASS_NAME,
            entries=[make_entry("test_a"), make_entry("test_a")],
        )

        root = ElementTree.fromstring(
            xml_reporter(tmp_path, rerun_failing_tests_count=1).generate(result)
        )

        assert [case.get("name") for case in root.findall("testcase")] == ["test_a"]


class TestConsoleOutputFileReporter:
    def test_writes_per_class_files(self, tmp_path: Path) -> None:
        receiver = ConsoleOutputFileReporter(tmp_path / "reports", "py311")
        receiver.write_test_output("pkg.A", "out line\n", stdout=True)
        receiver.write_test_output("pkg.A", "err line\n", stdout=False)
        receiver.write_test_output("pkg.B", "other\n", stdout=True)
        receiver.close()

        assert (tmp_path / "reports" / "pkg.A-py311-output.txt").read_text() == "out line\nerr line\n"
        assert (tmp_path / "reports" / "pkg.B-py311-output.txt").read_text() == "other\n"

    def test_close_test_set_then_append(self, tmp_path: Path) -> None:
        receiver = ConsoleOutputFileReporter(tmp_path)
        receiver.write_test_output("pkg.A", "first\n", stdout=True)
        receiver.close_test_set("pkg.A")
        receiver.write_test_output("pkg.A", "second\n", stdout=True)
        receiver.close()

        assert receiver.output_file("pkg.A").read_text() == "first\nsecond\n"

    def test_no_file_without_output(self, tmp_path: Path) -> None:
        receiver = ConsoleOutputFileReporter(tmp_path / "reports")
        receiver.close()
        assert not (tmp_path / "reports").exists()


class TestDirectConsoleOutput:
    def test_routes_to_captured_streams(self) -> None:
        out, err = io.StringIO(), io.StringIO()
        receiver = DirectConsoleOutput(out, err)

        receiver.write_test_output("pkg.A", "to out", stdout=True)
        receiver.write_test_output("pkg.A", "to err", stdout=False)

        assert out.getvalue() == "to out"
        assert err.getvalue() == "to err"

    def test_close_test_set_leaves_streams_open(self) -> None:
        out = io.StringIO()
        receiver = DirectConsoleOutput(out, io.StringIO())

        receiver.close_test_set("pkg.A")
        receiver.write_test_output("pkg.A", "still open", stdout=True)

        assert out.getvalue() == "still open"


class TestStatisticsReporter:
    def test_missing_file_loads_empty(self, tmp_path: Path) -> None:
        assert StatisticsReporter(tmp_path / ".surefire-h").load() == {}

    def test_writes_and_accumulates(self, tmp_path: Path) -> None:
        path = tmp_path / "module" / ".surefire-h"
        first = StatisticsReporter(path)
        first.test_set_completed(
            TestSetResult(
                class_name=CLASS_NAME,
                entries=[
                    make_entry("test_ok", elapsed_ms=40),
                    make_entry("test_fail", ReportEntryType.FAILURE, elapsed_ms=70),
                ],
            )
        )
        first.run_completed()

        stats = StatisticsReporter(path).load()
        assert stats[(CLASS_NAME, "test_ok")] == RunEntryStatistics(1, 40, CLASS_NAME, "test_ok")
        assert stats[(CLASS_NAME, "test_fail")].successful_builds == 0

        second = StatisticsReporter(path)
        second.test_set_completed(
            TestSetResult(class_name=CLASS_NAME, entries=[make_entry("test_ok", elapsed_ms=50)])
        )
        second.run_completed()

        stats = second.load()
        assert stats[(CLASS_NAME, "test_ok")] == RunEntryStatistics(2, 50, CLASS_NAME, "test_ok")
        assert stats[(CLASS_NAME, "test_fail")].run_time_ms == 70

    def test_malformed_lines_are_skipped(self, tmp_path: Path) -> None:
        path = tmp_path / ".surefire-h"
        path.write_text("garbage\n3,10,pkg.A,test_x\n")

        assert list(StatisticsReporter(path).load()) == [("pkg.A", "test_x")]

    def test_classes_by_failure_first(self, tmp_path: Path) -> None:
        path = tmp_path / ".surefire-h"
        path.write_text("3,10,pkg.Fast,test_a\n0,5,pkg.Broken,test_b\n2,900,pkg.Slow,test_c\n")

        assert StatisticsReporter(path).classes_by_failure_first() == ["pkg.Broken", "pkg.Slow", "pkg.Fast"]

    def test_concurrent_reporters_merge_into_one_file(self, tmp_path: Path, monkeypatch) -> None:
        path = tmp_path / ".surefire-h"
        original_load = StatisticsReporter.load

        def slow_load(self):
            stats = original_load(self)
            time.sleep(0.05)
            return stats

        monkeypatch.setattr(StatisticsReporter, "load", slow_load)

        reporters = []
        for class_name in ("pkg.A", "pkg.B", "pkg.C", "pkg.D"):
            reporter = StatisticsReporter(path)
            reporter.test_set_completed(
                TestSetResult(class_name=class_name, entries=[make_entry("test_x", class_name=class_name)])
            )
            reporters.append(reporter)

        barrier = threading.Barrier(len(reporters))

        def finish(reporter: StatisticsReporter) -> None:
            barrier.wait()
            reporter.run_completed()

        threads = [threading.Thread(target=finish, args=(r,)) for r in reporters]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert path.read_text().splitlines() == [
            "1,0,pkg.A,test_x",
            "1,0,pkg.B,test_x",
            "1,0,pkg.C,test_x",
            "1,0,pkg.D,test_x",
        ]
