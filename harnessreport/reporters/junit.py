"""JUnit XML reporter for CI/CD integration.

Writes one ``TEST-<class>[-<suffix>].xml`` document per test set following
the JUnit XML layout read by Jenkins, GitHub Actions, GitLab CI and others.

When reruns are enabled the reporter consults the run history so that every
attempt of a method is reflected in a single testcase:

- first attempt passed: plain testcase
- a later attempt passed: flaky testcase with ``flakyFailure``/``flakyError``
  children, counted in the ``flakes`` attribute
- no attempt passed: ``failure``/``error`` for the first attempt and
  ``rerunFailure``/``rerunError`` for each rerun

Example:
    >>> reporter = StatelessXmlReporter(
    ...     "target/reports", None, False, 0, RunHistoryRegistry(), None
    ... )
    >>> reporter.test_set_completed(result)
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from harnessreport.core.models import ReportEntry, ReportEntryType
from harnessreport.reporters.base import BaseFileReporter

if TYPE_CHECKING:
    from harnessreport.core.history import RunHistoryRegistry
    from harnessreport.core.models import TestSetResult

XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"

ET.register_namespace("xsi", XSI_NAMESPACE)

_FIRST_ATTEMPT_TAGS = {ReportEntryType.FAILURE: "failure", ReportEntryType.ERROR: "error"}
_RERUN_TAGS = {ReportEntryType.FAILURE: "rerunFailure", ReportEntryType.ERROR: "rerunError"}
_FLAKY_TAGS = {ReportEntryType.FAILURE: "flakyFailure", ReportEntryType.ERROR: "flakyError"}


class StatelessXmlReporter(BaseFileReporter):
    """Generate JUnit XML reports, one file per test set.

    The reporter keeps no state between test sets; everything it needs for
    reruns lives in the shared run history. With reruns enabled the report
    of a class lists every method the history holds for it.

    Attributes:
        trim_stack_trace: Reduce stack traces to the frames of the test class.
        rerun_failing_tests_count: Reruns permitted for a failing test.
        run_history: Registry of every attempt, shared with the producers.
        xsd_schema_location: Written as ``xsi:noNamespaceSchemaLocation``.
        system_properties: Written as ``properties`` of every testsuite.
    """

    def __init__(
        self,
        reports_directory: str | Path,
        report_name_suffix: str | None,
        trim_stack_trace: bool,
        rerun_failing_tests_count: int,
        run_history: RunHistoryRegistry,
        xsd_schema_location: str | None,
        system_properties: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(reports_directory, report_name_suffix)
        self.trim_stack_trace = trim_stack_trace
        self.rerun_failing_tests_count = rerun_failing_tests_count
        self.run_history = run_history
        self.xsd_schema_location = xsd_schema_location
        self.system_properties = system_properties

    def test_set_starting(self, class_name: str) -> None:
        pass

    def test_set_completed(self, result: TestSetResult) -> None:
        path = self.report_file(result.class_name, ".xml", prefix="TEST-")
        self.write_report(path, self.generate(result), class_name=result.class_name)

    def run_completed(self) -> None:
        pass

    def generate(self, result: TestSetResult) -> str:
        """Generate the JUnit XML document for one test set.

        Returns:
            XML string with declaration.
        """
        root = self._build_test_suite(result)
        self._indent_xml(root)
        return ET.tostring(root, encoding="unicode", xml_declaration=True)

    def _build_test_suite(self, result: TestSetResult) -> ET.Element:
        test_suite = ET.Element("testsuite")
        if self.xsd_schema_location:
            test_suite.set(f"{{{XSI_NAMESPACE}}}noNamespaceSchemaLocation", self.xsd_schema_location)

        if self.system_properties:
            properties = ET.SubElement(test_suite, "properties")
            for name, value in sorted(dict(self.system_properties).items()):
                self._add_property(properties, name, value)

        tests = failures = errors = skipped = flakes = 0
        for attempts in self._method_attempts(result):
            test_case, outcome = self._build_test_case(attempts)
            test_suite.append(test_case)
            tests += 1
            if outcome is ReportEntryType.FAILURE:
                failures += 1
            elif outcome is ReportEntryType.ERROR:
                errors += 1
            elif outcome is ReportEntryType.SKIPPED:
                skipped += 1
            elif outcome == "flaky":
                flakes += 1

        test_suite.set("name", result.class_name)
        test_suite.set("time", f"{result.elapsed_seconds:.3f}")
        test_suite.set("tests", str(tests))
        test_suite.set("errors", str(errors))
        test_suite.set("skipped", str(skipped))
        test_suite.set("failures", str(failures))
        test_suite.set("flakes", str(flakes))
        return test_suite

    def _method_attempts(self, result: TestSetResult) -> list[Sequence[ReportEntry]]:
        """Group the set's entries into the attempts shown per testcase.

        With reruns enabled every method recorded for the class appears, so a
        later test set holding only the rerun methods does not drop the rest
        of the class from the rewritten report.
        """
        if self.rerun_failing_tests_count <= 0:
            return [(entry,) for entry in result.entries]

        attempts: dict[str, Sequence[ReportEntry]] = {
            method: history
            for method, history in self.run_history.methods_for(result.class_name).items()
            if history
        }
        unrecorded: dict[str, list[ReportEntry]] = {}
        for entry in result.entries:
            if entry.method_name not in attempts:
                unrecorded.setdefault(entry.method_name, []).append(entry)
        attempts.update(unrecorded)
        return list(attempts.values())

    def _build_test_case(
        self, attempts: Sequence[ReportEntry]
    ) -> tuple[ET.Element, ReportEntryType | str]:
        first = attempts[0]
        if not first.is_failure or len(attempts) == 1:
            return self._single_test_case(first), first.entry_type

        passed = next((a for a in attempts[1:] if a.is_success), None)
        if passed is not None:
            test_case = self._new_test_case(passed)
            for attempt in attempts:
                if attempt is passed:
                    break
                if attempt.is_failure:
                    self._add_rerun_element(test_case, _FLAKY_TAGS[attempt.entry_type], attempt)
            return test_case, "flaky"

        test_case = self._single_test_case(first)
        for attempt in attempts[1:]:
            if attempt.is_failure:
                self._add_rerun_element(test_case, _RERUN_TAGS[attempt.entry_type], attempt)
        return test_case, first.entry_type

    def _new_test_case(self, entry: ReportEntry) -> ET.Element:
        test_case = ET.Element("testcase")
        test_case.set("name", entry.method_name)
        test_case.set("classname", entry.class_name)
        test_case.set("time", f"{entry.elapsed_seconds:.3f}")
        return test_case

    def _single_test_case(self, entry: ReportEntry) -> ET.Element:
        test_case = self._new_test_case(entry)

        if entry.is_failure:
            failure = ET.SubElement(test_case, _FIRST_ATTEMPT_TAGS[entry.entry_type])
            self._set_failure_attributes(failure, entry)
            failure.text = self._stack_trace(entry)
        elif entry.is_skipped:
            skipped = ET.SubElement(test_case, "skipped")
            if entry.message:
                skipped.set("message", entry.message)

        self._add_output(test_case, entry)
        return test_case

    def _add_rerun_element(self, test_case: ET.Element, tag: str, entry: ReportEntry) -> None:
        element = ET.SubElement(test_case, tag)
        self._set_failure_attributes(element, entry)
        stack_trace = self._stack_trace(entry)
        if stack_trace:
            ET.SubElement(element, "stackTrace").text = stack_trace
        self._add_output(element, entry)

    def _set_failure_attributes(self, element: ET.Element, entry: ReportEntry) -> None:
        if entry.message:
            element.set("message", entry.message)
        exception_type = self._exception_type(entry)
        if exception_type:
            element.set("type", exception_type)

    def _add_output(self, parent: ET.Element, entry: ReportEntry) -> None:
        if entry.stdout:
            ET.SubElement(parent, "system-out").text = entry.stdout
        if entry.stderr:
            ET.SubElement(parent, "system-err").text = entry.stderr

    def _stack_trace(self, entry: ReportEntry) -> str | None:
        if self.trim_stack_trace:
            return entry.trimmed_stack_trace()
        return entry.stack_trace

    @staticmethod
    def _exception_type(entry: ReportEntry) -> str | None:
        """Read the exception type from the last line of a Python traceback."""
        if not entry.stack_trace:
            return None
        last_line = entry.stack_trace.rstrip("\n").splitlines()[-1].strip()
        exception_type, sep, _ = last_line.partition(":")
        if not sep or " " in exception_type:
            return None
        return exception_type

    def _add_property(self, parent: ET.Element, name: str, value: str) -> None:
        prop = ET.SubElement(parent, "property")
        prop.set("name", name)
        prop.set("value", value)

    def _indent_xml(self, elem: ET.Element, level: int = 0) -> None:
        """Add indentation to XML for pretty-printing.

        Elements with text content (failures, stack traces, output) keep
        their text untouched.
        """
        indent = "\n" + "  " * level
        if len(elem) > 0:
            if not elem.text or not elem.text.strip():
                elem.text = indent + "  "
            if not elem.tail or not elem.tail.strip():
                elem.tail = indent
            for child in elem:
                self._indent_xml(child, level + 1)
            if not child.tail or not child.tail.strip():
                child.tail = indent
        else:
            if not elem.tail or not elem.tail.strip():
                elem.tail = indent
