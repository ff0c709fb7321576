"""Listeners connecting test producers to the provisioned sinks.

A TestSetRunListener serves one forked test process. ForkedTestRun serves a
whole run: it hands out one listener per fork and owns the sinks that
summarize the run as a whole, so their final output happens once.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from typing import TYPE_CHECKING

from harnessreport.core.models import ReportEntry, TestSetResult

if TYPE_CHECKING:
    from harnessreport.config.settings import ReportConfiguration
    from harnessreport.core.history import RunHistoryRegistry
    from harnessreport.reporters.base import ConsoleOutputReceiver, ReportSink

logger = logging.getLogger(__name__)


class TestSetRunListener:
    """Receive events from one forked test run and dispatch them.

    Every completed entry is recorded in the shared run history before the
    test set is handed to the reporters, so the XML reporter sees all
    attempts of a rerun test.

    Reporters listed in ``run_level_reporters`` receive test set events but
    not run_completed(); whoever shares them across forks finishes them.

    Example:
        >>> listener = TestSetRunListener.from_configuration(config)
        >>> listener.test_set_starting("pkg.UserTest")
        >>> listener.test_completed(entry)
        >>> listener.test_set_completed("pkg.UserTest", elapsed_ms=120)
        >>> listener.close()
    """

    __test__ = False

    def __init__(
        self,
        reporters: list[ReportSink],
        output_receiver: ConsoleOutputReceiver,
        run_history: RunHistoryRegistry,
        run_level_reporters: Sequence[ReportSink] = (),
    ) -> None:
        self.reporters = reporters
        self.output_receiver = output_receiver
        self.run_history = run_history
        self.run_level_reporters = tuple(run_level_reporters)
        self._entries: dict[str, list[ReportEntry]] = {}
        self._lock = threading.Lock()
        self._closed = False

    @classmethod
    def from_configuration(cls, config: ReportConfiguration) -> TestSetRunListener:
        """Build a listener owning every sink, for a run with a single fork."""
        factory = config.sink_factory()
        return cls(
            reporters=factory.create_reporters(),
            output_receiver=factory.console_output_receiver(),
            run_history=config.run_history,
        )

    @property
    def closed(self) -> bool:
        return self._closed

    def test_set_starting(self, class_name: str) -> None:
        with self._lock:
            self._entries.setdefault(class_name, [])
        for reporter in self.reporters:
            reporter.test_set_starting(class_name)

    def test_completed(self, entry: ReportEntry) -> None:
        self.run_history.record(entry.class_name, entry.method_name, entry)
        with self._lock:
            self._entries.setdefault(entry.class_name, []).append(entry)

    def write_test_output(self, class_name: str, output: str, stdout: bool = True) -> None:
        self.output_receiver.write_test_output(class_name, output, stdout)

    def test_set_completed(self, class_name: str, elapsed_ms: int = 0) -> TestSetResult:
        """Build the set's result and hand it to every enabled reporter."""
        with self._lock:
            entries = self._entries.pop(class_name, [])

        result = TestSetResult(class_name=class_name, entries=entries, elapsed_ms=elapsed_ms)
        logger.debug(
            "Test set %s completed with %d entries, dispatching to %d reporters",
            class_name,
            len(entries),
            len(self.reporters),
        )
        for reporter in self.reporters:
            reporter.test_set_completed(result)

        self.output_receiver.close_test_set(class_name)
        return result

    def close(self) -> None:
        """Finish the fork: notify owned reporters and release the output receiver."""
        if self._closed:
            return
        self._closed = True
        try:
            for reporter in self.reporters:
                if any(reporter is shared for shared in self.run_level_reporters):
                    continue
                reporter.run_completed()
        finally:
            self.output_receiver.close()

    def __enter__(self) -> TestSetRunListener:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class ForkedTestRun:
    """Provision listeners for every fork of one test run.

    The console and statistics reporters summarize the run, so a single
    instance of each is shared by all forks and completed once in close().
    File, XML and output sinks are per test set and built for each fork.

    Example:
        >>> with ForkedTestRun(config) as run:
        ...     with run.fork() as listener:
        ...         listener.test_set_starting("pkg.UserTest")
        ...         listener.test_completed(entry)
        ...         listener.test_set_completed("pkg.UserTest")
    """

    __test__ = False

    def __init__(self, config: ReportConfiguration) -> None:
        self.config = config
        self._factory = config.sink_factory()
        self.console_reporter = self._factory.console_reporter()
        self.statistics_reporter = self._factory.statistics_reporter()
        self._listeners: list[TestSetRunListener] = []
        self._lock = threading.Lock()
        self._closed = False

    @property
    def run_level_reporters(self) -> list[ReportSink]:
        return [r for r in (self.console_reporter, self.statistics_reporter) if r is not None]

    def fork(self) -> TestSetRunListener:
        """Return a listener for one more forked test process."""
        factory = self._factory
        candidates = [
            self.console_reporter,
            factory.file_reporter(),
            factory.xml_reporter(),
            self.statistics_reporter,
        ]
        listener = TestSetRunListener(
            reporters=[reporter for reporter in candidates if reporter is not None],
            output_receiver=factory.console_output_receiver(),
            run_history=self.config.run_history,
            run_level_reporters=self.run_level_reporters,
        )
        with self._lock:
            if self._closed:
                raise RuntimeError("Cannot fork a test run that is already closed")
            self._listeners.append(listener)
        logger.debug("Forked listener %d of the run", len(self._listeners))
        return listener

    def close(self) -> None:
        """Close forks still open, then complete the run-level reporters once."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            listeners = list(self._listeners)

        try:
            for listener in listeners:
                listener.close()
        finally:
            for reporter in self.run_level_reporters:
                reporter.run_completed()
        logger.info("Test run completed across %d forks", len(listeners))

    def __enter__(self) -> ForkedTestRun:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
