"""Statistics reporter persisting per-test run history across builds.

The statistics file lives two levels above the reports directory (see
``harnessreport.config.paths``). Each line records one test method::

    <successful_builds>,<elapsed_ms>,<class_name>,<method_name>

``successful_builds`` counts consecutive passing builds and drops to zero on
a failure, which lets a harness run recently failing tests first.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from harnessreport.errors import ErrorContext, ReportWriteError

if TYPE_CHECKING:
    from harnessreport.core.models import ReportEntry, TestSetResult

logger = logging.getLogger(__name__)

_file_locks: dict[Path, threading.Lock] = {}
_file_locks_guard = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    """Return the process-wide lock guarding one statistics file."""
    key = path.absolute()
    with _file_locks_guard:
        lock = _file_locks.get(key)
        if lock is None:
            lock = _file_locks[key] = threading.Lock()
        return lock


@dataclass(frozen=True)
class RunEntryStatistics:
    """Persisted outcome of one test method.

    Attributes:
        successful_builds: Consecutive builds in which the test passed.
        run_time_ms: Duration of the most recent run in milliseconds.
        class_name: Fully-qualified test class name.
        method_name: Test method name.
    """

    successful_builds: int
    run_time_ms: int
    class_name: str
    method_name: str

    @property
    def key(self) -> tuple[str, str]:
        return (self.class_name, self.method_name)

    def to_line(self) -> str:
        return f"{self.successful_builds},{self.run_time_ms},{self.class_name},{self.method_name}"

    @classmethod
    def from_line(cls, line: str) -> RunEntryStatistics:
        builds, run_time, class_name, method_name = line.split(",", 3)
        return cls(int(builds), int(run_time), class_name, method_name)

    def next_generation(self, entry: ReportEntry) -> RunEntryStatistics:
        """Statistics after one more run of the same test."""
        builds = self.successful_builds + 1 if entry.is_success else 0
        return RunEntryStatistics(builds, entry.elapsed_ms or 0, self.class_name, self.method_name)


class StatisticsReporter:
    """Collect test outcomes during the run and persist them at the end.

    Attributes:
        statistics_file: Backing file; created with its parent directories on
            the first write.
    """

    def __init__(self, statistics_file: str | Path) -> None:
        self.statistics_file = Path(statistics_file)
        self._lock = threading.Lock()
        self._pending: dict[tuple[str, str], ReportEntry] = {}

    def load(self) -> dict[tuple[str, str], RunEntryStatistics]:
        """Read the existing statistics file.

        A missing file yields an empty mapping. Malformed lines are skipped.
        """
        if not self.statistics_file.exists():
            return {}

        stats: dict[tuple[str, str], RunEntryStatistics] = {}
        with open(self.statistics_file, encoding="utf-8") as f:
            for line_no, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    item = RunEntryStatistics.from_line(line)
                except ValueError:
                    logger.warning(
                        "Skipping malformed line %d in %s", line_no, self.statistics_file
                    )
                    continue
                stats[item.key] = item
        return stats

    def test_set_starting(self, class_name: str) -> None:
        pass

    def test_set_completed(self, result: TestSetResult) -> None:
        with self._lock:
            for entry in result.entries:
                # Later attempts of a rerun overwrite earlier ones.
                self._pending[(entry.class_name, entry.method_name)] = entry

    def run_completed(self) -> None:
        """Merge this run's outcomes into the statistics file.

        Reporters of concurrently closing forks share the file; the
        read-merge-write runs under a lock keyed by its path.
        """
        with self._lock:
            pending = dict(self._pending)

        with _lock_for(self.statistics_file):
            stats = self.load()
            for key, entry in pending.items():
                previous = stats.get(key) or RunEntryStatistics(0, 0, *key)
                stats[key] = previous.next_generation(entry)

            lines = [item.to_line() for item in sorted(stats.values(), key=lambda s: s.key)]
            try:
                self.statistics_file.parent.mkdir(parents=True, exist_ok=True)
                with open(self.statistics_file, "w", encoding="utf-8") as f:
                    f.write("\n".join(lines) + ("\n" if lines else ""))
            except OSError as e:
                raise ReportWriteError(
                    "Failed to write run statistics",
                    context=ErrorContext(path=str(self.statistics_file)),
                    cause=e,
                ) from e

        logger.info("Wrote statistics for %d tests to %s", len(lines), self.statistics_file)

    def classes_by_failure_first(self) -> list[str]:
        """Order known test classes with recent failures first, then slowest."""
        per_class: dict[str, tuple[int, int]] = {}
        for item in self.load().values():
            failing, run_time = per_class.get(item.class_name, (0, 0))
            if item.successful_builds == 0:
                failing += 1
            per_class[item.class_name] = (failing, run_time + item.run_time_ms)
        return sorted(per_class, key=lambda name: (-per_class[name][0], -per_class[name][1], name))
