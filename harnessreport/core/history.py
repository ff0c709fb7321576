"""Run history shared by every fork of one report configuration.

The registry maps a test class to its methods, and each method to the
ordered sequence of ReportEntry objects recorded for it, one per execution
attempt (reruns included). Producers append while sinks read, from any
number of threads, without external synchronization.

Example:
    >>> history = RunHistoryRegistry()
    >>> history.record("pkg.UserTest", "test_create", entry)
    >>> history.history_for("pkg.UserTest", "test_create")
    (ReportEntry(...),)
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from harnessreport.core.models import ReportEntry

logger = logging.getLogger(__name__)


class _MethodHistory:
    """Append-only attempt log for one (class, method) key."""

    __slots__ = ("_entries", "_lock")

    def __init__(self) -> None:
        self._entries: list[ReportEntry] = []
        self._lock = threading.Lock()

    def append(self, entry: ReportEntry) -> None:
        with self._lock:
            self._entries.append(entry)

    def snapshot(self) -> tuple[ReportEntry, ...]:
        with self._lock:
            return tuple(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class RunHistoryRegistry:
    """Concurrent store of report entries keyed by class and method.

    Locking is sharded: one registry lock guards creation of per-class and
    per-method slots, and each method slot has its own lock for appends. Two
    appends to different methods never contend on the same lock once their
    slots exist.

    Entries are never removed or replaced. The registry grows for as long as
    the owning configuration is in use.
    """

    def __init__(self) -> None:
        self._classes: dict[str, dict[str, _MethodHistory]] = {}
        self._lock = threading.Lock()

    def _slot(self, class_name: str, method_name: str) -> _MethodHistory:
        methods = self._classes.get(class_name)
        if methods is not None:
            slot = methods.get(method_name)
            if slot is not None:
                return slot

        with self._lock:
            methods = self._classes.setdefault(class_name, {})
            slot = methods.get(method_name)
            if slot is None:
                slot = _MethodHistory()
                methods[method_name] = slot
            return slot

    def record(self, class_name: str, method_name: str, entry: ReportEntry) -> None:
        """Append an attempt to the history of ``class_name.method_name``."""
        self._slot(class_name, method_name).append(entry)
        logger.debug("Recorded %s attempt for %s.%s", entry.entry_type.value, class_name, method_name)

    def history_for(self, class_name: str, method_name: str) -> tuple[ReportEntry, ...]:
        """Return every attempt recorded so far, oldest first.

        Returns an empty tuple when nothing was recorded for the key.
        """
        methods = self._classes.get(class_name)
        if methods is None:
            return ()
        slot = methods.get(method_name)
        if slot is None:
            return ()
        return slot.snapshot()

    def methods_for(self, class_name: str) -> dict[str, tuple[ReportEntry, ...]]:
        """Return a snapshot of all method histories for one class."""
        with self._lock:
            slots = list(self._classes.get(class_name, {}).items())
        return {method: slot.snapshot() for method, slot in slots}

    def class_names(self) -> list[str]:
        with self._lock:
            return list(self._classes)

    def __contains__(self, class_name: object) -> bool:
        return class_name in self._classes

    def __iter__(self) -> Iterator[str]:
        return iter(self.class_names())

    def __len__(self) -> int:
        """Total number of recorded entries across all keys."""
        with self._lock:
            slots = [slot for methods in self._classes.values() for slot in methods.values()]
        return sum(len(slot) for slot in slots)

    def __repr__(self) -> str:
        return f"RunHistoryRegistry(classes={len(self._classes)}, entries={len(self)})"
