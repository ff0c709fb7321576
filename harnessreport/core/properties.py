"""Thread-safe property bag forwarded to forked test VMs."""

from __future__ import annotations

import threading
from collections.abc import Iterator, MutableMapping


class SystemProperties(MutableMapping[str, str]):
    """String-to-string mapping that tolerates concurrent mutation.

    The harness and the sinks add properties after the configuration is
    built. Every operation takes an internal lock, so callers never need
    their own synchronization. Iteration walks a snapshot of the keys.
    """

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = {}
        self._lock = threading.RLock()
        if initial:
            self.update(initial)

    def __getitem__(self, key: str) -> str:
        with self._lock:
            return self._data[key]

    def __setitem__(self, key: str, value: str) -> None:
        if not isinstance(key, str) or not isinstance(value, str):
            raise TypeError("System property keys and values must be strings")
        with self._lock:
            self._data[key] = value

    def __delitem__(self, key: str) -> None:
        with self._lock:
            del self._data[key]

    def __iter__(self) -> Iterator[str]:
        with self._lock:
            keys = list(self._data)
        return iter(keys)

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def setdefault(self, key: str, default: str = "") -> str:
        with self._lock:
            if key not in self._data:
                self[key] = default
            return self._data[key]

    def snapshot(self) -> dict[str, str]:
        """Return a point-in-time copy of all properties."""
        with self._lock:
            return dict(self._data)

    def __repr__(self) -> str:
        return f"SystemProperties({self.snapshot()!r})"
