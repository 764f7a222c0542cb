from __future__ import annotations

import threading


class CancellationRegistry:
    """Maps a database identifier to the cancellation flag of its current run.

    The lock guards only the dictionary; flags are signalled outside of any
    scan and never waited on while the lock is held.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._flags: dict[str, threading.Event] = {}

    def register(self, target: str) -> threading.Event:
        flag = threading.Event()
        with self._lock:
            previous = self._flags.get(target)
            self._flags[target] = flag
        if previous is not None:
            previous.set()
        return flag

    def cancel(self, target: str) -> bool:
        with self._lock:
            flag = self._flags.pop(target, None)
        if flag is None:
            return False
        flag.set()
        return True

    def unregister(self, target: str, flag: threading.Event) -> bool:
        with self._lock:
            if self._flags.get(target) is not flag:
                return False
            del self._flags[target]
        return True

    def is_active(self, target: str) -> bool:
        with self._lock:
            return target in self._flags

    def active_ids(self) -> list[str]:
        with self._lock:
            return sorted(self._flags)
