from __future__ import annotations

import types
from threading import Condition
from threading import Lock as T_LOCK


class Lock:
    def __init__(self) -> None:
        self._lock = T_LOCK()

    def __enter__(self) -> None:
        self._lock.acquire()

    def __exit__(
        self,
        exc_type: type[BaseException] | None = None,
        exc_value: BaseException | None = None,
        traceback: types.TracebackType | None = None,
    ) -> None:
        self._lock.release()


class _SharedSide:
    def __init__(self, lock: ReadWriteLock) -> None:
        self._lock = lock

    def __enter__(self) -> None:
        self._lock.acquire_read()

    def __exit__(
        self,
        exc_type: type[BaseException] | None = None,
        exc_value: BaseException | None = None,
        traceback: types.TracebackType | None = None,
    ) -> None:
        self._lock.release_read()


class _ExclusiveSide:
    def __init__(self, lock: ReadWriteLock) -> None:
        self._lock = lock

    def __enter__(self) -> None:
        self._lock.acquire_write()

    def __exit__(
        self,
        exc_type: type[BaseException] | None = None,
        exc_value: BaseException | None = None,
        traceback: types.TracebackType | None = None,
    ) -> None:
        self._lock.release_write()


class ReadWriteLock:
    """
    A lock that admits many readers or a single writer.

    Waiting writers block new readers, so a steady stream of readers
    cannot starve a writer. The lock is not reentrant and a reader cannot
    upgrade in place: release the shared side before taking the exclusive one.

    Usage::

        lock = ReadWriteLock()
        with lock.read:
            ...
        with lock.write:
            ...
    """

    def __init__(self) -> None:
        self._condition = Condition(T_LOCK())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0
        self.read = _SharedSide(self)
        self.write = _ExclusiveSide(self)

    def acquire_read(self) -> None:
        with self._condition:
            while self._writer or self._waiting_writers:
                self._condition.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._condition:
            self._readers -= 1
            if self._readers == 0:
                self._condition.notify_all()

    def acquire_write(self) -> None:
        with self._condition:
            self._waiting_writers += 1
            try:
                while self._writer or self._readers:
                    self._condition.wait()
            finally:
                self._waiting_writers -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._condition:
            self._writer = False
            self._condition.notify_all()
