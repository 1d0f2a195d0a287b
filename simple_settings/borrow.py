from __future__ import annotations

import threading

from .errors import BorrowError


class BorrowFlag:
    """
    Runtime stand-in for shared/exclusive borrows of one stored value.

    Any number of shared borrows, or exactly one exclusive borrow. Conflicting
    acquisition raises BorrowError immediately; nothing ever waits.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._readers = 0
        self._writer = False

    @property
    def readers(self) -> int:
        return self._readers

    @property
    def writer(self) -> bool:
        return self._writer

    @property
    def idle(self) -> bool:
        with self._guard:
            return self._readers == 0 and not self._writer

    def acquire_shared(self) -> None:
        with self._guard:
            if self._writer:
                raise BorrowError("value is already borrowed mutably by a write guard")
            self._readers += 1

    def release_shared(self) -> None:
        with self._guard:
            if self._readers == 0:
                raise BorrowError("no shared borrow to release")
            self._readers -= 1

    def acquire_exclusive(self) -> None:
        with self._guard:
            if self._writer:
                raise BorrowError("value is already borrowed mutably by a write guard")
            if self._readers:
                raise BorrowError(f"value is borrowed by {self._readers} read guard(s)")
            self._writer = True

    def release_exclusive(self) -> None:
        with self._guard:
            if not self._writer:
                raise BorrowError("no exclusive borrow to release")
            self._writer = False
