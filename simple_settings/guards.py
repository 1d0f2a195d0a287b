from __future__ import annotations

import logging
import warnings
import weakref
from types import TracebackType
from typing import TYPE_CHECKING, Generic, TypeVar

from .errors import BorrowError, SettingsError

if TYPE_CHECKING:
    from .borrow import BorrowFlag
    from .store import SettingsStore

T = TypeVar("T")

logger = logging.getLogger(__name__)


def _release_leaked_read(borrow: BorrowFlag, path: str) -> None:
    warnings.warn(f"read guard for {path} was never released", ResourceWarning)
    borrow.release_shared()


def _release_leaked_write(store: SettingsStore[object]) -> None:
    warnings.warn(
        f"write guard for {store.path} was never committed or released; saving on collection",
        ResourceWarning,
    )
    logger.warning("LEAKED WRITE GUARD: %s, running write-back", store.path)
    try:
        store._write_back()
    except SettingsError:
        logger.exception("LEAKED WRITE GUARD: write-back of %s failed", store.path)
    finally:
        store._borrow.release_exclusive()


class ReadGuard(Generic[T]):
    """
    Shared, read-only view of a store's value. Performs no I/O.

    Mutating the value through a read guard is not detected and is not persisted
    until a write guard is released.
    """

    def __init__(self, store: SettingsStore[T]):
        store._borrow.acquire_shared()
        self._store = store
        self._open = True
        self._finalizer = weakref.finalize(self, _release_leaked_read, store._borrow, str(store.path))

    @property
    def value(self) -> T:
        if not self._open:
            raise BorrowError("read guard has been released")
        return self._store._value

    @property
    def released(self) -> bool:
        return not self._open

    def release(self) -> None:
        if not self._open:
            return
        self._open = False
        self._finalizer.detach()
        self._store._borrow.release_shared()

    def __enter__(self) -> ReadGuard[T]:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()

    def __repr__(self) -> str:
        state = "released" if not self._open else "open"
        return f"<ReadGuard {state} {self._store.path}>"


class WriteGuard(Generic[T]):
    """
    Exclusive, mutable access to a store's value and its backing file.

    The value is written back to disk by commit(), or by release() / leaving the
    with-block if commit() was not called:

        with store.write() as guard:
            guard.value.retries = 5
        # file now holds retries = 5

    commit() raises on failure and keeps the guard open, so the same
    write-back is attempted again on release. A successful commit releases the
    guard. If the with-block exits with an exception, the write-back still runs;
    a failure there is logged and the original exception propagates.
    """

    def __init__(self, store: SettingsStore[T]):
        store._borrow.acquire_exclusive()
        self._store = store
        self._open = True
        self._finalizer = weakref.finalize(self, _release_leaked_write, store)

    @property
    def value(self) -> T:
        self._check_open()
        return self._store._value

    @value.setter
    def value(self, value: T) -> None:
        self._check_open()
        self._store._value = value

    @property
    def released(self) -> bool:
        return not self._open

    def commit(self) -> None:
        self._check_open()
        self._store._write_back()
        self._close()

    def release(self) -> None:
        if not self._open:
            return
        try:
            self._store._write_back()
        finally:
            self._close()

    def _check_open(self) -> None:
        if not self._open:
            raise BorrowError("write guard has been committed or released")

    def _close(self) -> None:
        self._open = False
        self._finalizer.detach()
        self._store._borrow.release_exclusive()

    def __enter__(self) -> WriteGuard[T]:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc_type is None:
            self.release()
            return
        try:
            self.release()
        except SettingsError:
            logger.exception(
                "WRITE-BACK: saving %s failed while unwinding from %s", self._store.path, exc_type.__name__
            )

    def __repr__(self) -> str:
        state = "released" if not self._open else "open"
        return f"<WriteGuard {state} {self._store.path}>"
