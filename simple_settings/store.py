from __future__ import annotations

import contextlib
import logging
import os
from pathlib import Path
from types import TracebackType
from typing import Any, BinaryIO, Generic, TypeVar

from .borrow import BorrowFlag
from .codec import Codec, codec_for
from .errors import BorrowError, SettingsIOError, StoreClosedError
from .guards import ReadGuard, WriteGuard
from .options import StoreOptions, get_options
from .paths import as_path, ensure_dir, temp_path_for

T = TypeVar("T")

logger = logging.getLogger(__name__)


class SettingsStore(Generic[T]):
    """
    Owns the open backing file and the in-memory value.

    The value is only reachable through guards: read() for shared access,
    write() for exclusive access that is saved when the guard is committed or
    released. The file on disk matches the value right after create(), load()
    and every successful write-back.

        store = SettingsStore.load("cfg.toml", Config)
        if store is None:
            store = SettingsStore.create("cfg.toml", Config(retries=3))

        with store.write() as guard:
            guard.value.retries = 5
        # written back to cfg.toml here
    """

    def __init__(
        self,
        path: Path,
        file: BinaryIO,
        value: T,
        codec: Codec[T],
        options: StoreOptions,
    ):
        self._path = path
        self._file = file
        self._value = value
        self._codec = codec
        self._options = options
        self._borrow = BorrowFlag()
        self._closed = False

    @classmethod
    def create(
        cls,
        path: str | os.PathLike[str],
        value: T,
        *,
        schema: Any = None,
        codec: Codec[T] | None = None,
        fmt: str | None = None,
        options: StoreOptions | None = None,
    ) -> SettingsStore[T]:
        """
        Create (or truncate) the file at path and write value to it.

        schema defaults to type(value). Raises SettingsIOError if the file cannot
        be created or written, EncodeError if value cannot be serialized.
        """
        opts = options or get_options()
        p = as_path(path)
        if codec is None:
            codec = codec_for(type(value) if schema is None else schema, p, fmt=fmt, options=opts)
        if opts.create_parents:
            ensure_dir(p.parent)

        try:
            file = p.open("w+b")
        except OSError as e:
            raise SettingsIOError(f"cannot create {p}: {e}") from e

        with contextlib.ExitStack() as stack:
            stack.callback(file.close)
            store = cls(p, file, value, codec, opts)
            store._write_back()
            stack.pop_all()

        logger.info("created settings file %s", p)
        return store

    @classmethod
    def load(
        cls,
        path: str | os.PathLike[str],
        schema: Any = None,
        *,
        codec: Codec[T] | None = None,
        fmt: str | None = None,
        options: StoreOptions | None = None,
    ) -> SettingsStore[T] | None:
        """
        Open and decode an existing settings file.

        Returns None if the file does not exist or cannot be opened for
        read+write. Raises DecodeError if the content does not decode into
        schema, SettingsIOError if the opened file cannot be read.
        """
        opts = options or get_options()
        p = as_path(path)
        if codec is None:
            if schema is None:
                raise TypeError("load() needs a schema or a codec")
            codec = codec_for(schema, p, fmt=fmt, options=opts)

        try:
            file = p.open("r+b")
        except OSError as e:
            logger.debug("no settings at %s: %r", p, e)
            return None

        with contextlib.ExitStack() as stack:
            stack.callback(file.close)
            try:
                data = file.read()
            except OSError as e:
                raise SettingsIOError(f"cannot read {p}: {e}") from e
            value = codec.decode(data)
            stack.pop_all()

        logger.debug("loaded %d bytes from %s", len(data), p)
        return cls(p, file, value, codec, opts)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def codec(self) -> Codec[T]:
        return self._codec

    @property
    def options(self) -> StoreOptions:
        return self._options

    @property
    def closed(self) -> bool:
        return self._closed

    def read(self) -> ReadGuard[T]:
        self._check_open()
        return ReadGuard(self)

    def write(self) -> WriteGuard[T]:
        self._check_open()
        return WriteGuard(self)

    def close(self) -> None:
        if self._closed:
            return
        if not self._borrow.idle:
            raise BorrowError(f"cannot close {self._path} while guards are live")
        self._closed = True
        self._file.close()
        logger.debug("closed %s", self._path)

    def _check_open(self) -> None:
        if self._closed:
            raise StoreClosedError(f"settings store for {self._path} is closed")

    # -- write-back ---------------------------------------------------------

    def _write_back(self) -> None:
        self._check_open()
        # Encode before touching the file so an EncodeError leaves it intact.
        data = self._codec.encode(self._value)
        if self._options.write_strategy == "replace":
            self._replace_file(data)
        else:
            self._rewrite_in_place(data)
        logger.debug("wrote %d bytes to %s (%s)", len(data), self._path, self._options.write_strategy)

    def _rewrite_in_place(self, data: bytes) -> None:
        # Not crash-atomic: a crash between truncate and the final sync can leave
        # the file empty or short.
        f = self._file
        try:
            f.truncate(0)
            f.flush()
            os.fsync(f.fileno())
            f.seek(0)
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        except OSError as e:
            raise SettingsIOError(f"cannot write {self._path}: {e}") from e

    def _replace_file(self, data: bytes) -> None:
        tmp = temp_path_for(self._path)
        try:
            with tmp.open("wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self._path)
            new_file = self._path.open("r+b")
        except OSError as e:
            tmp.unlink(missing_ok=True)
            raise SettingsIOError(f"cannot replace {self._path}: {e}") from e
        old, self._file = self._file, new_file
        old.close()

    def __enter__(self) -> SettingsStore[T]:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<SettingsStore {state} {self._path} codec={self._codec!r}>"
