from __future__ import annotations

from .codec import Codec, ModelCodec
from .errors import (
    BorrowError,
    DecodeError,
    EncodeError,
    SettingsError,
    SettingsIOError,
    StoreClosedError,
    UnknownFormatError,
)
from .formats import JsonFormat, TomlFormat
from .guards import ReadGuard, WriteGuard
from .options import StoreOptions, get_options
from .store import SettingsStore

__all__ = [
    "SettingsStore",
    "ReadGuard",
    "WriteGuard",
    "Codec",
    "ModelCodec",
    "TomlFormat",
    "JsonFormat",
    "StoreOptions",
    "get_options",
    "SettingsError",
    "SettingsIOError",
    "DecodeError",
    "EncodeError",
    "BorrowError",
    "StoreClosedError",
    "UnknownFormatError",
]
