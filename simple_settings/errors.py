from __future__ import annotations


class SettingsError(Exception):
    """Root of every error raised by simple_settings."""


class SettingsIOError(SettingsError, OSError):
    """
    The backing file could not be created, opened, read, truncated, written or synced.

    The underlying OSError is chained as __cause__.
    """


class DecodeError(SettingsError, ValueError):
    """Stored content does not decode into the requested type."""


class EncodeError(SettingsError, ValueError):
    """The in-memory value cannot be serialized."""


class BorrowError(SettingsError, RuntimeError):
    """A guard was requested or used in a way that would alias the stored value."""


class StoreClosedError(BorrowError):
    pass


class UnknownFormatError(SettingsError, ValueError):
    pass
