from __future__ import annotations

import gc

import pytest
import toml
from pydantic import BaseModel

from simple_settings import BorrowError, SettingsStore
from simple_settings.borrow import BorrowFlag


class Config(BaseModel):
    retries: int = 3


@pytest.fixture
def store(cfg_path):
    s = SettingsStore.create(cfg_path, Config())
    yield s
    s.close()


def test_read_guards_coexist(store):
    with store.read() as a, store.read() as b:
        assert a.value is b.value
        assert store._borrow.readers == 2
    assert store._borrow.idle


def test_write_rejected_while_reading(store):
    with store.read():
        with pytest.raises(BorrowError):
            store.write()
    with store.write() as guard:
        guard.value.retries = 4


def test_read_rejected_while_writing(store):
    with store.write():
        with pytest.raises(BorrowError):
            store.read()
    with store.read() as guard:
        assert guard.value.retries == 3


def test_second_write_rejected(store):
    with store.write():
        with pytest.raises(BorrowError):
            store.write()


def test_released_guards_deny_access(store):
    read = store.read()
    read.release()
    assert read.released
    with pytest.raises(BorrowError):
        read.value

    write = store.write()
    write.commit()
    assert write.released
    with pytest.raises(BorrowError):
        write.value
    with pytest.raises(BorrowError):
        write.value = Config()
    with pytest.raises(BorrowError):
        write.commit()


def test_release_twice_is_noop(store):
    read = store.read()
    read.release()
    read.release()

    write = store.write()
    write.release()
    write.release()
    assert store._borrow.idle


def test_commit_inside_with_block_is_final(store, cfg_path):
    with store.write() as guard:
        guard.value.retries = 6
        guard.commit()
    assert toml.loads(cfg_path.read_text(encoding="utf-8"))["retries"] == 6
    assert store._borrow.idle


def test_leaked_write_guard_is_saved_and_warned(store, cfg_path):
    guard = store.write()
    guard.value.retries = 4
    with pytest.warns(ResourceWarning, match="never committed or released"):
        del guard
        gc.collect()

    assert toml.loads(cfg_path.read_text(encoding="utf-8"))["retries"] == 4
    assert store._borrow.idle


def test_leaked_read_guard_returns_borrow(store):
    guard = store.read()
    with pytest.warns(ResourceWarning, match="never released"):
        del guard
        gc.collect()
    with store.write():
        pass


def test_guard_repr(store):
    guard = store.read()
    assert "open" in repr(guard)
    guard.release()
    assert "released" in repr(guard)

    wguard = store.write()
    assert repr(wguard).startswith("<WriteGuard open")
    wguard.commit()
    assert repr(wguard).startswith("<WriteGuard released")


class TestBorrowFlag:
    def test_shared_then_exclusive(self):
        flag = BorrowFlag()
        flag.acquire_shared()
        flag.acquire_shared()
        with pytest.raises(BorrowError):
            flag.acquire_exclusive()
        flag.release_shared()
        flag.release_shared()
        flag.acquire_exclusive()
        assert flag.writer
        with pytest.raises(BorrowError):
            flag.acquire_shared()
        flag.release_exclusive()
        assert flag.idle

    def test_unbalanced_release(self):
        flag = BorrowFlag()
        with pytest.raises(BorrowError):
            flag.release_shared()
        with pytest.raises(BorrowError):
            flag.release_exclusive()
