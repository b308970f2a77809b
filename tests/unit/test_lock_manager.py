"""Unit tests for ReadWriteLock."""

from __future__ import annotations

import threading
import time

import pytest

from simpledb.domain.services import ReadWriteLock
from simpledb.domain.value_objects import LockMode


@pytest.mark.unit
class TestLockMode:
    """Tests for LockMode compatibility."""

    def test_compatibility(self) -> None:
        assert LockMode.is_compatible(LockMode.SHARED, LockMode.SHARED)
        assert not LockMode.is_compatible(LockMode.SHARED, LockMode.EXCLUSIVE)
        assert not LockMode.is_compatible(LockMode.EXCLUSIVE, LockMode.SHARED)
        assert not LockMode.is_compatible(LockMode.EXCLUSIVE, LockMode.EXCLUSIVE)


@pytest.mark.unit
class TestReadWriteLock:
    """Tests for ReadWriteLock."""

    def test_shared_holders(self) -> None:
        lock = ReadWriteLock()
        lock.acquire(LockMode.SHARED)
        lock.acquire(LockMode.SHARED)

        assert lock.readers == 2
        assert not lock.write_held

        lock.release(LockMode.SHARED)
        lock.release(LockMode.SHARED)
        assert lock.readers == 0

    def test_exclusive_context(self) -> None:
        lock = ReadWriteLock()
        with lock.write_locked():
            assert lock.write_held
        assert not lock.write_held

    def test_release_unheld(self) -> None:
        lock = ReadWriteLock()
        with pytest.raises(RuntimeError):
            lock.release(LockMode.SHARED)
        with pytest.raises(RuntimeError):
            lock.release(LockMode.EXCLUSIVE)

    def test_writer_blocks_readers(self) -> None:
        lock = ReadWriteLock()
        acquired = threading.Event()

        def reader() -> None:
            with lock.read_locked():
                acquired.set()

        with lock.write_locked():
            t = threading.Thread(target=reader)
            t.start()
            assert not acquired.wait(0.1)

        t.join(timeout=2)
        assert acquired.is_set()

    def test_waiting_writer_blocks_new_readers(self) -> None:
        """A queued writer gets the lock before readers that arrive later."""
        lock = ReadWriteLock()
        order: list[str] = []

        def writer() -> None:
            with lock.write_locked():
                order.append("writer")

        def late_reader() -> None:
            with lock.read_locked():
                order.append("reader")

        lock.acquire(LockMode.SHARED)
        w = threading.Thread(target=writer)
        w.start()
        # give the writer time to start waiting
        deadline = time.monotonic() + 2
        while time.monotonic() < deadline:
            with lock._cond:
                if lock._waiting_writers:
                    break
            time.sleep(0.001)

        r = threading.Thread(target=late_reader)
        r.start()
        time.sleep(0.05)
        assert order == []

        lock.release(LockMode.SHARED)
        w.join(timeout=2)
        r.join(timeout=2)

        assert order == ["writer", "reader"]

    def test_interrupted_writer_releases_queued_readers(self, monkeypatch) -> None:
        """Readers queued behind a writer proceed if that writer gives up."""
        lock = ReadWriteLock()
        give_up = threading.Event()
        interrupted: list[BaseException] = []
        real_wait = lock._cond.wait

        def wait(timeout: float | None = None) -> bool:
            if threading.current_thread().name != "writer":
                return real_wait(timeout)
            real_wait(0.01)
            if give_up.is_set():
                raise KeyboardInterrupt
            return True

        monkeypatch.setattr(lock._cond, "wait", wait)

        def writer() -> None:
            try:
                lock.acquire(LockMode.EXCLUSIVE)
            except KeyboardInterrupt as e:
                interrupted.append(e)

        lock.acquire(LockMode.SHARED)
        w = threading.Thread(target=writer, name="writer")
        w.start()
        deadline = time.monotonic() + 2
        while time.monotonic() < deadline:
            with lock._cond:
                if lock._waiting_writers:
                    break
            time.sleep(0.001)

        r = threading.Thread(target=lambda: lock.acquire(LockMode.SHARED), daemon=True)
        r.start()
        time.sleep(0.05)
        give_up.set()
        w.join(timeout=2)
        r.join(timeout=2)

        assert len(interrupted) == 1
        assert not r.is_alive()
        assert lock.readers == 2
        assert not lock.write_held

        lock.release(LockMode.SHARED)
        lock.release(LockMode.SHARED)

    def test_release_on_exception(self) -> None:
        lock = ReadWriteLock()
        with pytest.raises(ValueError):
            with lock.write_locked():
                raise ValueError("boom")

        assert not lock.write_held
