from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

import pytest

from consoleapp.errors import LockHeldError
from consoleapp.utils.instance import LockManager, is_console_process, is_process_running, read_pid

DEAD_PID = 99999999


@pytest.fixture
def lock_path(tmp_path: Path) -> Path:
    return tmp_path / "consoleapp-lock-test"


def test_lock_unlock_relock(lock_path: Path) -> None:
    manager = LockManager()

    manager.lock(lock_path)
    assert lock_path.read_text(encoding="utf-8") == str(os.getpid())
    assert manager.locked_path == lock_path

    manager.unlock()
    assert not lock_path.exists()

    manager.lock(lock_path)
    assert lock_path.read_text(encoding="utf-8") == str(os.getpid())
    manager.unlock()


def test_lock_held_by_live_process_fails(lock_path: Path) -> None:
    lock_path.write_text(str(os.getpid()), encoding="utf-8")

    with pytest.raises(LockHeldError) as ei:
        LockManager().lock(lock_path)

    assert str(lock_path) in str(ei.value)
    assert ei.value.pid == os.getpid()
    assert lock_path.read_text(encoding="utf-8") == str(os.getpid())


def test_lock_held_by_other_process(lock_path: Path) -> None:
    holder = subprocess.Popen([sys.executable, "-c", "import time; time.sleep(30)"])
    try:
        lock_path.write_text(str(holder.pid), encoding="utf-8")

        with pytest.raises(LockHeldError):
            LockManager().lock(lock_path)
        assert lock_path.read_text(encoding="utf-8") == str(holder.pid)
    finally:
        holder.kill()
        holder.wait()

    # Holder is gone now, so its lock is stale
    manager = LockManager()
    manager.lock(lock_path)
    assert lock_path.read_text(encoding="utf-8") == str(os.getpid())
    manager.unlock()


def test_stale_lock_is_reclaimed(lock_path: Path) -> None:
    lock_path.write_text(str(DEAD_PID), encoding="utf-8")

    manager = LockManager()
    manager.lock(lock_path)

    assert lock_path.read_text(encoding="utf-8") == str(os.getpid())
    manager.unlock()


def test_garbage_lock_content_is_stale(lock_path: Path) -> None:
    lock_path.write_text("not a pid", encoding="utf-8")

    manager = LockManager()
    manager.lock(lock_path)

    assert read_pid(lock_path) == os.getpid()
    manager.unlock()


def test_unlock_leaves_lock_reclaimed_by_someone_else(lock_path: Path) -> None:
    manager = LockManager()
    manager.lock(lock_path)
    lock_path.write_text(str(DEAD_PID), encoding="utf-8")

    manager.unlock()

    assert lock_path.exists()
    assert lock_path.read_text(encoding="utf-8") == str(DEAD_PID)
    assert manager.locked_path is None


def test_unlock_without_lock_is_noop(lock_path: Path) -> None:
    manager = LockManager()
    manager.unlock()
    manager.unlock()
    assert not lock_path.exists()


def test_unlock_twice(lock_path: Path) -> None:
    manager = LockManager()
    manager.lock(lock_path)
    manager.unlock()
    manager.unlock()
    assert not lock_path.exists()
    assert manager.locked_path is None


def test_unlock_after_file_removed(lock_path: Path) -> None:
    manager = LockManager()
    manager.lock(lock_path)
    lock_path.unlink()

    manager.unlock()


def test_locking_another_path_releases_the_first(tmp_path: Path) -> None:
    first = tmp_path / "first.lock"
    second = tmp_path / "second.lock"
    manager = LockManager()

    manager.lock(first)
    manager.lock(second)

    assert not first.exists()
    assert second.exists()
    assert manager.locked_path == second
    manager.unlock()


def test_is_process_running() -> None:
    assert is_process_running(os.getpid())
    assert not is_process_running(DEAD_PID)
    assert not is_process_running(0)
    assert not is_process_running(None)


def test_is_console_process(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sys, "argv", ["app"])
    assert is_console_process()

    monkeypatch.setattr(sys, "argv", [])
    assert not is_console_process()
