"""Unit tests for sync_engine.run_lock module."""

import os

import pytest

from src.sync_engine.run_lock import HAS_FCNTL, LOCK_FILE_NAME, RunInProgressError, RunLock


class TestRunLock:
    """Test cases for RunLock."""

    def test_creates_lock_file_with_pid(self, tmp_path):
        base_dir = tmp_path / "repos"

        with RunLock(str(base_dir)) as lock:
            assert lock.locked is True
            lock_path = base_dir / LOCK_FILE_NAME
            assert lock_path.exists()
            if HAS_FCNTL:
                assert lock_path.read_text() == str(os.getpid())

        assert lock.locked is False

    @pytest.mark.skipif(not HAS_FCNTL, reason="fcntl locking not available")
    def test_second_lock_is_rejected(self, tmp_path):
        with RunLock(str(tmp_path)):
            with pytest.raises(RunInProgressError) as exc_info:
                RunLock(str(tmp_path)).acquire()

        assert LOCK_FILE_NAME in str(exc_info.value)

    @pytest.mark.skipif(not HAS_FCNTL, reason="fcntl locking not available")
    def test_rejected_attempt_keeps_holder_pid(self, tmp_path):
        lock_path = tmp_path / LOCK_FILE_NAME

        with RunLock(str(tmp_path)):
            with pytest.raises(RunInProgressError):
                RunLock(str(tmp_path)).acquire()
            assert lock_path.read_text() == str(os.getpid())

    @pytest.mark.skipif(not HAS_FCNTL, reason="fcntl locking not available")
    def test_stale_pid_is_replaced(self, tmp_path):
        lock_path = tmp_path / LOCK_FILE_NAME
        lock_path.write_text("999999999")

        with RunLock(str(tmp_path)):
            assert lock_path.read_text() == str(os.getpid())

    def test_lock_can_be_retaken_after_release(self, tmp_path):
        first = RunLock(str(tmp_path))
        first.acquire()
        first.release()

        with RunLock(str(tmp_path)) as second:
            assert second.locked is True

    def test_release_without_acquire(self, tmp_path):
        RunLock(str(tmp_path)).release()

    def test_lock_released_on_exception(self, tmp_path):
        lock = RunLock(str(tmp_path))
        with pytest.raises(ValueError):
            with lock:
                raise ValueError("boom")

        assert lock.locked is False
