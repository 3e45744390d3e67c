import os
import time
from threading import current_thread
from unittest.mock import MagicMock, patch

import pytest

from CMTV.logmerge.file_poller import FilePoller, POLL_INTERVAL


def bump_mtime(path, seconds=10):
    stat = os.stat(path)
    os.utime(path, ns=(stat.st_atime_ns, stat.st_mtime_ns + seconds * 1_000_000_000))


@pytest.fixture
def log_file(tmp_path):
    path = tmp_path / "watched.log"
    path.write_text("initial\n")
    return path


def test_default_interval():
    assert POLL_INTERVAL == 1.0
    assert FilePoller([], MagicMock()).interval == 1.0


def test_baseline_skips_missing_files(tmp_path, log_file):
    missing = tmp_path / "missing.log"
    poller = FilePoller([log_file, missing], MagicMock())

    assert poller.last_modified == {}
    poller.record_baseline()

    assert list(poller.last_modified) == [log_file]


def test_no_change_after_baseline(log_file):
    poller = FilePoller([log_file], MagicMock())
    poller.record_baseline()

    assert poller.check_for_changes() == []


def test_newer_mtime_is_a_change(log_file):
    poller = FilePoller([log_file], MagicMock())
    poller.record_baseline()
    baseline = poller.last_modified[log_file]

    bump_mtime(log_file)

    assert poller.check_for_changes() == [log_file]
    assert poller.last_modified[log_file] > baseline
    assert poller.check_for_changes() == []


def test_older_mtime_is_not_a_change(log_file):
    poller = FilePoller([log_file], MagicMock())
    poller.record_baseline()

    bump_mtime(log_file, seconds=-100)

    assert poller.check_for_changes() == []


def test_file_without_baseline_counts_as_changed(tmp_path):
    late = tmp_path / "late.log"
    poller = FilePoller([late], MagicMock())
    poller.record_baseline()
    assert poller.check_for_changes() == []

    late.write_text("now here")

    assert poller.check_for_changes() == [late]
    assert late in poller.last_modified


def test_stat_failure_keeps_baseline(log_file):
    poller = FilePoller([log_file], MagicMock())
    poller.record_baseline()
    baseline = poller.last_modified[log_file]

    os.remove(log_file)

    assert poller.check_for_changes() == []
    assert poller.last_modified[log_file] == baseline


def test_polling_thread_reports_once_per_tick(tmp_path):
    first = tmp_path / "a.log"
    second = tmp_path / "b.log"
    first.write_text("a")
    second.write_text("b")
    on_change = MagicMock()

    poller = FilePoller([first, second], on_change, interval=0.5)
    poller.start()
    try:
        assert poller.baseline_ready.wait(5)
        bump_mtime(first)
        bump_mtime(second)

        deadline = time.monotonic() + 5
        while not on_change.called and time.monotonic() < deadline:
            time.sleep(0.01)
        time.sleep(0.7)

        assert on_change.call_count == 1
    finally:
        poller.stop()


def test_no_callback_after_stop(log_file):
    on_change = MagicMock()
    poller = FilePoller([log_file], on_change, interval=0.05)
    poller.start()
    assert poller.is_running
    assert poller.baseline_ready.wait(5)

    poller.stop()
    assert not poller.is_running

    bump_mtime(log_file)
    time.sleep(0.3)

    on_change.assert_not_called()


def test_callback_error_does_not_stop_polling(log_file):
    on_change = MagicMock(side_effect=[RuntimeError("boom"), None])
    poller = FilePoller([log_file], on_change, interval=0.05)
    poller.start()
    try:
        assert poller.baseline_ready.wait(5)
        bump_mtime(log_file)
        time.sleep(0.3)
        bump_mtime(log_file, seconds=20)

        deadline = time.monotonic() + 5
        while on_change.call_count < 2 and time.monotonic() < deadline:
            time.sleep(0.01)

        assert on_change.call_count == 2
        assert poller.is_running
    finally:
        poller.stop()


def test_baseline_is_recorded_on_polling_thread(log_file):
    real_stat = os.stat
    stat_threads = []

    def recording_stat(path, *args, **kwargs):
        if str(path) == str(log_file):
            stat_threads.append(current_thread().name)
        return real_stat(path, *args, **kwargs)

    poller = FilePoller([log_file], MagicMock(), interval=60)
    with patch("CMTV.logmerge.file_poller.os.stat", side_effect=recording_stat):
        poller.start()
        assert poller.baseline_ready.wait(5)
        poller.stop()

    assert stat_threads == ["cmtv-poller"]
    assert log_file in poller.last_modified


def test_on_ready_runs_after_baseline(log_file):
    seen = []
    poller = FilePoller([log_file], MagicMock(), interval=60)
    poller.on_ready = lambda: seen.append((current_thread().name, dict(poller.last_modified)))

    poller.start()
    try:
        assert poller.baseline_ready.wait(5)
        deadline = time.monotonic() + 5
        while not seen and time.monotonic() < deadline:
            time.sleep(0.01)
    finally:
        poller.stop()

    assert len(seen) == 1
    thread_name, baseline = seen[0]
    assert thread_name == "cmtv-poller"
    assert log_file in baseline


def test_no_on_ready_when_stopped_before_baseline(log_file):
    on_ready = MagicMock()
    poller = FilePoller([log_file], MagicMock(), interval=60, on_ready=on_ready)
    poller.stop_event.set()

    poller._poll_loop()

    assert poller.baseline_ready.is_set()
    on_ready.assert_not_called()
