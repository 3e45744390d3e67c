"""
File Poller Module - Modification time based change detection

Handles:
- Baseline modification times for a fixed set of files
- Periodic re-stat of every file on a background thread
- Files that appear (or become stat-able) after startup
- Clean shutdown with no callback after stop
"""
import logging
import os
from pathlib import Path
from threading import Event, Thread, current_thread
from typing import Callable, Dict, Iterable, List, Optional

POLL_INTERVAL = 1.0


class FilePoller:
    """Polls a fixed set of files and reports modifications"""

    def __init__(self, file_paths: Iterable, on_change: Callable[[], None],
                 interval: float = POLL_INTERVAL,
                 on_ready: Optional[Callable[[], None]] = None):
        """
        Initialize the poller

        Args:
            file_paths: Files to watch
            on_change: Called once per tick in which any file changed
            interval: Seconds between two ticks
            on_ready: Called once on the polling thread after the
                baselines are recorded
        """
        self.file_paths = tuple(Path(p) for p in file_paths)
        self.on_change = on_change
        self.interval = interval
        self.on_ready = on_ready

        # Baseline modification times, {path: st_mtime_ns}
        self.last_modified: Dict[Path, int] = {}

        self.stop_event = Event()
        self.baseline_ready = Event()
        self.poll_thread: Optional[Thread] = None
        self.logger = logging.getLogger(__name__)

    @staticmethod
    def _stat_mtime(path: Path) -> Optional[int]:
        try:
            return os.stat(path).st_mtime_ns
        except (OSError, ValueError):
            return None

    def record_baseline(self) -> None:
        """Record the current modification time of every stat-able file"""
        for path in self.file_paths:
            mtime = self._stat_mtime(path)
            if mtime is not None:
                self.last_modified[path] = mtime

    def check_for_changes(self) -> List[Path]:
        """
        Re-stat every file and update the baselines

        Returns:
            Files that are new since the last check or carry a newer
            modification time. Files that cannot be stat-ed are skipped.
        """
        changed = []
        for path in self.file_paths:
            mtime = self._stat_mtime(path)
            if mtime is None:
                continue

            last = self.last_modified.get(path)
            if last is None or mtime > last:
                self.last_modified[path] = mtime
                changed.append(path)

        return changed

    def _poll_loop(self) -> None:
        """Main polling loop - runs in background thread"""
        self.logger.info(f"Polling {len(self.file_paths)} file(s) every {self.interval}s")

        # Baselines are stat-ed on the polling thread, never the caller of start()
        self.record_baseline()
        self.baseline_ready.set()
        if self.on_ready and not self.stop_event.is_set():
            try:
                self.on_ready()
            except Exception as e:
                self.logger.error(f"Unhandled error after recording baselines: {e}", exc_info=True)

        while not self.stop_event.wait(self.interval):
            try:
                changed = self.check_for_changes()
                if changed and not self.stop_event.is_set():
                    self.logger.info(f"Change detected in: {', '.join(p.name for p in changed)}")
                    self.on_change()
            except Exception as e:
                self.logger.error(f"Unhandled error while polling: {e}", exc_info=True)
        self.logger.info("Polling stopped")

    @property
    def is_running(self) -> bool:
        return self.poll_thread is not None and self.poll_thread.is_alive()

    def start(self) -> None:
        """Start polling; baselines are recorded on the polling thread"""
        if self.is_running:
            return

        self.stop_event.clear()
        self.baseline_ready.clear()
        self.poll_thread = Thread(target=self._poll_loop, name="cmtv-poller", daemon=True)
        self.poll_thread.start()

    def stop(self) -> None:
        """Stop polling and wait for the loop to exit"""
        self.stop_event.set()
        if self.poll_thread and self.poll_thread.is_alive() and self.poll_thread is not current_thread():
            self.poll_thread.join(timeout=2.0)
            if self.poll_thread.is_alive():
                self.logger.warning("Poller thread did not terminate gracefully.")
