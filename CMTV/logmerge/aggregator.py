"""
Log Aggregator Module - Multi-file merge with live reload

Handles:
- Reading and decoding every tracked file
- In-band error entries for files that cannot be read
- Timestamp ordered merge (timestamp-less entries last, order kept)
- Background reload worker with request coalescing
- Change driven reloads through FilePoller
- Lifetime management: threads stop on close() or garbage collection
"""
import codecs
import logging
import weakref
from functools import partial
from pathlib import Path
from threading import Condition, Event, Thread, current_thread
from typing import Callable, Iterable, List, Optional, Tuple

from CMTV.util import file_label

from . import log_parser
from .file_poller import FilePoller, POLL_INTERVAL
from .log_parser import LogEntry, Severity

logger = logging.getLogger(__name__)


def read_log_file(path: Path) -> str:
    """
    Read and decode a log file

    UTF-16 files are recognised by their byte order mark, everything
    else is decoded as UTF-8 (with or without BOM).

    Raises:
        OSError: The file cannot be read
        UnicodeDecodeError: The content is not valid text
        ValueError: The path cannot be opened (embedded NUL)
    """
    with open(path, 'rb') as f:
        data = f.read()

    if data.startswith((codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)):
        return data.decode('utf-16')
    return data.decode('utf-8-sig')


def _describe_error(error: Exception) -> str:
    if isinstance(error, OSError) and error.strerror:
        return error.strerror
    return str(error)


def load_file(path: Path) -> List[LogEntry]:
    """
    Parse one file, tagging entries with its label

    A read failure yields a single Error entry instead of raising.
    """
    name = file_label(path)
    try:
        content = read_log_file(path)
    except (OSError, UnicodeDecodeError, ValueError) as e:
        logger.warning(f"Failed to read {path}: {e}")
        return [LogEntry(
            message=f"Failed to read {name}: {_describe_error(e)}",
            severity=Severity.ERROR,
            file_name=name,
        )]

    return log_parser.parse(content, name)


def sort_key(entry: LogEntry) -> tuple:
    """Timestamped entries first by time, the rest compare equal"""
    if entry.timestamp is not None:
        return (0, entry.timestamp)
    return (1,)


def merge_entries(entries: Iterable[LogEntry]) -> List[LogEntry]:
    """Stable sort of the concatenated per-file entries"""
    return sorted(entries, key=sort_key)


def load_files(file_paths: Iterable[Path]) -> List[LogEntry]:
    """
    Read, parse and merge a set of files

    Args:
        file_paths: Files in listing order (tie-break for entries
            without timestamp)

    Returns:
        Merged, sorted list of entries
    """
    combined: List[LogEntry] = []
    for path in file_paths:
        combined.extend(load_file(path))
    return merge_entries(combined)


def _weak_callback(method: Callable) -> Callable:
    """Wrap a bound method so the caller does not keep its owner alive"""
    ref = weakref.WeakMethod(method)

    def callback(*args):
        target = ref()
        if target is not None:
            target(*args)

    return callback


class ReloadWorker:
    """Background worker running reload passes one at a time"""

    def __init__(self, load: Callable[[], List[LogEntry]],
                 publish: Callable[[List[LogEntry]], None]):
        """
        Initialize the reload worker

        Args:
            load: Performs one full read/parse/merge pass
            publish: Receives the result of each pass
        """
        self.load = load
        self.publish = publish

        # Requests arriving during a pass are coalesced into the next one
        self.request_event = Event()
        self.stop_event = Event()

        self.worker_thread: Optional[Thread] = None
        self.logger = logging.getLogger(__name__)

    @property
    def is_running(self) -> bool:
        return self.worker_thread is not None and self.worker_thread.is_alive()

    def start(self) -> None:
        """Start the background reload worker"""
        if self.is_running:
            return

        self.stop_event.clear()
        self.worker_thread = Thread(target=self._worker_loop, name="cmtv-reload", daemon=True)
        self.worker_thread.start()

    def stop(self) -> None:
        """Stop the background reload worker"""
        self.stop_event.set()
        self.request_event.set()
        if self.worker_thread and self.worker_thread.is_alive() and self.worker_thread is not current_thread():
            self.worker_thread.join(timeout=2.0)
            if self.worker_thread.is_alive():
                self.logger.warning("Reload worker did not terminate gracefully.")

    def request(self) -> None:
        """Ask for a reload pass"""
        if not self.stop_event.is_set():
            self.request_event.set()

    def _worker_loop(self) -> None:
        """Main worker loop - runs in background thread"""
        while True:
            self.request_event.wait()
            if self.stop_event.is_set():
                break
            self.request_event.clear()

            try:
                entries = self.load()
            except Exception as e:
                self.logger.error(f"Unhandled error during reload: {e}", exc_info=True)
                continue

            if self.stop_event.is_set():
                break
            self.publish(entries)


def _shutdown(worker: ReloadWorker, poller: FilePoller) -> None:
    poller.stop()
    worker.stop()
    logger.info("Aggregator closed")


class LogAggregator:
    """
    Merged, live view of a fixed set of log files

    The published ``entries`` tuple is always complete, unfiltered and
    sorted; it is swapped wholesale on every reload. ``on_update`` is
    called on the reload thread after each publish, one call at a time.
    ``follow_latest`` and ``filter_text`` are consumer preferences that
    the aggregator stores but never applies.
    """

    def __init__(self, file_paths: Iterable,
                 on_update: Optional[Callable[[Tuple[LogEntry, ...]], None]] = None,
                 poll_interval: float = POLL_INTERVAL,
                 autostart: bool = True):
        self.file_paths: Tuple[Path, ...] = tuple(Path(p) for p in file_paths)
        self.on_update = on_update

        self.follow_latest = True
        self.filter_text = ""

        self._entries: Tuple[LogEntry, ...] = ()
        self._version = 0
        self._condition = Condition()

        # Threads only hold weak references back to the aggregator
        self._worker = ReloadWorker(
            partial(load_files, self.file_paths),
            _weak_callback(self._publish),
        )
        self._poller = FilePoller(
            self.file_paths,
            _weak_callback(self.reload),
            interval=poll_interval,
            on_ready=_weak_callback(self.reload),
        )
        self._finalizer = weakref.finalize(self, _shutdown, self._worker, self._poller)

        if autostart:
            self.start()

    @property
    def entries(self) -> Tuple[LogEntry, ...]:
        """Current merged snapshot"""
        with self._condition:
            return self._entries

    @property
    def version(self) -> int:
        """Number of snapshots published so far"""
        with self._condition:
            return self._version

    @property
    def closed(self) -> bool:
        return not self._finalizer.alive

    def start(self) -> None:
        """
        Start the reload worker and the poller

        The initial load is requested by the poller once its baselines are
        recorded, so a change made after the first read is never missed.
        Nothing here touches the file system.
        """
        if self.closed:
            return

        self._worker.start()
        self._poller.start()
        logger.info(f"Aggregator started for {len(self.file_paths)} file(s)")

    def reload(self) -> None:
        """Request an asynchronous reload of all files"""
        if self.closed:
            return
        self._worker.request()

    def reload_sync(self) -> Tuple[LogEntry, ...]:
        """Reload all files on the calling thread and publish the result"""
        if not self.closed:
            self._publish(load_files(self.file_paths))
        return self.entries

    def wait_for_update(self, version: int, timeout: Optional[float] = None) -> bool:
        """
        Block until a snapshot newer than *version* is published

        Returns:
            True if such a snapshot exists, False on timeout
        """
        with self._condition:
            return self._condition.wait_for(lambda: self._version > version, timeout)

    def _publish(self, entries: List[LogEntry]) -> None:
        snapshot = tuple(entries)
        with self._condition:
            if self.closed:
                return
            self._entries = snapshot
            self._version += 1
            self._condition.notify_all()

        logger.debug(f"Published {len(snapshot)} entries")
        if self.on_update:
            try:
                self.on_update(snapshot)
            except Exception as e:
                logger.error(f"Update callback failed: {e}", exc_info=True)

    def close(self) -> None:
        """Stop polling and reloading; safe to call more than once"""
        self._finalizer()

    def __enter__(self) -> "LogAggregator":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
