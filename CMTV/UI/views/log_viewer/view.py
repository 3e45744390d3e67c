"""
Log Viewer View Module - One open document (a file or a merged group)

Handles:
- Owning the LogAggregator for the document's files
- Receiving published snapshots on the UI thread
- Search (debounced) and follow tail coordination
- Entry details and statistics
"""
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.message import Message
from textual.timer import Timer
from textual.widgets import Button, Checkbox, DataTable, Input, Label
from textual import on
from rich.text import Text

from CMTV.logmerge.aggregator import LogAggregator
from CMTV.logmerge.file_poller import POLL_INTERVAL
from CMTV.logmerge.filtering import filter_entries
from CMTV.logmerge.log_parser import LogEntry
from CMTV.util import file_label

from .log_table import LogViewerTable
from .components import LogSearchPanel, LogStatsPanel, LogEntryDetailsPanel


def document_title(file_paths: Sequence) -> str:
    """Tab title: the file name, or the list of merged file names"""
    names = [file_label(p) for p in file_paths]
    if len(names) == 1:
        return names[0]
    if not names:
        return "Untitled"
    return f"Merged ({', '.join(names)})"


class LogViewerView(Vertical):
    """
    Merged, live view of one or more log files

    The aggregator publishes from its reload thread; the snapshot is
    forwarded to the UI thread as an EntriesUpdated message.
    """

    class EntriesUpdated(Message):
        """A new merged snapshot was published"""

        def __init__(self, entries: Tuple[LogEntry, ...]) -> None:
            super().__init__()
            self.entries = entries

    def __init__(self, file_paths: Sequence, poll_interval: float = POLL_INTERVAL, **kwargs):
        """
        Initialize the log viewer

        Args:
            file_paths: Files shown in this document
            poll_interval: Seconds between change checks
        """
        super().__init__(**kwargs)
        self.file_paths: List[Path] = [Path(p) for p in file_paths]
        self.poll_interval = poll_interval
        self.doc_title = document_title(self.file_paths)

        self.aggregator: Optional[LogAggregator] = None
        self._search_timer: Optional[Timer] = None

    def compose(self) -> ComposeResult:
        """Compose the log viewer layout"""
        yield LogSearchPanel(classes="log-search-panel")

        with Horizontal(classes="log-viewer-content"):
            with Vertical(classes="main-panel"):
                yield Label(Text(self.doc_title, style="bold"), classes="section-title")
                yield LogViewerTable(classes="log-viewer-table")

            with Vertical(classes="right-panel"):
                yield LogStatsPanel(classes="log-stats-panel")
                yield LogEntryDetailsPanel(classes="log-entry-details-panel")

    def on_mount(self) -> None:
        """Start loading and polling once the widgets exist"""
        self.call_after_refresh(self._start_aggregator)

    def _start_aggregator(self) -> None:
        if not self.is_mounted or self.aggregator:
            return
        self.aggregator = LogAggregator(
            self.file_paths,
            on_update=self._entries_published,
            poll_interval=self.poll_interval,
        )

    def _entries_published(self, entries: Tuple[LogEntry, ...]) -> None:
        # Reload thread; post_message is thread-safe
        self.post_message(self.EntriesUpdated(entries))

    def on_log_viewer_view_entries_updated(self, event: EntriesUpdated) -> None:
        """Show a freshly published snapshot (main thread)"""
        event.stop()
        self._show_entries(event.entries)

    @property
    def table(self) -> LogViewerTable:
        return self.query_one(LogViewerTable)

    def _show_entries(self, entries: Sequence[LogEntry]) -> None:
        filter_text = self.aggregator.filter_text if self.aggregator else ""
        follow_latest = self.aggregator.follow_latest if self.aggregator else True

        # Without follow tail the view stays where the user left it
        self.table.set_entries(filter_entries(entries, filter_text), keep_position=not follow_latest)
        self._update_stats(len(entries))

        if follow_latest:
            self.table.jump_to_bottom()

    def _refilter(self) -> None:
        if self.aggregator:
            self._show_entries(self.aggregator.entries)

    def _update_stats(self, total: int) -> None:
        """Update statistics panel"""
        stats = self.table.get_stats()

        stats_panel = self.query_one(LogStatsPanel)
        stats_panel.total_entries = total
        stats_panel.visible_entries = stats['visible']
        stats_panel.error_count = stats['error']
        stats_panel.warning_count = stats['warning']

    def reload(self) -> None:
        """Ask the aggregator for a reload"""
        if self.aggregator:
            self.aggregator.reload()

    # Event Handlers

    @on(Button.Pressed, ".reload-logs-btn")
    def handle_reload(self) -> None:
        self.reload()
        self.notify(f"Reloading {self.doc_title}", severity="information")

    @on(Button.Pressed, ".clear-search-btn")
    def handle_clear_search(self) -> None:
        self.query_one(".log-search-input", Input).value = ""

    @on(Input.Changed, ".log-search-input")
    def handle_search_changed(self, event: Input.Changed) -> None:
        """Store the filter and re-apply it after typing pauses"""
        if self.aggregator:
            self.aggregator.filter_text = event.value

        if self._search_timer:
            self._search_timer.stop()

        # Debounce search - wait 300ms after last keystroke
        self._search_timer = self.set_timer(0.3, self._perform_search)

    def _perform_search(self) -> None:
        self._search_timer = None
        self._refilter()

    @on(Checkbox.Changed, ".follow-tail-checkbox")
    def handle_follow_tail_changed(self, event: Checkbox.Changed) -> None:
        if self.aggregator:
            self.aggregator.follow_latest = event.value
        if event.value:
            self.table.jump_to_bottom()

    def on_data_table_row_highlighted(self, event: DataTable.RowHighlighted) -> None:
        """Show details of the highlighted entry"""
        entry = self.table.entry_map.get(event.row_key)
        details_panel = self.query_one(LogEntryDetailsPanel)
        if entry:
            details_panel.show_entry_details(entry)
        else:
            details_panel.clear_details()

    def on_unmount(self) -> None:
        """Stop polling when the document is closed"""
        if self._search_timer:
            self._search_timer.stop()
            self._search_timer = None

        if self.aggregator:
            self.aggregator.close()
