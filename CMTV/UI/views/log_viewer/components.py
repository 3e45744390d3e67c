"""
Log Viewer Components Module - UI widgets and panels

Handles:
- Open files bar
- Search box, follow tail toggle and reload control
- Log statistics panel
- Entry details panel
"""
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, Input, Static, Label, Checkbox
from textual.reactive import reactive
from rich.markup import escape

from CMTV.logmerge.log_parser import LogEntry


class OpenFilesPanel(Horizontal):
    """Path entry used in place of a file picker"""

    def compose(self) -> ComposeResult:
        """Compose the open files bar"""
        yield Label("[bold]Open:[/bold]", classes="control-label")
        yield Input(
            placeholder="One or more log file paths (several paths open merged)",
            id="open-files-input"
        )
        yield Button("Open", id="open-files-btn", variant="primary")


class LogSearchPanel(Horizontal):
    """Search and tail controls for one document"""

    def __init__(self, follow_latest: bool = True, **kwargs):
        super().__init__(**kwargs)
        self.follow_latest = follow_latest

    def compose(self) -> ComposeResult:
        """Compose the search panel"""
        yield Label("[bold]Search:[/bold]", classes="control-label")
        yield Input(
            placeholder="Search message, component or severity...",
            classes="log-search-input"
        )
        yield Button("Clear", classes="clear-search-btn", variant="default")
        yield Checkbox("Follow Tail", value=self.follow_latest, classes="follow-tail-checkbox")
        yield Button("⟳ Reload", classes="reload-logs-btn", variant="primary")


class LogStatsPanel(Static):
    """Display log statistics"""

    total_entries: reactive[int] = reactive(0)
    visible_entries: reactive[int] = reactive(0)
    error_count: reactive[int] = reactive(0)
    warning_count: reactive[int] = reactive(0)

    def compose(self) -> ComposeResult:
        """Compose the stats panel"""
        yield Label("[bold]Log Statistics[/bold]", classes="panel-title")
        yield Static(self._format_stats(), classes="stats-content")

    def _format_stats(self) -> str:
        """Format statistics for display"""
        return (
            f"Total Entries: {self.total_entries}\n"
            f"Visible: {self.visible_entries}\n"
            f"[red]Errors: {self.error_count}[/red]\n"
            f"[dark_orange]Warnings: {self.warning_count}[/dark_orange]"
        )

    def watch_total_entries(self, value: int) -> None:
        self._update_display()

    def watch_visible_entries(self, value: int) -> None:
        self._update_display()

    def watch_error_count(self, value: int) -> None:
        self._update_display()

    def watch_warning_count(self, value: int) -> None:
        self._update_display()

    def _update_display(self) -> None:
        """Update the stats display"""
        if not self.is_mounted:
            return
        self.query_one(".stats-content", Static).update(self._format_stats())


class LogEntryDetailsPanel(Vertical):
    """Detailed view of selected log entry"""

    EMPTY_TEXT = "Select a log entry to view details"

    def compose(self) -> ComposeResult:
        """Compose the details panel"""
        yield Label("[bold]Entry Details[/bold]", classes="panel-title")
        yield Static(self.EMPTY_TEXT, classes="entry-details-content")

    def show_entry_details(self, entry: LogEntry) -> None:
        """
        Display details for a log entry

        Args:
            entry: LogEntry object to display
        """
        timestamp = entry.timestamp.strftime('%Y-%m-%d %H:%M:%S.%f %Z') if entry.timestamp else 'N/A'
        color = entry.severity.color

        details = (
            f"[bold]Time:[/bold] {escape(entry.raw_timestamp or 'N/A')}\n"
            f"[bold]Parsed:[/bold] {escape(timestamp)}\n"
            f"[bold]Severity:[/bold] [{color}]{entry.severity.label}[/{color}]\n"
            f"[bold]Component:[/bold] {escape(entry.component or 'N/A')}\n"
            f"[bold]File:[/bold] {escape(entry.file_name or 'N/A')}\n"
            f"[bold]Message:[/bold]\n{escape(entry.message)}"
        )

        self.query_one(".entry-details-content", Static).update(details)

    def clear_details(self) -> None:
        """Clear the details display"""
        self.query_one(".entry-details-content", Static).update(self.EMPTY_TEXT)
