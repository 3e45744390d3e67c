"""
Log Table Module - DataTable for displaying merged log entries

Handles:
- Log entry display with color-coded severities
- Column sorting on header click
- Row selection and interaction
- Jumping to the newest entry when following the tail
"""
from typing import Dict, List, Optional

from textual.widgets import DataTable
from rich.text import Text

from CMTV.logmerge.filtering import SORT_KEYS, sort_entries
from CMTV.logmerge.log_parser import LogEntry, Severity


class LogViewerTable(DataTable):
    """
    DataTable for displaying log entries

    Features:
    - Color-coded severities
    - Raw timestamp display
    - Component and originating file
    - Message preview with truncation
    - Sortable columns
    """

    COLUMNS = [
        ("Time", "time"),
        ("Severity", "severity"),
        ("Component", "component"),
        ("Message", "message"),
        ("File", "file"),
    ]

    def __init__(self, max_message_length: int = 160, **kwargs):
        """Initialize the log viewer table"""
        super().__init__(**kwargs)
        self.entries: List[LogEntry] = []
        self.entry_map: Dict = {}  # Maps row_key to LogEntry
        self.max_message_length = max_message_length

        # None keeps the merged order
        self.sort_column: Optional[str] = None
        self.sort_reverse = False

    def on_mount(self) -> None:
        """Initialize table columns when mounted"""
        self.cursor_type = "row"
        self.zebra_stripes = True

        for label, key in self.COLUMNS:
            self.add_column(label, key=key)

    def set_entries(self, entries: List[LogEntry], keep_position: bool = False) -> None:
        """
        Replace the table content

        Args:
            entries: Entries to show, in merged order
            keep_position: Keep the highlighted entry and the scroll offset
                instead of returning to the first row
        """
        self.entries = list(entries)
        self._render_rows(keep_position)

    def _render_rows(self, keep_position: bool = False) -> None:
        selected = self.get_selected_entry() if keep_position else None
        cursor_row = self.cursor_row
        scroll_x, scroll_y = self.scroll_x, self.scroll_y

        # clear() resets the cursor and the scroll offset
        self.clear()
        self.entry_map.clear()

        rows = self.entries
        if self.sort_column is not None:
            rows = sort_entries(rows, self.sort_column, self.sort_reverse)

        for entry in rows:
            row_key = self.add_row(*self._format_entry(entry))
            self.entry_map[row_key] = entry

        if keep_position and self.row_count > 0:
            self.move_cursor(row=self._find_row(selected, cursor_row))
            # Virtual size is only known after the next refresh
            self.call_after_refresh(self.scroll_to, scroll_x, scroll_y, animate=False)

    def _find_row(self, entry: Optional[LogEntry], fallback: int) -> int:
        """
        Row showing an entry equal to *entry*, nearest to *fallback*

        Entries are re-created on every reload, so they are matched by
        value rather than by identity.
        """
        fallback = min(fallback, self.row_count - 1)
        if entry is None:
            return fallback

        matches = [row for row, candidate in enumerate(self.entry_map.values()) if candidate == entry]
        if not matches:
            return fallback
        return min(matches, key=lambda row: abs(row - fallback))

    def _format_entry(self, entry: LogEntry) -> tuple:
        """
        Format a log entry for table display

        Returns:
            Tuple of formatted cell values
        """
        timestamp = entry.raw_timestamp or "—"

        severity_text = Text(f"● {entry.severity.label}", style=entry.severity.color)

        # Newlines would break the row layout
        message = entry.message.replace("\r", " ").replace("\n", " ")
        if len(message) > self.max_message_length:
            message = message[:self.max_message_length - 3] + "..."

        message_style = "red" if entry.severity == Severity.ERROR else ""

        # Plain str cells would be parsed as console markup
        return (
            Text(timestamp),
            severity_text,
            Text(entry.component or ""),
            Text(message, style=message_style),
            Text(entry.file_name or ""),
        )

    def sort_by_column(self, column: Optional[str], reverse: bool = False) -> None:
        """
        Sort rows by a column key, or restore merged order with None
        """
        if column is not None and column not in SORT_KEYS:
            return

        self.sort_column = column
        self.sort_reverse = reverse
        self._render_rows()

    def on_data_table_header_selected(self, event: DataTable.HeaderSelected) -> None:
        """Sort by the clicked column; clicking again flips direction"""
        column = event.column_key.value
        if column not in SORT_KEYS:
            return

        reverse = not self.sort_reverse if column == self.sort_column else False
        self.sort_by_column(column, reverse)

    def get_selected_entry(self) -> Optional[LogEntry]:
        """
        Get the currently selected log entry

        Returns:
            Selected LogEntry or None
        """
        if self.row_count == 0:
            return None

        row_key = self.coordinate_to_cell_key(self.cursor_coordinate).row_key
        return self.entry_map.get(row_key)

    def jump_to_top(self) -> None:
        """Jump to the first entry"""
        if self.row_count > 0:
            self.move_cursor(row=0)

    def jump_to_bottom(self) -> None:
        """Jump to the last entry"""
        if self.row_count > 0:
            self.move_cursor(row=self.row_count - 1)

    def get_visible_entries(self) -> List[LogEntry]:
        """Entries currently shown, in display order"""
        return list(self.entry_map.values())

    def get_stats(self) -> dict:
        """
        Get statistics about the displayed entries

        Returns:
            Dictionary with entry counts by severity
        """
        stats = {
            'visible': len(self.entry_map),
            'unknown': 0,
            'information': 0,
            'warning': 0,
            'error': 0,
        }

        for entry in self.entries:
            stats[entry.severity.name.lower()] += 1

        return stats
