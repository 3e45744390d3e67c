"""
Log Viewer Package - Live, merged view of CMTrace and plain text logs

Package Structure:
- view: One open document (LogViewerView)
- components: UI panels and controls (OpenFilesPanel, LogSearchPanel, LogStatsPanel, LogEntryDetailsPanel)
- log_table: Log entry table widget (LogViewerTable)

Parsing and merging live in CMTV.logmerge.
"""

from .view import LogViewerView, document_title

from .components import (
    OpenFilesPanel,
    LogSearchPanel,
    LogStatsPanel,
    LogEntryDetailsPanel
)
from .log_table import LogViewerTable

__all__ = [
    # Main view
    'LogViewerView',
    'document_title',

    # UI components
    'OpenFilesPanel',
    'LogSearchPanel',
    'LogStatsPanel',
    'LogEntryDetailsPanel',
    'LogViewerTable',
]
