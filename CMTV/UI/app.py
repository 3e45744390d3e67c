"""
CMTV Main Application - CMTrace log viewer using Textual
"""
import logging
import shlex
from typing import List, Optional, Sequence

from rich.markup import escape
from textual import on
from textual.app import App, ComposeResult
from textual.widgets import Button, Footer, Header, Input, Static, TabbedContent, TabPane

from CMTV.logmerge.file_poller import POLL_INTERVAL
from CMTV.UI.views.log_viewer import LogViewerView, OpenFilesPanel

logger = logging.getLogger(__name__)


class CMTVApp(App):
    """CMTrace log viewer - Terminal UI Application"""

    TITLE = "CMTV - CMTrace Log Viewer"
    CSS_PATH = "cmtv.tcss"

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("o", "focus_open", "Open"),
        ("r", "reload", "Reload"),
        ("slash", "focus_search", "Search"),
        ("w", "close_document", "Close Tab"),
    ]

    def __init__(self, documents: Optional[List[Sequence[str]]] = None,
                 poll_interval: float = POLL_INTERVAL, **kwargs):
        """
        Initialize the application

        Args:
            documents: File groups to open at startup, one tab per group
            poll_interval: Seconds between change checks
        """
        super().__init__(**kwargs)
        self.initial_documents = [list(group) for group in (documents or []) if group]
        self.poll_interval = poll_interval
        self._document_count = 0

    def compose(self) -> ComposeResult:
        """Compose the main UI layout"""
        yield Header(show_clock=True)
        yield OpenFilesPanel(id="open-files-panel")
        yield Static("Enter one or more log file paths above to open them.", id="empty-prompt")

        with TabbedContent(id="documents"):
            for paths in self.initial_documents:
                yield self._new_pane(paths)

        yield Footer()

    def on_mount(self) -> None:
        self._update_empty_prompt()

    def _new_pane(self, paths: Sequence[str]) -> TabPane:
        self._document_count += 1
        pane_id = f"doc-{self._document_count}"
        view = LogViewerView(paths, poll_interval=self.poll_interval, id=f"{pane_id}-view")
        return TabPane(escape(view.doc_title), view, id=pane_id)

    def _update_empty_prompt(self) -> None:
        tabs = self.query_one("#documents", TabbedContent)
        self.query_one("#empty-prompt", Static).display = tabs.tab_count == 0

    async def open_document(self, paths: Sequence[str]) -> None:
        """Open files as a new tab, merged when more than one"""
        if not paths:
            return

        tabs = self.query_one("#documents", TabbedContent)
        pane = self._new_pane(paths)
        await tabs.add_pane(pane)
        tabs.active = pane.id
        self._update_empty_prompt()
        logger.info(f"Opened {len(paths)} file(s) in {pane.id}")

    def active_view(self) -> Optional[LogViewerView]:
        tabs = self.query_one("#documents", TabbedContent)
        if not tabs.active:
            return None
        return tabs.get_pane(tabs.active).query_one(LogViewerView)

    # Event Handlers

    @on(Input.Submitted, "#open-files-input")
    @on(Button.Pressed, "#open-files-btn")
    async def handle_open(self) -> None:
        """Open the paths typed in the open bar"""
        open_input = self.query_one("#open-files-input", Input)
        try:
            paths = shlex.split(open_input.value)
        except ValueError as e:
            self.notify(f"Invalid path list: {e}", severity="error")
            return

        if not paths:
            return

        open_input.value = ""
        await self.open_document(paths)

    def action_focus_open(self) -> None:
        self.query_one("#open-files-input", Input).focus()

    def action_focus_search(self) -> None:
        view = self.active_view()
        if view:
            view.query_one(".log-search-input", Input).focus()

    def action_reload(self) -> None:
        """Reload the active document"""
        view = self.active_view()
        if view:
            view.reload()

    async def action_close_document(self) -> None:
        """Close the active tab; its aggregator stops on unmount"""
        tabs = self.query_one("#documents", TabbedContent)
        if tabs.active:
            await tabs.remove_pane(tabs.active)
        self._update_empty_prompt()


def run_app(file_paths: Optional[Sequence[str]] = None, poll_interval: float = POLL_INTERVAL) -> None:
    """Entry point to run the CMTV application"""
    documents = [list(file_paths)] if file_paths else []
    app = CMTVApp(documents, poll_interval=poll_interval)
    app.run()
