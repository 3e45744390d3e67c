"""
Consumer side helpers for the merged view: free text filtering and
per-column sorting. The aggregator never applies these itself.
"""
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List

from .log_parser import LogEntry

_DISTANT_PAST = datetime.min.replace(tzinfo=timezone.utc)


def matches_filter(entry: LogEntry, query: str) -> bool:
    """Case-insensitive match on message, component and severity label"""
    search = query.strip().lower()
    if not search:
        return True

    return (
        search in entry.message.lower()
        or search in (entry.component or "").lower()
        or search in entry.severity.label.lower()
    )


def filter_entries(entries: Iterable[LogEntry], query: str) -> List[LogEntry]:
    """Return the entries matching *query*, keeping their order"""
    if not query.strip():
        return list(entries)
    return [entry for entry in entries if matches_filter(entry, query)]


# Column sort keys; entries without a value sort first
SORT_KEYS: Dict[str, Callable[[LogEntry], object]] = {
    "time": lambda e: e.timestamp or _DISTANT_PAST,
    "severity": lambda e: int(e.severity),
    "component": lambda e: e.component or "",
    "file": lambda e: e.file_name or "",
}


def sort_entries(entries: Iterable[LogEntry], column: str, reverse: bool = False) -> List[LogEntry]:
    """
    Sort entries by a table column

    Raises:
        KeyError: The column is not sortable
    """
    return sorted(entries, key=SORT_KEYS[column], reverse=reverse)
