"""
Log Parser Module - CMTrace record parsing

Handles:
- CMTrace record recognition (<![LOG[...]LOG]!><time=... date=... ...>)
- Timestamp assembly with UTC-offset suffix stripping
- Severity code mapping (0 Unknown, 1 Information, 2 Warning, 3 Error)
- Heuristic severity classification for plain text lines
- Line splitting that keeps the true line count of a file

The parser is total: every input line produces exactly one LogEntry,
whatever its content.
"""
import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Optional, Dict, Any, List
from uuid import UUID, uuid4


class Severity(IntEnum):
    """CMTrace severity levels, valued by their type code"""
    UNKNOWN = 0
    INFORMATION = 1
    WARNING = 2
    ERROR = 3

    @property
    def label(self) -> str:
        """Human friendly name"""
        return self.name.capitalize()

    @property
    def color(self) -> str:
        """Get color representation for this severity"""
        colors = {
            Severity.UNKNOWN: "grey50",
            Severity.INFORMATION: "white",
            Severity.WARNING: "dark_orange",
            Severity.ERROR: "red",
        }
        return colors.get(self, "white")

    @classmethod
    def from_code(cls, code: Optional[str]) -> "Severity":
        """
        Map a type attribute to a severity

        Missing or non-numeric codes fall back to Information; numeric
        codes outside 0-3 map to Unknown.
        """
        try:
            value = int(code.strip())
        except (AttributeError, ValueError):
            value = DEFAULT_SEVERITY_CODE

        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


DEFAULT_SEVERITY_CODE = 1


@dataclass(frozen=True)
class LogEntry:
    """Parsed log entry with metadata"""
    message: str
    severity: Severity = Severity.INFORMATION
    timestamp: Optional[datetime] = None
    raw_timestamp: Optional[str] = None
    component: Optional[str] = None
    file_name: Optional[str] = None
    entry_id: UUID = field(default_factory=uuid4, compare=False, repr=False)

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for export"""
        return {
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
            'raw_timestamp': self.raw_timestamp,
            'component': self.component,
            'severity': self.severity.label,
            'message': self.message,
            'file_name': self.file_name,
        }


# Message body is lazy, may span line breaks and never runs past the next
# record opener; attribute values never cross a quote.
RECORD_PATTERN = re.compile(
    r'<!\[LOG\[(?P<message>(?:(?!<!\[LOG\[).)*?)\]LOG\]!>'
    r'<time="(?P<time>[^"]*)"'
    r'\s+date="(?P<date>[^"]*)"'
    r'\s+component="(?P<component>[^"]*)"'
    r'(?:\s+context="[^"]*")?'
    r'(?:\s+type="(?P<type>[^"]*)")?'
    r'(?:\s+thread="[^"]*")?'
    r'(?:\s+file="[^"]*")?'
    r'\s*>',
    re.DOTALL,
)

# Raw offset in minutes appended to the fraction, e.g. "15:30:00.123-420"
UTC_OFFSET_PATTERN = re.compile(r'[+-]\d+$')

LINE_BREAK_PATTERN = re.compile(r'\r\n|[\n\r\x0b\x0c\x85\u2028\u2029]')

FRACTION_PATTERN = re.compile(r'\.(\d{7,})$')

# Tried in order, first match wins. %f takes one to six digits, so
# millisecond and microsecond fractions share a format; a time without
# a fraction does not parse.
TIMESTAMP_FORMATS = [
    '%m-%d-%Y %H:%M:%S.%f',
]


def split_lines(content: str) -> List[str]:
    """
    Split file content into lines

    Both single and two character terminators are recognised. A trailing
    terminator leaves an empty last line, so the segment count always
    matches the line count of the file.
    """
    return LINE_BREAK_PATTERN.split(content)


def strip_utc_offset(time_text: str) -> str:
    """Remove a trailing signed offset; the offset itself is discarded"""
    return UTC_OFFSET_PATTERN.sub('', time_text)


def parse_timestamp(timestamp_str: Optional[str]) -> Optional[datetime]:
    """
    Parse a combined "MM-DD-YYYY HH:MM:SS.fraction" string

    The result is an aware datetime in the local time zone, or None when
    no format matches.
    """
    if not timestamp_str:
        return None

    # strptime's %f stops at six digits
    text = FRACTION_PATTERN.sub(lambda m: '.' + m.group(1)[:6], timestamp_str.strip())

    for fmt in TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(text, fmt).astimezone()
        except (ValueError, OverflowError, OSError):
            continue

    return None


def classify_plain_line(line: str) -> Severity:
    """Guess severity of an unstructured line from its text"""
    lower = line.lower()
    if 'error' in lower:
        return Severity.ERROR
    if 'warning' in lower:
        return Severity.WARNING
    return Severity.INFORMATION


def parse_line(line: str, file_name: Optional[str] = None) -> LogEntry:
    """
    Parse a single log line

    Args:
        line: The raw line (may contain embedded line breaks)
        file_name: Label of the originating file

    Returns:
        A structured entry when the line holds a CMTrace record,
        otherwise a plain text entry carrying the whole line
    """
    match = RECORD_PATTERN.search(line)
    if not match:
        return LogEntry(
            message=line,
            severity=classify_plain_line(line),
            file_name=file_name,
        )

    time_text = strip_utc_offset(match.group('time'))
    combined = f"{match.group('date')} {time_text}"

    return LogEntry(
        message=match.group('message'),
        severity=Severity.from_code(match.group('type')),
        timestamp=parse_timestamp(combined),
        raw_timestamp=combined,
        component=match.group('component'),
        file_name=file_name,
    )


def parse(content: str, file_name: Optional[str] = None) -> List[LogEntry]:
    """
    Parse the full content of one file

    Args:
        content: Decoded file content
        file_name: Label attached to every entry

    Returns:
        List of LogEntry objects in line order
    """
    return [parse_line(line, file_name) for line in split_lines(content)]
