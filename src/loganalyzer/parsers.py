"""
Log Parsers Module

Parses web-server access logs in the Apache/Nginx combined format into
structured LogEntry records.
"""

import re
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Dict, List, Any, Iterable

from .utils import status_class

logger = logging.getLogger(__name__)


class LogParseError(ValueError):
    """Base class for per-line parse failures."""

    def __init__(self, message: str, line: str = "", line_number: int = 0):
        super().__init__(message)
        self.line = line
        self.line_number = line_number


class MalformedLineError(LogParseError):
    """Line does not follow the combined log grammar."""


class InvalidStatusError(LogParseError):
    """Status field is not a decimal integer."""


class LogFileReadError(OSError):
    """Log file could not be opened or read."""


@dataclass(frozen=True)
class LogEntry:
    """Represents one parsed HTTP access record."""

    ip: str
    timestamp: datetime
    method: str
    url: str
    status: int
    size: int = 0
    referer: str = ""
    user_agent: str = ""
    protocol: str = ""
    line_number: int = 0

    @property
    def is_valid(self) -> bool:
        return bool(self.ip) and bool(self.method) and self.status > 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "ip": self.ip,
            "timestamp": self.timestamp.isoformat(),
            "method": self.method,
            "url": self.url,
            "protocol": self.protocol,
            "status": self.status,
            "size": self.size,
            "referer": self.referer,
            "user_agent": self.user_agent,
            "line_number": self.line_number,
        }


# Timestamp layouts, tried in order
TIMESTAMP_FORMATS = [
    "%d/%b/%Y:%H:%M:%S %z",     # 13/Sep/2025:21:00:01 +0200
    "%d/%b/%Y:%H:%M:%S",        # 13/Sep/2025:21:00:01
    "%Y-%m-%d %H:%M:%S",        # 2025-09-13 21:00:01
    "%Y/%m/%d %H:%M:%S",        # 2025/09/13 21:00:01
]


def parse_timestamp(value: str) -> Optional[datetime]:
    """
    Parse an access log timestamp.

    Layouts without an offset are taken as UTC so that every parsed
    timestamp is timezone-aware and comparable.

    Returns:
        Aware datetime, or None if no known layout matches
    """
    for fmt in TIMESTAMP_FORMATS:
        try:
            parsed = datetime.strptime(value, fmt)
        except ValueError:
            continue
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    return None


class AccessLogParser:
    """
    Parser for the Apache/Nginx Combined Log Format.

    Format: %h %l %u %t "%r" %>s %b "%{Referer}i" "%{User-agent}i"
    Example: 10.0.0.1 - - [13/Sep/2025:21:00:01 +0200] "GET /index.html HTTP/1.1" 200 512 "-" "Mozilla/5.0"
    """

    name = "combined"

    PATTERN = re.compile(
        r'^(?P<ip>\S+) \S+ \S+ '                        # IP, ident, user
        r'\[(?P<timestamp>[^\]]+)\] '                   # Timestamp
        r'"(?P<method>\S+) (?P<url>[^"]*?)'             # Request line
        r'(?: (?P<protocol>HTTP/[^"\s]+))?" '           # Protocol (optional)
        r'(?P<status>\S+) '                             # Status code
        r'(?P<size>\S+) '                               # Size
        r'"(?P<referer>[^"]*)" '                        # Referer
        r'"(?P<user_agent>[^"]*)"'                      # User-agent
    )

    def parse_line(self, line: str, line_number: int = 0) -> LogEntry:
        """
        Parse a single access log line.

        Raises:
            MalformedLineError: line does not match the combined grammar
            InvalidStatusError: status field is not numeric
        """
        match = self.PATTERN.match(line)

        if not match:
            raise MalformedLineError(
                "Line does not match combined log format", line, line_number
            )

        data = match.groupdict()

        if not data['status'].isdecimal():
            raise InvalidStatusError(
                f"Invalid status code: {data['status']}", line, line_number
            )

        timestamp = parse_timestamp(data['timestamp'])
        if timestamp is None:
            # Unknown layout: keep the line, stamp it with the current time
            logger.debug(
                f"Line {line_number}: unrecognised timestamp {data['timestamp']!r}, using current time"
            )
            timestamp = datetime.now(timezone.utc).astimezone()

        size = 0
        if data['size'].isdecimal():
            size = int(data['size'])

        return LogEntry(
            ip=data['ip'],
            timestamp=timestamp,
            method=data['method'],
            url=data['url'],
            protocol=data['protocol'] or "",
            status=int(data['status']),
            size=size,
            referer=data['referer'],
            user_agent=data['user_agent'],
            line_number=line_number,
        )

    def parse_lines(self, lines: Iterable[str]) -> List[LogEntry]:
        """Parse lines, skipping blank and unparseable ones."""
        entries = []

        for line_num, line in enumerate(lines, 1):
            line = line.rstrip('\r\n')
            if not line.strip():
                continue

            try:
                entries.append(self.parse_line(line, line_num))
            except LogParseError as e:
                logger.debug(f"Skipping line {line_num}: {e}")

        return entries

    def parse_file(self, filepath: str) -> List[LogEntry]:
        """
        Parse all lines in a file.

        Args:
            filepath: Path to the access log

        Returns:
            Successfully parsed entries, in file order

        Raises:
            FileNotFoundError: path does not exist
            IsADirectoryError: path is a directory
            LogFileReadError: file could not be opened or read
        """
        path = Path(filepath)

        if not path.exists():
            raise FileNotFoundError(f"Log file not found: {filepath}")
        if path.is_dir():
            raise IsADirectoryError(f"{filepath} is a directory, not a file")

        try:
            with open(path, 'r', encoding='utf-8', errors='replace') as f:
                entries = self.parse_lines(f)
        except OSError as e:
            raise LogFileReadError(f"Error reading {filepath}: {e}") from e

        logger.info(f"Parsed {len(entries)} entries from {filepath}")
        return entries

    @staticmethod
    def get_parsing_stats(entries: List[LogEntry]) -> Dict[str, int]:
        """Count entries per status class (success, redirect, client_error, server_error)."""
        stats = {
            "total": 0,
            "success": 0,
            "redirect": 0,
            "client_error": 0,
            "server_error": 0,
        }

        for entry in entries:
            stats["total"] += 1
            category = status_class(entry.status)
            if category:
                stats[category] += 1

        return stats
