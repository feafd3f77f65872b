"""
Threats Module

Security threat records produced by the detectors, plus ordering
and summary helpers used by the reporters.
"""

from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Dict, Any, Iterable

MULTIPLE_URLS = "Multiple"


class Severity(Enum):
    """Threat severity levels."""
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @property
    def numeric(self) -> int:
        """Get numeric value for comparison."""
        values = {
            "HIGH": 3,
            "MEDIUM": 2,
            "LOW": 1,
        }
        return values[self.value]

    def __lt__(self, other):
        return self.numeric < other.numeric

    def __le__(self, other):
        return self.numeric <= other.numeric

    def __gt__(self, other):
        return self.numeric > other.numeric

    def __ge__(self, other):
        return self.numeric >= other.numeric


class ThreatType(Enum):
    """Kinds of detected threats."""
    SQL_INJECTION = "SQL_INJECTION"
    XSS = "XSS"
    DIRECTORY_TRAVERSAL = "DIRECTORY_TRAVERSAL"
    SUSPICIOUS_BOT = "SUSPICIOUS_BOT"
    AUTH_FAILURE = "AUTH_FAILURE"
    BRUTE_FORCE = "BRUTE_FORCE"
    DDOS_ATTEMPT = "DDOS_ATTEMPT"


@dataclass(frozen=True)
class SecurityThreat:
    """Represents one detected suspicious event."""

    type: ThreatType
    ip: str
    url: str
    timestamp: datetime
    severity: Severity
    description: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert threat to dictionary."""
        return {
            "type": self.type.value,
            "ip": self.ip,
            "url": self.url,
            "timestamp": self.timestamp.isoformat(),
            "severity": self.severity.value,
            "description": self.description,
        }


def sort_threats(threats: Iterable[SecurityThreat]) -> List[SecurityThreat]:
    """
    Order threats for display.

    Highest severity first; within a severity, most recent first.
    The input sequence is left untouched.
    """
    return sorted(
        threats,
        key=lambda t: (t.severity.numeric, t.timestamp),
        reverse=True,
    )


def summarize_threats(threats: Iterable[SecurityThreat]) -> Dict[str, Dict[str, int]]:
    """Count threats by type and by severity."""
    by_type: Counter = Counter()
    by_severity: Counter = Counter()

    for threat in threats:
        by_type[threat.type.value] += 1
        by_severity[threat.severity.value] += 1

    return {
        "by_type": dict(by_type),
        "by_severity": dict(by_severity),
    }


class ThreatFormatter:
    """Formats threats for console display."""

    SEVERITY_COLORS = {
        Severity.HIGH: "\033[91m",    # Red
        Severity.MEDIUM: "\033[93m",  # Yellow
        Severity.LOW: "\033[92m",     # Green
    }
    RESET = "\033[0m"

    @classmethod
    def format_severity(cls, severity: Severity, use_colors: bool = True) -> str:
        if not use_colors:
            return severity.value
        color = cls.SEVERITY_COLORS.get(severity, "")
        return f"{color}{severity.value}{cls.RESET}"

    @classmethod
    def format_console(cls, threat: SecurityThreat, use_colors: bool = True) -> str:
        """Format threat as a single console line."""
        severity_str = f"[{cls.format_severity(threat.severity, use_colors)}]"
        timestamp = threat.timestamp.strftime("%Y-%m-%d %H:%M:%S")
        return f"{timestamp} {severity_str} {threat.ip}: {threat.type.value} {threat.description}"
