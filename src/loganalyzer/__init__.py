"""
LogAnalyzer

Parses Apache/Nginx access logs, computes traffic statistics and
flags suspicious requests and behaviour.
"""

__version__ = "1.0.0"
__license__ = "MIT"

from .parsers import (
    AccessLogParser,
    LogEntry,
    LogParseError,
    MalformedLineError,
    InvalidStatusError,
    LogFileReadError,
)
from .threats import SecurityThreat, Severity, ThreatType
from .detectors import (
    BaseDetector,
    SQLInjectionDetector,
    XSSDetector,
    DirectoryTraversalDetector,
    SuspiciousBotDetector,
    AuthFailureDetector,
    CompositeDetector,
    BruteForceDetector,
    DDoSDetector,
)
from .analyzer import LogAnalyzer, Statistics, TimeRange, get_top_items
from .reporters import Reporter, ConsoleReporter, JSONReporter, CSVReporter

__all__ = [
    # Parsing
    "AccessLogParser",
    "LogEntry",
    "LogParseError",
    "MalformedLineError",
    "InvalidStatusError",
    "LogFileReadError",
    # Threats
    "SecurityThreat",
    "Severity",
    "ThreatType",
    # Detectors
    "BaseDetector",
    "SQLInjectionDetector",
    "XSSDetector",
    "DirectoryTraversalDetector",
    "SuspiciousBotDetector",
    "AuthFailureDetector",
    "CompositeDetector",
    "BruteForceDetector",
    "DDoSDetector",
    # Core
    "LogAnalyzer",
    "Statistics",
    "TimeRange",
    "get_top_items",
    # Reporters
    "Reporter",
    "ConsoleReporter",
    "JSONReporter",
    "CSVReporter",
]
