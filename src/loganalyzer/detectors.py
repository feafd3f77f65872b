"""
Threat Detectors Module

Per-request signature detectors and whole-dataset behavioural
heuristics (brute force, DDoS bursts).
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import List, Dict, Optional

from .parsers import LogEntry
from .patterns import (
    ThreatRule,
    SQL_INJECTION,
    XSS,
    DIRECTORY_TRAVERSAL,
    SUSPICIOUS_USER_AGENT,
    AUTH_FAILURE,
)
from .threats import SecurityThreat, Severity, ThreatType, MULTIPLE_URLS
from .utils import truncate

logger = logging.getLogger(__name__)


class BaseDetector(ABC):
    """Abstract base class for per-request detectors."""

    name: str = "base"
    description: str = "Base detector"

    @abstractmethod
    def detect(self, entry: LogEntry) -> Optional[SecurityThreat]:
        """
        Analyze a log entry for threats.

        Args:
            entry: Parsed log entry

        Returns:
            SecurityThreat if the entry matches, None otherwise
        """
        pass

    def detect_batch(self, entries: List[LogEntry]) -> List[SecurityThreat]:
        """Analyze multiple entries, in order."""
        results = []
        for entry in entries:
            threat = self.detect(entry)
            if threat:
                results.append(threat)
        return results


class RuleDetector(BaseDetector):
    """Detector driven by a single ThreatRule."""

    rule: ThreatRule

    def __init__(self, rule: ThreatRule = None):
        if rule is not None:
            self.rule = rule

    def matches(self, entry: LogEntry) -> bool:
        if self.rule.required_status is not None and entry.status != self.rule.required_status:
            return False
        return any(self.rule.match(getattr(entry, f)) for f in self.rule.fields)

    def describe(self, entry: LogEntry) -> str:
        return self.rule.description

    def detect(self, entry: LogEntry) -> Optional[SecurityThreat]:
        if not self.matches(entry):
            return None

        logger.debug(f"{self.rule.name} match from {entry.ip} on line {entry.line_number}")
        return SecurityThreat(
            type=self.rule.threat_type,
            ip=entry.ip,
            url=entry.url,
            timestamp=entry.timestamp,
            severity=self.rule.severity,
            description=self.describe(entry),
        )


class SQLInjectionDetector(RuleDetector):
    """Detects SQL injection attempts in the URL."""

    name = "sqli"
    description = "SQL Injection Detector"
    rule = SQL_INJECTION


class XSSDetector(RuleDetector):
    """Detects Cross-Site Scripting attempts in the URL or user agent."""

    name = "xss"
    description = "XSS Detector"
    rule = XSS


class DirectoryTraversalDetector(RuleDetector):
    """Detects directory traversal / LFI attempts."""

    name = "traversal"
    description = "Directory Traversal Detector"
    rule = DIRECTORY_TRAVERSAL


class SuspiciousBotDetector(RuleDetector):
    """Detects scanners and hostile bots by user agent."""

    name = "bot"
    description = "Suspicious Bot Detector"
    rule = SUSPICIOUS_USER_AGENT

    def describe(self, entry: LogEntry) -> str:
        return f"{self.rule.description}: {truncate(entry.user_agent, 50)}"


class AuthFailureDetector(RuleDetector):
    """Detects 401 responses on authentication-related pages."""

    name = "auth"
    description = "Auth Failure Detector"
    rule = AUTH_FAILURE


class CompositeDetector:
    """Runs several per-request detectors and collects every hit."""

    name = "composite"
    description = "Composite Detector"

    def __init__(self, detectors: List[BaseDetector] = None):
        """
        Initialize with list of detectors.

        Args:
            detectors: Detector instances, evaluated in list order
        """
        if detectors is None:
            detectors = [
                SQLInjectionDetector(),
                XSSDetector(),
                DirectoryTraversalDetector(),
                SuspiciousBotDetector(),
                AuthFailureDetector(),
            ]

        self.detectors = detectors

    def detect(self, entry: LogEntry) -> List[SecurityThreat]:
        """Run all detectors against one entry."""
        threats = []
        for detector in self.detectors:
            threat = detector.detect(entry)
            if threat:
                threats.append(threat)
        return threats


# === Dataset heuristics ===

class DatasetDetector(ABC):
    """Detectors that look at the full per-IP request timeline."""

    name: str = "dataset"

    @abstractmethod
    def detect(self, ip_timestamps: Dict[str, List[datetime]]) -> List[SecurityThreat]:
        """
        Analyze request timestamps grouped by client IP.

        Args:
            ip_timestamps: Mapping of IP to its request timestamps

        Returns:
            Detected threats, at most one per IP
        """
        pass


class BruteForceDetector(DatasetDetector):
    """
    Detects high request rates from a single IP.

    Slides a time window over each IP's sorted timestamps and flags the
    first window holding at least `threshold` requests.
    """

    name = "bruteforce"

    def __init__(
        self,
        min_requests: int = 10,
        threshold: int = 50,
        window_seconds: int = 3600,
    ):
        """
        Initialize brute force detector.

        Args:
            min_requests: IPs with fewer requests are skipped
            threshold: Requests inside one window needed to alert
            window_seconds: Window length in seconds
        """
        self.min_requests = min_requests
        self.threshold = threshold
        self.window = timedelta(seconds=window_seconds)

    def _first_burst(self, timestamps: List[datetime]) -> Optional[tuple]:
        """Return (window_start, count) of the first qualifying window."""
        end = 0
        for start, window_start in enumerate(timestamps):
            window_end = window_start + self.window
            end = max(end, start)
            while end < len(timestamps) and timestamps[end] < window_end:
                end += 1

            count = end - start
            if count >= self.threshold:
                return window_start, count

        return None

    def detect(self, ip_timestamps: Dict[str, List[datetime]]) -> List[SecurityThreat]:
        threats = []

        for ip, timestamps in ip_timestamps.items():
            if len(timestamps) < self.min_requests:
                continue

            burst = self._first_burst(sorted(timestamps))
            if burst is None:
                continue

            window_start, count = burst
            logger.info(f"Brute force pattern from {ip}: {count} requests in {self.window}")
            threats.append(SecurityThreat(
                type=ThreatType.BRUTE_FORCE,
                ip=ip,
                url=MULTIPLE_URLS,
                timestamp=window_start,
                severity=Severity.HIGH,
                description=f"Possible brute force attack: {count} requests in {self.window}",
            ))

        return threats


class DDoSDetector(DatasetDetector):
    """Detects very large request volumes packed into a short span."""

    name = "ddos"

    def __init__(self, min_requests: int = 1000, max_span_seconds: int = 600):
        """
        Initialize DDoS detector.

        Args:
            min_requests: IPs need strictly more requests than this
            max_span_seconds: Alert when first-to-last span is shorter
        """
        self.min_requests = min_requests
        self.max_span = timedelta(seconds=max_span_seconds)

    def detect(self, ip_timestamps: Dict[str, List[datetime]]) -> List[SecurityThreat]:
        threats = []

        for ip, timestamps in ip_timestamps.items():
            if len(timestamps) <= self.min_requests:
                continue

            first, last = min(timestamps), max(timestamps)
            span = last - first
            if span >= self.max_span:
                continue

            logger.info(f"Traffic burst from {ip}: {len(timestamps)} requests in {span}")
            threats.append(SecurityThreat(
                type=ThreatType.DDOS_ATTEMPT,
                ip=ip,
                url=MULTIPLE_URLS,
                timestamp=first,
                severity=Severity.HIGH,
                description=f"Potential DDoS attempt: {len(timestamps)} requests in {span}",
            ))

        return threats
