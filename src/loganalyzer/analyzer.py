"""
Log Analyzer Module

Main orchestrator for log analysis: a single pass over parsed entries
that builds traffic statistics and runs the threat detectors.
"""

import logging
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Dict, Any, Optional, Tuple

from .parsers import AccessLogParser, LogEntry
from .detectors import (
    CompositeDetector,
    DatasetDetector,
    BruteForceDetector,
    DDoSDetector,
)
from .threats import SecurityThreat, Severity, summarize_threats
from .utils import truncate, is_error_status

logger = logging.getLogger(__name__)

MAX_PAGE_LENGTH = 100
MAX_USER_AGENT_LENGTH = 100


@dataclass(frozen=True)
class TimeRange:
    """Earliest and latest request timestamps."""

    start: datetime
    end: datetime

    @property
    def duration(self):
        return self.end - self.start

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
        }


@dataclass
class Statistics:
    """Complete analysis output for one log file."""

    total_requests: int = 0
    unique_ips: int = 0
    error_rate: float = 0.0
    top_ips: Dict[str, int] = field(default_factory=dict)
    top_pages: Dict[str, int] = field(default_factory=dict)
    top_user_agents: Dict[str, int] = field(default_factory=dict)
    status_codes: Dict[int, int] = field(default_factory=dict)
    method_distribution: Dict[str, int] = field(default_factory=dict)
    security_threats: List[SecurityThreat] = field(default_factory=list)
    bandwidth_usage: int = 0
    average_response_size: float = 0.0
    time_range: Optional[TimeRange] = None
    hourly_distribution: Dict[int, int] = field(default_factory=dict)

    def threat_summary(self) -> Dict[str, Dict[str, int]]:
        return summarize_threats(self.security_threats)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "total_requests": self.total_requests,
            "unique_ips": self.unique_ips,
            "error_rate": self.error_rate,
            "top_ips": self.top_ips,
            "top_pages": self.top_pages,
            "top_user_agents": self.top_user_agents,
            "status_codes": {str(k): v for k, v in self.status_codes.items()},
            "method_distribution": self.method_distribution,
            "security_threats": [t.to_dict() for t in self.security_threats],
            "bandwidth_usage": self.bandwidth_usage,
            "average_response_size": self.average_response_size,
            "time_range": self.time_range.to_dict() if self.time_range else None,
            "hourly_distribution": {str(k): v for k, v in self.hourly_distribution.items()},
        }


def normalize_page(url: str) -> str:
    """Drop the query string and cap the length of a request target."""
    page = url.split('?', 1)[0]
    return truncate(page, MAX_PAGE_LENGTH)


def normalize_user_agent(user_agent: str) -> str:
    return truncate(user_agent, MAX_USER_AGENT_LENGTH)


def get_top_items(items: Dict[Any, int], limit: int) -> List[Tuple[Any, int]]:
    """
    Get the `limit` most frequent items.

    Ties are broken by key so the ordering is stable across runs.
    """
    ranked = sorted(items.items(), key=lambda x: (-x[1], str(x[0])))
    return ranked[:limit]


class LogAnalyzer:
    """
    Statistics aggregator and threat detection orchestrator.

    Example:
        >>> analyzer = LogAnalyzer()
        >>> stats = analyzer.analyze_file("access.log")
        >>> print(f"{stats.total_requests} requests, {len(stats.security_threats)} threats")
    """

    def __init__(
        self,
        parser: AccessLogParser = None,
        detector: CompositeDetector = None,
        dataset_detectors: List[DatasetDetector] = None,
    ):
        self.parser = parser or AccessLogParser()
        self.detector = detector or CompositeDetector()
        if dataset_detectors is None:
            dataset_detectors = [BruteForceDetector(), DDoSDetector()]
        self.dataset_detectors = dataset_detectors

    def analyze(self, entries: List[LogEntry]) -> Statistics:
        """
        Build statistics for a sequence of entries.

        Invalid entries are skipped. Per-request threats are appended in
        entry order, followed by the dataset heuristics' findings.
        """
        stats = Statistics()

        ips: Counter = Counter()
        pages: Counter = Counter()
        user_agents: Counter = Counter()
        status_codes: Counter = Counter()
        methods: Counter = Counter()
        hours: Counter = Counter()
        ip_timestamps: Dict[str, List[datetime]] = defaultdict(list)
        threats: List[SecurityThreat] = []
        error_count = 0
        total_size = 0
        start = end = None

        for entry in entries:
            if not entry.is_valid:
                continue

            stats.total_requests += 1

            if start is None or entry.timestamp < start:
                start = entry.timestamp
            if end is None or entry.timestamp > end:
                end = entry.timestamp

            ips[entry.ip] += 1
            pages[normalize_page(entry.url)] += 1
            user_agents[normalize_user_agent(entry.user_agent)] += 1
            status_codes[entry.status] += 1
            methods[entry.method] += 1
            hours[entry.timestamp.hour] += 1

            if is_error_status(entry.status):
                error_count += 1

            total_size += entry.size

            threats.extend(self.detector.detect(entry))
            ip_timestamps[entry.ip].append(entry.timestamp)

        if stats.total_requests == 0:
            logger.info("No valid entries to analyze")
            return stats

        for detector in self.dataset_detectors:
            threats.extend(detector.detect(ip_timestamps))

        stats.unique_ips = len(ips)
        stats.top_ips = dict(ips)
        stats.top_pages = dict(pages)
        stats.top_user_agents = dict(user_agents)
        stats.status_codes = dict(status_codes)
        stats.method_distribution = dict(methods)
        stats.hourly_distribution = dict(hours)
        stats.security_threats = threats
        stats.bandwidth_usage = total_size
        stats.error_rate = error_count / stats.total_requests * 100
        stats.average_response_size = total_size / stats.total_requests
        stats.time_range = TimeRange(start=start, end=end)

        logger.info(
            f"Analysis complete: {stats.total_requests} requests, "
            f"{stats.unique_ips} unique IPs, {len(threats)} threats"
        )
        return stats

    def analyze_file(self, filepath: str) -> Statistics:
        """Parse a log file and analyze its entries."""
        logger.info(f"Starting analysis of {filepath}")
        entries = self.parser.parse_file(filepath)
        return self.analyze(entries)


# === Health scoring ===

SEVERITY_PENALTIES = {
    Severity.HIGH: 15,
    Severity.MEDIUM: 5,
    Severity.LOW: 1,
}


def calculate_health_score(stats: Statistics) -> int:
    """
    Score the log's overall health from 0 to 100.

    Each threat costs points by severity; an error rate above 10%
    costs its integer percentage.
    """
    score = 100

    for threat in stats.security_threats:
        score -= SEVERITY_PENALTIES.get(threat.severity, 0)

    if stats.error_rate > 10:
        score -= int(stats.error_rate)

    return max(score, 0)


def health_rating(score: int) -> str:
    if score >= 85:
        return "Excellent"
    elif score >= 70:
        return "Good"
    elif score >= 50:
        return "Fair"
    return "Critical"
