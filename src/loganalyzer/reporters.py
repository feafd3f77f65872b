"""
Reporters Module

Renders analysis statistics to the console and exports them as
JSON or CSV.
"""

import json
import csv
import io
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Sequence

from .analyzer import Statistics, get_top_items
from .threats import Severity, ThreatFormatter, sort_threats
from .utils import format_bytes, get_status_description, status_class, truncate

logger = logging.getLogger(__name__)

OUTPUT_DIR = "output"

CSV_HEADER = ["Type", "IP", "URL", "Timestamp", "Severity", "Description"]
CSV_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class Reporter(ABC):
    """Abstract base class for reporters."""

    @abstractmethod
    def generate(self, stats: Statistics) -> str:
        """Generate report content."""
        pass

    def save(self, stats: Statistics, filepath: str):
        """Save report to file."""
        content = self.generate(stats)
        Path(filepath).write_text(content, encoding='utf-8')
        logger.info(f"Report saved to {filepath}")


class ExportReporter(Reporter):
    """Reporter that writes files next to an `output` directory."""

    def export(self, stats: Statistics, filepath: str):
        """
        Export statistics to a file.

        Creates the `output` directory in the working directory and the
        target's parent directory if they are missing.

        Raises:
            OSError: directory or file could not be written
        """
        Path(OUTPUT_DIR).mkdir(parents=True, exist_ok=True)
        Path(filepath).parent.mkdir(parents=True, exist_ok=True)
        self.save(stats, filepath)


class JSONReporter(ExportReporter):
    """Serializes the full Statistics value."""

    def generate(self, stats: Statistics) -> str:
        return json.dumps(stats.to_dict(), indent=2, default=str)


class CSVReporter(ExportReporter):
    """Writes one CSV row per detected threat."""

    def generate(self, stats: Statistics) -> str:
        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow(CSV_HEADER)

        for threat in stats.security_threats:
            try:
                writer.writerow([
                    threat.type.value,
                    threat.ip,
                    threat.url,
                    threat.timestamp.strftime(CSV_TIMESTAMP_FORMAT),
                    threat.severity.value,
                    threat.description,
                ])
            except csv.Error as e:
                logger.warning(f"Skipping CSV row for {threat.ip}: {e}")

        return output.getvalue()


class ConsoleReporter(Reporter):
    """Generates console-friendly tables."""

    COLORS = {
        'red': '\033[91m',
        'green': '\033[92m',
        'yellow': '\033[93m',
        'blue': '\033[94m',
        'magenta': '\033[95m',
        'cyan': '\033[96m',
        'reset': '\033[0m',
        'bold': '\033[1m',
    }

    METHOD_ORDER = ["GET", "POST", "PUT", "DELETE", "HEAD", "OPTIONS", "PATCH"]

    STATUS_LABELS = {
        'success': "Success",
        'redirect': "Redirect",
        'client_error': "Client Error",
        'server_error': "Server Error",
    }

    def __init__(self, use_colors: bool = True):
        self.use_colors = use_colors

    def _color(self, text: str, color: str) -> str:
        if not self.use_colors:
            return text
        return f"{self.COLORS.get(color, '')}{text}{self.COLORS['reset']}"

    def _header(self, title: str) -> List[str]:
        border = "=" * (len(title) + 4)
        return [
            "",
            self._color(border, 'magenta'),
            self._color(f"| {title} |", 'magenta'),
            self._color(border, 'magenta'),
        ]

    def _section(self, title: str) -> List[str]:
        return [
            "",
            self._color(f"> {title}", 'yellow'),
            self._color("-" * (len(title) + 2), 'yellow'),
        ]

    @staticmethod
    def _table(headers: Sequence[str], rows: List[Sequence[str]]) -> List[str]:
        """Render rows as a pipe-separated text table."""
        widths = [len(h) for h in headers]
        for row in rows:
            for i, cell in enumerate(row):
                widths[i] = max(widths[i], len(cell))

        def fmt(cells):
            return "| " + " | ".join(c.ljust(w) for c, w in zip(cells, widths)) + " |"

        separator = "|" + "|".join("-" * (w + 2) for w in widths) + "|"
        return [fmt(headers), separator] + [fmt(row) for row in rows]

    def _error_rate(self, rate: float) -> str:
        text = f"{rate:.2f}%"
        if rate < 5.0:
            return self._color(text, 'green')
        elif rate < 15.0:
            return self._color(text, 'yellow')
        return self._color(text, 'red')

    def render_general(self, stats: Statistics) -> List[str]:
        lines = self._section("General Statistics")
        lines.append(f"Total requests: {self._color(str(stats.total_requests), 'cyan')}")
        lines.append(f"Unique IPs: {self._color(str(stats.unique_ips), 'green')}")
        lines.append(f"Error rate: {self._error_rate(stats.error_rate)}")
        lines.append(f"Total bandwidth: {self._color(format_bytes(stats.bandwidth_usage), 'blue')}")
        lines.append(
            f"Average response size: {self._color(format_bytes(stats.average_response_size), 'blue')}"
        )

        if stats.time_range:
            start = stats.time_range.start.strftime("%Y-%m-%d %H:%M:%S")
            end = stats.time_range.end.strftime("%Y-%m-%d %H:%M:%S")
            lines.append(
                f"Period: {self._color(start, 'magenta')} to {self._color(end, 'magenta')} "
                f"({self._color(str(stats.time_range.duration), 'magenta')})"
            )

        return lines

    def render_methods(self, methods) -> List[str]:
        total = sum(methods.values())
        ordered = [m for m in self.METHOD_ORDER if m in methods]
        ordered += sorted(m for m in methods if m not in self.METHOD_ORDER)

        rows = [
            [method, str(methods[method]), f"{methods[method] / total * 100:.1f}%"]
            for method in ordered
        ]
        return self._table(["Method", "Requests", "Percentage"], rows)

    def render_top_items(self, items, limit: int, item_label: str, count_label: str) -> List[str]:
        if not items:
            return ["No data available"]

        total = sum(items.values())
        rows = []
        for rank, (item, count) in enumerate(get_top_items(items, limit), 1):
            rows.append([
                str(rank),
                truncate(str(item), 50),
                str(count),
                f"{count / total * 100:.1f}%",
            ])

        return self._table(["Rank", item_label, count_label, "Percentage"], rows)

    def render_user_agents(self, user_agents, limit: int) -> List[str]:
        if not user_agents:
            return ["No data available"]

        rows = [
            [str(rank), truncate(ua, 60), str(count)]
            for rank, (ua, count) in enumerate(get_top_items(user_agents, limit), 1)
        ]
        return self._table(["Rank", "User Agent", "Requests"], rows)

    def render_status_codes(self, status_codes) -> List[str]:
        rows = []
        for code in sorted(status_codes):
            label = self.STATUS_LABELS.get(status_class(code), "Informational")
            rows.append([
                str(code),
                get_status_description(code),
                str(status_codes[code]),
                label,
            ])
        return self._table(["Code", "Description", "Count", "Status"], rows)

    def render_hourly(self, hourly) -> List[str]:
        max_requests = max(hourly.values(), default=0)
        rows = []

        for hour in range(24):
            count = hourly.get(hour, 0)
            bar_length = count * 20 // max_requests if max_requests else 0
            bar = "█" * bar_length
            if bar_length == 0 and count > 0:
                bar = "▌"
            rows.append([f"{hour:02d}:00", str(count), bar])

        return self._table(["Hour", "Requests", "Graph"], rows)

    def render_threats(self, threats) -> List[str]:
        ordered = sort_threats(threats)
        rows = []
        for threat in ordered:
            rows.append([
                threat.type.value,
                threat.ip,
                threat.severity.value,
                truncate(threat.url, 40),
                threat.timestamp.strftime("%H:%M:%S"),
                truncate(threat.description, 50),
            ])

        table = self._table(["Type", "IP", "Severity", "URL", "Time", "Description"], rows)
        if self.use_colors:
            # Color the data rows by severity, header and separator stay plain
            colors = {Severity.HIGH: 'red', Severity.MEDIUM: 'yellow', Severity.LOW: 'green'}
            table = table[:2] + [
                self._color(line, colors[t.severity]) for line, t in zip(table[2:], ordered)
            ]
        return table

    def render_threat_summary(self, stats: Statistics) -> List[str]:
        summary = stats.threat_summary()
        by_severity = summary["by_severity"]
        total = len(stats.security_threats)

        lines = ["", self._color("Threat summary:", 'yellow')]
        lines.append(f"  Total: {self._color(str(total), 'red')} threats detected")
        for severity in Severity:
            count = by_severity.get(severity.value, 0)
            if count:
                lines.append(f"  {ThreatFormatter.format_severity(severity, self.use_colors)}: {count}")

        lines.append("")
        lines.append("  Detected types:")
        for threat_type, count in sorted(summary["by_type"].items()):
            lines.append(f"    - {threat_type}: {count}")

        return lines

    def generate(self, stats: Statistics) -> str:
        lines = self._header("WEB ACCESS LOG ANALYSIS")

        lines += self.render_general(stats)

        if stats.method_distribution:
            lines += self._section("HTTP Methods")
            lines += self.render_methods(stats.method_distribution)

        lines += self._section("Top 10 IPs")
        lines += self.render_top_items(stats.top_ips, 10, "IP", "Requests")

        lines += self._section("Top 10 Pages")
        lines += self.render_top_items(stats.top_pages, 10, "Page", "Hits")

        lines += self._section("Top 5 User Agents")
        lines += self.render_user_agents(stats.top_user_agents, 5)

        lines += self._section("Status Codes")
        lines += self.render_status_codes(stats.status_codes)

        if stats.hourly_distribution:
            lines += self._section("Hourly Distribution")
            lines += self.render_hourly(stats.hourly_distribution)

        if stats.security_threats:
            lines += self._section("SECURITY ALERTS")
            lines += self.render_threats(stats.security_threats)
            lines += self.render_threat_summary(stats)
        else:
            lines += self._section("Security")
            lines.append(self._color("No threats detected", 'green'))

        lines.append("")
        return "\n".join(lines)
