"""
Unit Tests for Reporters
"""

import csv
import io
import json
import pytest
from datetime import datetime, timedelta, timezone

from loganalyzer.analyzer import Statistics, TimeRange
from loganalyzer.reporters import (
    ConsoleReporter, JSONReporter, CSVReporter, CSV_HEADER, OUTPUT_DIR,
)
from loganalyzer.threats import SecurityThreat, Severity, ThreatType, MULTIPLE_URLS


BASE_TIME = datetime(2025, 9, 13, 21, 0, 0, tzinfo=timezone.utc)


def make_threat(threat_type=ThreatType.SQL_INJECTION, severity=Severity.HIGH, ip="10.0.0.1",
                url="/login.php?id=1 UNION SELECT 1", timestamp=None, description="SQL injection attempt"):
    """Helper to create test threats."""
    return SecurityThreat(
        type=threat_type,
        ip=ip,
        url=url,
        timestamp=timestamp or BASE_TIME,
        severity=severity,
        description=description,
    )


@pytest.fixture
def stats():
    return Statistics(
        total_requests=4,
        unique_ips=2,
        error_rate=25.0,
        top_ips={"10.0.0.1": 3, "10.0.0.2": 1},
        top_pages={"/index.html": 3, "/login.php": 1},
        top_user_agents={"Mozilla/5.0": 3, "sqlmap/1.5": 1},
        status_codes={200: 3, 404: 1},
        method_distribution={"GET": 3, "POST": 1},
        security_threats=[
            make_threat(severity=Severity.LOW, threat_type=ThreatType.AUTH_FAILURE,
                        timestamp=BASE_TIME + timedelta(minutes=10), description="auth"),
            make_threat(severity=Severity.HIGH, timestamp=BASE_TIME, description="older high"),
            make_threat(severity=Severity.HIGH, threat_type=ThreatType.BRUTE_FORCE, url=MULTIPLE_URLS,
                        timestamp=BASE_TIME + timedelta(minutes=5), description="newer high"),
            make_threat(severity=Severity.MEDIUM, threat_type=ThreatType.SUSPICIOUS_BOT,
                        timestamp=BASE_TIME + timedelta(minutes=1), description="bot"),
        ],
        bandwidth_usage=1800,
        average_response_size=450.0,
        time_range=TimeRange(start=BASE_TIME, end=BASE_TIME + timedelta(hours=2)),
        hourly_distribution={21: 3, 23: 1},
    )


class TestJSONReporter:
    """Tests for JSON export."""

    def test_generate(self, stats):
        data = json.loads(JSONReporter().generate(stats))

        assert data["total_requests"] == 4
        assert data["top_ips"] == {"10.0.0.1": 3, "10.0.0.2": 1}
        assert data["hourly_distribution"] == {"21": 3, "23": 1}
        assert data["time_range"]["start"] == "2025-09-13T21:00:00+00:00"
        assert len(data["security_threats"]) == 4
        assert data["security_threats"][0]["severity"] == "LOW"

    def test_export_creates_output_dir(self, stats, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        JSONReporter().export(stats, "output/results.json")

        assert (tmp_path / OUTPUT_DIR).is_dir()
        data = json.loads((tmp_path / "output" / "results.json").read_text(encoding="utf-8"))
        assert data["unique_ips"] == 2

    def test_export_creates_parent(self, stats, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        target = tmp_path / "reports" / "daily" / "stats.json"

        JSONReporter().export(stats, str(target))

        assert target.exists()
        assert (tmp_path / OUTPUT_DIR).is_dir()

    def test_export_failure_raises(self, stats, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")

        with pytest.raises(OSError):
            JSONReporter().export(stats, str(blocker / "results.json"))


class TestCSVReporter:
    """Tests for CSV threat export."""

    def test_header_and_rows(self, stats):
        rows = list(csv.reader(io.StringIO(CSVReporter().generate(stats))))

        assert rows[0] == CSV_HEADER
        assert len(rows) == 5
        assert rows[1] == ["AUTH_FAILURE", "10.0.0.1", "/login.php?id=1 UNION SELECT 1",
                           "2025-09-13 21:10:00", "LOW", "auth"]

    def test_empty_threats(self):
        rows = list(csv.reader(io.StringIO(CSVReporter().generate(Statistics()))))

        assert rows == [CSV_HEADER]

    def test_quoting(self):
        stats = Statistics(security_threats=[make_threat(url='/a,"b"', description="x, y")])

        rows = list(csv.reader(io.StringIO(CSVReporter().generate(stats))))

        assert rows[1][2] == '/a,"b"'
        assert rows[1][5] == "x, y"

    def test_export(self, stats, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        CSVReporter().export(stats, "output/threats.csv")

        content = (tmp_path / "output" / "threats.csv").read_text(encoding="utf-8")
        assert content.startswith("Type,IP,URL,Timestamp,Severity,Description")


class TestConsoleReporter:
    """Tests for the console report."""

    def test_sections(self, stats):
        report = ConsoleReporter(use_colors=False).generate(stats)

        for title in ("WEB ACCESS LOG ANALYSIS", "General Statistics", "HTTP Methods", "Top 10 IPs",
                      "Top 10 Pages", "Top 5 User Agents", "Status Codes", "Hourly Distribution",
                      "SECURITY ALERTS"):
            assert title in report

    def test_no_ansi_codes_without_colors(self, stats):
        report = ConsoleReporter(use_colors=False).generate(stats)

        assert "\033[" not in report

    def test_colors_enabled(self, stats):
        report = ConsoleReporter(use_colors=True).generate(stats)

        assert "\033[91m" in report

    def test_general_statistics(self, stats):
        report = ConsoleReporter(use_colors=False).generate(stats)

        assert "Total requests: 4" in report
        assert "Unique IPs: 2" in report
        assert "Error rate: 25.00%" in report
        assert "Total bandwidth: 1.8 KB" in report
        assert "Period: 2025-09-13 21:00:00 to 2025-09-13 23:00:00 (2:00:00)" in report

    def test_status_descriptions(self, stats):
        report = ConsoleReporter(use_colors=False).generate(stats)

        assert "Not Found" in report
        assert "Client Error" in report

    def test_hourly_has_24_rows(self, stats):
        lines = ConsoleReporter(use_colors=False).render_hourly(stats.hourly_distribution)

        # Header and separator, then one row per hour
        assert len(lines) == 26
        assert lines[2].startswith("| 00:00")
        assert lines[-1].startswith("| 23:00")
        assert "█" * 20 in lines[2 + 21]

    def test_hourly_small_count_marker(self):
        lines = ConsoleReporter(use_colors=False).render_hourly({0: 100, 1: 1})

        assert "▌" in lines[3]

    def test_threats_sorted_by_severity_then_recency(self, stats):
        lines = ConsoleReporter(use_colors=False).render_threats(stats.security_threats)
        rows = lines[2:]

        assert "newer high" in rows[0]
        assert "older high" in rows[1]
        assert "bot" in rows[2]
        assert "auth" in rows[3]

    def test_threat_order_in_stats_untouched(self, stats):
        ConsoleReporter(use_colors=False).generate(stats)

        assert stats.security_threats[0].description == "auth"

    def test_threat_summary(self, stats):
        report = ConsoleReporter(use_colors=False).generate(stats)

        assert "Total: 4 threats detected" in report
        assert "HIGH: 2" in report
        assert "- BRUTE_FORCE: 1" in report

    def test_no_threats(self):
        stats = Statistics(total_requests=1, unique_ips=1, top_ips={"10.0.0.1": 1})

        report = ConsoleReporter(use_colors=False).generate(stats)

        assert "No threats detected" in report
        assert "SECURITY ALERTS" not in report

    def test_empty_statistics(self):
        report = ConsoleReporter(use_colors=False).generate(Statistics())

        assert "No data available" in report
        assert "Hourly Distribution" not in report

    def test_method_order(self):
        lines = ConsoleReporter(use_colors=False).render_methods({"PATCH": 1, "GET": 2, "BREW": 1})
        methods = [line.split("|")[1].strip() for line in lines[2:]]

        assert methods == ["GET", "PATCH", "BREW"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
