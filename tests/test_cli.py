"""
Tests for the command-line interface
"""

import json
import pytest

from loganalyzer import __version__
from loganalyzer.__main__ import main, create_parser


LINES = [
    '10.0.0.1 - - [13/Sep/2025:21:00:01 +0200] "GET /index.html HTTP/1.1" 200 512 "-" "Mozilla/5.0"',
    '10.0.0.2 - - [13/Sep/2025:21:05:00 +0200] "GET /search?q=<script>alert(1)</script> HTTP/1.1" 200 128 "-" "Mozilla/5.0"',
    '10.0.0.3 - - [13/Sep/2025:21:10:00 +0200] "POST /wp-login.php HTTP/1.1" 401 64 "-" "Nikto/2.1.6"',
    'not a log line',
]


@pytest.fixture
def log_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = tmp_path / "access.log"
    path.write_text("\n".join(LINES) + "\n")
    return path


class TestArguments:
    """Tests for argument handling."""

    def test_defaults(self):
        args = create_parser().parse_args(["-f", "access.log"])

        assert args.file == "access.log"
        assert args.json is None
        assert args.csv is None
        assert args.no_color is False
        assert args.verbose == 0
        assert args.quick is False

    def test_verbose_count(self):
        args = create_parser().parse_args(["-f", "a.log", "-vv"])

        assert args.verbose == 2

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_help(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["-h"])

        assert exc_info.value.code == 0
        assert "--json" in capsys.readouterr().out

    def test_no_file(self, capsys):
        assert main([]) == 1

        assert "a log file is required" in capsys.readouterr().out


class TestRun:
    """Tests for a full CLI run."""

    def test_success(self, log_file, capsys):
        assert main(["-f", str(log_file), "--no-color"]) == 0

        out = capsys.readouterr().out
        assert "3 entries found" in out
        assert "WEB ACCESS LOG ANALYSIS" in out
        assert "SECURITY ALERTS" in out
        assert "EXECUTIVE SUMMARY" in out
        assert "Health score" in out
        assert "\033[" not in out

    def test_verbose_details(self, log_file, capsys):
        assert main(["-f", str(log_file), "--no-color", "-v"]) == 0

        out = capsys.readouterr().out
        assert "Threat details:" in out
        assert "XSS" in out
        assert "Use --verbose" not in out

    def test_quick_accepted(self, log_file, capsys):
        assert main(["-f", str(log_file), "--no-color", "--quick"]) == 0

        assert "WEB ACCESS LOG ANALYSIS" in capsys.readouterr().out

    def test_missing_file(self, tmp_path, capsys):
        assert main(["-f", str(tmp_path / "missing.log")]) == 1

        assert "not found" in capsys.readouterr().out

    def test_directory(self, tmp_path, capsys):
        assert main(["-f", str(tmp_path), "--no-color"]) == 1

        assert "is a directory" in capsys.readouterr().out

    def test_empty_file(self, tmp_path, capsys):
        path = tmp_path / "empty.log"
        path.write_text("")

        assert main(["-f", str(path), "--no-color"]) == 0

        out = capsys.readouterr().out
        assert "No valid log entries found" in out
        assert "WEB ACCESS LOG ANALYSIS" not in out

    def test_no_threats(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        path = tmp_path / "clean.log"
        path.write_text(LINES[0] + "\n")

        assert main(["-f", str(path), "--no-color"]) == 0

        assert "No threats detected" in capsys.readouterr().out


class TestExports:
    """Tests for --json and --csv."""

    def test_json_and_csv(self, log_file, tmp_path, capsys):
        assert main([
            "-f", str(log_file), "--no-color",
            "--json", "output/results.json",
            "--csv", "output/threats.csv",
        ]) == 0

        data = json.loads((tmp_path / "output" / "results.json").read_text(encoding="utf-8"))
        assert data["total_requests"] == 3
        types = {t["type"] for t in data["security_threats"]}
        assert {"XSS", "SUSPICIOUS_BOT", "AUTH_FAILURE"} <= types

        csv_lines = (tmp_path / "output" / "threats.csv").read_text(encoding="utf-8").splitlines()
        assert csv_lines[0] == "Type,IP,URL,Timestamp,Severity,Description"
        assert len(csv_lines) == 1 + len(data["security_threats"])

        out = capsys.readouterr().out
        assert "JSON export complete" in out
        assert "CSV export complete" in out

    def test_export_failure_is_a_warning(self, log_file, tmp_path, capsys):
        blocker = tmp_path / "blocker"
        blocker.write_text("")

        code = main(["-f", str(log_file), "--no-color", "--json", str(blocker / "results.json")])

        assert code == 0
        assert "Warning: JSON export failed" in capsys.readouterr().out


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
