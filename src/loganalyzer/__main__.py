"""
Log Analyzer CLI

Command-line interface for web access log analysis and threat detection.
"""

import argparse
import sys
import logging
import time
from pathlib import Path

from . import __version__
from .analyzer import LogAnalyzer, Statistics, calculate_health_score, health_rating
from .parsers import AccessLogParser
from .reporters import ConsoleReporter, JSONReporter, CSVReporter
from .threats import Severity, ThreatFormatter
from .utils import setup_logging, format_bytes

logger = logging.getLogger(__name__)

APP_NAME = "LogAnalyzer"


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog="loganalyzer",
        description="LogAnalyzer - Apache/Nginx access log statistics and threat detection",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  loganalyzer -f access.log
  loganalyzer -f access.log --json output/results.json --csv output/threats.csv
  loganalyzer -f access.log -v --no-color

Detections: SQL injection, XSS, directory traversal, suspicious bots,
auth failures on sensitive pages, brute force, DDoS bursts.
        """
    )

    parser.add_argument(
        '-f', '--file',
        help="Access log file to analyze (Apache/Nginx combined format)"
    )

    parser.add_argument(
        '--json',
        metavar='PATH',
        help="Export full statistics as JSON"
    )

    parser.add_argument(
        '--csv',
        metavar='PATH',
        help="Export security threats as CSV"
    )

    parser.add_argument(
        '--no-color',
        action='store_true',
        help="Disable colored output"
    )

    parser.add_argument(
        '-v', '--verbose',
        action='count',
        default=0,
        help="Show extra details (-v), enable debug logging (-vv)"
    )

    parser.add_argument(
        '--quick',
        action='store_true',
        help="Quick scan (accepted for compatibility, runs the full analysis)"
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f"{APP_NAME} v{__version__}"
    )

    return parser


class Console:
    """Colored stdout writer for the CLI."""

    COLORS = ConsoleReporter.COLORS

    def __init__(self, use_colors: bool = True):
        self.use_colors = use_colors

    def color(self, text: str, color: str) -> str:
        if not self.use_colors:
            return text
        return f"{self.COLORS[color]}{text}{self.COLORS['reset']}"

    def print(self, text: str = "", color: str = None):
        print(self.color(text, color) if color else text)


def print_banner(console: Console):
    console.print()
    console.print("=" * 60, 'cyan')
    console.print(f"  {APP_NAME} v{__version__} - Web Access Log Analyzer", 'cyan')
    console.print("=" * 60, 'cyan')
    console.print()


def print_summary(console: Console, stats: Statistics, verbose: bool):
    """Print the executive summary."""
    console.print()
    console.print("=" * 60, 'cyan')
    console.print("  EXECUTIVE SUMMARY", 'cyan')
    console.print("=" * 60, 'cyan')

    console.print("\nKey figures:")
    console.print(f"  - Total requests: {console.color(str(stats.total_requests), 'blue')}")
    console.print(f"  - Unique IPs: {console.color(str(stats.unique_ips), 'blue')}")
    console.print(f"  - Error rate: {stats.error_rate:.2f}%")
    console.print(f"  - Bandwidth: {console.color(format_bytes(stats.bandwidth_usage), 'blue')}")

    console.print("\nSecurity:")
    threats = stats.security_threats
    if threats:
        summary = stats.threat_summary()
        by_severity = summary["by_severity"]
        console.print(f"  - Total threats: {console.color(str(len(threats)), 'red')}")
        for severity, color in ((Severity.HIGH, 'red'), (Severity.MEDIUM, 'yellow'), (Severity.LOW, 'green')):
            count = by_severity.get(severity.value, 0)
            if count:
                console.print(f"  - {severity.value}: {console.color(str(count), color)}")

        if verbose:
            console.print("\n  Threat details:")
            for threat_type, count in sorted(summary["by_type"].items()):
                console.print(f"    - {threat_type}: {count} occurrences")
            for threat in threats:
                console.print(f"    {ThreatFormatter.format_console(threat, console.use_colors)}")

        console.print("\nRecommendations:")
        if by_severity.get(Severity.HIGH.value):
            console.print("  Immediate action required:", 'red')
            console.print("    - Block malicious IPs")
            console.print("    - Check application integrity")
            console.print("    - Harden input validation")
        if by_severity.get(Severity.MEDIUM.value):
            console.print("  Recommended actions:", 'yellow')
            console.print("    - Monitor suspicious IPs")
            console.print("    - Update filtering rules")
    else:
        console.print("  No security threats detected", 'green')

    score = calculate_health_score(stats)
    if score >= 85:
        score_color = 'green'
    elif score >= 70:
        score_color = 'yellow'
    else:
        score_color = 'red'
    console.print("\nHealth score:")
    console.print(f"  - Overall: {console.color(f'{score}/100 ({health_rating(score)})', score_color)}")

    if not verbose:
        console.print("\nUse --verbose for more details")


def export_results(console: Console, stats: Statistics, args):
    """Run optional exports; failures are reported and do not stop the run."""
    exports = [
        ("JSON", args.json, JSONReporter()),
        ("CSV", args.csv, CSVReporter()),
    ]

    for label, path, reporter in exports:
        if not path:
            continue
        console.print(f"Exporting {label} to {path}...")
        try:
            reporter.export(stats, path)
        except OSError as e:
            logger.warning(f"{label} export to {path} failed: {e}")
            console.print(f"Warning: {label} export failed: {e}", 'yellow')
        else:
            console.print(f"{label} export complete", 'green')


def run_analyze(args) -> int:
    """Run the analysis pipeline."""
    console = Console(use_colors=not args.no_color)
    path = Path(args.file)

    if not path.exists():
        console.print(f"Error: file '{args.file}' not found", 'red')
        return 1
    if path.is_dir():
        console.print(f"Error: '{args.file}' is a directory, not a file", 'red')
        return 1

    print_banner(console)

    if args.verbose:
        console.print(f"File: {args.file}")
        if args.quick:
            console.print("Quick scan mode")

    console.print(f"Starting analysis of: {console.color(args.file, 'cyan')}")
    started = time.perf_counter()

    parser = AccessLogParser()
    analyzer = LogAnalyzer(parser=parser)
    reporter = ConsoleReporter(use_colors=not args.no_color)

    try:
        entries = parser.parse_file(args.file)
    except OSError as e:
        console.print(f"Error while parsing: {e}", 'red')
        return 1
    console.print(f"{len(entries)} entries found", 'green')

    if not entries:
        console.print("No valid log entries found", 'yellow')
        console.print("Check that the file uses the Apache/Nginx combined format")
        return 0

    if args.verbose:
        parsing = parser.get_parsing_stats(entries)
        console.print(
            f"Parsing stats: {parsing['success']} success, "
            f"{parsing['client_error']} client errors, {parsing['server_error']} server errors"
        )

    stats = analyzer.analyze(entries)
    console.print("Analysis complete", 'green')

    if args.verbose:
        console.print(
            f"{len(stats.security_threats)} threats detected, {stats.unique_ips} unique IPs analyzed"
        )

    print(reporter.generate(stats))

    export_results(console, stats, args)

    elapsed = time.perf_counter() - started
    console.print(f"\nAnalysis finished in {console.color(f'{elapsed:.3f}s', 'magenta')}")
    if elapsed > 0:
        console.print(f"Throughput: {len(entries) / elapsed:.0f} lines/second")

    print_summary(console, stats, args.verbose > 0)

    console.print()
    if stats.security_threats:
        console.print("Security threats were detected. See the details above.", 'yellow')
    else:
        console.print("Analysis completed successfully. No threats detected.", 'green')

    return 0


def main(argv=None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    # Setup logging
    log_level = logging.WARNING
    if args.verbose == 1:
        log_level = logging.INFO
    elif args.verbose >= 2:
        log_level = logging.DEBUG

    setup_logging(log_level)

    if not args.file:
        print("Error: a log file is required (-f/--file)\n")
        parser.print_help()
        return 1

    return run_analyze(args)


if __name__ == '__main__':
    sys.exit(main())
