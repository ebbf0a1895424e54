"""
Command line interface for Flowspace.

Usage:
    flowspace analyze board.json
    flowspace analyze board.json --strict --summary
    python -m flowspace analyze board.json --output report.json
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from .shared import FlowspaceError, setup_logging
from .services.board_analysis import BoardAnalysisService
from .services.board_analysis.models import AnalysisReport


def _load_snapshot(path: str):
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def format_summary(report: AnalysisReport) -> str:
    """Short human-readable report summary."""
    summary = report.summary
    lines = [
        f"Health score: {summary.health_score}/100",
        f"Issues: {summary.total_issues} "
        f"(critical {summary.critical_issues}, high {summary.high_severity}, "
        f"medium {summary.medium_severity}, low {summary.low_severity})",
        f"Patches: {summary.patches_available} ({summary.auto_applicable_patches} auto-applicable)",
        f"Clusters: {len(report.clusters)}, topics: {len(report.topics)}, "
        f"hierarchies: {len(report.hierarchies)}, chains: {len(report.dependencies.chains)}",
    ]
    for diagnostic_type, diagnostics in report.diagnostic_groups.items():
        lines.append(f"  {diagnostic_type}: {len(diagnostics)}")
    return "\n".join(lines)


def analyze_command(args) -> int:
    """Analyze a board snapshot file heuristics-only."""
    try:
        snapshot = _load_snapshot(args.board)
    except (OSError, json.JSONDecodeError) as e:
        print(f"❌ Could not read board file {args.board}: {e}", file=sys.stderr)
        return 1

    options = {
        "strict_mode": args.strict,
        "check_terminology": not args.no_terminology,
        "suggest_fixes": not args.no_fixes,
        "use_enrichment": False,
    }

    try:
        report = BoardAnalysisService().analyze(snapshot, options)
    except FlowspaceError as e:
        print(f"❌ Analysis failed: {e}", file=sys.stderr)
        return 1

    if args.summary:
        output = format_summary(report)
    else:
        output = json.dumps(report.to_dict(), indent=2)

    if args.output:
        Path(args.output).write_text(output + "\n", encoding="utf-8")
        print(f"✅ Report written to {args.output}", file=sys.stderr)
    else:
        print(output)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='flowspace',
        description='Flowspace: semantic graph analysis and validation for whiteboards'
    )
    parser.add_argument('--log-level', default=None,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        help='Logging level (defaults to FLOWSPACE_LOG_LEVEL)')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    analyze_parser = subparsers.add_parser('analyze', help='Analyze a board snapshot JSON file')
    analyze_parser.add_argument('board', help='Path to board snapshot JSON')
    analyze_parser.add_argument('--strict', action='store_true', help='Escalate circular-logic severity')
    analyze_parser.add_argument('--no-terminology', action='store_true', help='Skip the terminology check')
    analyze_parser.add_argument('--no-fixes', action='store_true', help='Skip patch generation')
    analyze_parser.add_argument('--output', '-o', help='Write the report to a file')
    analyze_parser.add_argument('--summary', action='store_true', help='Print a short summary instead of JSON')
    analyze_parser.set_defaults(func=analyze_command)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if args.log_level:
        setup_logging(args.log_level)

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\n⚠️ Operation cancelled by user", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
