"""Command line interface for budget plan spreadsheets."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Iterable, Optional

import pandas as pd
from tabulate import tabulate

from .config import AppConfig, load_config
from .formatting import format_inr, format_lakhs
from .insights import create_insights_provider, generate_insights
from .io import ExportContext, ImportParseError, default_export_filename, read_plan, write_plan
from .models import BudgetPlan
from .reporting import DashboardSummary, build_dashboard, export_dashboard

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Summarise and convert budget plan spreadsheets")
    parser.add_argument("--config", type=Path, help="Path to YAML configuration")
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, WARNING)")
    parser.add_argument("--quiet", action="store_true", help="Suppress console output")
    subparsers = parser.add_subparsers(dest="command", required=True)

    report = subparsers.add_parser("report", help="Write dashboard totals for a budget sheet")
    report.add_argument("input", type=Path, help="Budget sheet (XLSX or CSV)")
    report.add_argument("--output-dir", type=Path, help="Directory for generated reports")
    report.add_argument("--top-n", type=int, help="Number of strategies and ledgers to rank")

    convert = subparsers.add_parser("convert", help="Rewrite a budget sheet with the standard headers")
    convert.add_argument("input", type=Path, help="Budget sheet (XLSX or CSV)")
    convert.add_argument(
        "output",
        type=Path,
        nargs="?",
        help="Target file (.xlsx or .csv); defaults to Budget_Report_<code>_<name>.xlsx",
    )
    convert.add_argument("--school-name", help="Override the school / function name")
    convert.add_argument("--school-code", help="Override the school code")
    convert.add_argument("--submitted-by", help="Override the submitter")
    convert.add_argument("--timestamp", help="Submission timestamp written on every row")

    insights = subparsers.add_parser("insights", help="Print a narrative review of the budget")
    insights.add_argument("input", type=Path, help="Budget sheet (XLSX or CSV)")
    insights.add_argument("--provider", help="Insights provider (offline, gemini)")
    return parser


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

    try:
        config = load_config(args.config)
    except Exception as exc:  # pragma: no cover - CLI validation
        logger.error("Failed to load configuration: %s", exc)
        return 1

    try:
        plan = read_plan(args.input)
    except ImportParseError as exc:
        logger.error("Import failed: %s", exc)
        return 1

    handlers = {"report": _run_report, "convert": _run_convert, "insights": _run_insights}
    try:
        return handlers[args.command](plan, config, args)
    except Exception as exc:
        logger.exception("Command '%s' failed: %s", args.command, exc)
        return 1


def _run_report(plan: BudgetPlan, config: AppConfig, args: argparse.Namespace) -> int:
    if args.output_dir:
        config.output.directory = _resolve_override_path(args.output_dir)
    top_n = args.top_n if args.top_n is not None else config.dashboard.top_n

    summary = build_dashboard(plan, top_n=top_n)
    export_dashboard(summary, config.output)
    if not args.quiet:
        _print_summary(summary)
    return 0


def _run_convert(plan: BudgetPlan, config: AppConfig, args: argparse.Namespace) -> int:
    context = ExportContext(
        school_name=_first_text(args.school_name, plan.school_name, config.school.name),
        school_code=_first_text(args.school_code, plan.school_code, config.school.code),
        submitted_by=_first_text(args.submitted_by, plan.submitted_by, config.school.submitted_by),
        timestamp=args.timestamp,
    )
    output = args.output or Path(default_export_filename(context.school_code, context.school_name))
    path = write_plan(_resolve_override_path(output), plan, context)
    if not args.quiet:
        print(f"Wrote {path}")
    return 0


def _run_insights(plan: BudgetPlan, config: AppConfig, args: argparse.Namespace) -> int:
    provider = create_insights_provider(args.provider, config.insights)
    text = generate_insights(plan, provider)
    if not text:
        logger.warning("Budget sheet has no goals; nothing to review")
        return 0
    if not args.quiet:
        print(text)
    return 0


def _first_text(*candidates: Optional[object]) -> str:
    for candidate in candidates:
        if candidate is not None and str(candidate) != "":
            return str(candidate)
    return ""


def _resolve_override_path(path: Path) -> Path:
    path = Path(path).expanduser()
    if path.is_absolute():
        return path
    return (Path.cwd() / path).resolve()


def _print_summary(summary: DashboardSummary) -> None:
    if summary.metadata.get("line_item_count", 0) == 0:
        print("No line items in budget sheet.")
        return

    print(f"Annual budget: INR {format_inr(summary.grand_total)} ({format_lakhs(summary.grand_total)} L)")
    for title, frame in (
        ("Quarterly phasing", summary.quarters),
        ("Goals", summary.goals),
        ("Top strategies", summary.strategies),
        ("Top ledgers", summary.ledgers),
    ):
        if frame.empty:
            continue
        printable = frame.copy()
        printable["total"] = printable["total"].apply(_format_amount)
        print()
        print(f"{title}:")
        print(tabulate(printable, headers="keys", tablefmt="github", showindex=False))


def _format_amount(value: float) -> str:
    if value is None or pd.isna(value):
        return "-"
    return format_inr(value)


if __name__ == "__main__":  # pragma: no cover - manual execution entry point
    raise SystemExit(main())
