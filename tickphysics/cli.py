"""Command-line entry points for the analytics tools.

Usage:
    tickphysics analyze TRADES [--signals S] [--export-json F] [--markdown F] [--charts DIR]
    tickphysics compare BASELINE CANDIDATE [MORE ...] [--labels L ...] [--chart F]
    tickphysics validate TRADES (--mt5-report F | --expected F) [--exit-reasons]
    tickphysics excursions TRADES
    tickphysics dashboard TRADES [--signals S] [--output F]
    tickphysics seed-symbols
"""

import argparse
import json
import sys
from pathlib import Path

from tickphysics.analytics import charts, report
from tickphysics.analytics.comparator import compare, compare_many
from tickphysics.analytics.errors import AnalyticsError, TradeLogNotFound
from tickphysics.analytics.loader import completeness_report, load_mt5_deals, load_signals, load_trades
from tickphysics.analytics.metrics import (
    compute_metrics,
    excursion_analysis,
    exit_reason_breakdown,
    loss_streaks,
    physics_separation,
    segment_performance,
    signal_analysis,
    suggestions,
)
from tickphysics.analytics.validator import validate_against_mt5, validate_exit_reasons, validate_summary
from tickphysics.config import settings
from tickphysics.utils.logging import setup_logging


def analyze(args):
    trades = load_trades(args.trades)
    signals = load_signals(args.signals) if args.signals else None

    summary = compute_metrics(trades, initial_balance=args.initial_balance)
    breakdown = exit_reason_breakdown(trades)
    signal_stats = signal_analysis(signals, trades)
    streaks = loss_streaks(trades)
    separation = physics_separation(trades)
    hints = suggestions(summary, signal_stats, streaks)

    print(report.format_summary(summary))
    print(report.format_frame(breakdown, "EXIT REASONS"))
    if signal_stats:
        print(report.format_mapping(signal_stats, "SIGNAL ANALYSIS"))
    if not separation.empty:
        print(report.format_frame(separation, "PHYSICS SEPARATION"))
    if "OpenTime" in trades.columns:
        print(report.format_frame(segment_performance(trades, "hour"), "PERFORMANCE BY HOUR"))

    missing = {k: v for k, v in completeness_report(trades).items() if v}
    if missing:
        print(report.format_mapping(missing, "MISSING VALUES"))

    print(report.header("SUGGESTIONS"))
    for hint in hints:
        print(f"  - {hint}")

    if args.export_json:
        path = report.export_json({
            "source": str(args.trades),
            "metrics": summary,
            "exit_reasons": breakdown,
            "signals": signal_stats,
            "loss_streaks": streaks,
            "physics_separation": separation,
            "suggestions": hints,
        }, args.export_json)
        print(f"\nJSON exported: {path}")

    if args.markdown:
        text = report.render_markdown(
            summary, title=f"Backtest Report: {Path(args.trades).stem}",
            exit_reasons=breakdown, signal_stats=signal_stats, hints=hints,
        )
        print(f"Markdown written: {report.write_markdown(text, args.markdown)}")

    if args.charts:
        out = Path(args.charts)
        charts.plot_equity_curve(trades, out / "equity_curve.png", args.initial_balance)
        if not breakdown.empty:
            charts.plot_exit_reasons(breakdown, out / "exit_reasons.png")
        if not separation.empty:
            charts.plot_physics_separation(separation, out / "physics_separation.png")
        print(f"Charts written to {out}")
    return 0


def default_labels(paths: list[str]) -> list[str]:
    """File stems, qualified by parent directory (then position) where they collide."""
    labels = [Path(p).stem for p in paths]
    if len(set(labels)) < len(labels):
        labels = [f"{Path(p).parent.name}/{Path(p).stem}" for p in paths]
    if len(set(labels)) < len(labels):
        labels = [f"{label}#{i + 1}" for i, label in enumerate(labels)]
    return labels


def compare_cmd(args):
    paths = [args.baseline, args.candidate, *args.more]
    labels = args.labels or default_labels(paths)
    if len(labels) != len(paths):
        print(f"ERROR: {len(labels)} labels given for {len(paths)} runs")
        return 1
    if len(set(labels)) != len(labels):
        print(f"ERROR: duplicate run labels: {', '.join(labels)}")
        return 1

    runs = {label: compute_metrics(load_trades(p)) for label, p in zip(labels, paths)}
    comparison = compare(runs[labels[0]], runs[labels[1]], labels=(labels[0], labels[1]))
    print(report.format_comparison(comparison))

    if len(paths) > 2:
        print(report.format_frame(compare_many(runs), "ALL RUNS"))

    if args.chart:
        path = charts.plot_comparison({k: v.to_dict() for k, v in runs.items()}, args.chart)
        print(f"Chart written: {path}")
    return 0


def load_expected(path: str) -> dict:
    path = Path(path)
    if not path.exists():
        raise TradeLogNotFound(path)
    try:
        with open(path) as f:
            expected = json.load(f)
    except json.JSONDecodeError as e:
        raise AnalyticsError(f"{path}: invalid JSON: {e}") from e
    if not isinstance(expected, dict):
        raise AnalyticsError(f"{path}: expected a JSON object of metric -> value")
    return expected


def validate(args):
    trades = load_trades(args.trades)

    if args.mt5_report:
        deals, initial_balance = load_mt5_deals(args.mt5_report)
        result = validate_against_mt5(trades, deals, initial_balance)
    else:
        expected = load_expected(args.expected)
        result = validate_summary(compute_metrics(trades), expected)
    print(report.format_validation(result))

    if args.exit_reasons:
        print(report.format_exit_reasons(validate_exit_reasons(trades)))
    return 0


def excursions(args):
    trades = load_trades(args.trades)
    stats = excursion_analysis(trades)
    if not stats:
        print("No excursion data (Pips / MFE / MAE / RunUp / RunDown columns) in trade log")
        return 0
    print(report.format_mapping(stats, "EXCURSION ANALYSIS"))
    return 0


def dashboard(args):
    trades = load_trades(args.trades)
    signals = load_signals(args.signals) if args.signals else None
    signal_stats = signal_analysis(signals, trades)
    summary = compute_metrics(trades, initial_balance=args.initial_balance)
    breakdown = exit_reason_breakdown(trades)

    output = Path(args.output) if args.output else settings.output_dir / "reports" / "dashboard.html"
    chart_dir = output.parent / f"{output.stem}_charts"
    chart_paths = [charts.plot_equity_curve(trades, chart_dir / "equity_curve.png", args.initial_balance)]
    if not breakdown.empty:
        chart_paths.append(charts.plot_exit_reasons(breakdown, chart_dir / "exit_reasons.png"))
    separation = physics_separation(trades)
    if not separation.empty:
        chart_paths.append(charts.plot_physics_separation(separation, chart_dir / "physics_separation.png"))

    html = report.render_dashboard_html(
        summary, chart_paths, title=f"TickPhysics Dashboard: {Path(args.trades).stem}",
        exit_reasons=breakdown, signal_stats=signal_stats,
    )
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(html, encoding="utf-8")
    print(f"Dashboard written: {output}")
    return 0


def seed(args):
    from sqlmodel import Session

    from tickphysics.database import create_db_and_tables, engine
    from tickphysics.seed import seed_symbols

    create_db_and_tables()
    with Session(engine) as session:
        added = seed_symbols(session)
    print(f"Seeded {added} symbols")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tickphysics", description="TickPhysics EA analytics")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("analyze", help="Metrics, breakdowns and suggestions for one trade log")
    p.add_argument("trades")
    p.add_argument("--signals")
    p.add_argument("--export-json")
    p.add_argument("--markdown")
    p.add_argument("--charts", help="Directory for PNG charts")
    p.add_argument("--initial-balance", type=float, default=settings.initial_balance)
    p.set_defaults(func=analyze)

    p = sub.add_parser("compare", help="Compare two or more runs")
    p.add_argument("baseline")
    p.add_argument("candidate")
    p.add_argument("more", nargs="*")
    p.add_argument("--labels", nargs="+")
    p.add_argument("--chart")
    p.set_defaults(func=compare_cmd)

    p = sub.add_parser("validate", help="Check CSV metrics against MT5 or expected values")
    p.add_argument("trades")
    source = p.add_mutually_exclusive_group(required=True)
    source.add_argument("--mt5-report")
    source.add_argument("--expected", help="JSON file of metric -> expected value")
    p.add_argument("--exit-reasons", action="store_true")
    p.set_defaults(func=validate)

    p = sub.add_parser("excursions", help="MFE/MAE and post-exit run-up analysis")
    p.add_argument("trades")
    p.set_defaults(func=excursions)

    p = sub.add_parser("dashboard", help="Self-contained HTML dashboard")
    p.add_argument("trades")
    p.add_argument("--signals")
    p.add_argument("--output")
    p.add_argument("--initial-balance", type=float, default=settings.initial_balance)
    p.set_defaults(func=dashboard)

    p = sub.add_parser("seed-symbols", help="Insert the default symbols into the database")
    p.set_defaults(func=seed)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging()
    try:
        return args.func(args)
    except AnalyticsError as e:
        print(f"ERROR: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
