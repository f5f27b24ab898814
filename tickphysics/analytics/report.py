"""Format computed metrics as console tables, markdown, JSON and HTML.

No business logic lives here, only templating.
"""

import base64
import html
import json
import math
from datetime import datetime
from pathlib import Path

import numpy as np
import pandas as pd

from tickphysics.analytics.comparator import Comparison
from tickphysics.analytics.metrics import MetricsSummary
from tickphysics.analytics.validator import ExitReasonReport, ValidationReport

RULE = "=" * 80

MONEY_KEYS = frozenset({
    "total_profit", "gross_profit", "gross_loss", "avg_win", "avg_loss",
    "largest_win", "largest_loss", "expectancy", "max_drawdown", "final_balance",
})
PERCENT_KEYS = frozenset({"win_rate", "max_drawdown_pct", "skip_rate", "signal_to_trade_ratio"})


def label(key: str) -> str:
    return key.replace("_", " ").title()


def format_value(key: str, value) -> str:
    if value is None:
        return "N/A"
    if isinstance(value, (int, np.integer)) and not isinstance(value, bool):
        return str(int(value))
    if isinstance(value, (float, np.floating)):
        if key in MONEY_KEYS:
            return f"${value:,.2f}"
        if key in PERCENT_KEYS:
            return f"{value:.2f}%"
        return f"{value:.2f}"
    return str(value)


def header(title: str) -> str:
    return f"\n{RULE}\n{title}\n{RULE}"


# ---------------------------------------------------------------------------
# Console tables
# ---------------------------------------------------------------------------

def format_summary(summary: MetricsSummary, title: str = "PERFORMANCE METRICS") -> str:
    lines = [header(title)]
    for key, value in summary.to_dict().items():
        lines.append(f"  {label(key):<28} {format_value(key, value)}")
    return "\n".join(lines)


def format_mapping(data: dict, title: str) -> str:
    lines = [header(title)]
    for key, value in data.items():
        if isinstance(value, dict):
            lines.append(f"  {label(key)}:")
            for sub_key, sub_value in value.items():
                lines.append(f"    {str(sub_key):<26} {sub_value}")
        else:
            lines.append(f"  {label(key):<28} {format_value(key, value)}")
    return "\n".join(lines)


def format_frame(df: pd.DataFrame, title: str) -> str:
    body = df.to_string(float_format=lambda v: f"{v:.2f}") if not df.empty else "  (no data)"
    return f"{header(title)}\n{body}"


def format_comparison(comparison: Comparison) -> str:
    base, cand = comparison.baseline_label, comparison.candidate_label
    lines = [
        header(f"COMPARISON: {base} vs {cand}"),
        f"{'Metric':<28} {base:>14} {cand:>14} {'Delta':>12} {'Change':>9}  Status",
        "-" * 92,
    ]
    for d in comparison.deltas:
        lines.append(
            f"{label(d.metric):<28} {format_value(d.metric, d.baseline):>14} "
            f"{format_value(d.metric, d.candidate):>14} {d.delta:>+12.2f} "
            f"{d.pct_change:>+8.1f}%  {d.status}"
        )
    lines.append("")
    lines.append(f"Improved: {len(comparison.improved)}  Regressed: {len(comparison.regressed)}")
    return "\n".join(lines)


def format_validation(report: ValidationReport, title: str = "VALIDATION: CSV vs MT5") -> str:
    lines = [
        header(title),
        f"{'Metric':<24} {'Expected':>14} {'Actual':>14} {'Diff':>10}  Match",
        "-" * 72,
    ]
    for c in report.checks:
        diff = "N/A" if c.diff is None else f"{c.diff:+.2f}"
        lines.append(
            f"{c.metric:<24} {format_value(c.metric, c.expected):>14} "
            f"{format_value(c.metric, c.actual):>14} {diff:>10}  {'OK' if c.matched else 'MISMATCH'}"
        )
    lines.append("")
    lines.append(
        f"Validation accuracy: {report.accuracy:.1f}% ({report.matched}/{len(report.checks)} metrics)"
    )
    return "\n".join(lines)


def format_exit_reasons(report: ExitReasonReport) -> str:
    total = sum(report.distribution.values())
    lines = [header("EXIT REASON VALIDATION")]
    for reason, count in report.distribution.items():
        pct = count / total * 100 if total else 0.0
        lines.append(f"  {reason:<12} {count:>5} trades ({pct:5.1f}%)")
    for reason in sorted({c.reason for c in report.checks}):
        valid, invalid = report.counts(reason)
        lines.append(f"  {reason} exits at recorded level: {valid}/{valid + invalid}")
        for c in report.checks:
            if c.reason == reason and not c.valid:
                lines.append(
                    f"    Trade #{c.ticket}: close={c.close_price:.2f} level={c.level:.2f} diff={c.diff:.2f}"
                )
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------

def to_jsonable(obj):
    """Recursively convert numpy/pandas values; inf and NaN become None."""
    if isinstance(obj, MetricsSummary):
        return to_jsonable(obj.to_dict())
    if isinstance(obj, pd.DataFrame):
        return to_jsonable(obj.reset_index().to_dict(orient="records"))
    if isinstance(obj, pd.Series):
        return to_jsonable(obj.to_dict())
    if isinstance(obj, dict):
        return {str(k): to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(v) for v in obj]
    if isinstance(obj, (np.integer,)):
        return int(obj)
    if isinstance(obj, (float, np.floating)):
        value = float(obj)
        return None if math.isnan(value) or math.isinf(value) else value
    if isinstance(obj, (pd.Timestamp, datetime)):
        return obj.isoformat()
    if isinstance(obj, Path):
        return str(obj)
    return obj


def export_json(data: dict, path: str | Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {"generated_at": datetime.now().isoformat(), **to_jsonable(data)}
    with open(path, "w") as f:
        json.dump(payload, f, indent=2)
    return path


def _md_table(rows: list[tuple[str, str]], headers: tuple[str, str] = ("Metric", "Value")) -> str:
    out = [f"| {headers[0]} | {headers[1]} |", "|---|---|"]
    out.extend(f"| {k} | {v} |" for k, v in rows)
    return "\n".join(out)


def _md_frame(df: pd.DataFrame) -> str:
    cols = [df.index.name or ""] + [str(c) for c in df.columns]
    out = ["| " + " | ".join(cols) + " |", "|" + "---|" * len(cols)]
    for idx, row in df.iterrows():
        cells = [str(idx)] + [
            f"{v:.2f}" if isinstance(v, (float, np.floating)) else str(v) for v in row
        ]
        out.append("| " + " | ".join(cells) + " |")
    return "\n".join(out)


def render_markdown(
    summary: MetricsSummary,
    title: str = "TickPhysics Backtest Report",
    exit_reasons: pd.DataFrame | None = None,
    signal_stats: dict | None = None,
    comparison: Comparison | None = None,
    hints: list[str] | None = None,
) -> str:
    parts = [f"# {title}", "", f"_Generated {datetime.now():%Y-%m-%d %H:%M}_", ""]

    parts += ["## Performance", ""]
    parts.append(_md_table([(label(k), format_value(k, v)) for k, v in summary.to_dict().items()]))

    if exit_reasons is not None and not exit_reasons.empty:
        parts += ["", "## Exit Reasons", "", _md_frame(exit_reasons)]

    if signal_stats:
        rows = [(label(k), format_value(k, v)) for k, v in signal_stats.items() if not isinstance(v, dict)]
        parts += ["", "## Signals", "", _md_table(rows)]

    if comparison is not None:
        parts += [
            "",
            f"## {comparison.baseline_label} vs {comparison.candidate_label}",
            "",
            f"| Metric | {comparison.baseline_label} | {comparison.candidate_label} | Delta | Status |",
            "|---|---|---|---|---|",
        ]
        for d in comparison.deltas:
            parts.append(
                f"| {label(d.metric)} | {format_value(d.metric, d.baseline)} | "
                f"{format_value(d.metric, d.candidate)} | {d.delta:+.2f} | {d.status} |"
            )

    if hints:
        parts += ["", "## Suggestions", ""]
        parts.extend(f"- {h}" for h in hints)

    return "\n".join(parts) + "\n"


def write_markdown(text: str, path: str | Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def _html_table(data: dict) -> str:
    rows = "\n".join(
        f"<tr><td>{html.escape(label(k))}</td><td>{html.escape(format_value(k, v))}</td></tr>"
        for k, v in data.items() if not isinstance(v, dict)
    )
    return f"<table class='metrics'>\n{rows}\n</table>"


def render_dashboard_html(
    summary: MetricsSummary,
    charts: list[str | Path] | None = None,
    title: str = "TickPhysics Dashboard",
    exit_reasons: pd.DataFrame | None = None,
    signal_stats: dict | None = None,
) -> str:
    """Self-contained HTML page: metrics table plus charts embedded as base64 PNG."""
    sections = [_html_table(summary.to_dict())]

    if exit_reasons is not None and not exit_reasons.empty:
        sections.append("<h2>Exit Reasons</h2>")
        sections.append(exit_reasons.to_html(float_format=lambda v: f"{v:.2f}", classes="metrics"))

    if signal_stats:
        sections.append("<h2>Signals</h2>")
        sections.append(_html_table(signal_stats))

    for chart in charts or []:
        data = base64.b64encode(Path(chart).read_bytes()).decode("ascii")
        sections.append(
            f"<figure><img src='data:image/png;base64,{data}' alt='{html.escape(Path(chart).stem)}'/></figure>"
        )

    body = "\n".join(sections)
    return (
        "<!DOCTYPE html>\n<html><head><meta charset='utf-8'>"
        f"<title>{html.escape(title)}</title>"
        "<style>body{font-family:sans-serif;background:#0A0E1A;color:#E4E7EB;margin:2em}"
        "table.metrics{border-collapse:collapse}"
        "table.metrics td,table.metrics th{border:1px solid #333;padding:4px 10px}"
        "img{max-width:100%}</style></head>\n"
        f"<body><h1>{html.escape(title)}</h1>\n{body}\n</body></html>\n"
    )
