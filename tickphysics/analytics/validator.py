"""Cross-check CSV-derived metrics against MT5 report values.

Mismatches are informational: every function returns a report and never
raises because numbers disagree.
"""

import logging
import re
from dataclasses import dataclass, field

import pandas as pd

from tickphysics.analytics.errors import MissingColumnsError
from tickphysics.analytics.loader import check_columns
from tickphysics.analytics.metrics import MetricsSummary, compute_metrics
from tickphysics.config import settings
from tickphysics.utils.constants import EXIT_SL, EXIT_TP

logger = logging.getLogger(__name__)

COUNT_METRICS = frozenset({
    "total_trades", "winning_trades", "losing_trades", "breakeven_trades",
    "max_consecutive_wins", "max_consecutive_losses", "sl_count", "tp_count",
})
PERCENT_METRICS = frozenset({"win_rate", "max_drawdown_pct"})
RATIO_METRICS = frozenset({"profit_factor"})

_SL_COMMENT = re.compile(r"\bsl\b", re.IGNORECASE)
_TP_COMMENT = re.compile(r"\btp\b", re.IGNORECASE)


@dataclass
class MetricCheck:
    metric: str
    expected: float | None
    actual: float | None
    diff: float | None
    tolerance: float
    matched: bool


@dataclass
class ValidationReport:
    checks: list[MetricCheck] = field(default_factory=list)

    @property
    def matched(self) -> int:
        return sum(1 for c in self.checks if c.matched)

    @property
    def mismatches(self) -> list[MetricCheck]:
        return [c for c in self.checks if not c.matched]

    @property
    def accuracy(self) -> float:
        return self.matched / len(self.checks) * 100 if self.checks else 0.0

    @property
    def all_matched(self) -> bool:
        return bool(self.checks) and not self.mismatches


def default_tolerances() -> dict[str, float]:
    return {
        "money": settings.money_tolerance,
        "percent": settings.percent_tolerance,
        "ratio": settings.ratio_tolerance,
    }


def tolerance_for(metric: str, tolerances: dict[str, float]) -> float:
    if metric in COUNT_METRICS:
        return 0.0
    if metric in PERCENT_METRICS:
        return tolerances["percent"]
    if metric in RATIO_METRICS:
        return tolerances["ratio"]
    return tolerances["money"]


def _as_float(value) -> float | None:
    """Numeric value, or None for missing and non-numeric entries."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def validate_summary(
    summary: MetricsSummary | dict,
    reference: dict[str, float],
    tolerances: dict[str, float] | None = None,
) -> ValidationReport:
    """Compare each reference value with the same metric from ``summary``."""
    actual_values = summary.to_dict() if isinstance(summary, MetricsSummary) else dict(summary)
    tols = {**default_tolerances(), **(tolerances or {})}

    report = ValidationReport()
    for metric, expected in reference.items():
        tol = tolerance_for(metric, tols)
        expected_value = _as_float(expected)
        actual_value = _as_float(actual_values.get(metric))
        if expected_value is None or actual_value is None:
            report.checks.append(MetricCheck(metric, expected_value, actual_value, None, tol, False))
            continue
        diff = actual_value - expected_value
        report.checks.append(
            MetricCheck(metric, expected_value, actual_value, diff, tol, abs(diff) <= tol + 1e-9)
        )

    for check in report.mismatches:
        logger.warning(
            f"Mismatch on {check.metric}: expected {check.expected}, got {check.actual}"
        )
    return report


def exit_counts_from_comments(deals: pd.DataFrame) -> tuple[int, int]:
    """SL and TP exit counts from MT5 deal comments ("sl 15000.5", "tp 15100")."""
    comments = deals["Comment"].fillna("") if "Comment" in deals.columns else pd.Series(dtype=str)
    sl = int(comments.str.contains(_SL_COMMENT).sum())
    tp = int(comments.str.contains(_TP_COMMENT).sum())
    return sl, tp


def mt5_reference(deals: pd.DataFrame, initial_balance: float = 0.0) -> dict[str, float]:
    """Reference metrics computed from the closing deals of an MT5 report."""
    summary = compute_metrics(deals["Profit"])
    sl, tp = exit_counts_from_comments(deals)
    reference = {
        "total_trades": summary.total_trades,
        "total_profit": summary.total_profit,
        "gross_profit": summary.gross_profit,
        "gross_loss": summary.gross_loss,
        "win_rate": summary.win_rate,
        "sl_count": sl,
        "tp_count": tp,
    }
    if initial_balance:
        reference["final_balance"] = initial_balance + summary.total_profit
    return reference


def validate_against_mt5(
    trades: pd.DataFrame,
    deals: pd.DataFrame,
    initial_balance: float = 0.0,
    tolerances: dict[str, float] | None = None,
) -> ValidationReport:
    """Validate a trade log against the deals report MT5 produced for the same run."""
    summary = compute_metrics(trades).to_dict()
    if "ExitReason" in trades.columns:
        summary["sl_count"] = int((trades["ExitReason"] == EXIT_SL).sum())
        summary["tp_count"] = int((trades["ExitReason"] == EXIT_TP).sum())
    if initial_balance:
        summary["final_balance"] = initial_balance + summary["total_profit"]

    return validate_summary(summary, mt5_reference(deals, initial_balance), tolerances)


@dataclass
class ExitCheck:
    ticket: object
    reason: str
    close_price: float
    level: float
    diff: float
    valid: bool


@dataclass
class ExitReasonReport:
    distribution: dict[str, int] = field(default_factory=dict)
    checks: list[ExitCheck] = field(default_factory=list)

    def counts(self, reason: str) -> tuple[int, int]:
        """(valid, invalid) checks for one exit reason."""
        subset = [c for c in self.checks if c.reason == reason]
        valid = sum(1 for c in subset if c.valid)
        return valid, len(subset) - valid


def validate_exit_reasons(
    trades: pd.DataFrame,
    tolerance: float | None = None,
) -> ExitReasonReport:
    """Check that SL/TP exits closed within ``tolerance`` of the recorded level."""
    missing = check_columns(trades, ["ExitReason", "ClosePrice", "SL", "TP"])
    if missing:
        raise MissingColumnsError("trade log", missing)

    tol = settings.price_tolerance if tolerance is None else tolerance
    report = ExitReasonReport(
        distribution={str(k): int(v) for k, v in trades["ExitReason"].value_counts().items()}
    )
    for reason, level_col in ((EXIT_SL, "SL"), (EXIT_TP, "TP")):
        subset = trades[trades["ExitReason"] == reason]
        for idx, row in subset.iterrows():
            diff = abs(float(row["ClosePrice"]) - float(row[level_col]))
            report.checks.append(ExitCheck(
                ticket=row["Ticket"] if "Ticket" in subset.columns else idx,
                reason=reason,
                close_price=float(row["ClosePrice"]),
                level=float(row[level_col]),
                diff=diff,
                valid=diff <= tol,
            ))
    return report
