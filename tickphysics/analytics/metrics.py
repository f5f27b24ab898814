"""Backtest performance metrics over a trade log.

All functions are pure computation with no I/O. Ratios whose denominator is zero
default to 0 instead of raising, so an empty or all-winning log still yields a
complete summary.
"""

from dataclasses import asdict, dataclass
from typing import Iterable

import numpy as np
import pandas as pd

from tickphysics.utils.constants import EXIT_SL, PHYSICS_COLUMNS


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _profits(data: pd.DataFrame | pd.Series | Iterable[float]) -> pd.Series:
    """Profit series from a trade table or a plain sequence, NaN/inf dropped."""
    if isinstance(data, pd.DataFrame):
        s = data["Profit"] if "Profit" in data.columns else pd.Series(dtype=float)
    elif isinstance(data, pd.Series):
        s = data
    else:
        s = pd.Series(list(data), dtype=float)
    s = pd.to_numeric(s, errors="coerce").replace([np.inf, -np.inf], np.nan).dropna()
    return s.astype(float).reset_index(drop=True)


def _ratio(numerator: float, denominator: float) -> float:
    return float(numerator / denominator) if denominator else 0.0


def max_consecutive(mask: Iterable[bool]) -> int:
    """Length of the longest run of True values."""
    best = current = 0
    for value in mask:
        current = current + 1 if value else 0
        best = max(best, current)
    return best


def profit_factor(profits) -> float:
    """gross_profit / |gross_loss|; 0 when there is no loss."""
    s = _profits(profits)
    gross_profit = s[s > 0].sum()
    gross_loss = s[s < 0].sum()
    return _ratio(gross_profit, abs(gross_loss))


def max_drawdown(profits) -> float:
    """Largest peak-to-trough fall of the cumulative profit curve, as a positive amount.

    The curve starts at 0 so a losing first trade counts as drawdown.
    """
    s = _profits(profits)
    if s.empty:
        return 0.0
    equity = np.concatenate([[0.0], s.cumsum().to_numpy()])
    running_peak = np.maximum.accumulate(equity)
    return float((running_peak - equity).max())


def max_drawdown_pct(profits, initial_balance: float) -> float:
    """Largest drawdown relative to the running balance peak, in percent."""
    s = _profits(profits)
    if s.empty or initial_balance <= 0:
        return 0.0
    balance = initial_balance + np.concatenate([[0.0], s.cumsum().to_numpy()])
    running_peak = np.maximum.accumulate(balance)
    with np.errstate(divide="ignore", invalid="ignore"):
        dd = np.where(running_peak > 0, (running_peak - balance) / running_peak * 100, 0.0)
    return float(dd.max())


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------

@dataclass
class MetricsSummary:
    """Aggregate performance of one run. Derived on every load, never stored."""
    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    breakeven_trades: int = 0
    win_rate: float = 0.0
    total_profit: float = 0.0
    gross_profit: float = 0.0
    gross_loss: float = 0.0  # <= 0
    profit_factor: float = 0.0
    avg_win: float = 0.0
    avg_loss: float = 0.0  # <= 0
    largest_win: float = 0.0
    largest_loss: float = 0.0
    expectancy: float = 0.0
    max_drawdown: float = 0.0
    max_drawdown_pct: float = 0.0
    max_consecutive_wins: int = 0
    max_consecutive_losses: int = 0
    avg_pips: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)


def compute_metrics(
    trades: pd.DataFrame | pd.Series | Iterable[float],
    initial_balance: float | None = None,
) -> MetricsSummary:
    """Summarize a trade table (or a bare sequence of per-trade profits)."""
    s = _profits(trades)
    total = len(s)
    if total == 0:
        return MetricsSummary()

    wins = s[s > 0]
    losses = s[s < 0]
    gross_profit = float(wins.sum())
    gross_loss = float(losses.sum())

    avg_pips = 0.0
    if isinstance(trades, pd.DataFrame) and "Pips" in trades.columns:
        pips = pd.to_numeric(trades["Pips"], errors="coerce").dropna()
        avg_pips = float(pips.mean()) if not pips.empty else 0.0

    return MetricsSummary(
        total_trades=total,
        winning_trades=len(wins),
        losing_trades=len(losses),
        breakeven_trades=total - len(wins) - len(losses),
        win_rate=len(wins) / total * 100,
        total_profit=float(s.sum()),
        gross_profit=gross_profit,
        gross_loss=gross_loss,
        profit_factor=_ratio(gross_profit, abs(gross_loss)),
        avg_win=float(wins.mean()) if len(wins) else 0.0,
        avg_loss=float(losses.mean()) if len(losses) else 0.0,
        largest_win=float(wins.max()) if len(wins) else 0.0,
        largest_loss=float(losses.min()) if len(losses) else 0.0,
        expectancy=float(s.mean()),
        max_drawdown=max_drawdown(s),
        max_drawdown_pct=max_drawdown_pct(s, initial_balance) if initial_balance else 0.0,
        max_consecutive_wins=max_consecutive(s > 0),
        max_consecutive_losses=max_consecutive(s < 0),
        avg_pips=avg_pips,
    )


# ---------------------------------------------------------------------------
# Breakdowns
# ---------------------------------------------------------------------------

def exit_reason_breakdown(trades: pd.DataFrame) -> pd.DataFrame:
    """Count, share, net profit and win rate per exit reason, most frequent first."""
    columns = ["count", "pct", "profit", "win_rate"]
    if trades.empty or "ExitReason" not in trades.columns:
        return pd.DataFrame(columns=columns)

    grouped = trades.groupby("ExitReason")["Profit"]
    result = pd.DataFrame({
        "count": grouped.size(),
        "profit": grouped.sum(),
        "win_rate": grouped.apply(lambda p: (p > 0).mean() * 100),
    })
    result["pct"] = result["count"] / len(trades) * 100
    return result[columns].sort_values("count", ascending=False, kind="stable")


def signal_analysis(signals: pd.DataFrame | None, trades: pd.DataFrame | None) -> dict:
    """How many evaluated signals became trades and why the rest were skipped."""
    if signals is None or trades is None:
        return {}

    total_signals = len(signals)
    total_trades = len(trades)
    actions = signals["Signal"].value_counts() if "Signal" in signals.columns else pd.Series(dtype=int)
    skipped = int(actions.get("SKIP", 0))

    skip_reasons: dict[str, int] = {}
    if "SkipReason" in signals.columns:
        reasons = signals.loc[signals["Signal"] == "SKIP", "SkipReason"]
        reasons = reasons[reasons.astype(str).str.len() > 0]
        skip_reasons = {str(k): int(v) for k, v in reasons.value_counts().items()}

    return {
        "total_signals": total_signals,
        "total_trades": total_trades,
        "buy_signals": int(actions.get("BUY", 0)),
        "sell_signals": int(actions.get("SELL", 0)),
        "skipped_signals": skipped,
        "signal_to_trade_ratio": _ratio(total_trades, total_signals) * 100,
        "skip_rate": _ratio(skipped, total_signals) * 100,
        "skip_reasons": skip_reasons,
    }


def loss_streaks(trades: pd.DataFrame, min_length: int = 3) -> list[dict]:
    """Runs of at least ``min_length`` consecutive losing trades."""
    profits = _profits(trades)
    streaks = []
    start = None
    for idx, profit in enumerate(list(profits) + [0.0]):  # sentinel closes a trailing run
        if profit < 0:
            if start is None:
                start = idx
            continue
        if start is not None and idx - start >= min_length:
            streaks.append({
                "start_idx": start,
                "end_idx": idx - 1,
                "consecutive_losses": idx - start,
                "total_loss": float(profits.iloc[start:idx].sum()),
            })
        start = None
    return streaks


def excursion_analysis(
    trades: pd.DataFrame,
    early_exit_ratio: float = 0.3,
    shakeout_ratio: float = 0.5,
) -> dict:
    """Exit efficiency from MFE/MAE and post-exit RunUp/RunDown.

    Capture rate compares pips banked on winners to what was available had
    the trade stayed open through the subsequent run-up.
    """
    if trades.empty or "Pips" not in trades.columns:
        return {}

    result: dict = {}
    winners = trades[trades["Profit"] > 0]
    losers = trades[trades["Profit"] < 0]

    for col in ("MFE_Pips", "MAE_Pips"):
        if col in trades.columns:
            result[f"avg_{col.lower()}"] = float(trades[col].mean())

    if "RunUp_Pips" in trades.columns and len(winners):
        captured = float(winners["Pips"].sum())
        left_on_table = float(winners["RunUp_Pips"].sum())
        early = winners[winners["RunUp_Pips"] > winners["Pips"] * early_exit_ratio]
        result.update({
            "captured_pips": captured,
            "left_on_table_pips": left_on_table,
            "capture_rate": _ratio(captured, captured + left_on_table) * 100,
            "early_exits": len(early),
            "avg_early_exit_runup": float(early["RunUp_Pips"].mean()) if len(early) else 0.0,
        })

    if "RunDown_Pips" in trades.columns and len(losers):
        sl_exits = losers
        if "ExitReason" in losers.columns:
            sl_exits = losers[losers["ExitReason"] == EXIT_SL]
        shaken = sl_exits[sl_exits["RunDown_Pips"].abs() > sl_exits["Pips"].abs() * shakeout_ratio]
        result.update({
            "sl_exits": len(sl_exits),
            "shakeouts": len(shaken),
            "shakeout_rate": _ratio(len(shaken), len(losers)) * 100,
            "avg_rundown_pips": float(losers["RunDown_Pips"].mean()),
        })

    return result


def physics_separation(
    trades: pd.DataFrame,
    columns: list[str] | None = None,
) -> pd.DataFrame:
    """Mean physics metric for winners vs losers and its correlation with profit."""
    columns = [c for c in (columns or PHYSICS_COLUMNS) if c in trades.columns]
    out_cols = ["winners_mean", "losers_mean", "separation", "correlation"]
    if trades.empty or not columns:
        return pd.DataFrame(columns=out_cols)

    winners = trades[trades["Profit"] > 0]
    losers = trades[trades["Profit"] <= 0]
    rows = {}
    for col in columns:
        win_mean = float(winners[col].mean()) if len(winners) else 0.0
        loss_mean = float(losers[col].mean()) if len(losers) else 0.0
        corr = trades[col].corr(trades["Profit"])
        rows[col] = {
            "winners_mean": win_mean,
            "losers_mean": loss_mean,
            "separation": win_mean - loss_mean,
            "correlation": 0.0 if pd.isna(corr) else float(corr),
        }
    return pd.DataFrame.from_dict(rows, orient="index")[out_cols]


def segment_performance(trades: pd.DataFrame, by: str = "hour") -> pd.DataFrame:
    """Performance per hour-of-day or weekday of the trade's open time."""
    out_cols = ["trades", "net_profit", "avg_profit", "win_rate", "profit_factor"]
    if by not in ("hour", "weekday"):
        raise ValueError(f"Invalid segment: {by}. Must be 'hour' or 'weekday'")
    if trades.empty or "OpenTime" not in trades.columns:
        return pd.DataFrame(columns=out_cols)

    opened = pd.to_datetime(trades["OpenTime"], errors="coerce")
    key = opened.dt.hour if by == "hour" else opened.dt.day_name()
    frame = pd.DataFrame({"segment": key, "Profit": trades["Profit"]}).dropna(subset=["segment"])
    if by == "hour":
        frame["segment"] = frame["segment"].astype(int)

    rows = {}
    for segment, group in frame.groupby("segment"):
        p = group["Profit"]
        rows[segment] = {
            "trades": len(p),
            "net_profit": float(p.sum()),
            "avg_profit": float(p.mean()),
            "win_rate": float((p > 0).mean() * 100),
            "profit_factor": profit_factor(p),
        }
    result = pd.DataFrame.from_dict(rows, orient="index", columns=out_cols)
    result.index.name = by
    return result


def suggestions(
    summary: MetricsSummary,
    signal_stats: dict | None = None,
    streaks: list[dict] | None = None,
) -> list[str]:
    """Plain-language tuning hints derived from the numbers."""
    hints = []
    if summary.total_trades == 0:
        return ["No trades found - check the backtest ran and the CSV path"]

    if summary.win_rate < 40:
        hints.append("Win rate below 40% - consider tightening entry filters (MinQuality/MinConfluence)")
    if summary.profit_factor < 1.5:
        hints.append("Profit factor below 1.5 - risk/reward may be suboptimal (review SL/TP settings)")

    skip_rate = (signal_stats or {}).get("skip_rate")
    if skip_rate is not None:
        if skip_rate < 30:
            hints.append("Low skip rate - entry filtering may not be aggressive enough")
        elif skip_rate > 70:
            hints.append("High skip rate - filters may be too restrictive, missing opportunities")

    if streaks:
        hints.append(f"Found {len(streaks)} consecutive loss streaks - review conditions around them")

    if not hints:
        hints.append("Performance metrics look healthy")
    return hints
