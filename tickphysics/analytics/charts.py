"""Chart rendering for backtest reports.

Every function writes one PNG and returns its path.
"""

import logging
from pathlib import Path

import matplotlib
matplotlib.use("Agg")  # Non-interactive backend; charts are only written to disk
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

COLORS = {
    "primary": "#2E86AB",
    "success": "#2CA02C",
    "danger": "#D62728",
    "neutral": "#8B92A8",
}


def _save(fig, path: str | Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(path, dpi=120, bbox_inches="tight")
    plt.close(fig)
    logger.info(f"Chart saved: {path}")
    return path


def plot_equity_curve(
    trades: pd.DataFrame,
    path: str | Path,
    initial_balance: float = 0.0,
    title: str = "Equity Curve",
) -> Path:
    """Cumulative balance per closed trade with its drawdown below."""
    profits = trades["Profit"].to_numpy(dtype=float) if len(trades) else np.array([])
    equity = initial_balance + np.concatenate([[0.0], np.cumsum(profits)])
    x = np.arange(len(equity))
    running_max = np.maximum.accumulate(equity)
    drawdown = running_max - equity

    fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(12, 8), sharex=True)

    ax1.plot(x, equity, linewidth=2, color=COLORS["primary"], label="Equity")
    ax1.axhline(y=initial_balance, color="gray", linestyle="--", alpha=0.5, label="Start")
    ax1.fill_between(x, initial_balance, equity, where=(equity >= initial_balance),
                     alpha=0.3, color=COLORS["success"])
    ax1.fill_between(x, initial_balance, equity, where=(equity < initial_balance),
                     alpha=0.3, color=COLORS["danger"])
    ax1.set_ylabel("Equity ($)", fontweight="bold")
    ax1.set_title(title, fontsize=14, fontweight="bold")
    ax1.legend(loc="best")
    ax1.grid(True, alpha=0.3)

    ax2.fill_between(x, 0, drawdown, color=COLORS["danger"], alpha=0.3)
    ax2.plot(x, drawdown, color="darkred", linewidth=1.5)
    ax2.set_xlabel("Trade Number", fontweight="bold")
    ax2.set_ylabel("Drawdown ($)", fontweight="bold")
    ax2.grid(True, alpha=0.3)
    ax2.invert_yaxis()

    return _save(fig, path)


def plot_exit_reasons(breakdown: pd.DataFrame, path: str | Path) -> Path:
    """Trade count and net profit per exit reason."""
    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(12, 5))
    reasons = [str(r) for r in breakdown.index]

    ax1.bar(reasons, breakdown["count"], color=COLORS["primary"], edgecolor="black", alpha=0.8)
    ax1.set_title("Trades by Exit Reason", fontweight="bold")
    ax1.set_ylabel("Trades")
    ax1.grid(True, axis="y", alpha=0.3)

    colors = [COLORS["success"] if p > 0 else COLORS["danger"] for p in breakdown["profit"]]
    ax2.bar(reasons, breakdown["profit"], color=colors, edgecolor="black", alpha=0.8)
    ax2.axhline(y=0, color="black", linewidth=1)
    ax2.set_title("Net Profit by Exit Reason", fontweight="bold")
    ax2.set_ylabel("Profit ($)")
    ax2.grid(True, axis="y", alpha=0.3)

    return _save(fig, path)


def plot_comparison(runs: dict[str, dict], path: str | Path) -> Path:
    """2x2 grid comparing win rate, profit factor, total profit and avg win/loss."""
    labels = list(runs)
    df = pd.DataFrame(runs).T

    fig, axes = plt.subplots(2, 2, figsize=(14, 10))
    fig.suptitle("Backtest Comparison", fontsize=16, fontweight="bold")

    ax = axes[0, 0]
    ax.bar(labels, df["win_rate"], edgecolor="black", alpha=0.7)
    ax.axhline(y=50, color=COLORS["danger"], linestyle="--", linewidth=1, label="50%")
    ax.set_ylabel("Win Rate (%)")
    ax.set_title("Win Rate")
    ax.legend()

    ax = axes[0, 1]
    ax.bar(labels, df["profit_factor"], edgecolor="black", alpha=0.7, color=COLORS["success"])
    ax.axhline(y=1.0, color=COLORS["danger"], linestyle="--", linewidth=1, label="Break-even")
    ax.set_ylabel("Profit Factor")
    ax.set_title("Profit Factor")
    ax.legend()

    ax = axes[1, 0]
    colors = [COLORS["success"] if v > 0 else COLORS["danger"] for v in df["total_profit"]]
    ax.bar(labels, df["total_profit"], edgecolor="black", alpha=0.7, color=colors)
    ax.axhline(y=0, color="black", linestyle="--", linewidth=1)
    ax.set_ylabel("Total Profit ($)")
    ax.set_title("Total Profit")

    ax = axes[1, 1]
    pos = np.arange(len(labels))
    ax.bar(pos, df["avg_win"], width=0.4, label="Avg Win", edgecolor="black", alpha=0.7)
    ax.bar(pos + 0.4, df["avg_loss"].abs(), width=0.4, label="Avg Loss",
           edgecolor="black", alpha=0.7, color=COLORS["danger"])
    ax.set_xticks(pos + 0.2)
    ax.set_xticklabels(labels)
    ax.set_ylabel("Amount ($)")
    ax.set_title("Average Win vs Average Loss")
    ax.legend()

    for ax in axes.flat:
        ax.grid(True, alpha=0.3)

    return _save(fig, path)


def plot_physics_separation(separation: pd.DataFrame, path: str | Path) -> Path:
    """Winner vs loser mean for each physics metric."""
    fig, ax = plt.subplots(figsize=(10, 5))
    pos = np.arange(len(separation))
    ax.bar(pos, separation["winners_mean"], width=0.4, label="Winners",
           color=COLORS["success"], edgecolor="black", alpha=0.8)
    ax.bar(pos + 0.4, separation["losers_mean"], width=0.4, label="Losers",
           color=COLORS["danger"], edgecolor="black", alpha=0.8)
    ax.set_xticks(pos + 0.2)
    ax.set_xticklabels([str(i).replace("Entry", "") for i in separation.index])
    ax.set_title("Physics Metrics - Winners vs Losers", fontweight="bold")
    ax.legend()
    ax.grid(True, axis="y", alpha=0.3)
    return _save(fig, path)
