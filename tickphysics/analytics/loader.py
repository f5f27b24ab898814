"""Load the EA's trade/signal logs and MT5 deal reports into DataFrames.

Every loader returns canonical column names (see ``COLUMN_ALIASES``) so the
rest of the pipeline never has to care which logger version wrote the file.
"""

import csv
import logging
from pathlib import Path

import pandas as pd

from tickphysics.analytics.errors import MissingColumnsError, TradeLogNotFound
from tickphysics.utils.constants import (
    COLUMN_ALIASES,
    CRITICAL_TRADE_COLUMNS,
    NUMERIC_TRADE_COLUMNS,
    REQUIRED_SIGNAL_COLUMNS,
    REQUIRED_TRADE_COLUMNS,
    TIMESTAMP_COLUMNS,
)

logger = logging.getLogger(__name__)


def _read_csv(path: str | Path) -> pd.DataFrame:
    path = Path(path)
    if not path.exists():
        raise TradeLogNotFound(path)
    # utf-8-sig strips the BOM MT5 writes at the start of exported files
    df = pd.read_csv(path, encoding="utf-8-sig", skipinitialspace=True)
    df.columns = [str(c).strip() for c in df.columns]
    return df


def normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Rename known aliases to canonical names. Existing canonical columns win."""
    renames = {
        alias: canonical
        for alias, canonical in COLUMN_ALIASES.items()
        if alias in df.columns and canonical not in df.columns
    }
    return df.rename(columns=renames)


def check_columns(df: pd.DataFrame, required: list[str]) -> list[str]:
    """Return the required columns absent from ``df``."""
    return [col for col in required if col not in df.columns]


def _coerce(df: pd.DataFrame) -> pd.DataFrame:
    for col in NUMERIC_TRADE_COLUMNS:
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce")
    for col in TIMESTAMP_COLUMNS:
        if col in df.columns:
            df[col] = pd.to_datetime(df[col], errors="coerce")
    return df


def load_trades(
    path: str | Path,
    required: list[str] | None = None,
) -> pd.DataFrame:
    """Load a trade log, coerce types and order it by close time."""
    df = normalize_columns(_read_csv(path))

    missing = check_columns(df, required or REQUIRED_TRADE_COLUMNS)
    if missing:
        raise MissingColumnsError(path, missing)

    df = _coerce(df)
    df["Profit"] = df["Profit"].fillna(0.0)
    if "ExitReason" in df.columns:
        df["ExitReason"] = df["ExitReason"].fillna("UNKNOWN").astype(str).str.strip().str.upper()
    if "Type" in df.columns:
        df["Type"] = df["Type"].astype(str).str.strip().str.upper()

    if "CloseTime" in df.columns and df["CloseTime"].notna().any():
        df = df.sort_values("CloseTime", kind="stable")
    df = df.reset_index(drop=True)

    logger.info(f"Loaded {len(df)} trades from {Path(path).name}")
    return df


def load_signals(path: str | Path) -> pd.DataFrame:
    """Load a signal log; the ``Signal`` column is upper-cased (BUY/SELL/SKIP)."""
    df = normalize_columns(_read_csv(path))

    missing = check_columns(df, REQUIRED_SIGNAL_COLUMNS)
    if missing:
        raise MissingColumnsError(path, missing)

    df = _coerce(df)
    df["Signal"] = df["Signal"].astype(str).str.strip().str.upper()
    if "SkipReason" in df.columns:
        df["SkipReason"] = df["SkipReason"].fillna("")

    logger.info(f"Loaded {len(df)} signals from {Path(path).name}")
    return df


def completeness_report(
    df: pd.DataFrame,
    critical: list[str] | None = None,
) -> dict[str, int | None]:
    """Missing-value count per critical column; None when the column is absent."""
    report: dict[str, int | None] = {}
    for col in critical or CRITICAL_TRADE_COLUMNS:
        report[col] = int(df[col].isna().sum()) if col in df.columns else None
    return report


def _parse_number(value: str | None) -> float:
    # MT5 exports use spaces (and sometimes commas) as thousands separators
    text = (value or "").replace(" ", "").replace("\xa0", "").replace(",", "")
    return float(text) if text else 0.0


def load_mt5_deals(path: str | Path) -> tuple[pd.DataFrame, float]:
    """Parse an MT5 deals report CSV.

    Returns the closing deals (``Direction == "out"``) with numeric ``Profit``
    and ``Balance`` columns, and the initial balance from the ``balance`` row
    (0.0 when the report has none).
    """
    path = Path(path)
    if not path.exists():
        raise TradeLogNotFound(path)

    rows = []
    initial_balance = 0.0
    with open(path, "r", encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f, skipinitialspace=True)
        fieldnames = [name.strip() for name in reader.fieldnames or []]
        reader.fieldnames = fieldnames
        missing = [col for col in ("Deal", "Profit") if col not in fieldnames]
        if missing:
            raise MissingColumnsError(path, missing)

        for row in reader:
            if not (row.get("Deal") or "").strip():
                continue
            deal_type = (row.get("Type") or "").strip().lower()
            if deal_type == "balance":
                initial_balance = _parse_number(row.get("Balance") or row.get("Profit"))
                continue
            if (row.get("Direction") or "").strip().lower() != "out":
                continue
            rows.append({
                "Deal": row["Deal"].strip(),
                "Time": (row.get("Time") or "").strip(),
                "Symbol": (row.get("Symbol") or "").strip(),
                "Type": deal_type,
                "Profit": _parse_number(row.get("Profit")),
                "Balance": _parse_number(row.get("Balance")),
                "Comment": (row.get("Comment") or "").strip(),
            })

    deals = pd.DataFrame(
        rows, columns=["Deal", "Time", "Symbol", "Type", "Profit", "Balance", "Comment"]
    )
    logger.info(f"Parsed {len(deals)} closing deals from {path.name}")
    return deals, initial_balance
