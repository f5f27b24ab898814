"""Tests for the CSV loaders and path helpers."""

import pandas as pd
import pytest

from tickphysics.analytics.errors import AnalyticsError, MissingColumnsError, TradeLogNotFound
from tickphysics.analytics.loader import (
    check_columns,
    completeness_report,
    load_mt5_deals,
    load_signals,
    load_trades,
    normalize_columns,
)
from tickphysics.config import get_csv_path, get_output_path, settings


# ---------------------------------------------------------------------------
# 1. Trade logs
# ---------------------------------------------------------------------------

class TestLoadTrades:
    def test_loads_and_normalizes(self, trades_csv):
        df = load_trades(trades_csv)
        assert len(df) == 5
        assert list(df["ExitReason"]) == ["TP", "SL", "TP", "SL", "REVERSAL"]
        assert set(df["Type"]) == {"BUY", "SELL"}
        assert pd.api.types.is_datetime64_any_dtype(df["OpenTime"])
        assert df["Profit"].dtype == float

    def test_sorted_by_close_time(self, tmp_path):
        path = tmp_path / "trades.csv"
        path.write_text(
            "Ticket,CloseTime,Profit\n"
            "2,2025-01-02 10:00:00,5\n"
            "1,2025-01-01 10:00:00,-3\n"
        )
        df = load_trades(path)
        assert list(df["Ticket"]) == [1, 2]
        assert list(df.index) == [0, 1]

    def test_aliases(self, tmp_path):
        path = tmp_path / "trades.csv"
        path.write_text(
            "EntryTime,ExitTime,Direction,NetProfit,MFE,MAE\n"
            "2025-01-01 09:00:00,2025-01-01 10:00:00,Buy,12.5,30,4\n"
        )
        df = load_trades(path)
        assert {"OpenTime", "CloseTime", "Type", "Profit", "MFE_Pips", "MAE_Pips"} <= set(df.columns)
        assert df.loc[0, "Profit"] == pytest.approx(12.5)
        assert df.loc[0, "Type"] == "BUY"

    def test_canonical_column_wins_over_alias(self):
        df = pd.DataFrame({"Profit": [1.0], "NetProfit": [2.0]})
        out = normalize_columns(df)
        assert list(out.columns) == ["Profit", "NetProfit"]

    def test_bom_and_padded_headers(self, tmp_path):
        path = tmp_path / "trades.csv"
        path.write_bytes(b"\xef\xbb\xbfTicket , Profit\n1, 4.5\n")
        df = load_trades(path)
        assert list(df.columns) == ["Ticket", "Profit"]
        assert df.loc[0, "Profit"] == pytest.approx(4.5)

    def test_blank_profit_and_exit_reason(self, tmp_path):
        path = tmp_path / "trades.csv"
        path.write_text("Ticket,Profit,ExitReason\n1,,\n2,3,tp\n")
        df = load_trades(path)
        assert df.loc[0, "Profit"] == 0.0
        assert df.loc[0, "ExitReason"] == "UNKNOWN"

    def test_missing_file(self, tmp_path):
        with pytest.raises(TradeLogNotFound) as exc:
            load_trades(tmp_path / "nope.csv")
        assert isinstance(exc.value, FileNotFoundError)
        assert isinstance(exc.value, AnalyticsError)

    def test_missing_profit_column(self, tmp_path):
        path = tmp_path / "trades.csv"
        path.write_text("Ticket,Pips\n1,10\n")
        with pytest.raises(MissingColumnsError) as exc:
            load_trades(path)
        assert exc.value.missing == ["Profit"]

    def test_custom_required_columns(self, trades_csv):
        with pytest.raises(MissingColumnsError) as exc:
            load_trades(trades_csv, required=["Profit", "Balance"])
        assert exc.value.missing == ["Balance"]


class TestCompleteness:
    def test_counts_missing_values(self, tmp_path):
        path = tmp_path / "trades.csv"
        path.write_text("Ticket,OpenTime,Profit\n1,,5\n2,2025-01-01 09:00:00,\n")
        report = completeness_report(load_trades(path))
        assert report["OpenTime"] == 1
        assert report["Profit"] == 0  # filled on load
        assert report["CloseTime"] is None

    def test_check_columns(self):
        df = pd.DataFrame({"A": [1]})
        assert check_columns(df, ["A", "B"]) == ["B"]


# ---------------------------------------------------------------------------
# 2. Signal logs
# ---------------------------------------------------------------------------

class TestLoadSignals:
    def test_loads_with_alias(self, signals_csv):
        df = load_signals(signals_csv)
        assert len(df) == 8
        assert set(df["Signal"]) == {"BUY", "SELL", "SKIP"}
        assert (df.loc[df["Signal"] != "SKIP", "SkipReason"] == "").all()

    def test_missing_signal_column(self, tmp_path):
        path = tmp_path / "signals.csv"
        path.write_text("Timestamp,Quality\n2025-01-01 09:00:00,50\n")
        with pytest.raises(MissingColumnsError):
            load_signals(path)


# ---------------------------------------------------------------------------
# 3. MT5 deals reports
# ---------------------------------------------------------------------------

class TestLoadMt5Deals:
    def test_closing_deals_and_balance(self, mt5_deals_csv):
        deals, initial_balance = load_mt5_deals(mt5_deals_csv)
        assert initial_balance == pytest.approx(1000.0)
        assert len(deals) == 5
        assert deals["Profit"].sum() == pytest.approx(10.0)
        assert deals["Balance"].iloc[-1] == pytest.approx(1010.0)
        assert deals["Comment"].iloc[0] == "tp 15100.0"

    def test_no_balance_row(self, tmp_path):
        path = tmp_path / "deals.csv"
        path.write_text("Deal,Type,Direction,Profit\n1,buy,in,0\n2,sell,out,7.5\n")
        deals, initial_balance = load_mt5_deals(path)
        assert initial_balance == 0.0
        assert list(deals["Profit"]) == [7.5]

    def test_padded_headers(self, tmp_path):
        path = tmp_path / "deals.csv"
        path.write_text(
            "Time ,Deal ,Type ,Direction ,Profit ,Balance ,Comment \n"
            "2025.01.06 00:00,1,balance,,500.00,500.00,\n"
            "2025.01.06 09:45,2,sell,out,25.00,525.00,tp 15100\n"
        )
        deals, initial_balance = load_mt5_deals(path)
        assert list(deals["Profit"]) == [25.0]
        assert initial_balance == pytest.approx(500.0)
        assert deals["Comment"].iloc[0] == "tp 15100"

    def test_missing_columns(self, tmp_path):
        path = tmp_path / "deals.csv"
        path.write_text("Ticket,Amount\n1,5\n")
        with pytest.raises(MissingColumnsError):
            load_mt5_deals(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(TradeLogNotFound):
            load_mt5_deals(tmp_path / "missing.csv")


# ---------------------------------------------------------------------------
# 4. Path helpers
# ---------------------------------------------------------------------------

class TestPaths:
    def test_backtest_trades_path(self):
        path = get_csv_path("backtest", "trades", "NAS100", "M15", "1_7")
        assert path.name == "TP_Integrated_Trades_NAS100_M15_v1_7.csv"
        assert path.parent == settings.backtest_root

    def test_defaults(self):
        path = get_csv_path("live", "signals")
        assert path.name == (
            f"TP_Integrated_Signals_{settings.default_symbol}_"
            f"{settings.default_timeframe}_v{settings.default_version}.csv"
        )

    @pytest.mark.parametrize("mode,file_type", [("paper", "trades"), ("backtest", "orders")])
    def test_invalid_arguments(self, mode, file_type):
        with pytest.raises(ValueError):
            get_csv_path(mode, file_type)

    def test_output_paths(self):
        assert get_output_path("json", "backtest", "US30", "2_0").name == "TP_Analysis_backtest_US30_v2_0.json"
        assert get_output_path("html").parent.name == "reports"
        with pytest.raises(ValueError):
            get_output_path("pdf")
