"""Tests for the tickphysics command-line entry points."""

import json

import pytest
from sqlmodel import select

import tickphysics.cli as cli
from tickphysics.models.symbol import Symbol
from tickphysics.seed import DEFAULT_SYMBOLS


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch):
    # setup_logging swaps root handlers, which would outlive pytest's captured stdout
    monkeypatch.setattr(cli, "setup_logging", lambda: None)


# ---------------------------------------------------------------------------
# 1. analyze / excursions / dashboard
# ---------------------------------------------------------------------------

class TestAnalyze:
    def test_prints_report(self, trades_csv, signals_csv, capsys):
        assert cli.main(["analyze", str(trades_csv), "--signals", str(signals_csv)]) == 0
        out = capsys.readouterr().out
        assert "PERFORMANCE METRICS" in out
        assert "EXIT REASONS" in out
        assert "SIGNAL ANALYSIS" in out
        assert "SUGGESTIONS" in out

    def test_writes_artifacts(self, trades_csv, tmp_path):
        json_path = tmp_path / "out" / "analysis.json"
        md_path = tmp_path / "out" / "report.md"
        chart_dir = tmp_path / "charts"
        code = cli.main([
            "analyze", str(trades_csv),
            "--export-json", str(json_path),
            "--markdown", str(md_path),
            "--charts", str(chart_dir),
        ])
        assert code == 0
        data = json.loads(json_path.read_text())
        assert data["metrics"]["total_trades"] == 5
        assert md_path.read_text().startswith("# Backtest Report")
        assert (chart_dir / "equity_curve.png").exists()
        assert (chart_dir / "exit_reasons.png").exists()

    def test_missing_file_exits_1(self, tmp_path, capsys):
        assert cli.main(["analyze", str(tmp_path / "missing.csv")]) == 1
        assert "CSV file not found" in capsys.readouterr().out

    def test_missing_columns_exits_1(self, tmp_path, capsys):
        path = tmp_path / "bad.csv"
        path.write_text("Ticket,Pips\n1,10\n")
        assert cli.main(["analyze", str(path)]) == 1
        assert "missing columns: Profit" in capsys.readouterr().out


def test_excursions(trades_csv, capsys):
    assert cli.main(["excursions", str(trades_csv)]) == 0
    assert "EXCURSION ANALYSIS" in capsys.readouterr().out


def test_dashboard(trades_csv, signals_csv, tmp_path):
    output = tmp_path / "dash.html"
    assert cli.main(["dashboard", str(trades_csv), "--signals", str(signals_csv), "--output", str(output)]) == 0
    html = output.read_text()
    assert "data:image/png;base64," in html
    assert "Signals" in html


# ---------------------------------------------------------------------------
# 2. compare / validate
# ---------------------------------------------------------------------------

class TestCompare:
    def test_two_runs(self, trades_csv, tmp_path, capsys):
        candidate = tmp_path / "candidate.csv"
        candidate.write_text("Profit\n12\n-4\n25\n")
        chart = tmp_path / "compare.png"
        code = cli.main([
            "compare", str(trades_csv), str(candidate),
            "--labels", "v1.7", "v1.8", "--chart", str(chart),
        ])
        assert code == 0
        assert "COMPARISON: v1.7 vs v1.8" in capsys.readouterr().out
        assert chart.exists()

    def test_label_count_mismatch(self, trades_csv, capsys):
        assert cli.main(["compare", str(trades_csv), str(trades_csv), "--labels", "only-one"]) == 1

    def test_same_file_name_in_different_directories(self, tmp_path, capsys):
        (tmp_path / "baseline").mkdir()
        (tmp_path / "optimized").mkdir()
        baseline = tmp_path / "baseline" / "trades.csv"
        candidate = tmp_path / "optimized" / "trades.csv"
        baseline.write_text("Profit\n10\n-5\n")
        candidate.write_text("Profit\n50\n50\n50\n")

        assert cli.main(["compare", str(baseline), str(candidate)]) == 0
        out = capsys.readouterr().out
        assert "COMPARISON: baseline/trades vs optimized/trades" in out
        assert "Improved: 0" not in out

    def test_duplicate_explicit_labels(self, trades_csv, capsys):
        code = cli.main(["compare", str(trades_csv), str(trades_csv), "--labels", "v1", "v1"])
        assert code == 1
        assert "ERROR: duplicate run labels" in capsys.readouterr().out

    def test_default_labels(self):
        assert cli.default_labels(["a/x.csv", "b/y.csv"]) == ["x", "y"]
        assert cli.default_labels(["a/x.csv", "b/x.csv"]) == ["a/x", "b/x"]
        assert cli.default_labels(["a/x.csv", "a/x.csv"]) == ["a/x#1", "a/x#2"]


class TestValidate:
    def test_against_mt5_report(self, trades_csv, mt5_deals_csv, capsys):
        code = cli.main(["validate", str(trades_csv), "--mt5-report", str(mt5_deals_csv), "--exit-reasons"])
        assert code == 0
        out = capsys.readouterr().out
        assert "Validation accuracy: 100.0%" in out
        assert "EXIT REASON VALIDATION" in out

    def test_mismatch_still_exits_0(self, trades_csv, tmp_path, capsys):
        expected = tmp_path / "expected.json"
        expected.write_text(json.dumps({"total_trades": 7, "total_profit": 10.0}))
        assert cli.main(["validate", str(trades_csv), "--expected", str(expected)]) == 0
        assert "MISMATCH" in capsys.readouterr().out

    def test_missing_expected_file_exits_1(self, trades_csv, tmp_path, capsys):
        code = cli.main(["validate", str(trades_csv), "--expected", str(tmp_path / "nope.json")])
        assert code == 1
        assert "ERROR:" in capsys.readouterr().out

    def test_malformed_expected_file_exits_1(self, trades_csv, tmp_path, capsys):
        expected = tmp_path / "expected.json"
        expected.write_text("{not json")
        assert cli.main(["validate", str(trades_csv), "--expected", str(expected)]) == 1
        assert "invalid JSON" in capsys.readouterr().out

    def test_non_numeric_expected_value_is_mismatch(self, trades_csv, tmp_path, capsys):
        expected = tmp_path / "expected.json"
        expected.write_text(json.dumps({"total_trades": "five", "total_profit": 10.0}))
        assert cli.main(["validate", str(trades_csv), "--expected", str(expected)]) == 0
        out = capsys.readouterr().out
        assert "MISMATCH" in out
        assert "Validation accuracy: 50.0%" in out

    def test_requires_reference(self, trades_csv):
        with pytest.raises(SystemExit):
            cli.main(["validate", str(trades_csv)])


# ---------------------------------------------------------------------------
# 3. seed-symbols
# ---------------------------------------------------------------------------

def test_seed_symbols(session, capsys):
    assert cli.main(["seed-symbols"]) == 0
    assert f"Seeded {len(DEFAULT_SYMBOLS)} symbols" in capsys.readouterr().out
    assert len(session.exec(select(Symbol)).all()) == len(DEFAULT_SYMBOLS)
