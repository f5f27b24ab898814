"""Application configuration via environment variables."""

from pathlib import Path
from pydantic_settings import BaseSettings

PROJECT_ROOT = Path(__file__).resolve().parent.parent

# EA log file naming: TP_Integrated_Trades_NAS100_M15_v1_7.csv
CSV_FILE_PATTERNS = {
    "trades": "TP_Integrated_Trades_{symbol}_{timeframe}_v{version}.csv",
    "signals": "TP_Integrated_Signals_{symbol}_{timeframe}_v{version}.csv",
}


class Settings(BaseSettings):
    project_name: str = "TickPhysics Backend"
    database_url: str = f"sqlite:///{PROJECT_ROOT / 'tickphysics.db'}"
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:5173"]  # Vite dev server
    auto_create_tables: bool = True  # use alembic in production

    # Analytics defaults
    default_symbol: str = "NAS100"
    default_timeframe: str = "M15"
    default_version: str = "1_7"
    backtest_root: Path = PROJECT_ROOT / "data" / "backtest"
    live_root: Path = PROJECT_ROOT / "data" / "live"
    output_dir: Path = PROJECT_ROOT / "analytics_output"
    initial_balance: float = 1000.0

    # Validator tolerances (absolute)
    money_tolerance: float = 0.50
    percent_tolerance: float = 1.0
    ratio_tolerance: float = 0.01
    price_tolerance: float = 5.0

    model_config = {"env_prefix": "TP_", "env_file": ".env", "extra": "ignore"}


settings = Settings()


def get_csv_path(
    mode: str,
    file_type: str,
    symbol: str | None = None,
    timeframe: str | None = None,
    version: str | None = None,
) -> Path:
    """Full path of an EA CSV log for a backtest or live run."""
    roots = {"backtest": settings.backtest_root, "live": settings.live_root}
    if mode not in roots:
        raise ValueError(f"Invalid mode: {mode}. Must be 'backtest' or 'live'")
    if file_type not in CSV_FILE_PATTERNS:
        raise ValueError(f"Invalid file type: {file_type}. Must be 'trades' or 'signals'")

    filename = CSV_FILE_PATTERNS[file_type].format(
        symbol=symbol or settings.default_symbol,
        timeframe=timeframe or settings.default_timeframe,
        version=version or settings.default_version,
    )
    return Path(roots[mode]) / filename


def get_output_path(
    report_type: str,
    mode: str | None = None,
    symbol: str | None = None,
    version: str | None = None,
) -> Path:
    """Output location for a generated artifact. Charts resolve to a directory."""
    mode_str = mode or "comparison"
    symbol = symbol or settings.default_symbol
    version = version or settings.default_version
    out = Path(settings.output_dir)

    if report_type == "html":
        return out / "reports" / f"TP_Analytics_{mode_str}_{symbol}_v{version}.html"
    if report_type == "md":
        return out / "reports" / f"TP_Analytics_{mode_str}_{symbol}_v{version}.md"
    if report_type == "json":
        return out / f"TP_Analysis_{mode_str}_{symbol}_v{version}.json"
    if report_type == "csv":
        return out / f"TP_Metrics_{mode_str}_{symbol}_v{version}.csv"
    if report_type == "chart":
        return out / "charts" / f"{mode_str}_{symbol}_v{version}"
    raise ValueError(f"Invalid report_type: {report_type}")
