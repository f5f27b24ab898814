"""Column names and defaults for the EA's CSV logs."""

REQUIRED_TRADE_COLUMNS = ["Profit"]
CRITICAL_TRADE_COLUMNS = ["Ticket", "OpenTime", "CloseTime", "Profit", "Type"]

PHYSICS_COLUMNS = [
    "EntryQuality",
    "EntryConfluence",
    "EntryMomentum",
    "EntrySpeed",
    "EntryAcceleration",
    "EntryEntropy",
]

EXCURSION_COLUMNS = ["MFE_Pips", "MAE_Pips", "RunUp_Pips", "RunDown_Pips"]
EXCURSION_TIME_COLUMNS = ["MFE_TimeBars", "MAE_TimeBars", "RunUp_TimeBars", "RunDown_TimeBars"]

NUMERIC_TRADE_COLUMNS = [
    "Ticket", "OpenPrice", "ClosePrice", "Profit", "Pips", "SL", "TP", "Balance",
    "HoldTimeMinutes", *PHYSICS_COLUMNS, *EXCURSION_COLUMNS, *EXCURSION_TIME_COLUMNS,
]
TIMESTAMP_COLUMNS = ["OpenTime", "CloseTime", "Timestamp"]

# Older logger versions and exported datasets use different headers
COLUMN_ALIASES: dict[str, str] = {
    "NetProfit": "Profit",
    "EntryTime": "OpenTime",
    "ExitTime": "CloseTime",
    "EntryPrice": "OpenPrice",
    "ExitPrice": "ClosePrice",
    "Direction": "Type",
    "MFE": "MFE_Pips",
    "MAE": "MAE_Pips",
    "RunUp": "RunUp_Pips",
    "RunDown": "RunDown_Pips",
    "signalType": "Signal",
    "SignalType": "Signal",
}

REQUIRED_SIGNAL_COLUMNS = ["Signal"]

EXIT_SL = "SL"
EXIT_TP = "TP"

# Metrics where a smaller number is the better outcome
LOWER_IS_BETTER = frozenset({
    "losing_trades",
    "max_drawdown",
    "max_drawdown_pct",
    "max_consecutive_losses",
})
