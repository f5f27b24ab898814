"""Exceptions raised by the analytics pipeline."""


class AnalyticsError(Exception):
    """Base class for failures the CLI reports and exits on."""


class TradeLogNotFound(AnalyticsError, FileNotFoundError):
    def __init__(self, path):
        self.path = path
        super().__init__(f"CSV file not found: {path}")


class MissingColumnsError(AnalyticsError):
    def __init__(self, path, missing: list[str]):
        self.path = path
        self.missing = list(missing)
        super().__init__(f"{path}: missing columns: {', '.join(self.missing)}")
