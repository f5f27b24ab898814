"""Root logger configuration shared by the API service and the CLI."""

import logging
import sys

from tickphysics.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

# Third-party loggers that flood DEBUG/INFO output
_NOISY_LOGGERS = ("matplotlib", "PIL", "urllib3")


def setup_logging(level: str | None = None) -> None:
    """Send all log records to stdout with a single handler."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger()
    root.setLevel((level or settings.log_level).upper())
    root.handlers.clear()
    root.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
