"""
Logging configuration.

All loggers live under the "treasury" namespace; structured fields are
passed through `extra=` so any JSON formatter can pick them up.
"""

import logging
from treasury_backend.app.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = None) -> None:
    """Configure the treasury logger hierarchy once at startup."""
    root = logging.getLogger("treasury")
    root.setLevel((level or settings.log_level).upper())
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
